import asyncio

import pytest

from storefront.core.exceptions import (
    CartLineNotFoundException,
    CartNotFoundException,
    ProductNotFoundException,
    ValidationException,
)
from storefront.services import CartService, ProductService
from storefront.services.cart_service import MISSING_PRODUCT_ERROR

from .conftest import product_data

def lines_of(cart):
    return [(line["product_id"], line["quantity"]) for line in cart["products"]]

@pytest.fixture
async def catalog(product_service):
    """Two products ready to be added to carts"""
    first = await product_service.create(product_data(price=10))
    second = await product_service.create(product_data(price=2.5))
    return first, second

async def test_new_cart_is_empty(cart_service):
    cart = await cart_service.create()

    assert cart["products"] == []
    fetched = await cart_service.get_by_id(cart["id"])
    assert fetched["id"] == cart["id"]

async def test_add_merges_repeated_product(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()

    await cart_service.add_product(cart["id"], product["id"])
    cart = await cart_service.add_product(cart["id"], product["id"], 2)

    assert lines_of(cart) == [(product["id"], 3)]
    assert cart["products"][0]["product"]["title"] == product["title"]
    assert cart["products"][0]["error"] is None

async def test_add_keeps_insertion_order(cart_service, catalog):
    first, second = catalog
    cart = await cart_service.create()

    await cart_service.add_product(cart["id"], second["id"])
    cart = await cart_service.add_product(cart["id"], first["id"])

    assert lines_of(cart) == [(second["id"], 1), (first["id"], 1)]

@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
async def test_add_rejects_bad_quantity(cart_service, catalog, quantity):
    product, _ = catalog
    cart = await cart_service.create()

    with pytest.raises(ValidationException):
        await cart_service.add_product(cart["id"], product["id"], quantity)

async def test_add_unknown_product_leaves_cart_unchanged(cart_service, product_service):
    gone = await product_service.create(product_data())
    await product_service.delete(gone["id"])
    cart = await cart_service.create()

    with pytest.raises(ProductNotFoundException):
        await cart_service.add_product(cart["id"], gone["id"])

    assert (await cart_service.get_by_id(cart["id"]))["products"] == []

async def test_add_to_unknown_cart(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()
    await cart_service.delete(cart["id"])

    with pytest.raises(CartNotFoundException):
        await cart_service.add_product(cart["id"], product["id"])

async def test_set_quantity_replaces_value(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], product["id"], 4)

    cart = await cart_service.set_line_quantity(cart["id"], product["id"], 2)

    assert lines_of(cart) == [(product["id"], 2)]

@pytest.mark.parametrize("quantity", [0, -3])
async def test_set_quantity_zero_or_less_removes_line(cart_service, catalog, quantity):
    first, second = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], first["id"])
    await cart_service.add_product(cart["id"], second["id"])

    cart = await cart_service.set_line_quantity(cart["id"], first["id"], quantity)

    assert lines_of(cart) == [(second["id"], 1)]

async def test_set_quantity_requires_existing_line(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()

    with pytest.raises(CartLineNotFoundException):
        await cart_service.set_line_quantity(cart["id"], product["id"], 2)
    with pytest.raises(ValidationException):
        await cart_service.set_line_quantity(cart["id"], product["id"], "2")

async def test_replace_lines_merges_duplicates(cart_service, catalog):
    first, second = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], first["id"], 9)

    cart = await cart_service.replace_lines(
        cart["id"],
        [
            {"product": second["id"], "quantity": 2},
            {"product": first["id"]},
            {"product": second["id"], "quantity": 1},
        ],
    )

    assert lines_of(cart) == [(second["id"], 3), (first["id"], 1)]

async def test_replace_lines_is_all_or_nothing(cart_service, product_service, catalog):
    first, second = catalog
    gone = await product_service.create(product_data())
    await product_service.delete(gone["id"])
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], first["id"], 2)

    with pytest.raises(ProductNotFoundException):
        await cart_service.replace_lines(
            cart["id"],
            [{"product": second["id"], "quantity": 1}, {"product": gone["id"], "quantity": 1}],
        )

    cart = await cart_service.get_by_id(cart["id"])
    assert lines_of(cart) == [(first["id"], 2)]

async def test_replace_lines_validates_shape(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()

    with pytest.raises(ValidationException) as exc_info:
        await cart_service.replace_lines(
            cart["id"],
            [{"quantity": 1}, {"product": product["id"], "quantity": 0}],
        )
    assert len(exc_info.value.errors) == 2

    with pytest.raises(ValidationException):
        await cart_service.replace_lines(cart["id"], {"product": product["id"]})

async def test_remove_line(cart_service, catalog):
    first, second = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], first["id"])
    await cart_service.add_product(cart["id"], second["id"])

    cart = await cart_service.remove_line(cart["id"], first["id"])

    assert lines_of(cart) == [(second["id"], 1)]
    with pytest.raises(CartLineNotFoundException):
        await cart_service.remove_line(cart["id"], first["id"])

async def test_clear_is_idempotent(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], product["id"])

    first = await cart_service.clear(cart["id"])
    second = await cart_service.clear(cart["id"])

    assert first["products"] == []
    assert second["products"] == []

async def test_deleted_product_leaves_dangling_line(cart_service, product_service, catalog):
    first, second = catalog
    cart = await cart_service.create()
    await cart_service.add_product(cart["id"], first["id"], 2)
    await cart_service.add_product(cart["id"], second["id"])

    await product_service.delete(first["id"])
    cart = await cart_service.get_by_id(cart["id"])

    dangling, intact = cart["products"]
    assert dangling["product_id"] == first["id"]
    assert dangling["product"] is None
    assert dangling["quantity"] == 2
    assert dangling["error"] == MISSING_PRODUCT_ERROR
    assert intact["product"]["id"] == second["id"]
    assert intact["error"] is None

    # Other lines can still be changed
    cart = await cart_service.set_line_quantity(cart["id"], second["id"], 4)
    assert lines_of(cart) == [(first["id"], 2), (second["id"], 4)]

async def test_delete_cart(cart_service):
    cart = await cart_service.create()

    deleted = await cart_service.delete(cart["id"])

    assert deleted["id"] == cart["id"]
    with pytest.raises(CartNotFoundException):
        await cart_service.get_by_id(cart["id"])
    with pytest.raises(CartNotFoundException):
        await cart_service.delete(cart["id"])

async def test_shopping_scenario(cart_service, catalog):
    first, second = catalog
    cart = await cart_service.create()
    cid = cart["id"]

    await cart_service.add_product(cid, first["id"])
    await cart_service.add_product(cid, first["id"])
    cart = await cart_service.add_product(cid, second["id"], 3)
    assert lines_of(cart) == [(first["id"], 2), (second["id"], 3)]

    cart = await cart_service.set_line_quantity(cid, first["id"], 5)
    assert lines_of(cart) == [(first["id"], 5), (second["id"], 3)]

    cart = await cart_service.remove_line(cid, second["id"])
    assert lines_of(cart) == [(first["id"], 5)]

    cart = await cart_service.replace_lines(cid, [{"product": second["id"], "quantity": 1}])
    assert lines_of(cart) == [(second["id"], 1)]

    cart = await cart_service.clear(cid)
    assert cart["products"] == []

async def test_concurrent_adds_are_serialized(file_store):
    products, carts = file_store.repositories()
    product = await ProductService(products).create(product_data())
    cart = await CartService(carts, products).create()

    def request_scoped_service():
        request_products, request_carts = file_store.repositories()
        return CartService(request_carts, request_products)

    await asyncio.gather(*[
        request_scoped_service().add_product(cart["id"], product["id"])
        for _ in range(20)
    ])

    cart = await CartService(carts, products).get_by_id(cart["id"])
    assert lines_of(cart) == [(product["id"], 20)]

def alternate_spelling(record_id):
    """Another accepted form of the same identity: zero-padded or upper-case"""
    if isinstance(record_id, int):
        return f"0{record_id}"
    return record_id.upper()

async def test_alternate_id_spellings_address_the_same_line(cart_service, catalog):
    product, _ = catalog
    cart = await cart_service.create()
    cid = alternate_spelling(cart["id"])
    pid = alternate_spelling(product["id"])

    cart = await cart_service.add_product(cid, pid)
    cart = await cart_service.add_product(cid, product["id"])
    assert lines_of(cart) == [(product["id"], 2)]

    cart = await cart_service.set_line_quantity(cid, pid, 5)
    assert lines_of(cart) == [(product["id"], 5)]

    cart = await cart_service.remove_line(cid, pid)
    assert cart["products"] == []

async def test_concurrent_adds_with_mixed_id_spellings(file_store):
    products, carts = file_store.repositories()
    product = await ProductService(products).create(product_data())
    cart = await CartService(carts, products).create()
    spellings = [cart["id"], str(cart["id"]), f"0{cart['id']}", f"00{cart['id']}"]

    def request_scoped_service():
        request_products, request_carts = file_store.repositories()
        return CartService(request_carts, request_products)

    await asyncio.gather(*[
        request_scoped_service().add_product(spellings[n % len(spellings)], product["id"])
        for n in range(20)
    ])

    cart = await CartService(carts, products).get_by_id(cart["id"])
    assert lines_of(cart) == [(product["id"], 20)]
