import asyncio

from storefront.utils.locks import KeyedLock
from storefront.utils.pagination import page_link, paginate, total_pages
from storefront.utils.validators import product_create_errors, product_update_errors

from .conftest import product_data

def test_total_pages():
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2

def test_page_link_omits_default_limit():
    assert page_link("/api/products", 2, 10) == "/api/products?page=2"
    assert page_link("/api/products", 2, 5, query="available", sort="desc") == (
        "/api/products?limit=5&query=available&sort=desc&page=2"
    )

def test_page_link_encodes_query():
    assert page_link("/api/products", 1, 10, query="home & garden") == (
        "/api/products?query=home+%26+garden&page=1"
    )

def test_paginate_first_page():
    result = paginate(["a", "b"], total=3, page=1, limit=2)

    assert result["payload"] == ["a", "b"]
    assert result["prev_page"] is None
    assert result["prev_link"] is None
    assert result["next_page"] == 2
    assert result["next_link"] == "/api/products?limit=2&page=2"

def test_create_errors_accept_valid_payload():
    assert product_create_errors(product_data(status=False, thumbnails=["x.png"])) == []

def test_create_errors_reject_bad_optional_fields():
    errors = product_create_errors(product_data(status="yes", thumbnails=[1]))

    assert len(errors) == 2

def test_update_errors_only_check_given_fields():
    assert product_update_errors({"stock": 0}) == []
    assert product_update_errors({"price": 0.01}) == []
    assert len(product_update_errors({"price": 0, "stock": "1"})) == 2

async def test_keyed_lock_serializes_same_key():
    locks = KeyedLock()
    order = []

    async def worker(name):
        async with locks.hold("cart-1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))

    assert order == ["a-in", "a-out", "b-in", "b-out"]
    assert len(locks) == 0

async def test_keyed_lock_treats_int_and_str_keys_alike():
    locks = KeyedLock()
    order = []

    async def worker(key):
        async with locks.hold(key):
            order.append(f"{key!r}-in")
            await asyncio.sleep(0)
            order.append(f"{key!r}-out")

    await asyncio.gather(worker(7), worker("7"))

    assert order == ["7-in", "7-out", "'7'-in", "'7'-out"]
