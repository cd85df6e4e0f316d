"""
Cart service for managing cart operations
"""

from typing import Any, Dict, List
import logging

from storefront.core.exceptions import (
    ValidationException,
    ProductNotFoundException,
    CartNotFoundException,
    CartLineNotFoundException,
)
from storefront.repositories import CartRepository, ProductRepository, Record
from storefront.utils.locks import KeyedLock

logger = logging.getLogger(__name__)

MISSING_PRODUCT_ERROR = "Product not found"

# Shared by every service instance so concurrent requests on one cart serialize
cart_locks = KeyedLock()

def _is_quantity(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)

class CartService:
    """
    Service for managing cart operations
    """

    def __init__(self, carts: CartRepository, products: ProductRepository):
        self.carts = carts
        self.products = products

    def _cart_key(self, cart_id: Any) -> Any:
        """Store form of a cart id; malformed ids pass through and miss on lookup"""
        canonical = self.carts.canonical_id(cart_id)
        return cart_id if canonical is None else canonical

    def _product_key(self, product_id: Any) -> Any:
        canonical = self.products.canonical_id(product_id)
        return product_id if canonical is None else canonical

    async def create(self) -> Record:
        """Allocate a new empty cart"""
        cart = await self.carts.insert({"products": []})
        logger.info(f"Cart {cart['id']} created")
        return await self.get_by_id(cart["id"])

    async def get_by_id(self, cart_id: Any) -> Record:
        """
        Cart with every line resolved to the current product record
        """
        cart = await self.carts.find_by_id_resolved(cart_id)
        if not cart:
            raise CartNotFoundException()

        for line in cart["products"]:
            line["error"] = None if line["product"] is not None else MISSING_PRODUCT_ERROR
        return cart

    async def _load_for_update(self, cart_id: Any) -> Record:
        cart = await self.carts.find_by_id(cart_id)
        if not cart:
            raise CartNotFoundException()
        return cart

    async def _save(self, cart_id: Any, lines: List[Record]) -> Record:
        updated = await self.carts.update_by_id(cart_id, {"products": lines})
        if not updated:
            # Deleted between load and write
            raise CartNotFoundException()
        return await self.get_by_id(cart_id)

    def _line_index(self, cart: Record, product_id: Any) -> int:
        product_id = self._product_key(product_id)
        for index, line in enumerate(cart["products"]):
            if self._product_key(line["product"]) == product_id:
                return index
        return -1

    async def add_product(self, cart_id: Any, product_id: Any, quantity: int = 1) -> Record:
        """
        Add item to cart or increment its quantity if present
        """
        if not _is_quantity(quantity) or quantity < 1:
            raise ValidationException("Quantity must be an integer greater than 0")

        product = await self.products.find_by_id(product_id)
        if not product:
            raise ProductNotFoundException()

        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            cart = await self._load_for_update(cart_id)
            lines = cart["products"]

            index = self._line_index(cart, product["id"])
            if index >= 0:
                lines[index]["quantity"] += quantity
            else:
                lines.append({"product": product["id"], "quantity": quantity})

            return await self._save(cart_id, lines)

    async def set_line_quantity(self, cart_id: Any, product_id: Any, quantity: int) -> Record:
        """
        Set a line's quantity; zero or less removes the line
        """
        if not _is_quantity(quantity):
            raise ValidationException("Quantity must be an integer")

        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            cart = await self._load_for_update(cart_id)
            lines = cart["products"]

            index = self._line_index(cart, product_id)
            if index < 0:
                raise CartLineNotFoundException()

            if quantity <= 0:
                lines.pop(index)
            else:
                lines[index]["quantity"] = quantity

            return await self._save(cart_id, lines)

    async def replace_lines(self, cart_id: Any, lines: List[Dict[str, Any]]) -> Record:
        """
        Replace every line of the cart after checking all products exist
        """
        if not isinstance(lines, list):
            raise ValidationException('Field "products" must be a list')

        errors = []
        for position, line in enumerate(lines):
            if not isinstance(line, dict) or line.get("product") is None:
                errors.append(f"Line {position}: \"product\" is required")
            elif not _is_quantity(line.get("quantity", 1)) or line.get("quantity", 1) < 1:
                errors.append(f"Line {position}: \"quantity\" must be an integer greater than 0")
        if errors:
            raise ValidationException("Invalid cart lines", errors=errors)

        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            await self._load_for_update(cart_id)

            merged: List[Record] = []
            for line in lines:
                product = await self.products.find_by_id(line["product"])
                if not product:
                    raise ProductNotFoundException(line["product"])

                quantity = line.get("quantity", 1)
                existing = next((m for m in merged if m["product"] == product["id"]), None)
                if existing:
                    existing["quantity"] += quantity
                else:
                    merged.append({"product": product["id"], "quantity": quantity})

            return await self._save(cart_id, merged)

    async def remove_line(self, cart_id: Any, product_id: Any) -> Record:
        """
        Remove item from cart
        """
        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            cart = await self._load_for_update(cart_id)

            index = self._line_index(cart, product_id)
            if index < 0:
                raise CartLineNotFoundException()

            cart["products"].pop(index)
            return await self._save(cart_id, cart["products"])

    async def clear(self, cart_id: Any) -> Record:
        """
        Clear all items from the cart
        """
        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            await self._load_for_update(cart_id)
            return await self._save(cart_id, [])

    async def delete(self, cart_id: Any) -> Record:
        """Remove the cart permanently"""
        cart_id = self._cart_key(cart_id)
        async with cart_locks.hold(cart_id):
            deleted = await self.carts.delete_by_id(cart_id)
        if not deleted:
            raise CartNotFoundException()
        logger.info(f"Cart {deleted['id']} deleted")
        return deleted
