"""Models package initialization"""

from .base import Base
from .product import Product
from .cart import Cart, CartItem

__all__ = [
    "Base",
    "Product",
    "Cart",
    "CartItem",
]
