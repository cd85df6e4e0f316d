"""Services package"""

from .cart_service import CartService
from .notification import ProductBroadcaster
from .product_service import ProductService

__all__ = [
    "CartService",
    "ProductBroadcaster",
    "ProductService",
]
