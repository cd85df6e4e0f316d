"""Utilities package"""

from .locks import KeyedLock
from .pagination import paginate, page_link, total_pages
from .validators import product_create_errors, product_update_errors

__all__ = [
    "KeyedLock",
    "paginate",
    "page_link",
    "total_pages",
    "product_create_errors",
    "product_update_errors",
]
