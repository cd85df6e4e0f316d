"""Repository package: store contracts and their backends"""

from pathlib import Path
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from .base import (
    AVAILABLE_QUERY,
    CartRepository,
    PriceSort,
    ProductFilter,
    ProductRepository,
    Record,
)
from .file import FileCartRepository, FileProductRepository, JsonCollection
from .sql import SQLCartRepository, SQLProductRepository

class FileStore:
    """Process-wide JSON collections shared by every request"""

    def __init__(self, data_dir):
        data_dir = Path(data_dir)
        self.products = JsonCollection(data_dir / "products.json")
        self.carts = JsonCollection(data_dir / "carts.json")

    def repositories(self) -> Tuple[ProductRepository, CartRepository]:
        return (
            FileProductRepository(self.products),
            FileCartRepository(self.carts, self.products),
        )

def build_repositories(
    db: Optional[AsyncSession] = None,
    file_store: Optional[FileStore] = None,
) -> Tuple[ProductRepository, CartRepository]:
    """Pick the backend: the file store when given, the SQL session otherwise"""
    if file_store is not None:
        return file_store.repositories()
    if db is None:
        raise ValueError("A database session or a file store is required")
    return SQLProductRepository(db), SQLCartRepository(db)

__all__ = [
    "AVAILABLE_QUERY",
    "CartRepository",
    "FileCartRepository",
    "FileProductRepository",
    "FileStore",
    "JsonCollection",
    "PriceSort",
    "ProductFilter",
    "ProductRepository",
    "Record",
    "SQLCartRepository",
    "SQLProductRepository",
    "build_repositories",
]
