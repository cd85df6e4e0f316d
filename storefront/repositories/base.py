"""
Store contracts consumed by the services
Records cross this boundary as plain dictionaries
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

Record = Dict[str, Any]

AVAILABLE_QUERY = "available"

class PriceSort(str, Enum):
    """Listing order by price"""
    ASC = "asc"
    DESC = "desc"

@dataclass
class ProductFilter:
    """Product filter parameters"""
    category: Optional[str] = None
    available: bool = False
    code: Optional[str] = None
    exclude_id: Optional[str] = None

    @classmethod
    def from_query(cls, query: Optional[str]) -> "ProductFilter":
        """Translate the listing `query` option into a filter"""
        if not query:
            return cls()
        if query == AVAILABLE_QUERY:
            return cls(available=True)
        return cls(category=query)

    def matches(self, record: Record) -> bool:
        """Evaluate the filter against a plain record"""
        if self.category is not None and record.get("category") != self.category:
            return False
        if self.available and not (record.get("stock", 0) > 0 and record.get("status") is True):
            return False
        if self.code is not None and record.get("code") != self.code:
            return False
        if self.exclude_id is not None and str(record.get("id")) == str(self.exclude_id):
            return False
        return True

class ProductRepository(ABC):
    """Product collection"""

    @abstractmethod
    def canonical_id(self, product_id: Any) -> Optional[Any]:
        """Identity in the form this store keeps it; None when malformed"""

    def is_valid_id(self, product_id: Any) -> bool:
        """Whether the value has the identity format of this store"""
        return self.canonical_id(product_id) is not None

    @abstractmethod
    async def find_all(
        self,
        filter: Optional[ProductFilter] = None,
        sort: Optional[PriceSort] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Record]:
        ...

    @abstractmethod
    async def count(self, filter: Optional[ProductFilter] = None) -> int:
        ...

    @abstractmethod
    async def find_by_id(self, product_id: Any) -> Optional[Record]:
        ...

    @abstractmethod
    async def find_one(self, filter: ProductFilter) -> Optional[Record]:
        ...

    @abstractmethod
    async def insert(self, record: Record) -> Record:
        """Persist a new product and return it with its identity"""

    @abstractmethod
    async def update_by_id(self, product_id: Any, partial: Record) -> Optional[Record]:
        """Apply a partial update; None when the product does not exist"""

    @abstractmethod
    async def delete_by_id(self, product_id: Any) -> Optional[Record]:
        """Remove the product; returns the removed record or None"""

class CartRepository(ABC):
    """Cart collection

    ``find_by_id`` returns a plain record that callers may mutate and hand
    back to ``update_by_id``; its lines look like
    ``{"product": <product id>, "quantity": n}``.
    """

    @abstractmethod
    def canonical_id(self, cart_id: Any) -> Optional[Any]:
        ...

    def is_valid_id(self, cart_id: Any) -> bool:
        return self.canonical_id(cart_id) is not None

    @abstractmethod
    async def insert(self, record: Record) -> Record:
        ...

    @abstractmethod
    async def find_by_id(self, cart_id: Any) -> Optional[Record]:
        ...

    @abstractmethod
    async def find_by_id_resolved(self, cart_id: Any) -> Optional[Record]:
        """Cart whose lines carry the product record (None when dangling)"""

    @abstractmethod
    async def update_by_id(self, cart_id: Any, partial: Record) -> Optional[Record]:
        ...

    @abstractmethod
    async def delete_by_id(self, cart_id: Any) -> Optional[Record]:
        ...
