"""
JSON-file-backed stores
Each collection lives in memory and is rewritten to disk after every mutation
"""

from typing import Any, Callable, Dict, List, Optional
from datetime import datetime, timezone
from pathlib import Path
import asyncio
import copy
import json
import logging
import os
import tempfile

from storefront.core.exceptions import DuplicateResourceException, InternalServerException
from .base import ProductRepository, CartRepository, ProductFilter, PriceSort, Record

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("title", "description", "code", "price", "stock", "category", "status", "thumbnails")

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

def _parse_id(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.isdigit():
        parsed = int(value)
        return parsed if parsed > 0 else None
    return None

class JsonCollection:
    """In-memory list of records persisted as one JSON array

    Loaded lazily on first use; integer ids continue from the highest
    stored id. All access goes through ``lock``. Mutations build a new
    list and hand it to ``commit``, which only makes it current once it
    is on disk.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.records: List[Record] = []
        self.next_id = 1
        self.lock = asyncio.Lock()
        self._loaded = False

    def _read(self) -> List[Record]:
        if not self.path.exists():
            return []
        with open(self.path, "r", encoding="utf-8") as fh:
            content = fh.read()
        if not content.strip():
            return []
        return json.loads(content)

    def _write(self, records: List[Record]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(records, fh, indent=2, ensure_ascii=False, allow_nan=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def _run(self, func: Callable, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def ensure_loaded(self) -> None:
        """Load the collection from disk once"""
        if self._loaded:
            return
        try:
            self.records = await self._run(self._read)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt collection file {self.path}: {e}")
            raise InternalServerException(f"Could not read {self.path.name}")
        except OSError as e:
            logger.error(f"Could not read collection file {self.path}: {e}")
            raise InternalServerException(f"Could not read {self.path.name}")

        ids = [r["id"] for r in self.records if isinstance(r.get("id"), int)]
        self.next_id = max(ids) + 1 if ids else 1
        self._loaded = True
        logger.info(f"Loaded {len(self.records)} records from {self.path}")

    async def commit(self, records: List[Record]) -> None:
        """Write `records` to disk, then make them the current collection"""
        try:
            await self._run(self._write, records)
        except (OSError, ValueError) as e:
            logger.error(f"Could not write collection file {self.path}: {e}")
            raise InternalServerException(f"Could not save {self.path.name}")
        self.records = records

    def index_of(self, record_id: int) -> int:
        for index, record in enumerate(self.records):
            if record.get("id") == record_id:
                return index
        return -1

    def replaced(self, index: int, record: Record) -> List[Record]:
        """Copy of the collection with one record swapped"""
        records = list(self.records)
        records[index] = record
        return records

    def removed(self, index: int) -> List[Record]:
        """Copy of the collection without one record"""
        return self.records[:index] + self.records[index + 1:]

class FileProductRepository(ProductRepository):
    """Products stored in products.json"""

    def __init__(self, collection: JsonCollection):
        self.collection = collection

    def canonical_id(self, product_id: Any) -> Optional[int]:
        return _parse_id(product_id)

    async def _matching(self, filter: Optional[ProductFilter]) -> List[Record]:
        await self.collection.ensure_loaded()
        if filter is None:
            return list(self.collection.records)
        return [r for r in self.collection.records if filter.matches(r)]

    async def find_all(
        self,
        filter: Optional[ProductFilter] = None,
        sort: Optional[PriceSort] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Record]:
        async with self.collection.lock:
            records = await self._matching(filter)
            if sort is not None:
                # Stable sort keeps insertion order between equal prices
                records = sorted(records, key=lambda r: r["price"], reverse=sort == PriceSort.DESC)
            return copy.deepcopy(records[offset:offset + limit])

    async def count(self, filter: Optional[ProductFilter] = None) -> int:
        async with self.collection.lock:
            return len(await self._matching(filter))

    async def find_by_id(self, product_id: Any) -> Optional[Record]:
        parsed = _parse_id(product_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            return copy.deepcopy(self.collection.records[index]) if index >= 0 else None

    async def find_one(self, filter: ProductFilter) -> Optional[Record]:
        async with self.collection.lock:
            matches = await self._matching(filter)
            return copy.deepcopy(matches[0]) if matches else None

    def _check_code(self, code: Optional[str], own_id: Optional[int] = None) -> None:
        if code is None:
            return
        for record in self.collection.records:
            if record.get("code") == code and record.get("id") != own_id:
                raise DuplicateResourceException("Product", "code", code)

    async def insert(self, record: Record) -> Record:
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            self._check_code(record.get("code"))

            timestamp = _now()
            product_id = self.collection.next_id
            product = {"id": product_id}
            product.update({k: copy.deepcopy(v) for k, v in record.items() if k in PRODUCT_FIELDS})
            product["created_at"] = timestamp
            product["updated_at"] = timestamp

            await self.collection.commit(self.collection.records + [product])
            self.collection.next_id = product_id + 1
            return copy.deepcopy(product)

    async def update_by_id(self, product_id: Any, partial: Record) -> Optional[Record]:
        parsed = _parse_id(product_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            if index < 0:
                return None

            self._check_code(partial.get("code"), own_id=parsed)
            updated = dict(self.collection.records[index])
            updated.update({k: copy.deepcopy(v) for k, v in partial.items() if k in PRODUCT_FIELDS})
            updated["updated_at"] = _now()

            await self.collection.commit(self.collection.replaced(index, updated))
            return copy.deepcopy(updated)

    async def delete_by_id(self, product_id: Any) -> Optional[Record]:
        parsed = _parse_id(product_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            if index < 0:
                return None

            removed = self.collection.records[index]
            await self.collection.commit(self.collection.removed(index))
            return copy.deepcopy(removed)

class FileCartRepository(CartRepository):
    """Carts stored in carts.json"""

    def __init__(self, collection: JsonCollection, products: JsonCollection):
        self.collection = collection
        self.products = products

    def canonical_id(self, cart_id: Any) -> Optional[int]:
        return _parse_id(cart_id)

    @staticmethod
    def _clean_lines(lines: List[Record]) -> List[Record]:
        return [{"product": line["product"], "quantity": line["quantity"]} for line in lines]

    async def insert(self, record: Record) -> Record:
        async with self.collection.lock:
            await self.collection.ensure_loaded()

            timestamp = _now()
            cart_id = self.collection.next_id
            cart = {
                "id": cart_id,
                "products": self._clean_lines(record.get("products") or []),
                "created_at": timestamp,
                "updated_at": timestamp,
            }
            await self.collection.commit(self.collection.records + [cart])
            self.collection.next_id = cart_id + 1
            return copy.deepcopy(cart)

    async def _find(self, cart_id: Any) -> Optional[Record]:
        parsed = _parse_id(cart_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            return copy.deepcopy(self.collection.records[index]) if index >= 0 else None

    async def find_by_id(self, cart_id: Any) -> Optional[Record]:
        return await self._find(cart_id)

    async def find_by_id_resolved(self, cart_id: Any) -> Optional[Record]:
        cart = await self._find(cart_id)
        if cart is None:
            return None

        async with self.products.lock:
            await self.products.ensure_loaded()
            by_id: Dict[str, Record] = {str(p["id"]): p for p in self.products.records}
            cart["products"] = [
                {
                    "product_id": line["product"],
                    "product": copy.deepcopy(by_id.get(str(line["product"]))),
                    "quantity": line["quantity"],
                }
                for line in cart["products"]
            ]
        return cart

    async def update_by_id(self, cart_id: Any, partial: Record) -> Optional[Record]:
        parsed = _parse_id(cart_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            if index < 0:
                return None

            updated = dict(self.collection.records[index])
            if "products" in partial:
                updated["products"] = self._clean_lines(partial["products"])
            updated["updated_at"] = _now()

            await self.collection.commit(self.collection.replaced(index, updated))
            return copy.deepcopy(updated)

    async def delete_by_id(self, cart_id: Any) -> Optional[Record]:
        parsed = _parse_id(cart_id)
        if parsed is None:
            return None
        async with self.collection.lock:
            await self.collection.ensure_loaded()
            index = self.collection.index_of(parsed)
            if index < 0:
                return None

            removed = self.collection.records[index]
            await self.collection.commit(self.collection.removed(index))
            return copy.deepcopy(removed)
