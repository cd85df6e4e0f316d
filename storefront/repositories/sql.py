"""
SQLAlchemy-backed stores
Each write commits its own transaction
"""

from typing import Any, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select, func, and_
from sqlalchemy.sql import Select
import logging
import uuid

from storefront.models import Product, Cart, CartItem
from storefront.core.exceptions import DuplicateResourceException
from .base import ProductRepository, CartRepository, ProductFilter, PriceSort, Record

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = ("title", "description", "code", "price", "stock", "category", "status", "thumbnails")

def _canonical_uuid(value: Any) -> Optional[str]:
    """Lower-case hyphenated form, as generated for primary keys"""
    if isinstance(value, bool):
        return None
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        return None

def _apply_filter(query: Select, filter: Optional[ProductFilter]) -> Select:
    """Apply filters to query"""
    if filter is None:
        return query

    conditions = []

    if filter.category is not None:
        conditions.append(Product.category == filter.category)

    if filter.available:
        conditions.append(Product.stock > 0)
        conditions.append(Product.status == True)

    if filter.code is not None:
        conditions.append(Product.code == filter.code)

    if filter.exclude_id is not None:
        conditions.append(Product.id != str(filter.exclude_id))

    if conditions:
        query = query.where(and_(*conditions))

    return query

class SQLProductRepository(ProductRepository):
    """Product CRUD operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def canonical_id(self, product_id: Any) -> Optional[str]:
        return _canonical_uuid(product_id)

    async def find_all(
        self,
        filter: Optional[ProductFilter] = None,
        sort: Optional[PriceSort] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Record]:
        query = _apply_filter(select(Product), filter)

        if sort == PriceSort.ASC:
            query = query.order_by(Product.price.asc(), Product.created_at.asc())
        elif sort == PriceSort.DESC:
            query = query.order_by(Product.price.desc(), Product.created_at.asc())
        else:
            query = query.order_by(Product.created_at.asc())

        query = query.offset(offset).limit(limit)
        result = await self.db.execute(query)
        return [p.to_dict() for p in result.scalars().all()]

    async def count(self, filter: Optional[ProductFilter] = None) -> int:
        query = _apply_filter(select(func.count()).select_from(Product), filter)
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def _get(self, product_id: Any) -> Optional[Product]:
        product_id = self.canonical_id(product_id)
        if product_id is None:
            return None
        return await self.db.get(Product, product_id)

    async def find_by_id(self, product_id: Any) -> Optional[Record]:
        product = await self._get(product_id)
        return product.to_dict() if product else None

    async def find_one(self, filter: ProductFilter) -> Optional[Record]:
        query = _apply_filter(select(Product), filter).limit(1)
        result = await self.db.execute(query)
        product = result.scalar_one_or_none()
        return product.to_dict() if product else None

    async def insert(self, record: Record) -> Record:
        product = Product(**{k: v for k, v in record.items() if k in PRODUCT_FIELDS})
        self.db.add(product)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Product", "code", record.get("code"))
        await self.db.refresh(product)
        return product.to_dict()

    async def update_by_id(self, product_id: Any, partial: Record) -> Optional[Record]:
        product = await self._get(product_id)
        if not product:
            return None

        product.update_from_dict({k: v for k, v in partial.items() if k in PRODUCT_FIELDS})
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateResourceException("Product", "code", partial.get("code"))
        await self.db.refresh(product)
        return product.to_dict()

    async def delete_by_id(self, product_id: Any) -> Optional[Record]:
        product = await self._get(product_id)
        if not product:
            return None

        record = product.to_dict()
        await self.db.delete(product)
        await self.db.commit()
        return record

class SQLCartRepository(CartRepository):
    """Cart CRUD operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    def canonical_id(self, cart_id: Any) -> Optional[str]:
        return _canonical_uuid(cart_id)

    @staticmethod
    def _to_record(cart: Cart) -> Record:
        return {
            "id": cart.id,
            "products": [
                {"product": item.product_id, "quantity": item.quantity}
                for item in cart.items
            ],
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
        }

    async def _get(self, cart_id: Any) -> Optional[Cart]:
        cart_id = self.canonical_id(cart_id)
        if cart_id is None:
            return None
        result = await self.db.execute(
            select(Cart).where(Cart.id == cart_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def insert(self, record: Record) -> Record:
        cart = Cart(items=self._build_items(record.get("products") or [], {}))
        self.db.add(cart)
        await self.db.commit()
        return await self.find_by_id(cart.id)

    async def find_by_id(self, cart_id: Any) -> Optional[Record]:
        cart = await self._get(cart_id)
        return self._to_record(cart) if cart else None

    async def find_by_id_resolved(self, cart_id: Any) -> Optional[Record]:
        cart = await self._get(cart_id)
        if not cart:
            return None

        record = self._to_record(cart)
        product_ids = [line["product"] for line in record["products"]]
        products = {}
        if product_ids:
            result = await self.db.execute(select(Product).where(Product.id.in_(product_ids)))
            products = {p.id: p.to_dict() for p in result.scalars().all()}

        record["products"] = [
            {
                "product_id": line["product"],
                "product": products.get(line["product"]),
                "quantity": line["quantity"],
            }
            for line in record["products"]
        ]
        return record

    @staticmethod
    def _build_items(lines: List[Record], existing: dict) -> List[CartItem]:
        """Reuse rows of products already in the cart so the unique key never collides"""
        items = []
        for position, line in enumerate(lines):
            product_id = str(line["product"])
            item = existing.pop(product_id, None)
            if item is None:
                item = CartItem(product_id=product_id)
            item.quantity = line["quantity"]
            item.position = position
            items.append(item)
        return items

    def _replace_items(self, cart: Cart, lines: List[Record]) -> None:
        """Reconcile the cart rows with the given lines in one unit of work"""
        existing = {item.product_id: item for item in cart.items}
        # Rows left in `existing` are orphaned and deleted on flush
        cart.items = self._build_items(lines, existing)

    async def update_by_id(self, cart_id: Any, partial: Record) -> Optional[Record]:
        cart = await self._get(cart_id)
        if not cart:
            return None

        if "products" in partial:
            self._replace_items(cart, partial["products"])
        cart.updated_at = func.now()

        await self.db.commit()
        return await self.find_by_id(cart.id)

    async def delete_by_id(self, cart_id: Any) -> Optional[Record]:
        cart = await self._get(cart_id)
        if not cart:
            return None

        record = self._to_record(cart)
        await self.db.delete(cart)
        await self.db.commit()
        return record
