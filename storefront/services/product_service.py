"""Product service: validation and query shaping over the product store"""

from typing import Any, Awaitable, Callable, Dict, List, Optional
import logging

from storefront.core.exceptions import (
    ValidationException,
    ProductNotFoundException,
    DuplicateResourceException,
)
from storefront.repositories import ProductRepository, ProductFilter, PriceSort, Record
from storefront.utils.locks import KeyedLock
from storefront.utils.pagination import DEFAULT_LIMIT, paginate
from storefront.utils.validators import (
    IDENTITY_FIELDS,
    PRODUCT_FIELDS,
    product_create_errors,
    product_update_errors,
)

logger = logging.getLogger(__name__)

PRODUCT_ADDED = "productAdded"
PRODUCT_DELETED = "productDeleted"

# (event, first page of products, created record or deleted id)
ProductChangeHook = Callable[[str, List[Record], Any], Awaitable[None]]

# Shared by every service instance so requests serialize on the same code
code_locks = KeyedLock()

class ProductService:
    """Product business logic"""

    def __init__(
        self,
        products: ProductRepository,
        on_change: Optional[ProductChangeHook] = None,
        snapshot_size: int = DEFAULT_LIMIT,
    ):
        self.products = products
        self.on_change = on_change
        self.snapshot_size = snapshot_size

    async def list(
        self,
        limit: int = DEFAULT_LIMIT,
        page: int = 1,
        sort: Optional[str] = None,
        query: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Filtered, sorted, paginated listing

        `query` is either "available" (stock > 0 and active) or an exact
        category; `sort` is "asc" or "desc" by price.
        """
        errors = []
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            errors.append('"limit" must be an integer greater than 0')
        if not isinstance(page, int) or isinstance(page, bool) or page < 1:
            errors.append('"page" must be an integer greater than 0')
        price_sort = None
        if sort:
            try:
                price_sort = PriceSort(sort)
            except ValueError:
                errors.append('"sort" must be "asc" or "desc"')
        if errors:
            raise ValidationException("Invalid listing options", errors=errors)

        product_filter = ProductFilter.from_query(query)
        total = await self.products.count(product_filter)
        items = await self.products.find_all(
            product_filter,
            price_sort,
            offset=(page - 1) * limit,
            limit=limit,
        )

        return paginate(
            items,
            total=total,
            page=page,
            limit=limit,
            query=query or None,
            sort=price_sort.value if price_sort else None,
        )

    async def get_by_id(self, product_id: Any) -> Record:
        product = await self.products.find_by_id(product_id)
        if not product:
            raise ProductNotFoundException()
        return product

    async def create(self, data: Dict[str, Any]) -> Record:
        """Validate and persist a new product"""
        if not isinstance(data, dict):
            raise ValidationException("Product data must be an object")

        errors = product_create_errors(data)
        if errors:
            raise ValidationException("All fields are required and must be valid", errors=errors)

        record = {field: data[field] for field in PRODUCT_FIELDS if field in data and data[field] is not None}
        record["title"] = record["title"].strip()
        record["code"] = record["code"].strip()
        record.setdefault("status", True)
        record.setdefault("thumbnails", [])

        async with code_locks.hold(record["code"]):
            if await self.products.find_one(ProductFilter(code=record["code"])):
                raise DuplicateResourceException("Product", "code", record["code"])
            product = await self.products.insert(record)

        logger.info(f"Product {product['id']} created with code {product['code']}")
        await self._notify(PRODUCT_ADDED, product)
        return product

    async def update(self, product_id: Any, data: Dict[str, Any]) -> Record:
        """Apply a partial update, validating only the fields present"""
        canonical = self.products.canonical_id(product_id)
        if canonical is not None:
            product_id = canonical

        if not isinstance(data, dict):
            raise ValidationException("Product data must be an object")

        changes = {
            field: value
            for field, value in data.items()
            if field in PRODUCT_FIELDS and field not in IDENTITY_FIELDS
        }
        if not changes:
            raise ValidationException("At least one field must be provided for update")

        errors = product_update_errors(changes)
        if errors:
            raise ValidationException("Invalid product data", errors=errors)

        if "code" in changes:
            changes["code"] = changes["code"].strip()
            async with code_locks.hold(changes["code"]):
                existing = await self.products.find_one(
                    ProductFilter(code=changes["code"], exclude_id=str(product_id))
                )
                if existing:
                    raise DuplicateResourceException("Product", "code", changes["code"])
                updated = await self.products.update_by_id(product_id, changes)
        else:
            updated = await self.products.update_by_id(product_id, changes)

        if not updated:
            raise ProductNotFoundException()
        return updated

    async def delete(self, product_id: Any) -> Record:
        deleted = await self.products.delete_by_id(product_id)
        if not deleted:
            raise ProductNotFoundException()

        logger.info(f"Product {deleted['id']} deleted")
        await self._notify(PRODUCT_DELETED, deleted["id"])
        return deleted

    async def first_page(self) -> List[Record]:
        """Products shown to real-time subscribers"""
        result = await self.list(limit=self.snapshot_size, page=1)
        return result["payload"]

    async def _notify(self, event: str, change: Any) -> None:
        """Run the change hook; failures are logged, never raised"""
        if self.on_change is None:
            return
        try:
            snapshot = await self.first_page()
            await self.on_change(event, snapshot, change)
        except Exception as e:
            logger.error(f"Failed to publish {event}: {e}")
