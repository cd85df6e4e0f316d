"""
Common dependencies for FastAPI
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Tuple
from fastapi import Depends, Path
from starlette.requests import HTTPConnection

from storefront.core.config import settings
from storefront.core.exceptions import ValidationException
from storefront.repositories import CartRepository, ProductRepository, build_repositories
from storefront.services.cart_service import CartService
from storefront.services.product_service import ProductService

Repositories = Tuple[ProductRepository, CartRepository]

@asynccontextmanager
async def open_repositories(app) -> AsyncGenerator[Repositories, None]:
    """
    Repositories for the configured backend
    Shared JSON collections in file mode, a fresh session otherwise
    """
    file_store = getattr(app.state, "file_store", None)
    if file_store is not None:
        yield build_repositories(file_store=file_store)
        return

    async with app.state.session_factory() as session:
        try:
            yield build_repositories(db=session)
        except Exception:
            await session.rollback()
            raise

async def get_repositories(connection: HTTPConnection) -> AsyncGenerator[Repositories, None]:
    """Request-scoped repositories"""
    async with open_repositories(connection.app) as repositories:
        yield repositories

def build_product_service(app, products: ProductRepository) -> ProductService:
    return ProductService(
        products,
        on_change=getattr(app.state, "broadcaster", None),
        snapshot_size=settings.REALTIME_PAGE_SIZE,
    )

def get_product_service(
    connection: HTTPConnection,
    repositories: Repositories = Depends(get_repositories),
) -> ProductService:
    return build_product_service(connection.app, repositories[0])

def get_cart_service(repositories: Repositories = Depends(get_repositories)) -> CartService:
    products, carts = repositories
    return CartService(carts, products)

def _check_id(repository, value: str, param: str) -> str:
    if not repository.is_valid_id(value):
        raise ValidationException(f"Invalid ID in parameter: {param}")
    return value

def valid_product_id(
    pid: str = Path(..., description="Product ID"),
    repositories: Repositories = Depends(get_repositories),
) -> str:
    """Reject malformed product identities before the service runs"""
    return _check_id(repositories[0], pid, "pid")

def valid_cart_id(
    cid: str = Path(..., description="Cart ID"),
    repositories: Repositories = Depends(get_repositories),
) -> str:
    """Reject malformed cart identities before the service runs"""
    return _check_id(repositories[1], cid, "cid")
