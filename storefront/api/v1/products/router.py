"""Products API router"""

from fastapi import APIRouter, Depends, Query, status
from typing import Literal, Optional

from storefront.schemas.base import DataResponse
from storefront.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductPageResponse,
)
from storefront.services.product_service import ProductService
from storefront.utils.dependencies import get_product_service, valid_product_id
from storefront.utils.pagination import DEFAULT_LIMIT

router = APIRouter()


@router.get("", response_model=ProductPageResponse)
async def get_products(
    limit: int = Query(DEFAULT_LIMIT, ge=1, description="Number of items per page"),
    page: int = Query(1, ge=1, description="Page number"),
    sort: Optional[Literal["asc", "desc"]] = Query(None, description="Sort by price"),
    query: Optional[str] = Query(None, description="Category, or 'available' for in-stock active products"),
    service: ProductService = Depends(get_product_service),
):
    """Get products with pagination, filtering and sorting"""
    result = await service.list(limit=limit, page=page, sort=sort, query=query)
    return {"status": "success", **result}


@router.get("/{pid}", response_model=DataResponse[ProductResponse])
async def get_product_by_id(
    pid: str = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    """Get product by ID"""
    product = await service.get_by_id(pid)
    return {"data": product}


@router.post("", response_model=DataResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    """Create a product and notify real-time subscribers"""
    product = await service.create(product_data.model_dump())
    return {"message": "Product created", "data": product}


@router.put("/{pid}", response_model=DataResponse[ProductResponse])
async def update_product(
    update_data: ProductUpdate,
    pid: str = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    """Update the fields sent in the body"""
    product = await service.update(pid, update_data.model_dump(exclude_unset=True))
    return {"message": "Product updated", "data": product}


@router.delete("/{pid}", response_model=DataResponse[ProductResponse])
async def delete_product(
    pid: str = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    """Delete a product and notify real-time subscribers"""
    product = await service.delete(pid)
    return {"message": "Product deleted", "data": product}
