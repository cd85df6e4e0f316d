"""Cart router"""

from fastapi import APIRouter, Body, Depends, status
from typing import Optional

from storefront.schemas.base import DataResponse
from storefront.schemas.cart import (
    AddToCartRequest,
    CartItemUpdate,
    CartLinesReplace,
    CartResponse,
)
from storefront.services.cart_service import CartService
from storefront.utils.dependencies import get_cart_service, valid_cart_id, valid_product_id

router = APIRouter()

@router.post("", response_model=DataResponse[CartResponse], status_code=status.HTTP_201_CREATED)
async def create_cart(service: CartService = Depends(get_cart_service)):
    """Create an empty cart"""
    cart = await service.create()
    return {"message": "Cart created", "data": cart}

@router.get("/{cid}", response_model=DataResponse[CartResponse])
async def get_cart(
    cid: str = Depends(valid_cart_id),
    service: CartService = Depends(get_cart_service),
):
    """Get cart with full product records"""
    cart = await service.get_by_id(cid)
    return {"data": cart}

@router.post("/{cid}/products/{pid}", response_model=DataResponse[CartResponse])
@router.post("/{cid}/product/{pid}", response_model=DataResponse[CartResponse], include_in_schema=False)
async def add_to_cart(
    item_data: Optional[AddToCartRequest] = Body(None),
    cid: str = Depends(valid_cart_id),
    pid: str = Depends(valid_product_id),
    service: CartService = Depends(get_cart_service),
):
    """Add a product to the cart, incrementing the line if present"""
    quantity = item_data.quantity if item_data else 1
    cart = await service.add_product(cid, pid, quantity)
    return {"message": "Product added to cart", "data": cart}

@router.put("/{cid}/products/{pid}", response_model=DataResponse[CartResponse])
async def update_cart_item(
    update_data: CartItemUpdate,
    cid: str = Depends(valid_cart_id),
    pid: str = Depends(valid_product_id),
    service: CartService = Depends(get_cart_service),
):
    """Set a line's quantity; zero removes the line"""
    cart = await service.set_line_quantity(cid, pid, update_data.quantity)
    return {"message": "Cart item quantity updated", "data": cart}

@router.put("/{cid}", response_model=DataResponse[CartResponse])
async def replace_cart_items(
    cart_data: CartLinesReplace,
    cid: str = Depends(valid_cart_id),
    service: CartService = Depends(get_cart_service),
):
    """Replace every line of the cart"""
    lines = [line.model_dump() for line in cart_data.products]
    cart = await service.replace_lines(cid, lines)
    return {"message": "Cart updated", "data": cart}

@router.delete("/{cid}/products/{pid}", response_model=DataResponse[CartResponse])
async def remove_from_cart(
    cid: str = Depends(valid_cart_id),
    pid: str = Depends(valid_product_id),
    service: CartService = Depends(get_cart_service),
):
    """Remove a product line from the cart"""
    cart = await service.remove_line(cid, pid)
    return {"message": "Product removed from cart", "data": cart}

@router.delete("/{cid}", response_model=DataResponse[CartResponse])
async def clear_cart(
    cid: str = Depends(valid_cart_id),
    service: CartService = Depends(get_cart_service),
):
    """Empty the cart"""
    cart = await service.clear(cid)
    return {"message": "Cart cleared", "data": cart}
