"""
Cart schemas for request/response validation
"""

from pydantic import Field
from typing import Optional, List, Union
from datetime import datetime

from .base import BaseSchema, RequestSchema
from .product import ProductResponse


class CartLineInput(RequestSchema):
    """One line of a full cart replacement"""
    product: Union[int, str] = Field(..., description="Product ID")
    quantity: int = Field(1, ge=1, description="Quantity")


class CartLinesReplace(RequestSchema):
    """Schema for replacing every line of a cart"""
    products: List[CartLineInput]


class AddToCartRequest(RequestSchema):
    """Schema for add to cart request"""
    quantity: int = Field(default=1, ge=1, description="Quantity to add")


class CartItemUpdate(RequestSchema):
    """Schema for updating cart item; zero removes the line"""
    quantity: int = Field(..., ge=0, description="New quantity")


class CartLineResponse(BaseSchema):
    """Resolved cart line"""
    product_id: Union[int, str]
    product: Optional[ProductResponse] = None
    quantity: int
    error: Optional[str] = None


class CartResponse(BaseSchema):
    """Schema for cart response"""
    id: Union[int, str]
    products: List[CartLineResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
