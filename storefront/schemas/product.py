"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Union
from datetime import datetime

from .base import BaseSchema, RequestSchema

class ProductCreate(RequestSchema):
    """Schema for creating product"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., gt=0, allow_inf_nan=False)
    stock: int = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    status: bool = True
    thumbnails: List[str] = []

class ProductUpdate(RequestSchema):
    """Schema for updating product; only the fields sent are applied"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    code: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    stock: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[bool] = None
    thumbnails: Optional[List[str]] = None

class ProductResponse(BaseSchema):
    """Schema for product response"""
    id: Union[int, str]
    title: str
    description: str
    code: str
    price: float
    stock: int
    category: str
    status: bool
    thumbnails: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ProductPageResponse(BaseModel):
    """Schema for paginated product list"""
    status: str = "success"
    payload: List[ProductResponse]
    total_docs: int
    limit: int
    total_pages: int
    page: int
    prev_page: Optional[int] = None
    next_page: Optional[int] = None
    has_prev_page: bool
    has_next_page: bool
    prev_link: Optional[str] = None
    next_link: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "status": "success",
                "payload": [],
                "total_docs": 25,
                "limit": 10,
                "total_pages": 3,
                "page": 2,
                "prev_page": 1,
                "next_page": 3,
                "has_prev_page": True,
                "has_next_page": True,
                "prev_link": "/api/products?page=1",
                "next_link": "/api/products?page=3",
            }
        }
