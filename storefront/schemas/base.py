"""Base schemas shared by the API responses"""

from pydantic import BaseModel, ConfigDict
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

class BaseSchema(BaseModel):
    """Base schema with common configuration"""

    model_config = ConfigDict(from_attributes=True)

class RequestSchema(BaseModel):
    """Request bodies: no type coercion, unknown fields dropped"""

    model_config = ConfigDict(strict=True, str_strip_whitespace=True, extra="ignore")

class DataResponse(BaseModel, Generic[T]):
    """Success envelope"""
    status: str = "success"
    message: Optional[str] = None
    data: T

class ErrorResponse(BaseModel):
    """Error envelope"""
    status: str = "error"
    message: str
    code: Optional[str] = None
    errors: Optional[list] = None
