"""
Custom exception classes
Services raise these; the API boundary maps them to responses
"""

from typing import List, Optional

class StorefrontException(Exception):
    """Base exception class for Storefront application"""

    error_code: str = "ERROR"

    def __init__(self, detail: str, error_code: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if error_code:
            self.error_code = error_code

class ValidationException(StorefrontException):
    """Missing or malformed input"""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validation failed",
        errors: Optional[List[str]] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(detail, error_code)
        self.errors = errors or []

class NotFoundException(StorefrontException):
    """Referenced entity does not exist"""

    error_code = "NOT_FOUND"

    def __init__(self, detail: str = "Not found", error_code: Optional[str] = None):
        super().__init__(detail, error_code)

class ConflictException(StorefrontException):
    """Uniqueness violation"""

    error_code = "CONFLICT"

class InternalServerException(StorefrontException):
    """Unexpected store failure"""

    error_code = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal server error", error_code: Optional[str] = None):
        super().__init__(detail, error_code)

# Business logic exceptions
class ProductNotFoundException(NotFoundException):
    """Product does not exist"""

    def __init__(self, product_id=None):
        detail = "Product not found"
        if product_id is not None:
            detail = f"Product with ID {product_id} not found"
        super().__init__(detail=detail, error_code="PRODUCT_NOT_FOUND")

class CartNotFoundException(NotFoundException):
    """Cart does not exist"""

    def __init__(self):
        super().__init__(detail="Cart not found", error_code="CART_NOT_FOUND")

class CartLineNotFoundException(NotFoundException):
    """Product is not a line of the cart"""

    def __init__(self):
        super().__init__(detail="Product not found in cart", error_code="CART_LINE_NOT_FOUND")

class DuplicateResourceException(ConflictException):
    """Resource already exists"""

    def __init__(self, resource: str, field: str, value: str):
        super().__init__(
            detail=f"{resource} with {field} '{value}' already exists",
            error_code="DUPLICATE_RESOURCE"
        )
