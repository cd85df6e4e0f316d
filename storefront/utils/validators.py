"""Field validators for product payloads"""

from numbers import Real
import math
from typing import Any, Dict, List, Optional

REQUIRED_TEXT_FIELDS = ("title", "description", "code", "category")
REQUIRED_FIELDS = ("title", "description", "code", "price", "stock", "category")
IDENTITY_FIELDS = ("id", "_id")
PRODUCT_FIELDS = ("title", "description", "code", "price", "stock", "category", "status", "thumbnails")

def is_number(value: Any) -> bool:
    """Real numbers only; bool is an int subclass and is rejected"""
    return isinstance(value, Real) and not isinstance(value, bool)

def is_non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())

def validate_price(value: Any) -> Optional[str]:
    """Price must be finite and strictly positive"""
    if not is_number(value) or (isinstance(value, float) and not math.isfinite(value)) or value <= 0:
        return 'Field "price" must be a finite number greater than 0'
    return None

def validate_stock(value: Any) -> Optional[str]:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        return 'Field "stock" must be an integer greater than or equal to 0'
    return None

def validate_status(value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        return 'Field "status" must be a boolean'
    return None

def validate_thumbnails(value: Any) -> Optional[str]:
    if not isinstance(value, list):
        return 'Field "thumbnails" must be a list'
    if any(not isinstance(thumb, str) for thumb in value):
        return 'Every item of "thumbnails" must be a string'
    return None

FIELD_VALIDATORS = {
    "price": validate_price,
    "stock": validate_stock,
    "status": validate_status,
    "thumbnails": validate_thumbnails,
}

def _validate_field(field: str, value: Any) -> Optional[str]:
    if field in REQUIRED_TEXT_FIELDS:
        if not is_non_empty_text(value):
            return f'Field "{field}" must be a non-empty string'
        return None
    validator = FIELD_VALIDATORS.get(field)
    return validator(value) if validator else None

def product_create_errors(data: Dict[str, Any]) -> List[str]:
    """Collect every problem with a product creation payload"""
    errors = []
    for field in REQUIRED_FIELDS:
        if data.get(field) is None or (isinstance(data.get(field), str) and not data[field].strip()):
            errors.append(f'Field "{field}" is required')
        else:
            error = _validate_field(field, data[field])
            if error:
                errors.append(error)

    for field in ("status", "thumbnails"):
        if field in data and data[field] is not None:
            error = _validate_field(field, data[field])
            if error:
                errors.append(error)

    return errors

def product_update_errors(data: Dict[str, Any]) -> List[str]:
    """Validate only the fields present in a partial update"""
    errors = []
    for field, value in data.items():
        error = _validate_field(field, value)
        if error:
            errors.append(error)
    return errors
