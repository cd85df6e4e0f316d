"""Base models and mixins for database models"""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy.sql import func
from typing import Any, Dict, Optional
import uuid

# Create declarative base
class Base(DeclarativeBase):
    pass

class TimestampedModel:
    """Mixin for adding created_at and updated_at timestamps"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            index=True
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            server_default=func.now(),
            onupdate=func.now()
        )

def generate_id() -> str:
    return str(uuid.uuid4())

class UUIDModel:
    """Mixin for adding an opaque string primary key"""

    @declared_attr
    def id(cls):
        return Column(
            String(36),
            primary_key=True,
            default=generate_id,
            nullable=False
        )

class BaseModel(Base):
    """Abstract base model with common functionality"""

    __abstract__ = True

    def to_dict(self, exclude: Optional[list] = None) -> Dict[str, Any]:
        """Convert model instance to dictionary"""
        exclude = exclude or []
        result = {}

        for column in self.__table__.columns:
            if column.name not in exclude:
                value = getattr(self, column.name)

                if isinstance(value, uuid.UUID):
                    value = str(value)
                elif isinstance(value, list):
                    value = list(value)

                result[column.name] = value

        return result

    def update_from_dict(self, data: Dict[str, Any], exclude: Optional[list] = None):
        """Update model instance from dictionary"""
        exclude = exclude or []

        for key, value in data.items():
            if hasattr(self, key) and key not in exclude:
                setattr(self, key, value)

    def __repr__(self):
        """String representation"""
        class_name = self.__class__.__name__
        attributes = []

        for column in self.__table__.columns:
            if column.primary_key:
                value = getattr(self, column.name)
                attributes.append(f"{column.name}={value!r}")

        return f"<{class_name}({', '.join(attributes)})>"

__all__ = [
    'Base',
    'BaseModel',
    'TimestampedModel',
    'UUIDModel',
    'generate_id',
]
