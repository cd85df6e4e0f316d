"""Product model using base mixins"""

from sqlalchemy import Column, String, Text, Float, Integer, Boolean, JSON, Index, CheckConstraint

from .base import BaseModel, TimestampedModel, UUIDModel

class Product(BaseModel, TimestampedModel, UUIDModel):
    """Catalog product"""

    __tablename__ = "products"

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    code = Column(String(100), nullable=False, unique=True, index=True)

    price = Column(Float, nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    category = Column(String(100), nullable=False, index=True)

    status = Column(Boolean, nullable=False, default=True)
    thumbnails = Column(JSON, nullable=False, default=list)

    __table_args__ = (
        CheckConstraint("price > 0", name="check_positive_price"),
        CheckConstraint("stock >= 0", name="check_non_negative_stock"),
        Index("idx_products_status_stock", "status", "stock"),
    )
