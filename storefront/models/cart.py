"""
Shopping cart model
A cart owns an ordered list of product lines
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Index, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from .base import BaseModel, TimestampedModel, UUIDModel

class Cart(BaseModel, TimestampedModel, UUIDModel):
    """Shopping cart"""

    __tablename__ = "carts"

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.position",
        lazy="selectin",
    )

class CartItem(BaseModel, TimestampedModel):
    """Shopping cart line"""

    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)

    # No foreign key: deleting a product leaves the line dangling
    product_id = Column(String(36), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False, default=0)

    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_cart_product"),
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
        Index("idx_cart_items_cart_position", "cart_id", "position"),
    )
