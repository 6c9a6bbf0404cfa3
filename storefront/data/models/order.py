from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    idempotency_key = Column(String(255), nullable=False, unique=True)

    status = Column(String, nullable=False, default="pending")  # pending, confirmed, processing, shipped, delivered, cancelled, void
    shipping_address = Column(JSON, nullable=False)
    payment_method = Column(String, nullable=False)

    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping_cost = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    items = relationship("OrderItemModel", back_populates="order", order_by="OrderItemModel.id")
