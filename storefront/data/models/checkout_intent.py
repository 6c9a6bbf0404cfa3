from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, JSON, ForeignKey

from storefront.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class CheckoutIntentModel(Base):
    """Jeden wiersz na probe checkoutu; pamieta, dokad doszla sekwencja zapisow."""

    __tablename__ = "checkout_intents"

    id = Column(Integer, primary_key=True)
    idempotency_key = Column(String(255), nullable=False, unique=True)
    user_id = Column(Integer, nullable=False, index=True)

    stage = Column(String, nullable=False)  # etap do wykonania (albo "done")
    status = Column(String, nullable=False, default="in_progress", index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True)

    payment_method = Column(String, nullable=False)
    shipping_address = Column(JSON, nullable=False)
    snapshot = Column(JSON, nullable=False)
    error = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
