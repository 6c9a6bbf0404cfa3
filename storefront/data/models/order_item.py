from sqlalchemy import Column, Integer, String, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)

    # referencje bez FK - historia zamowien przezywa usuniecie produktu
    product_id = Column(Integer, nullable=False)
    variant_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    product_name = Column(String, nullable=False)
    brand = Column(String, nullable=True)
    size = Column(String, nullable=False)
    color = Column(String, nullable=False)
    sku = Column(String, nullable=False)

    order = relationship("OrderModel", back_populates="items")
