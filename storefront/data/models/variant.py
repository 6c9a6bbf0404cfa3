from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class VariantModel(Base):
    __tablename__ = "product_variants"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)

    size = Column(String, nullable=False)
    color = Column(String, nullable=False)
    color_hex = Column(String, nullable=True)
    price_adjustment = Column(Numeric(10, 2), nullable=False, default=0)
    is_available = Column(Boolean, nullable=False, default=True)
    sku = Column(String, nullable=False, unique=True)

    product = relationship("ProductModel", back_populates="variants")
    inventory = relationship(
        "InventoryModel",
        back_populates="variant",
        uselist=False,
        cascade="all, delete-orphan",
    )
