from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.data.database import Base


class InventoryModel(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True)
    variant_id = Column(
        Integer,
        ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    quantity = Column(Integer, nullable=False, default=0)
    reserved_quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(Integer, nullable=True, default=10)

    variant = relationship("VariantModel", back_populates="inventory")

    # ostatnia linia obrony, serwisy i tak pilnuja tego same
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity"),
        CheckConstraint("reserved_quantity >= 0", name="ck_inventory_reserved"),
        CheckConstraint("reserved_quantity <= quantity", name="ck_inventory_reserved_le_quantity"),
    )
