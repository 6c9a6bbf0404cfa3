# storefront/repos/catalog_repo.py
from typing import List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.data.models.variant import VariantModel
from storefront.data.models.inventory import InventoryModel
from storefront.domain.variants import size_key


class CatalogRepo:
    """
    Produkty, warianty i stany magazynowe.

    Zapisy magazynu to pojedyncze warunkowe UPDATE: wiersz zmienia sie tylko,
    gdy liczniki zostaja poprawne, a wynik widac po rowcount.
    Nic tu nie commituje; transakcja nalezy do serwisu.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_variant(self, variant_id: int) -> VariantModel | None:
        return self.db.get(VariantModel, variant_id)

    def list_variants(self, product_id: int, available_only: bool = False) -> List[VariantModel]:
        stmt = select(VariantModel).where(VariantModel.product_id == product_id)
        if available_only:
            stmt = stmt.where(VariantModel.is_available.is_(True))
        stmt = stmt.order_by(VariantModel.id)
        # rozmiary wg drabinki XS..XXL, w obrebie rozmiaru kolejnosc katalogu
        return sorted(self.db.execute(stmt).scalars().all(), key=lambda v: size_key(v.size))

    def get_inventory(self, variant_id: int) -> InventoryModel | None:
        return self.db.execute(
            select(InventoryModel).where(InventoryModel.variant_id == variant_id)
        ).scalar_one_or_none()

    def get_inventory_map(self, variant_ids: List[int]) -> dict:
        if not variant_ids:
            return {}
        rows = self.db.execute(
            select(InventoryModel).where(InventoryModel.variant_id.in_(variant_ids))
        ).scalars().all()
        return {row.variant_id: row for row in rows}

    def try_reserve(self, variant_id: int, quantity: int) -> bool:
        #reserved += n tylko jesli dostepne (quantity - reserved) >= n
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.variant_id == variant_id,
                InventoryModel.quantity - InventoryModel.reserved_quantity >= quantity,
            )
            .values(reserved_quantity=InventoryModel.reserved_quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def release(self, variant_id: int, quantity: int) -> bool:
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.variant_id == variant_id,
                InventoryModel.reserved_quantity >= quantity,
            )
            .values(reserved_quantity=InventoryModel.reserved_quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def fulfil(self, variant_id: int, quantity: int) -> bool:
        """Zarezerwowane sztuki wychodza z magazynu: oba liczniki spadaja o n."""
        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.variant_id == variant_id,
                InventoryModel.reserved_quantity >= quantity,
                InventoryModel.quantity >= quantity,
            )
            .values(
                quantity=InventoryModel.quantity - quantity,
                reserved_quantity=InventoryModel.reserved_quantity - quantity,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def set_stock(self, variant_id: int, quantity: int, low_stock_threshold: int | None = None) -> bool:
        values = {"quantity": quantity}
        if low_stock_threshold is not None:
            values["low_stock_threshold"] = low_stock_threshold

        result = self.db.execute(
            update(InventoryModel)
            .where(
                InventoryModel.variant_id == variant_id,
                InventoryModel.reserved_quantity <= quantity,
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
