# storefront/repos/cart_repo.py
from datetime import datetime, timezone
from typing import Dict, List

from sqlalchemy import select, delete, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            return pg_insert(CartItemModel)
        return sqlite_insert(CartItemModel)

    def get_line(self, line_id: int) -> CartItemModel | None:
        return self.db.get(CartItemModel, line_id)

    def get_line_for_variant(self, user_id: int, variant_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.variant_id == variant_id,
            )
        ).scalar_one_or_none()

    def list_lines(self, user_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.id)
            ).scalars().all()
        )

    def upsert_line(self, user_id: int, product_id: int, variant_id: int, quantity: int) -> None:
        """
        INSERT ... ON CONFLICT (user_id, variant_id) DO UPDATE quantity = quantity + n

        Jedna instrukcja zamiast "sprawdz czy jest, potem insert/update",
        wiec dwa rownolegle dodania nie zrobia dwoch linii.
        """
        now = datetime.now(timezone.utc)
        stmt = self._insert().values(
            user_id=user_id,
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "variant_id"],
            set_={
                "quantity": CartItemModel.__table__.c.quantity + stmt.excluded.quantity,
                "updated_at": now,
            },
        )
        self.db.execute(stmt)

    def update_quantity(self, line_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(CartItemModel)
            .where(CartItemModel.id == line_id)
            .values(quantity=quantity, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_line(self, line_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel)
            .where(CartItemModel.id == line_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def take_quantities(self, user_id: int, quantities: Dict[int, int]) -> None:
        """
        Zdejmuje z linii koszyka zamowione ilosci (line_id -> n).
        Linia znika tylko gdy nie zostaje nic ponad n, wiec sztuki dolozone
        w trakcie checkoutu zostaja w koszyku.
        """
        now = datetime.now(timezone.utc)
        for line_id, quantity in quantities.items():
            if line_id is None:
                continue
            result = self.db.execute(
                update(CartItemModel)
                .where(
                    CartItemModel.id == line_id,
                    CartItemModel.user_id == user_id,
                    CartItemModel.quantity > quantity,
                )
                .values(quantity=CartItemModel.quantity - quantity, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                self.db.execute(
                    delete(CartItemModel)
                    .where(CartItemModel.id == line_id, CartItemModel.user_id == user_id)
                    .execution_options(synchronize_session=False)
                )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
