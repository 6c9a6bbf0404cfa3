# storefront/repos/checkout_repo.py
from datetime import datetime
from typing import List

from sqlalchemy import select, or_, and_
from sqlalchemy.orm import Session

from storefront.data.models.checkout_intent import CheckoutIntentModel


class CheckoutIntentRepo:
    def __init__(self, db: Session):
        self.db = db

    def create(self, intent: CheckoutIntentModel) -> CheckoutIntentModel:
        self.db.add(intent)
        self.db.flush()
        return intent

    def get_by_key(self, idempotency_key: str) -> CheckoutIntentModel | None:
        return self.db.execute(
            select(CheckoutIntentModel).where(CheckoutIntentModel.idempotency_key == idempotency_key)
        ).scalar_one_or_none()

    def list_unfinished(self, stale_before: datetime) -> List[CheckoutIntentModel]:
        """Intenty failed oraz in_progress nieruszane od ``stale_before``."""
        return list(
            self.db.execute(
                select(CheckoutIntentModel)
                .where(
                    or_(
                        CheckoutIntentModel.status == "failed",
                        and_(
                            CheckoutIntentModel.status == "in_progress",
                            CheckoutIntentModel.updated_at < stale_before,
                        ),
                    )
                )
                .order_by(CheckoutIntentModel.id)
            ).scalars().all()
        )

    def advance(self, intent: CheckoutIntentModel, stage: str, status: str | None = None) -> None:
        intent.stage = stage
        if status is not None:
            intent.status = status
        intent.error = None
        self.db.flush()

    def mark_failed(self, intent: CheckoutIntentModel, error: str) -> None:
        intent.status = "failed"
        intent.error = error[:2000]
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
