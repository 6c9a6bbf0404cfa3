# storefront/services/reconciliation_service.py
from datetime import datetime, timedelta, timezone
from typing import Dict

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.domain.errors import DomainError
from storefront.repos.checkout_repo import CheckoutIntentRepo
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import RECONCILE_STALE_SECONDS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class ReconciliationService:
    """
    Sprzata checkouty, ktore utknely w polowie:
    - failed albo in_progress starsze niz ``stale_after_seconds``
    - clearing_cart -> dokonczenie (zamowienie ma juz pozycje i rezerwacje)
    - wczesniejsze etapy -> void (pending order dostaje status void)

    Uzytkownik z aktywnym lockiem checkoutu jest pomijany w tym przebiegu.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.repo = CheckoutIntentRepo(db)
        self.lock_service = lock_service
        self.checkout = CheckoutService(db, lock_service, notification_service)

    def reconcile(self, stale_after_seconds: int = RECONCILE_STALE_SECONDS) -> Dict[str, int]:
        stale_before = datetime.now(timezone.utc) - timedelta(seconds=stale_after_seconds)
        intents = self.repo.list_unfinished(stale_before)

        stats = {"voided": 0, "completed": 0, "skipped": 0, "failed": 0}
        logger.info(f"Found {len(intents)} unfinished checkouts")

        for intent in intents:
            key = intent.idempotency_key
            token = self.lock_service.new_token()

            try:
                if not self.lock_service.acquire_checkout_lock(intent.user_id, token):
                    stats["skipped"] += 1
                    continue
            except RedisError as e:
                logger.warning(f"Could not lock user {intent.user_id} for checkout {key}: {e}")
                stats["skipped"] += 1
                continue

            try:
                outcome = self.checkout.recover(intent)
                stats[outcome] += 1
            except DomainError as e:
                # zostaje failed, kolejny przebieg sprobuje ponownie
                logger.warning(f"Reconciling checkout {key} failed: {e.message}")
                stats["failed"] += 1
            finally:
                try:
                    self.lock_service.release_checkout_lock(intent.user_id, token)
                except RedisError as e:
                    logger.warning(f"Failed to release checkout lock for user {intent.user_id}: {e}")

        logger.info(f"Reconciliation finished: {stats}")
        return stats
