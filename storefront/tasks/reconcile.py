# storefront/tasks/reconcile.py
from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.services.lock_service import LockService
from storefront.services.reconciliation_service import ReconciliationService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="storefront.tasks.reconcile.reconcile_checkouts_task")
def reconcile_checkouts_task(stale_after_seconds: int | None = None):
    logger.info("Reconcile checkouts task started")

    db = SessionLocal()
    try:
        service = ReconciliationService(db, LockService())
        if stale_after_seconds is None:
            return service.reconcile()
        return service.reconcile(stale_after_seconds=stale_after_seconds)
    finally:
        db.close()
