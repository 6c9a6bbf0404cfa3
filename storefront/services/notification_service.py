# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zamowieniach, przetwarzane asynchronicznie przez Celery.
    """

    @staticmethod
    def send_order_confirmation(user_id: int, order_id: int):
        send_order_confirmation_task.delay(user_id, order_id)


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(user_id: int, order_id: int):
    """
    Na produkcji poszloby do dostawcy email/push; tutaj tylko logujemy.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} confirmed")

    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
