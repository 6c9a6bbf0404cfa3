# storefront/services/order_service.py
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.checkout import OrderStatus, check_transition
from storefront.domain.errors import NotFoundError, InventoryError
from storefront.domain.identity import UserContext
from storefront.repos.catalog_repo import CatalogRepo
from storefront.repos.order_repo import OrderRepo
from storefront.utils.retry import store_read
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# statusy, w ktorych towar jest jeszcze zarezerwowany w magazynie
_HOLDING_STOCK = {OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value}


def order_to_dict(order: OrderModel, items: List[OrderItemModel]) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "payment_method": order.payment_method,
        "shipping_address": dict(order.shipping_address or {}),
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax": order.tax,
        "total": order.total,
        "created_at": order.created_at,
        "items": [
            {
                "id": i.id,
                "product_id": i.product_id,
                "variant_id": i.variant_id,
                "product_name": i.product_name,
                "brand": i.brand,
                "size": i.size,
                "color": i.color,
                "sku": i.sku,
                "quantity": i.quantity,
                "unit_price": i.unit_price,
                "total_price": i.total_price,
            }
            for i in items
        ],
    }


class OrderService:
    """
    Zamowienia po checkoucie: podglad/historia oraz zmiany statusu przez admina
    (razem z wplywem na zarezerwowany towar).
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.catalog = CatalogRepo(db)

    def _visible_order(self, user: UserContext, order_id: int) -> OrderModel:
        user_id = user.require()
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("Order not found")

        if order.user_id != user_id and not user.is_admin:
            raise PermissionError("No access to this order")

        return order

    @store_read
    def get_order(self, user: UserContext, order_id: int) -> Dict[str, Any]:
        order = self._visible_order(user, order_id)
        return order_to_dict(order, self.repo.get_items(order.id))

    @store_read
    def list_orders(self, user: UserContext) -> List[Dict[str, Any]]:
        user_id = user.require()
        return [
            order_to_dict(order, self.repo.get_items(order.id))
            for order in self.repo.list_for_user(user_id)
        ]

    def update_status(self, user: UserContext, order_id: int, status: str) -> Dict[str, Any]:
        """
        Zmiana statusu przez admina.

        - shipped: zarezerwowane sztuki wychodza z magazynu (spada quantity i reserved)
        - cancelled: rezerwacje wracaja do dostepnego stanu
        """
        user.require_admin()
        order = self._visible_order(user, order_id)
        target = check_transition(order.status, status)
        items = self.repo.get_items(order.id)

        try:
            if target == OrderStatus.SHIPPED:
                for item in items:
                    if not self.catalog.fulfil(item.variant_id, item.quantity):
                        raise InventoryError(
                            f"Cannot ship {item.quantity} x {item.sku}: not enough reserved stock"
                        )
            elif target == OrderStatus.CANCELLED and order.status in _HOLDING_STOCK:
                for item in items:
                    if not self.catalog.release(item.variant_id, item.quantity):
                        raise InventoryError(
                            f"Cannot release {item.quantity} x {item.sku}: reservation missing"
                        )

            previous = order.status
            self.repo.set_status(order, target.value)
            self.repo.commit()
        except (InventoryError, SQLAlchemyError):
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id} status {previous} -> {target.value}")
        return order_to_dict(order, self.repo.get_items(order.id))
