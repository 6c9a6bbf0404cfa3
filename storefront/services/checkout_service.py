# storefront/services/checkout_service.py
import uuid
from typing import Dict, Any, List

from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.checkout_intent import CheckoutIntentModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.checkout import (
    WRITE_STAGES,
    CheckoutStage,
    IntentStatus,
    OrderStatus,
    validate_address,
    validate_payment_method,
)
from storefront.domain.errors import (
    AvailabilityError,
    CheckoutInProgressError,
    CheckoutStageError,
    TransientIOError,
    ValidationError,
)
from storefront.domain.identity import UserContext
from storefront.domain.pricing import PricedLine, compute_totals
from storefront.repos.cart_repo import CartRepo
from storefront.repos.catalog_repo import CatalogRepo
from storefront.repos.checkout_repo import CheckoutIntentRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.cart_service import CartService
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import order_to_dict
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Checkout: koszyk -> zamowienie jako utrwalona saga.

    validating -> placing_order -> placing_items -> clearing_cart -> done

    Walidacja nic nie zapisuje. Kazdy etap zapisu to osobna transakcja, ktora
    w tej samej transakcji przesuwa intent, wiec intent zawsze wskazuje
    pierwszy etap jeszcze NIE zatwierdzony. Blad etapu trafia do intentu i
    wychodzi jako CheckoutStageError; wczesniejsze etapy zostaja (pending
    order, koszyk nietkniety) do wznowienia tym samym kluczem idempotencji
    albo dla reconciliation.

    Zapisow tutaj nigdy nie ponawiamy.
    """

    def __init__(
        self,
        db: Session,
        lock_service: LockService,
        notification_service: NotificationService | None = None,
    ):
        self.db = db
        self.cart_service = CartService(db)
        self.cart_repo = CartRepo(db)
        self.catalog_repo = CatalogRepo(db)
        self.order_repo = OrderRepo(db)
        self.intent_repo = CheckoutIntentRepo(db)
        self.lock_service = lock_service
        self.notification_service = notification_service or NotificationService()

        self._steps = {
            CheckoutStage.PLACING_ORDER: self._place_order_record,
            CheckoutStage.PLACING_ITEMS: self._place_items,
            CheckoutStage.CLEARING_CART: self._clear_cart,
        }

    def place_order(
        self,
        user: UserContext,
        shipping_address: Dict[str, Any],
        payment_method: str,
        idempotency_key: str | None = None,
    ) -> Dict[str, Any]:
        user_id = user.require()

        # validating - zadnych zapisow
        address = validate_address(shipping_address)
        method = validate_payment_method(payment_method)
        key = idempotency_key or uuid.uuid4().hex

        token = self.lock_service.new_token()
        try:
            acquired = self.lock_service.acquire_checkout_lock(user_id, token)
        except RedisError as e:
            # nic jeszcze nie zapisano, klient moze po prostu ponowic
            logger.error(f"Checkout lock unavailable for user {user_id}: {e}")
            raise TransientIOError("Checkout is temporarily unavailable, please try again") from e
        if not acquired:
            raise CheckoutInProgressError(CheckoutStage.VALIDATING.value, idempotency_key=key)

        try:
            existing = self.intent_repo.get_by_key(key)
            if existing is not None:
                return self._replay(existing, user_id)

            # snapshot koszyka z aktualnymi cenami, od tej chwili ceny sa zamrozone
            lines = self.cart_service.priced_lines(user_id, strict=True)
            if not lines:
                raise ValidationError("Your cart is empty")
            self._check_availability(lines)

            intent = self._open_intent(user_id, key, address, method.value, lines)
            return self._run(intent)
        finally:
            self._release(user_id, token)

    def recover(self, intent: CheckoutIntentModel) -> str:
        """
        Dokonczenie albo kompensacja niedokonczonego checkoutu (wolajacy trzyma lock).

        Po zatwierdzeniu pozycji i rezerwacji zamowienie jest prawdziwe, wiec
        idziemy do przodu; wszystko wczesniej dostaje void.
        """
        if CheckoutStage(intent.stage) == CheckoutStage.CLEARING_CART:
            self._run(intent)
            return "completed"

        self._void(intent, f"abandoned at {intent.stage}")
        return "voided"

    #helpers

    def _release(self, user_id: int, token: str) -> None:
        try:
            self.lock_service.release_checkout_lock(user_id, token)
        except RedisError as e:
            # lock i tak wygasnie po TTL
            logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

    def _check_availability(self, lines: List[PricedLine]) -> None:
        for line in lines:
            label = f"{line.product_name} ({line.size} / {line.color})"
            if not line.purchasable:
                raise AvailabilityError(f"{label} is no longer available")
            if line.quantity > line.stock:
                raise AvailabilityError(f"Only {max(line.stock, 0)} left of {label}")

    def _open_intent(
        self,
        user_id: int,
        key: str,
        address: Dict[str, str],
        payment_method: str,
        lines: List[PricedLine],
    ) -> CheckoutIntentModel:
        intent = CheckoutIntentModel(
            idempotency_key=key,
            user_id=user_id,
            stage=CheckoutStage.PLACING_ORDER.value,
            status=IntentStatus.IN_PROGRESS.value,
            payment_method=payment_method,
            shipping_address=address,
            snapshot=[line.to_snapshot() for line in lines],
        )

        try:
            self.intent_repo.create(intent)
            self.intent_repo.commit()
        except IntegrityError as e:
            self.intent_repo.rollback()
            raise CheckoutInProgressError(CheckoutStage.VALIDATING.value, idempotency_key=key) from e
        except SQLAlchemyError as e:
            self.intent_repo.rollback()
            logger.exception(f"Could not open checkout {key} for user {user_id}")
            raise CheckoutStageError(CheckoutStage.VALIDATING.value, idempotency_key=key) from e

        logger.info(f"Checkout {key} opened for user {user_id} with {len(lines)} line(s)")
        return intent

    def _replay(self, intent: CheckoutIntentModel, user_id: int) -> Dict[str, Any]:
        if intent.user_id != user_id:
            raise PermissionError("No access to this checkout")

        status = IntentStatus(intent.status)

        if status == IntentStatus.DONE:
            logger.info(f"Checkout {intent.idempotency_key} already done, returning order {intent.order_id}")
            return self._summary(intent.order_id)

        if status == IntentStatus.VOIDED:
            raise CheckoutStageError(
                intent.stage,
                order_id=intent.order_id,
                idempotency_key=intent.idempotency_key,
                message="This checkout was cancelled. Please start a new checkout.",
            )

        if status == IntentStatus.IN_PROGRESS:
            # porzucony przebieg dokonczy reconciliation
            raise CheckoutInProgressError(
                intent.stage,
                order_id=intent.order_id,
                idempotency_key=intent.idempotency_key,
            )

        logger.info(f"Resuming checkout {intent.idempotency_key} from stage {intent.stage}")
        return self._run(intent)

    def _run(self, intent: CheckoutIntentModel) -> Dict[str, Any]:
        key = intent.idempotency_key

        if intent.status != IntentStatus.IN_PROGRESS.value:
            intent.status = IntentStatus.IN_PROGRESS.value
            self.intent_repo.commit()

        lines = [PricedLine.from_snapshot(item) for item in intent.snapshot]
        start = WRITE_STAGES.index(CheckoutStage(intent.stage))

        for stage in WRITE_STAGES[start:]:
            try:
                self._steps[stage](intent, lines)
                self.db.commit()
            except AvailabilityError as e:
                self.db.rollback()
                logger.warning(f"Checkout {key} lost the race for stock: {e}")
                self._void(intent, str(e))
                raise
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception(f"Checkout {key} failed at stage {stage.value}")
                self._record_failure(intent, f"{stage.value}: {e}")
                raise CheckoutStageError(stage.value, order_id=intent.order_id, idempotency_key=key) from e

            logger.info(f"Checkout {key} finished stage {stage.value}")

        self._notify(intent.user_id, intent.order_id)
        return self._summary(intent.order_id)

    #etapy sagi - kazdy konczy sie przesunieciem intentu w tej samej transakcji

    def _place_order_record(self, intent: CheckoutIntentModel, lines: List[PricedLine]) -> None:
        totals = compute_totals(lines)

        order = OrderModel(
            user_id=intent.user_id,
            idempotency_key=intent.idempotency_key,
            status=OrderStatus.PENDING.value,
            shipping_address=dict(intent.shipping_address),
            payment_method=intent.payment_method,
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping,
            tax=totals.tax,
            total=totals.total,
        )
        self.order_repo.add_order(order)

        intent.order_id = order.id
        self.intent_repo.advance(intent, CheckoutStage.PLACING_ITEMS.value)

    def _place_items(self, intent: CheckoutIntentModel, lines: List[PricedLine]) -> None:
        # stala kolejnosc blokowania wierszy magazynu
        for line in sorted(lines, key=lambda l: l.variant_id):
            if not self.catalog_repo.try_reserve(line.variant_id, line.quantity):
                raise AvailabilityError(
                    f"{line.product_name} ({line.size} / {line.color}) sold out while placing your order"
                )

        self.order_repo.add_items([
            OrderItemModel(
                order_id=intent.order_id,
                product_id=line.product_id,
                variant_id=line.variant_id,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total_price=line.line_total,
                product_name=line.product_name,
                brand=line.brand,
                size=line.size,
                color=line.color,
                sku=line.sku,
            )
            for line in lines
        ])

        self.intent_repo.advance(intent, CheckoutStage.CLEARING_CART.value)

    def _clear_cart(self, intent: CheckoutIntentModel, lines: List[PricedLine]) -> None:
        self.cart_repo.take_quantities(intent.user_id, {line.line_id: line.quantity for line in lines})

        order = self.order_repo.get_order(intent.order_id)
        self.order_repo.set_status(order, OrderStatus.CONFIRMED.value)

        self.intent_repo.advance(intent, CheckoutStage.DONE.value, status=IntentStatus.DONE.value)

    #kompensacja i bledy

    def _record_failure(self, intent: CheckoutIntentModel, error: str) -> None:
        try:
            self.intent_repo.mark_failed(intent, error)
            self.intent_repo.commit()
        except SQLAlchemyError:
            self.intent_repo.rollback()
            # zostaje in_progress, reconciliation podejmie go jako przeterminowany
            logger.exception(f"Could not record failure of checkout {intent.idempotency_key}")

    def _void(self, intent: CheckoutIntentModel, reason: str) -> None:
        try:
            if intent.order_id is not None:
                order = self.order_repo.get_order(intent.order_id)
                if order is not None and order.status == OrderStatus.PENDING.value:
                    self.order_repo.set_status(order, OrderStatus.VOID.value)

            intent.status = IntentStatus.VOIDED.value
            intent.error = reason[:2000]
            self.intent_repo.commit()
        except SQLAlchemyError:
            self.intent_repo.rollback()
            logger.exception(f"Could not void checkout {intent.idempotency_key}")
            return

        logger.info(f"Checkout {intent.idempotency_key} voided (order {intent.order_id}): {reason}")

    def _notify(self, user_id: int, order_id: int) -> None:
        try:
            self.notification_service.send_order_confirmation(user_id, order_id)
        except Exception as e:
            # zamowienie jest juz zlozone, powiadomienie nie moze go cofnac
            logger.warning(f"Failed to enqueue confirmation for order {order_id}: {e}")

    def _summary(self, order_id: int) -> Dict[str, Any]:
        order = self.order_repo.get_order(order_id)
        return order_to_dict(order, self.order_repo.get_items(order_id))
