# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.api.dependencies import get_current_user, get_lock_service
from storefront.data.database import get_db
from storefront.domain.errors import DomainError, CheckoutStageError
from storefront.domain.identity import UserContext
from storefront.domain.schemas import CheckoutIn, OrderOut, OrderStatusIn
from storefront.services.checkout_service import CheckoutService
from storefront.services.lock_service import LockService
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("", response_model=OrderOut, status_code=201)
def place_order(
    payload: CheckoutIn,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key"),
    user: UserContext = Depends(get_current_user),
    lock_service: LockService = Depends(get_lock_service),
    db: Session = Depends(get_db),
):
    """
    Skladanie zamowienia z koszyka.
    Ten sam Idempotency-Key zwraca to samo zamowienie albo wznawia nieudany checkout.
    Potwierdzenie wysylane asynchronicznie (Celery).
    """
    svc = CheckoutService(db, lock_service)
    try:
        return svc.place_order(
            user,
            shipping_address=payload.shipping_address.model_dump(),
            payment_method=payload.payment_method,
            idempotency_key=idempotency_key,
        )
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except CheckoutStageError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={
                "message": str(e),
                "stage": e.stage,
                "order_id": e.order_id,
                "idempotency_key": e.idempotency_key,
            },
        )
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("", response_model=List[OrderOut])
def list_orders(
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.list_orders(user)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_order(user, order_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: int,
    payload: OrderStatusIn,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_status(user, order_id, payload.status)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
