# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from storefront.api.dependencies import get_current_user
from storefront.data.database import get_db
from storefront.domain.errors import DomainError
from storefront.domain.identity import UserContext
from storefront.domain.schemas import AddItemIn, UpdateQuantityIn, CartLineOut, CartOut
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.get_cart(user)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/items", response_model=CartLineOut, status_code=201)
def add_item(
    payload: AddItemIn,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.add_to_cart(
            user,
            product_id=payload.product_id,
            variant_id=payload.variant_id,
            quantity=payload.quantity,
        )
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/items/{line_id}", response_model=CartLineOut)
def update_item(
    line_id: int,
    payload: UpdateQuantityIn,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_quantity(user, line_id, payload.quantity)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/items/{line_id}", status_code=204)
def remove_item(
    line_id: int,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        svc.remove_from_cart(user, line_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return Response(status_code=204)
