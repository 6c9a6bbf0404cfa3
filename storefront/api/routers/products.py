# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.dependencies import get_current_user
from storefront.data.database import get_db
from storefront.domain.errors import DomainError
from storefront.domain.identity import UserContext
from storefront.domain.schemas import ProductDetailOut, StockIn, StockOut
from storefront.services.catalog_service import CatalogService

router = APIRouter(tags=["catalog"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/products/{product_id}", response_model=ProductDetailOut)
def get_product(
    product_id: int,
    variant_id: int | None = Query(None),
    size: str | None = Query(None),
    color: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Strona produktu: warianty, opcje rozmiar/kolor i wybrany wariant.
    Bez variant_id -> domyslny wariant (albo dopasowanie size/color).
    Z variant_id + size/color -> zmiana wyboru z fallbackiem.
    """
    svc = get_service(db)
    try:
        return svc.get_product_detail(product_id, variant_id=variant_id, size=size, color=color)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/inventory/{variant_id}", response_model=StockOut)
def set_stock(
    variant_id: int,
    payload: StockIn,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.set_stock(user, variant_id, payload.quantity, payload.low_stock_threshold)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
