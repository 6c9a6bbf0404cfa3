# storefront/services/catalog_service.py
from dataclasses import asdict
from decimal import Decimal
from typing import Dict, Any, List, Tuple

from sqlalchemy.orm import Session

from storefront.data.models.inventory import InventoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.variant import VariantModel
from storefront.domain.errors import NotFoundError, InventoryError
from storefront.domain.identity import UserContext
from storefront.domain.variants import (
    VariantOption,
    Selection,
    available_stock,
    change_color,
    change_size,
    color_options,
    effective_price,
    find_variant,
    is_purchasable,
    resolve_variant,
    size_options,
    stock_status,
)
from storefront.repos.catalog_repo import CatalogRepo
from storefront.utils.retry import store_read
from storefront.utils.settings import DEFAULT_LOW_STOCK_THRESHOLD
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def to_option(variant: VariantModel, inventory: InventoryModel | None) -> VariantOption:
    """Wiersz katalogu + wiersz magazynu -> wariant tak, jak widzi go resolver."""
    if inventory is not None:
        stock = available_stock(inventory.quantity, inventory.reserved_quantity)
        threshold = inventory.low_stock_threshold
    else:
        stock = 0
        threshold = None

    return VariantOption(
        id=variant.id,
        size=variant.size,
        color=variant.color,
        color_hex=variant.color_hex,
        price_adjustment=Decimal(str(variant.price_adjustment or 0)),
        is_available=bool(variant.is_available),
        stock=stock,
        low_stock_threshold=threshold if threshold is not None else DEFAULT_LOW_STOCK_THRESHOLD,
        sku=variant.sku,
    )


class CatalogService:
    """
    Odczyt katalogu dla strony produktu + edycja stanow magazynu przez admina.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepo(db)

    @store_read
    def load_options(self, product_id: int, available_only: bool = False) -> Tuple[ProductModel, List[VariantOption]]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        variants = self.repo.list_variants(product_id, available_only=available_only)
        inventory = self.repo.get_inventory_map([v.id for v in variants])
        return product, [to_option(v, inventory.get(v.id)) for v in variants]

    def get_product_detail(
        self,
        product_id: int,
        variant_id: int | None = None,
        size: str | None = None,
        color: str | None = None,
    ) -> Dict[str, Any]:
        product, options = self.load_options(product_id)

        if variant_id is not None:
            selected = find_variant(options, variant_id)
            if size is not None:
                selected = change_size(options, variant_id, size)
            if color is not None:
                selected = change_color(options, selected.id if selected else None, color)
        else:
            selected = resolve_variant(options, Selection(size=size, color=color))

        base_price = Decimal(str(product.base_price))

        # produkt bez wariantow to nie blad, tylko "nie do kupienia"
        return {
            "id": product.id,
            "name": product.name,
            "brand": product.brand,
            "description": product.description,
            "base_price": base_price,
            "is_active": product.is_active,
            "tags": list(product.tags or []),
            "variants": [
                {
                    "id": o.id,
                    "size": o.size,
                    "color": o.color,
                    "color_hex": o.color_hex,
                    "sku": o.sku,
                    "price_adjustment": o.price_adjustment,
                    "is_available": o.is_available,
                    "stock": max(o.stock, 0),
                    "stock_status": stock_status(o),
                    "price": effective_price(base_price, o),
                }
                for o in options
            ],
            "sizes": [asdict(s) for s in size_options(options)],
            "colors": [asdict(c) for c in color_options(options)],
            "selected_variant_id": selected.id if selected else None,
            "price": effective_price(base_price, selected),
            "stock": max(selected.stock, 0) if selected else 0,
            "stock_status": stock_status(selected) if selected else None,
            "orderable": is_purchasable(product.is_active, selected),
        }

    def set_stock(
        self,
        user: UserContext,
        variant_id: int,
        quantity: int,
        low_stock_threshold: int | None = None,
    ) -> Dict[str, Any]:
        user.require_admin()

        if quantity < 0:
            raise InventoryError("Stock quantity cannot be negative")

        inventory = self.repo.get_inventory(variant_id)
        if not inventory:
            raise NotFoundError("Inventory record not found")

        if not self.repo.set_stock(variant_id, quantity, low_stock_threshold):
            self.repo.rollback()
            raise InventoryError(
                f"Cannot set stock to {quantity}: {inventory.reserved_quantity} units are reserved"
            )

        self.repo.commit()
        logger.info(f"Stock for variant {variant_id} set to {quantity}")

        inventory = self.repo.get_inventory(variant_id)
        return {
            "variant_id": variant_id,
            "quantity": inventory.quantity,
            "reserved_quantity": inventory.reserved_quantity,
            "available": available_stock(inventory.quantity, inventory.reserved_quantity),
            "low_stock_threshold": inventory.low_stock_threshold,
        }
