from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import AvailabilityError, NotFoundError, ValidationError
from storefront.domain.identity import UserContext
from storefront.domain.pricing import PricedLine, compute_totals, unit_price
from storefront.domain.variants import is_purchasable
from storefront.repos.cart_repo import CartRepo
from storefront.repos.catalog_repo import CatalogRepo
from storefront.services.catalog_service import to_option
from storefront.utils.retry import store_read
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def line_to_dict(line: PricedLine) -> Dict[str, Any]:
    return {
        "id": line.line_id,
        "product_id": line.product_id,
        "variant_id": line.variant_id,
        "product_name": line.product_name,
        "brand": line.brand,
        "size": line.size,
        "color": line.color,
        "color_hex": line.color_hex,
        "quantity": line.quantity,
        "unit_price": line.unit_price,
        "line_total": line.line_total,
        "stock": max(line.stock, 0),
        "purchasable": line.purchasable,
    }


class CartService:
    """
    Koszyk uzytkownika = zbior linii (wariant, ilosc), max jedna linia na wariant.
    query (get_cart, priced_lines) tylko odczyt
    commands (add, update, remove) modyfikuja stan

    Ceny nie sa zamrazane w koszyku: kazdy odczyt liczy base_price +
    price_adjustment z aktualnego katalogu.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.catalog = CatalogRepo(db)

    def _price(self, item: CartItemModel, strict: bool) -> PricedLine | None:
        product = self.catalog.get_product(item.product_id)
        variant = self.catalog.get_variant(item.variant_id)

        if not product or not variant:
            if strict:
                raise NotFoundError("An item in your cart is no longer available in the catalog")
            logger.warning(
                f"Cart line {item.id} of user {item.user_id} points at a missing "
                f"product {item.product_id} / variant {item.variant_id}, skipping"
            )
            return None

        option = to_option(variant, self.catalog.get_inventory(variant.id))

        return PricedLine(
            line_id=item.id,
            product_id=product.id,
            variant_id=variant.id,
            quantity=item.quantity,
            unit_price=unit_price(product.base_price, variant.price_adjustment),
            product_name=product.name,
            brand=product.brand,
            size=variant.size,
            color=variant.color,
            color_hex=variant.color_hex,
            sku=variant.sku,
            stock=option.stock,
            purchasable=is_purchasable(product.is_active, option),
        )

    #query
    @store_read
    def priced_lines(self, user_id: int, strict: bool = False) -> List[PricedLine]:
        priced = []
        for item in self.repo.list_lines(user_id):
            line = self._price(item, strict)
            if line is not None:
                priced.append(line)
        return priced

    def get_cart(self, user: UserContext) -> Dict[str, Any]:
        user_id = user.require()
        lines = self.priced_lines(user_id)

        return {
            "user_id": user_id,
            "items": [line_to_dict(line) for line in lines],
            "totals": compute_totals(lines).as_dict(),
        }

    #commands
    def add_to_cart(
        self,
        user: UserContext,
        product_id: int,
        variant_id: int,
        quantity: int = 1,
    ) -> Dict[str, Any]:
        user_id = user.require()

        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        product = self.catalog.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")

        variant = self.catalog.get_variant(variant_id)
        if not variant or variant.product_id != product.id:
            raise NotFoundError("Variant not found")

        option = to_option(variant, self.catalog.get_inventory(variant_id))
        if not is_purchasable(product.is_active, option):
            raise AvailabilityError("This variant is currently out of stock")

        # sprawdzenie best-effort, prawdziwa rezerwacja dopiero przy checkoucie
        existing = self.repo.get_line_for_variant(user_id, variant_id)
        in_cart = existing.quantity if existing else 0
        if in_cart + quantity > option.stock:
            raise AvailabilityError(
                f"Only {option.stock} left in stock ({in_cart} already in your cart)"
            )

        try:
            self.repo.upsert_line(user_id, product.id, variant_id, quantity)
            self.repo.commit()
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Adding variant {variant_id} to cart of user {user_id} failed")
            raise

        if existing:
            logger.info(
                f"Variant {variant_id} already in cart of user {user_id}, "
                f"quantity {in_cart} -> {in_cart + quantity}"
            )
        else:
            logger.info(f"Variant {variant_id} added to cart of user {user_id}")

        line = self.repo.get_line_for_variant(user_id, variant_id)
        return line_to_dict(self._price(line, strict=True))

    def _owned_line(self, user_id: int, line_id: int) -> CartItemModel:
        line = self.repo.get_line(line_id)
        if not line:
            raise NotFoundError("Cart item not found")
        if line.user_id != user_id:
            raise PermissionError("No access to this cart item")
        return line

    def update_quantity(self, user: UserContext, line_id: int, quantity: int) -> Dict[str, Any]:
        user_id = user.require()

        # 0 to nie "usun" - do tego jest remove_from_cart
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1; remove the item instead")

        line = self._owned_line(user_id, line_id)

        if quantity > line.quantity:
            inventory = self.catalog.get_inventory(line.variant_id)
            available = (inventory.quantity - inventory.reserved_quantity) if inventory else 0
            if quantity > available:
                raise AvailabilityError(f"Only {max(available, 0)} left in stock")

        try:
            self.repo.update_quantity(line_id, quantity)
            self.repo.commit()
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Updating cart line {line_id} failed")
            raise

        logger.info(f"Cart line {line_id} of user {user_id} quantity set to {quantity}")

        line = self.repo.get_line(line_id)
        return line_to_dict(self._price(line, strict=True))

    def remove_from_cart(self, user: UserContext, line_id: int) -> None:
        user_id = user.require()
        self._owned_line(user_id, line_id)

        try:
            self.repo.delete_line(line_id)
            self.repo.commit()
        except SQLAlchemyError:
            self.repo.rollback()
            logger.exception(f"Removing cart line {line_id} failed")
            raise

        logger.info(f"Cart line {line_id} removed from cart of user {user_id}")

