# storefront/domain/pricing.py
"""
Zasady liczenia pieniedzy wspolne dla koszyka i checkoutu.

Obie strony licza linie jako ``base_price + price_adjustment`` z aktualnego
katalogu i obie uzywaja ``compute_totals``, wiec koszyk i zlozone zamowienie
zawsze sie zgadzaja dla tego samego stanu katalogu.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Protocol, Any, Dict

from storefront.utils.settings import FREE_SHIPPING_THRESHOLD, SHIPPING_FEE, TAX_RATE

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def unit_price(base_price, price_adjustment) -> Decimal:
    """Cena bazowa + doplata wariantu, nigdy ponizej zera."""
    price = money(base_price) + money(price_adjustment or 0)
    return max(price, ZERO)


class PricedItem(Protocol):
    unit_price: Decimal
    quantity: int


@dataclass
class PricedLine:
    """Linia koszyka wyceniona wg aktualnego katalogu."""

    line_id: int | None
    product_id: int
    variant_id: int
    quantity: int
    unit_price: Decimal
    product_name: str = ""
    brand: str | None = None
    size: str = ""
    color: str = ""
    color_hex: str | None = None
    sku: str = ""
    stock: int = 0
    purchasable: bool = True

    @property
    def line_total(self) -> Decimal:
        return money(self.unit_price * self.quantity)

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "product_name": self.product_name,
            "brand": self.brand,
            "size": self.size,
            "color": self.color,
            "sku": self.sku,
        }

    @classmethod
    def from_snapshot(cls, data: Dict[str, Any]) -> "PricedLine":
        return cls(
            line_id=data.get("line_id"),
            product_id=data["product_id"],
            variant_id=data["variant_id"],
            quantity=data["quantity"],
            unit_price=money(data["unit_price"]),
            product_name=data.get("product_name", ""),
            brand=data.get("brand"),
            size=data.get("size", ""),
            color=data.get("color", ""),
            sku=data.get("sku", ""),
        )


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal = ZERO
    shipping: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    item_count: int = field(default=0, compare=False)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
            "item_count": self.item_count,
        }


def shipping_for(subtotal: Decimal, has_items: bool = True) -> Decimal:
    if not has_items or subtotal >= FREE_SHIPPING_THRESHOLD:
        return ZERO
    return money(SHIPPING_FEE)


def tax_for(subtotal: Decimal) -> Decimal:
    return money(subtotal * TAX_RATE)


def compute_totals(lines: Iterable[PricedItem]) -> Totals:
    lines = list(lines)
    subtotal = money(sum((line.unit_price * line.quantity for line in lines), ZERO))
    shipping = shipping_for(subtotal, has_items=bool(lines))
    tax = tax_for(subtotal)

    return Totals(
        subtotal=subtotal,
        shipping=shipping,
        tax=tax,
        total=money(subtotal + shipping + tax),
        item_count=sum(line.quantity for line in lines),
    )
