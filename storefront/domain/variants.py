# storefront/domain/variants.py
"""
Wybor wariantu na stronie produktu.

Warianty produktu leza na osi rozmiaru i osi koloru, ale nie kazda para
rozmiar/kolor istnieje. Wybor wartosci na jednej osi zachowuje druga os,
jesli taki wariant istnieje, a w przeciwnym razie bierze pierwszy dostepny
wariant z wybrana wartoscia. Nic tu nie rzuca wyjatkow: "brak wariantu" to
zwykly wynik, ktory UI pokazuje jako wylaczona opcje.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Sequence

from storefront.domain.pricing import unit_price
from storefront.utils.settings import DEFAULT_LOW_STOCK_THRESHOLD

IN_STOCK = "in_stock"
LOW_STOCK = "low_stock"
OUT_OF_STOCK = "out_of_stock"

SIZE_ORDER = ["XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL"]


@dataclass(frozen=True)
class VariantOption:
    id: int
    size: str
    color: str
    color_hex: str | None = None
    price_adjustment: Decimal = Decimal("0.00")
    is_available: bool = True
    stock: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    sku: str = ""


@dataclass(frozen=True)
class Selection:
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class AxisOption:
    value: str
    enabled: bool
    color_hex: str | None = None


def available_stock(quantity: int, reserved_quantity: int) -> int:
    return (quantity or 0) - (reserved_quantity or 0)


def is_purchasable(product_active: bool, variant: VariantOption | None) -> bool:
    """Jedyne miejsce, ktore decyduje, czy wariant moze trafic do koszyka."""
    return bool(
        product_active
        and variant is not None
        and variant.is_available
        and variant.stock > 0
    )


def stock_status(variant: VariantOption) -> str:
    if variant.stock <= 0:
        return OUT_OF_STOCK
    if variant.stock <= variant.low_stock_threshold:
        return LOW_STOCK
    return IN_STOCK


def effective_price(base_price, variant: VariantOption | None) -> Decimal:
    return unit_price(base_price, variant.price_adjustment if variant else 0)


def find_variant(variants: Iterable[VariantOption], variant_id: int | None) -> VariantOption | None:
    if variant_id is None:
        return None
    return next((v for v in variants if v.id == variant_id), None)


def default_variant(variants: Sequence[VariantOption]) -> VariantOption | None:
    """Pierwszy dostepny wariant, ktory ma jeszcze towar."""
    return next((v for v in variants if v.is_available and v.stock > 0), None)


def _first(variants, size=None, color=None):
    for v in variants:
        if not v.is_available:
            continue
        if size is not None and v.size != size:
            continue
        if color is not None and v.color != color:
            continue
        return v
    return None


def resolve_variant(variants: Sequence[VariantOption], selection: Selection) -> VariantOption | None:
    if selection.size is None and selection.color is None:
        return default_variant(variants)

    exact = _first(variants, size=selection.size, color=selection.color)
    if exact is not None:
        return exact

    # pierwsza os wygrywa: rozmiar, potem kolor
    if selection.size is not None:
        return _first(variants, size=selection.size)
    return _first(variants, color=selection.color)


def change_size(
    variants: Sequence[VariantOption],
    current_id: int | None,
    size: str,
) -> VariantOption | None:
    current = find_variant(variants, current_id)
    chosen = resolve_variant(
        variants,
        Selection(size=size, color=current.color if current else None),
    )
    return chosen if chosen is not None else current


def change_color(
    variants: Sequence[VariantOption],
    current_id: int | None,
    color: str,
) -> VariantOption | None:
    current = find_variant(variants, current_id)
    exact = _first(variants, size=current.size if current else None, color=color)
    chosen = exact if exact is not None else _first(variants, color=color)
    return chosen if chosen is not None else current


def size_key(size: str):
    label = size.strip().upper()
    if label in SIZE_ORDER:
        return (0, SIZE_ORDER.index(label), "")
    try:
        return (1, float(label), "")
    except ValueError:
        return (2, 0, label)


def size_options(variants: Sequence[VariantOption]) -> List[AxisOption]:
    sizes = sorted({v.size for v in variants}, key=size_key)
    return [
        AxisOption(value=s, enabled=any(v.is_available for v in variants if v.size == s))
        for s in sizes
    ]


def color_options(variants: Sequence[VariantOption]) -> List[AxisOption]:
    options: List[AxisOption] = []
    seen = set()
    for v in variants:
        if v.color in seen:
            continue
        seen.add(v.color)
        options.append(
            AxisOption(
                value=v.color,
                enabled=any(o.is_available for o in variants if o.color == v.color),
                color_hex=v.color_hex,
            )
        )
    return options
