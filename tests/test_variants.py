from decimal import Decimal

from storefront.domain.variants import (
    IN_STOCK,
    LOW_STOCK,
    OUT_OF_STOCK,
    Selection,
    VariantOption,
    change_color,
    change_size,
    color_options,
    default_variant,
    effective_price,
    is_purchasable,
    resolve_variant,
    size_options,
    stock_status,
)


def v(id, size, color, stock=5, available=True, adj="0.00", threshold=10):
    return VariantOption(
        id=id,
        size=size,
        color=color,
        price_adjustment=Decimal(adj),
        is_available=available,
        stock=stock,
        low_stock_threshold=threshold,
    )


VARIANTS = [
    v(1, "S", "White", stock=0),
    v(2, "M", "White"),
    v(3, "M", "Navy"),
    v(4, "L", "Navy"),
    v(5, "XL", "Red", available=False),
]


def test_default_variant_skips_sold_out_and_unavailable():
    assert default_variant(VARIANTS).id == 2


def test_default_variant_none_when_nothing_in_stock():
    assert default_variant([v(1, "S", "White", stock=0), v(2, "M", "White", available=False)]) is None


def test_resolve_without_selection_returns_default():
    assert resolve_variant(VARIANTS, Selection()).id == 2


def test_resolve_exact_match():
    assert resolve_variant(VARIANTS, Selection(size="M", color="Navy")).id == 3


def test_resolve_falls_back_to_size_when_pair_missing():
    # L/White nie istnieje -> pierwszy dostepny L
    assert resolve_variant(VARIANTS, Selection(size="L", color="White")).id == 4


def test_resolve_falls_back_to_color_when_only_color_given():
    assert resolve_variant(VARIANTS, Selection(color="Navy")).id == 3


def test_resolve_ignores_unavailable_variants():
    assert resolve_variant(VARIANTS, Selection(size="XL", color="Red")) is None


def test_resolve_on_product_without_variants():
    assert resolve_variant([], Selection()) is None
    assert resolve_variant([], Selection(size="M")) is None


def test_change_size_keeps_color_when_possible():
    assert change_size(VARIANTS, 3, "L").id == 4


def test_change_size_falls_back_to_first_with_size():
    # L/White nie ma, L/Navy jest
    assert change_size(VARIANTS, 2, "L").id == 4


def test_change_size_keeps_current_when_size_missing():
    assert change_size(VARIANTS, 2, "XXL").id == 2


def test_change_color_keeps_size_when_possible():
    assert change_color(VARIANTS, 2, "Navy").id == 3


def test_change_color_falls_back_to_first_with_color():
    assert change_color(VARIANTS, 4, "White").id == 1


def test_change_color_without_current_selection():
    assert change_color(VARIANTS, None, "Navy").id == 3


def test_effective_price_adds_adjustment_and_clamps_at_zero():
    assert effective_price("50.00", v(1, "M", "White", adj="10.00")) == Decimal("60.00")
    assert effective_price("5.00", v(1, "M", "White", adj="-8.00")) == Decimal("0.00")
    assert effective_price("50.00", None) == Decimal("50.00")


def test_stock_status_thresholds():
    assert stock_status(v(1, "M", "White", stock=0)) == OUT_OF_STOCK
    assert stock_status(v(1, "M", "White", stock=-2)) == OUT_OF_STOCK
    assert stock_status(v(1, "M", "White", stock=10, threshold=10)) == LOW_STOCK
    assert stock_status(v(1, "M", "White", stock=11, threshold=10)) == IN_STOCK


def test_is_purchasable():
    assert is_purchasable(True, v(1, "M", "White", stock=1))
    assert not is_purchasable(False, v(1, "M", "White", stock=1))
    assert not is_purchasable(True, v(1, "M", "White", stock=0))
    assert not is_purchasable(True, v(1, "M", "White", available=False))
    assert not is_purchasable(True, None)


def test_size_options_sorted_by_size_ladder():
    variants = [v(1, "XL", "Red"), v(2, "S", "Red"), v(3, "M", "Red", available=False)]
    options = size_options(variants)

    assert [o.value for o in options] == ["S", "M", "XL"]
    assert [o.enabled for o in options] == [True, False, True]


def test_color_options_keep_first_seen_order():
    options = color_options(VARIANTS)

    assert [o.value for o in options] == ["White", "Navy", "Red"]
    assert options[2].enabled is False
