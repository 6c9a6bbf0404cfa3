from decimal import Decimal

from storefront.domain.pricing import PricedLine, compute_totals, money, unit_price


def line(price, qty, variant_id=1):
    return PricedLine(
        line_id=variant_id,
        product_id=1,
        variant_id=variant_id,
        quantity=qty,
        unit_price=money(price),
    )


def test_empty_cart_totals_are_zero():
    totals = compute_totals([])

    assert totals.subtotal == Decimal("0.00")
    assert totals.shipping == Decimal("0.00")
    assert totals.tax == Decimal("0.00")
    assert totals.total == Decimal("0.00")
    assert totals.item_count == 0


def test_free_shipping_starts_at_threshold():
    totals = compute_totals([line("100.00", 1)])

    assert totals.shipping == Decimal("0.00")
    assert totals.tax == Decimal("8.00")
    assert totals.total == Decimal("108.00")


def test_shipping_fee_below_threshold():
    totals = compute_totals([line("99.99", 1)])

    assert totals.shipping == Decimal("9.99")
    assert totals.tax == Decimal("8.00")
    assert totals.total == Decimal("117.98")


def test_variant_adjustment_scenario():
    # 50.00 + 10.00 x 2
    totals = compute_totals([line(unit_price("50.00", "10.00"), 2)])

    assert totals.subtotal == Decimal("120.00")
    assert totals.shipping == Decimal("0.00")
    assert totals.tax == Decimal("9.60")
    assert totals.total == Decimal("129.60")
    assert totals.item_count == 2


def test_subtotal_is_sum_of_line_totals():
    lines = [line("19.99", 3, 1), line("5.05", 1, 2), line("0.00", 4, 3)]

    assert compute_totals(lines).subtotal == sum(l.line_total for l in lines)


def test_unit_price_clamps_negative():
    assert unit_price("10.00", "-12.50") == Decimal("0.00")
    assert unit_price("10.00", None) == Decimal("10.00")


def test_snapshot_keeps_frozen_price():
    original = PricedLine(
        line_id=7,
        product_id=1,
        variant_id=3,
        quantity=2,
        unit_price=Decimal("59.90"),
        product_name="Linen Shirt",
        size="M",
        color="Navy",
        sku="LINEN-M-NAVY",
    )

    restored = PricedLine.from_snapshot(original.to_snapshot())

    assert restored.unit_price == Decimal("59.90")
    assert restored.line_total == Decimal("119.80")
    assert restored.sku == "LINEN-M-NAVY"
