from decimal import Decimal

import pytest

from storefront.domain.errors import InventoryError, NotFoundError
from storefront.domain.variants import LOW_STOCK, OUT_OF_STOCK
from storefront.repos.catalog_repo import CatalogRepo
from storefront.services.catalog_service import CatalogService
from tests.conftest import ADMIN, ALICE, inventory, make_product


def test_product_detail_selects_default_variant(db, shirt):
    product_id, variants = shirt

    detail = CatalogService(db).get_product_detail(product_id)

    assert detail["selected_variant_id"] == variants[("S", "White")]
    assert detail["price"] == Decimal("50.00")
    assert detail["orderable"] is True
    assert [s["value"] for s in detail["sizes"]] == ["S", "M", "L"]
    assert [s["enabled"] for s in detail["sizes"]] == [True, True, False]
    assert len(detail["variants"]) == 4


def test_product_detail_changes_size_keeping_color(db, shirt):
    product_id, variants = shirt

    detail = CatalogService(db).get_product_detail(
        product_id, variant_id=variants[("S", "White")], size="M"
    )

    assert detail["selected_variant_id"] == variants[("M", "White")]


def test_product_detail_changes_color_with_fallback(db, shirt):
    product_id, variants = shirt

    detail = CatalogService(db).get_product_detail(
        product_id, variant_id=variants[("S", "White")], color="Navy"
    )

    assert detail["selected_variant_id"] == variants[("M", "Navy")]
    assert detail["price"] == Decimal("60.00")
    assert detail["stock_status"] == LOW_STOCK


def test_product_without_variants_is_not_orderable(db):
    product_id, _ = make_product(db, name="Gift Card", variants=())

    detail = CatalogService(db).get_product_detail(product_id)

    assert detail["selected_variant_id"] is None
    assert detail["orderable"] is False
    assert detail["price"] == Decimal("50.00")


def test_sold_out_variant_reports_out_of_stock(db):
    product_id, variants = make_product(db, variants=(("M", "White", "0.00", 0, True),))

    detail = CatalogService(db).get_product_detail(product_id, size="M")

    assert detail["stock_status"] == OUT_OF_STOCK
    assert detail["orderable"] is False


def test_missing_product(db):
    with pytest.raises(NotFoundError):
        CatalogService(db).get_product_detail(999)


def test_admin_sets_stock(db, shirt):
    _, variants = shirt
    variant_id = variants[("M", "White")]

    result = CatalogService(db).set_stock(ADMIN, variant_id, 20, low_stock_threshold=3)

    assert result["quantity"] == 20
    assert result["available"] == 20
    assert result["low_stock_threshold"] == 3


def test_stock_cannot_drop_below_reserved(db, shirt):
    _, variants = shirt
    variant_id = variants[("M", "White")]
    repo = CatalogRepo(db)
    repo.try_reserve(variant_id, 4)
    repo.commit()

    with pytest.raises(InventoryError):
        CatalogService(db).set_stock(ADMIN, variant_id, 3)
    with pytest.raises(InventoryError):
        CatalogService(db).set_stock(ADMIN, variant_id, -1)

    assert inventory(db, variant_id).quantity == 5


def test_set_stock_requires_admin(db, shirt):
    _, variants = shirt

    with pytest.raises(PermissionError):
        CatalogService(db).set_stock(ALICE, variants[("M", "White")], 1)


def test_reservation_never_exceeds_available(db, shirt):
    _, variants = shirt
    variant_id = variants[("M", "Navy")]
    repo = CatalogRepo(db)

    assert repo.try_reserve(variant_id, 2)
    assert not repo.try_reserve(variant_id, 1)
    assert not repo.release(variant_id, 3)
    repo.commit()

    stock = inventory(db, variant_id)
    assert stock.reserved_quantity == 2
    assert stock.quantity == 2


def test_variants_listed_by_size_ladder(db):
    product_id, _ = make_product(
        db,
        variants=(
            ("XL", "Red", "0.00", 1, True),
            ("S", "Red", "0.00", 1, False),
            ("M", "Red", "0.00", 1, True),
        ),
    )
    repo = CatalogRepo(db)

    assert [v.size for v in repo.list_variants(product_id)] == ["S", "M", "XL"]
    assert [v.size for v in repo.list_variants(product_id, available_only=True)] == ["M", "XL"]
