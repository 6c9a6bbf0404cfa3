# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import CategoryModel, ProductModel, VariantModel, InventoryModel
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# (name, brand, base_price, tags, [(size, color, color_hex, price_adjustment, stock)])
DEMO_CATALOG = [
    (
        "Linen Shirt",
        "Northwind",
        "49.90",
        ["summer", "linen"],
        [
            ("S", "White", "#FFFFFF", "0.00", 12),
            ("M", "White", "#FFFFFF", "0.00", 8),
            ("L", "White", "#FFFFFF", "0.00", 0),
            ("M", "Navy", "#1F2A44", "5.00", 4),
            ("L", "Navy", "#1F2A44", "5.00", 15),
        ],
    ),
    (
        "Denim Jacket",
        "Harbor & Co",
        "89.00",
        ["denim", "outerwear"],
        [
            ("M", "Indigo", "#3F4B8C", "0.00", 6),
            ("L", "Indigo", "#3F4B8C", "0.00", 3),
            ("XL", "Black", "#111111", "10.00", 9),
        ],
    ),
    (
        "Wool Beanie",
        "Northwind",
        "19.50",
        ["accessories"],
        [
            ("One Size", "Charcoal", "#36454F", "0.00", 40),
            ("One Size", "Mustard", "#E1AD01", "-2.00", 25),
        ],
    ),
]


def _sku(name: str, size: str, color: str) -> str:
    parts = [name, size, color]
    return "-".join(p.upper().replace(" ", "").replace("&", "") for p in parts)


def seed():
    db = SessionLocal()
    try:
        # tylko gdy katalog jest pusty
        if db.query(ProductModel).first():
            logger.info("Catalog already present, skipping demo seed")
            return

        category = CategoryModel(name="Apparel", slug="apparel")
        db.add(category)
        db.flush()

        for name, brand, base_price, tags, variants in DEMO_CATALOG:
            product = ProductModel(
                name=name,
                brand=brand,
                base_price=Decimal(base_price),
                category_id=category.id,
                tags=tags,
            )
            for size, color, color_hex, adjustment, stock in variants:
                product.variants.append(
                    VariantModel(
                        size=size,
                        color=color,
                        color_hex=color_hex,
                        price_adjustment=Decimal(adjustment),
                        sku=_sku(name, size, color),
                        inventory=InventoryModel(quantity=stock, reserved_quantity=0),
                    )
                )
            db.add(product)

        db.commit()
        logger.info(f"Seeded {len(DEMO_CATALOG)} demo products")
    finally:
        db.close()
