# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List
from decimal import Decimal
from datetime import datetime


class AddItemIn(BaseModel):
    """Dodanie wariantu do koszyka."""

    product_id: int = Field(..., gt=0, description="Product ID (> 0)")
    variant_id: int = Field(..., gt=0, description="Variant ID (> 0)")
    quantity: int = Field(1, description="Quantity to add (defaults to 1)")


class UpdateQuantityIn(BaseModel):
    """Zmiana ilosci w linii koszyka (< 1 odrzuca serwis)."""

    quantity: int


class CartLineOut(BaseModel):
    id: int
    product_id: int
    variant_id: int
    product_name: str
    brand: str | None = None
    size: str
    color: str
    color_hex: str | None = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    stock: int
    purchasable: bool

    model_config = ConfigDict(from_attributes=True)


class TotalsOut(BaseModel):
    subtotal: Decimal
    shipping: Decimal
    tax: Decimal
    total: Decimal
    item_count: int = 0


class CartOut(BaseModel):
    user_id: int
    items: List[CartLineOut]
    totals: TotalsOut


class VariantOut(BaseModel):
    id: int
    size: str
    color: str
    color_hex: str | None = None
    sku: str
    price_adjustment: Decimal
    is_available: bool
    stock: int
    stock_status: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class AxisOptionOut(BaseModel):
    value: str
    enabled: bool
    color_hex: str | None = None


class ProductDetailOut(BaseModel):
    id: int
    name: str
    brand: str | None = None
    description: str | None = None
    base_price: Decimal
    is_active: bool
    tags: List[str] = []
    variants: List[VariantOut]
    sizes: List[AxisOptionOut]
    colors: List[AxisOptionOut]
    selected_variant_id: int | None = None
    price: Decimal
    stock: int = 0
    stock_status: str | None = None
    orderable: bool


class ShippingAddressIn(BaseModel):
    """Puste pola sa tu dozwolone; checkout sam zglasza, ktorego brakuje."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "United States"


class CheckoutIn(BaseModel):
    shipping_address: ShippingAddressIn
    payment_method: str = "card"


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    variant_id: int
    product_name: str
    brand: str | None = None
    size: str
    color: str
    sku: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    payment_method: str
    shipping_address: dict
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


class OrderStatusIn(BaseModel):
    status: str = Field(..., min_length=1)


class StockIn(BaseModel):
    quantity: int
    low_stock_threshold: int | None = Field(None, ge=0)


class StockOut(BaseModel):
    variant_id: int
    quantity: int
    reserved_quantity: int
    available: int
    low_stock_threshold: int | None = None
