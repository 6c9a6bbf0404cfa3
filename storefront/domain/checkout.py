# storefront/domain/checkout.py
from enum import Enum
from typing import Dict, Any

from storefront.domain.errors import ValidationError


class PaymentMethod(str, Enum):
    CARD = "card"
    WALLET = "wallet"
    BANK_TRANSFER = "bank-transfer"


class CheckoutStage(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PLACING_ORDER = "placing_order"
    PLACING_ITEMS = "placing_items"
    CLEARING_CART = "clearing_cart"
    DONE = "done"


# kolejnosc krokow sagi
WRITE_STAGES = [
    CheckoutStage.PLACING_ORDER,
    CheckoutStage.PLACING_ITEMS,
    CheckoutStage.CLEARING_CART,
]


class IntentStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    FAILED = "failed"
    DONE = "done"
    VOIDED = "voided"


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    VOID = "void"


# pending -> confirmed/void robi tylko checkout i reconciliation
ADMIN_TRANSITIONS = {
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
}

# pole -> etykieta w komunikacie bledu
REQUIRED_ADDRESS_FIELDS = {
    "full_name": "full name",
    "email": "email",
    "phone": "phone",
    "address": "street address",
    "city": "city",
    "state": "state",
    "zip_code": "postal code",
}


def validate_address(address: Dict[str, Any]) -> Dict[str, str]:
    """Zwraca przycieta kopie adresu albo rzuca blad na pierwszym pustym polu."""
    cleaned = {k: (str(v).strip() if v is not None else "") for k, v in address.items()}

    for field, label in REQUIRED_ADDRESS_FIELDS.items():
        if not cleaned.get(field):
            raise ValidationError(f"Please fill in your {label}")

    return cleaned


def validate_payment_method(value) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Unsupported payment method {value!r} (expected one of: {allowed})")


def check_transition(current: str, target: str) -> OrderStatus:
    try:
        target_status = OrderStatus(target)
    except ValueError:
        raise ValidationError(f"Unknown order status {target!r}")

    allowed = ADMIN_TRANSITIONS.get(OrderStatus(current), set())
    if target_status not in allowed:
        raise ValidationError(f"Cannot change order status from {current} to {target}")
    return target_status
