#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.variant import VariantModel
from storefront.data.models.inventory import InventoryModel
from storefront.data.models.cart_item import CartItemModel
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.checkout_intent import CheckoutIntentModel

__all__ = [
    "CategoryModel",
    "ProductModel",
    "VariantModel",
    "InventoryModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
    "CheckoutIntentModel",
]
