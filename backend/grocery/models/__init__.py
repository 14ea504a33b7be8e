"""SQLAlchemy models for the grocery backend."""

from grocery.models.category import ProductType
from grocery.models.product import Product, StockStatus
from grocery.models.inventory import InventoryTransaction, TransactionType
from grocery.models.sale import Sale, PaymentMethod
from grocery.models.order import Order, OrderItem, OrderStatus, PreOrder, PreOrderItem, PreOrderStatus

__all__ = [
    "ProductType",
    "Product",
    "StockStatus",
    "InventoryTransaction",
    "TransactionType",
    "Sale",
    "PaymentMethod",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PreOrder",
    "PreOrderItem",
    "PreOrderStatus",
]
