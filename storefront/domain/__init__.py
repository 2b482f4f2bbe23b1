"""Domain package."""

from .cart import LineItem, Product
from .order import CheckoutStatus, Order, OrderItem, OrderRequest, ShippingInfo

__all__ = [
    "Product",
    "LineItem",
    "ShippingInfo",
    "OrderItem",
    "OrderRequest",
    "Order",
    "CheckoutStatus",
]
