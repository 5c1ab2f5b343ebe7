from marketplace.models.product import Product
from marketplace.models.order import Order, OrderStatus, PendingOrder

__all__ = ["Product", "Order", "OrderStatus", "PendingOrder"]
