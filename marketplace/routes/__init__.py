from marketplace.routes.accounts import accounts_bp
from marketplace.routes.orders import orders_bp
from marketplace.routes.products import products_bp

__all__ = ["accounts_bp", "orders_bp", "products_bp"]
