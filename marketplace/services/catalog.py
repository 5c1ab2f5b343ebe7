"""
Product Catalog
Handles product CRUD and sale counting.
"""

import logging

from marketplace.errors import InvalidPayload, NotFound
from marketplace.models import Product

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "description", "location", "attachment_url")
EDITABLE_FIELDS = TEXT_FIELDS + ("price",)


def _validate(payload, partial=False):
    if not isinstance(payload, dict):
        raise InvalidPayload("Request body must be a JSON object")

    fields = [f for f in EDITABLE_FIELDS if f in payload] if partial else list(EDITABLE_FIELDS)
    if partial and not fields:
        raise InvalidPayload(f"Provide at least one of: {', '.join(EDITABLE_FIELDS)}")

    missing = [f for f in fields if f in TEXT_FIELDS
               and (not isinstance(payload.get(f), str) or not payload[f].strip())]
    if missing:
        raise InvalidPayload(f"Missing fields: {', '.join(missing)}")

    if "price" in fields:
        price = payload.get("price")
        # bool is an int subclass
        if isinstance(price, bool) or not isinstance(price, int) or price <= 0:
            raise InvalidPayload("price must be a positive integer in minor units")

    return {f: payload[f].strip() if f in TEXT_FIELDS else payload[f] for f in fields}


class ProductCatalog:
    def __init__(self, products):
        self.products = products

    def add(self, payload, caller):
        values = _validate(payload)
        product = Product(seller=caller, sold_count=0, **values)
        self.products.put(product)
        logger.info("Product %s listed by %s", product.id, caller)
        return product

    def get(self, product_id):
        product = self.products.get(product_id)
        if product is None:
            raise NotFound(f"Product {product_id} not found")
        return product

    def list(self, seller=None):
        return self.products.values(seller=seller)

    def update(self, product_id, payload):
        # TODO: restrict edits to product.seller once ownership rules are agreed
        product = self.get(product_id)
        for field, value in _validate(payload, partial=True).items():
            setattr(product, field, value)
        self.products.put(product)
        return product

    def delete(self, product_id):
        if self.products.remove(product_id) is None:
            raise NotFound(f"Product {product_id} not found")
        logger.info("Product %s deleted", product_id)
        return product_id

    def record_sale(self, product_id):
        """Increment sold_count inside the caller's transaction."""
        if not self.products.increment_sold(product_id):
            raise NotFound(f"Product {product_id} not found")
