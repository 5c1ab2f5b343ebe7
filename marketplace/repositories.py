"""
SQL-backed repositories with a small get/put/remove/values surface.
The reconciliation service receives these instead of querying models directly.
"""

from sqlalchemy import update

from marketplace.extensions import db
from marketplace.models import Order, Product


def commit_or_rollback():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class SqlRepository:
    model = None

    def get(self, key):
        return db.session.get(self.model, key)

    def put(self, obj, commit=True):
        db.session.add(obj)
        if commit:
            commit_or_rollback()
        return obj

    def remove(self, key, commit=True):
        obj = self.get(key)
        if obj is None:
            return None
        db.session.delete(obj)
        if commit:
            commit_or_rollback()
        return obj

    def values(self):
        return self.model.query.all()


class ProductRepository(SqlRepository):
    model = Product

    def values(self, seller=None):
        query = Product.query
        if seller:
            query = query.filter_by(seller=seller)
        return query.order_by(Product.created_at.desc(), Product.id).all()

    def increment_sold(self, product_id):
        """SQL-side increment; returns False when the product no longer exists."""
        result = db.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(sold_count=Product.sold_count + 1)
        )
        return result.rowcount == 1


class OrderRepository(SqlRepository):
    model = Order

    def remove(self, key, commit=True):
        raise TypeError("completed orders are append-only and cannot be removed")

    def values(self):
        return Order.query.order_by(Order.completed_at.desc()).all()

    def for_buyer(self, buyer):
        return Order.query.filter_by(buyer=buyer).order_by(Order.completed_at.desc()).all()

    def get_by_correlation_id(self, correlation_id):
        return Order.query.filter_by(correlation_id=correlation_id).first()
