"""
Order models.
PendingOrder lives in the reservation store until it is completed or expires.
Order rows are completed orders and are never updated after insert.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from marketplace.extensions import db


class OrderStatus(str, enum.Enum):
    PAYMENT_PENDING = "PaymentPending"
    COMPLETED = "Completed"
    EXPIRED = "Expired"


def _iso(timestamp):
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


@dataclass
class PendingOrder:
    product_id: str
    price: int
    seller: str
    seller_address: str
    buyer: str
    correlation_id: int
    created_at: float
    expires_at: float
    status: OrderStatus = OrderStatus.PAYMENT_PENDING

    def is_expired(self, now):
        return now > self.expires_at

    def to_dict(self):
        return {
            "product_id": self.product_id,
            "price": self.price,
            "seller": self.seller,
            "seller_address": self.seller_address,
            "buyer": self.buyer,
            "status": self.status.value,
            "correlation_id": self.correlation_id,
            "memo": self.correlation_id,
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
        }


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    correlation_id = db.Column(db.BigInteger, nullable=False, unique=True)
    product_id = db.Column(db.String(36), nullable=False, index=True)
    buyer = db.Column(db.String(255), nullable=False, index=True)
    seller = db.Column(db.String(255), nullable=False)
    price = db.Column(db.BigInteger, nullable=False)
    status = db.Column(db.String(20), nullable=False, default=OrderStatus.COMPLETED.value)
    paid_at_block = db.Column(db.BigInteger, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    completed_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc)
    )

    @classmethod
    def from_pending(cls, pending, block_index):
        return cls(
            correlation_id=pending.correlation_id,
            product_id=pending.product_id,
            buyer=pending.buyer,
            seller=pending.seller,
            price=pending.price,
            status=OrderStatus.COMPLETED.value,
            paid_at_block=block_index,
            created_at=datetime.fromtimestamp(pending.created_at, tz=timezone.utc),
        )

    def to_dict(self):
        return {
            "id":             self.id,
            "product_id":     self.product_id,
            "buyer":          self.buyer,
            "seller":         self.seller,
            "price":          self.price,
            "status":         self.status,
            "paid_at_block":  self.paid_at_block,
            "correlation_id": self.correlation_id,
            "memo":           self.correlation_id,
            "created_at":     self.created_at.isoformat(),
            "completed_at":   self.completed_at.isoformat() if self.completed_at else None,
        }
