"""
Order Reservation Store
Pending orders keyed by correlation id, each with a deadline.

resolve() is an atomic remove-and-return, so whichever of completion and
expiry reaches an entry first owns it and the other sees None. Deadlines are
enforced lazily on every read; the optional timers only purge entries early.
"""

import logging
import threading
import time

from marketplace.models import OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 120


class DuplicateReservation(Exception):
    pass


class ReservationStore:
    def __init__(self, clock=time.time, eager_expiry=True):
        self.clock = clock
        self.eager_expiry = eager_expiry
        self._orders = {}
        self._timers = {}
        self._lock = threading.Lock()

    def reserve(self, order, ttl_seconds=DEFAULT_TTL_SECONDS):
        key = order.correlation_id
        with self._lock:
            existing = self._orders.get(key)
            if existing is not None and not existing.is_expired(self.clock()):
                raise DuplicateReservation(f"correlation id {key} is already reserved")
            self._pop(key)
            order.expires_at = order.created_at + ttl_seconds
            self._insert(order, ttl_seconds)
        logger.info("Reserved order %s for product %s (ttl=%ss)", key, order.product_id, ttl_seconds)
        return order

    def _insert(self, order, delay):
        self._orders[order.correlation_id] = order
        if self.eager_expiry:
            timer = threading.Timer(max(delay, 0), self.expire, args=(order.correlation_id,))
            timer.daemon = True
            self._timers[order.correlation_id] = timer
            timer.start()

    def restore(self, order):
        """Put back an order whose completion could not be persisted, keeping its deadline."""
        with self._lock:
            if order.correlation_id in self._orders:
                raise DuplicateReservation(f"correlation id {order.correlation_id} is already reserved")
            order.status = OrderStatus.PAYMENT_PENDING
            self._insert(order, order.expires_at - self.clock())
        logger.warning("Order %s restored after a failed completion", order.correlation_id)
        return order

    def _pop(self, key):
        order = self._orders.pop(key, None)
        timer = self._timers.pop(key, None)
        if timer is not None:
            timer.cancel()
        return order

    def resolve(self, correlation_id):
        with self._lock:
            order = self._pop(correlation_id)
            if order is None:
                return None
            if order.is_expired(self.clock()):
                order.status = OrderStatus.EXPIRED
                logger.info("Order %s expired before it was resolved", correlation_id)
                return None
            return order

    def expire(self, correlation_id):
        with self._lock:
            order = self._pop(correlation_id)
        if order is not None:
            order.status = OrderStatus.EXPIRED
            logger.info("Order %s expired unpaid, reservation released", correlation_id)
        return order

    def release(self, correlation_id):
        """Drop a reservation the service itself abandoned."""
        with self._lock:
            return self._pop(correlation_id)

    def get(self, correlation_id):
        order = self._orders.get(correlation_id)
        if order is None or order.is_expired(self.clock()):
            return None
        return order

    def values(self):
        now = self.clock()
        with self._lock:
            return [o for o in self._orders.values() if not o.is_expired(now)]

    def pending_for(self, buyer):
        return [o for o in self.values() if o.buyer == buyer]

    def purge_expired(self):
        now = self.clock()
        with self._lock:
            expired = [k for k, o in self._orders.items() if o.is_expired(now)]
        return [o for o in map(self.expire, expired) if o is not None]

    def close(self):
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()

    def __len__(self):
        return len(self._orders)

    def __contains__(self, correlation_id):
        return self.get(correlation_id) is not None
