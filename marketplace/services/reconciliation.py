"""
Reconciliation Service
Ties products, reservations and ledger payments together.

Transfer mode (default):
    create_order       -> PaymentPending (reserved under a memo)
    buyer transfers price to seller_address with that memo, off-band
    complete_purchase  -> Completed, once the ledger block is verified
Allowance mode (ICRC-2):
    buyer pre-approves the service, create_order pulls the payment and
    completes in one call.
Unpaid reservations expire after the TTL and can never complete afterwards.
"""

import hashlib
import logging
import secrets
import time

from marketplace.errors import (
    LedgerUnavailable,
    NotFound,
    PaymentVerificationFailed,
    TransferRejected,
)
from marketplace.extensions import db
from marketplace.ledger.addresses import hex_address_from_identity
from marketplace.models import Order, OrderStatus, PendingOrder
from marketplace.repositories import commit_or_rollback
from marketplace.services.reservations import DEFAULT_TTL_SECONDS, DuplicateReservation

logger = logging.getLogger(__name__)

PAYMENT_MODES = ("transfer", "allowance")

# memo is a u64 on the ledger; 63 bits also fit a signed BIGINT column
MAX_CORRELATION_ID = (1 << 63) - 1
RESERVE_ATTEMPTS = 3

VALID_TRANSITIONS = {
    OrderStatus.PAYMENT_PENDING: {OrderStatus.COMPLETED, OrderStatus.EXPIRED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.EXPIRED: set(),
}


def make_correlation_id(product_id, buyer, timestamp_ns=None):
    if timestamp_ns is None:
        timestamp_ns = time.time_ns()
    seed = f"{product_id}:{buyer}:{timestamp_ns}".encode("utf-8") + secrets.token_bytes(8)
    digest = hashlib.sha256(seed).digest()
    return int.from_bytes(digest[:8], "big") & MAX_CORRELATION_ID


def _transition(order, new_status):
    allowed = VALID_TRANSITIONS.get(order.status, set())
    if new_status not in allowed:
        raise ValueError(f"Cannot transition from {order.status.value} to {new_status.value}")
    order.status = new_status


class ReconciliationService:
    def __init__(self, catalog, orders, reservations, verifier, ledger,
                 ttl_seconds=DEFAULT_TTL_SECONDS, payment_mode="transfer", clock=time.time):
        if payment_mode not in PAYMENT_MODES:
            raise ValueError(f"payment_mode must be one of {PAYMENT_MODES}, got {payment_mode!r}")
        self.catalog = catalog
        self.orders = orders
        self.reservations = reservations
        self.verifier = verifier
        self.ledger = ledger
        self.ttl_seconds = ttl_seconds
        self.payment_mode = payment_mode
        self.clock = clock

    # --- Orders ---------------------------------------------------------

    def create_order(self, product_id, buyer):
        """
        Reserve a product for `buyer`.
        Returns the PendingOrder in transfer mode, the completed Order in
        allowance mode.
        """
        product = self.catalog.get(product_id)

        for _ in range(RESERVE_ATTEMPTS):
            now = self.clock()
            pending = PendingOrder(
                product_id=product.id,
                price=product.price,
                seller=product.seller,
                seller_address=product.seller_address,
                buyer=buyer,
                correlation_id=make_correlation_id(product.id, buyer),
                created_at=now,
                expires_at=now + self.ttl_seconds,
            )
            try:
                self.reservations.reserve(pending, self.ttl_seconds)
                break
            except DuplicateReservation:
                logger.warning("Correlation id collision for product %s, retrying", product.id)
        else:
            raise RuntimeError("could not allocate a unique correlation id")

        if self.payment_mode == "allowance":
            return self._pull_payment(pending)
        return pending

    def complete_purchase(self, buyer, seller, product_id, price, block_index, correlation_id):
        pending = self.reservations.get(correlation_id)
        if pending is not None and (
            pending.buyer != buyer
            or pending.seller != seller
            or pending.product_id != product_id
            or pending.price != price
        ):
            raise PaymentVerificationFailed(
                f"Payment claim does not match order {correlation_id}"
            )

        if not self.verifier.verify(buyer, seller, price, block_index, correlation_id):
            raise PaymentVerificationFailed(
                f"Block {block_index} does not prove payment for order {correlation_id}"
            )
        return self._complete(correlation_id, block_index)

    def _complete(self, correlation_id, block_index):
        pending = self.reservations.resolve(correlation_id)
        if pending is None:
            raise NotFound(f"No pending order for memo {correlation_id}")
        _transition(pending, OrderStatus.COMPLETED)

        try:
            try:
                self.catalog.record_sale(pending.product_id)
            except NotFound:
                # paid for a product delisted after reservation; the order still stands
                logger.warning("Product %s was removed before order %s completed",
                               pending.product_id, correlation_id)

            order = self.orders.put(Order.from_pending(pending, block_index), commit=False)
            commit_or_rollback()
        except Exception:
            # payment is verified, keep the reservation so the buyer can retry
            db.session.rollback()
            self.reservations.restore(pending)
            raise
        logger.info("Order %s completed at block %s", correlation_id, block_index)
        return order

    def _pull_payment(self, pending):
        buyer_address = hex_address_from_identity(pending.buyer)
        try:
            block_index = self.ledger.transfer_from(
                buyer_address, pending.seller_address, pending.price, pending.correlation_id
            )
        except TransferRejected as e:
            self.reservations.release(pending.correlation_id)
            raise PaymentVerificationFailed(f"Allowance transfer rejected: {e.message}")
        except LedgerUnavailable:
            self.reservations.release(pending.correlation_id)
            raise

        if not self.verifier.verify(pending.buyer, pending.seller, pending.price,
                                    block_index, pending.correlation_id):
            # funds moved; leave the reservation so complete_purchase can retry
            raise PaymentVerificationFailed(
                f"Block {block_index} does not prove payment for order {pending.correlation_id}"
            )
        return self._complete(pending.correlation_id, block_index)

    def list_orders(self, buyer):
        return self.orders.for_buyer(buyer)

    def list_pending(self, buyer):
        return self.reservations.pending_for(buyer)

    # --- Accounts -------------------------------------------------------

    def address_of(self, identity):
        return hex_address_from_identity(identity)

    def balance_of(self, identity):
        return self.ledger.balance(self.address_of(identity))

    def transfer_fee(self):
        return self.ledger.transfer_fee()
