from marketplace.services.catalog import ProductCatalog
from marketplace.services.reconciliation import ReconciliationService, make_correlation_id
from marketplace.services.reservations import ReservationStore
from marketplace.services.verifier import PaymentVerifier

__all__ = [
    "ProductCatalog",
    "ReconciliationService",
    "ReservationStore",
    "PaymentVerifier",
    "make_correlation_id",
]
