"""
Error types shared by the catalog, the reconciliation flow and the HTTP layer.
Every error carries the HTTP status and the error_code returned to clients.
"""

import logging

from flask import jsonify

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {"error": self.message, "error_code": self.error_code}


class NotFound(MarketplaceError):
    """The requested product or order could not be found."""
    status_code = 404
    error_code = "NOT_FOUND"


class InvalidPayload(MarketplaceError):
    """The request body is missing required fields or has invalid values."""
    status_code = 400
    error_code = "INVALID_PAYLOAD"


class PaymentVerificationFailed(MarketplaceError):
    """The ledger transfer does not match the claimed payment."""
    status_code = 402
    error_code = "PAYMENT_VERIFICATION_FAILED"


class LedgerError(MarketplaceError):
    """The ledger could not process the request."""
    status_code = 502
    error_code = "LEDGER_ERROR"


class LedgerUnavailable(LedgerError):
    """The ledger could not be reached or did not answer in time."""
    status_code = 503
    error_code = "LEDGER_UNAVAILABLE"


class TransferRejected(LedgerError):
    """The ledger rejected the transfer."""
    status_code = 402
    error_code = "TRANSFER_REJECTED"


def register_error_handlers(app):
    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(error):
        if error.status_code >= 500:
            logger.warning("%s: %s", error.error_code, error.message)
        return jsonify(error.to_dict()), error.status_code
