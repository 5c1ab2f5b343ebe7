"""
Payment Verifier
Point check of a single ledger block against an expected transfer.
Any ledger failure counts as "not verified".
"""

import logging

from marketplace.errors import LedgerError
from marketplace.ledger.addresses import binary_address_from_address, binary_address_from_identity

logger = logging.getLogger(__name__)


class PaymentVerifier:
    def __init__(self, ledger):
        self.ledger = ledger

    def verify(self, sender, receiver, amount, block_index, memo):
        """
        True only if block `block_index` holds a transfer of exactly `amount`
        from `sender`'s account to `receiver`'s account carrying `memo`.
        `sender` and `receiver` are identities, not addresses.
        """
        if block_index is None or block_index < 0:
            return False
        try:
            blocks = self.ledger.query_blocks(block_index, 1)
        except LedgerError as e:
            logger.warning("Could not fetch block %s for memo %s: %s", block_index, memo, e)
            return False

        if not blocks:
            logger.warning("Block %s not found on the ledger", block_index)
            return False

        block = blocks[0]
        transfer = block.operation
        if transfer is None:
            return False

        try:
            block_from = binary_address_from_address(transfer.from_address)
            block_to = binary_address_from_address(transfer.to_address)
        except ValueError:
            logger.warning("Block %s carries a malformed address", block_index)
            return False

        matches = (
            block.memo == memo
            and block_from == binary_address_from_identity(sender)
            and block_to == binary_address_from_identity(receiver)
            and transfer.amount == amount
        )
        if not matches:
            logger.warning("Block %s does not match payment for memo %s", block_index, memo)
        return matches
