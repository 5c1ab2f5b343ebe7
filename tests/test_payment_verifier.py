import unittest
from unittest import mock

from marketplace.errors import LedgerUnavailable, TransferRejected
from marketplace.ledger import Block, HttpLedgerClient, InMemoryLedger, Transfer, hex_address_from_identity
from marketplace.services.verifier import PaymentVerifier

BUYER = "buyer"
SELLER = "seller"
MEMO = 123456789


class TestPaymentVerifier(unittest.TestCase):
    def setUp(self):
        self.ledger = InMemoryLedger(owner="service")
        self.ledger.mint(hex_address_from_identity(BUYER), 10_000)
        self.verifier = PaymentVerifier(self.ledger)
        self.block = self.ledger.transfer(hex_address_from_identity(SELLER), 500, MEMO, caller=BUYER)

    def test_matching_transfer_verifies(self):
        self.assertTrue(self.verifier.verify(BUYER, SELLER, 500, self.block, MEMO))

    def test_wrong_memo(self):
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 500, self.block, MEMO + 1))

    def test_wrong_amount(self):
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 499, self.block, MEMO))
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 501, self.block, MEMO))

    def test_wrong_sender(self):
        self.assertFalse(self.verifier.verify("someone-else", SELLER, 500, self.block, MEMO))

    def test_wrong_receiver(self):
        self.assertFalse(self.verifier.verify(BUYER, "someone-else", 500, self.block, MEMO))

    def test_unknown_or_negative_block(self):
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 500, self.block + 100, MEMO))
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 500, -1, MEMO))

    def test_only_the_given_block_is_checked(self):
        # the mint block (index 0) is not the payment even though a matching one exists later
        self.assertFalse(self.verifier.verify(BUYER, SELLER, 500, 0, MEMO))

    def test_block_without_transfer(self):
        ledger = mock.Mock()
        ledger.query_blocks.return_value = [Block(index=7, memo=MEMO, operation=None)]
        self.assertFalse(PaymentVerifier(ledger).verify(BUYER, SELLER, 500, 7, MEMO))
        ledger.query_blocks.assert_called_once_with(7, 1)

    def test_malformed_block_address(self):
        ledger = mock.Mock()
        ledger.query_blocks.return_value = [
            Block(index=7, memo=MEMO, operation=Transfer("zz", hex_address_from_identity(SELLER), 500))
        ]
        self.assertFalse(PaymentVerifier(ledger).verify(BUYER, SELLER, 500, 7, MEMO))

    def test_ledger_errors_fail_closed(self):
        for error in (LedgerUnavailable("timeout"), TransferRejected("bad request")):
            ledger = mock.Mock()
            ledger.query_blocks.side_effect = error
            self.assertFalse(PaymentVerifier(ledger).verify(BUYER, SELLER, 500, 1, MEMO))

    def test_malformed_ledger_replies_fail_closed(self):
        for body in (["unexpected"], {"blocks": [{"memo": MEMO, "operation": {"from": "x"}}]}, {"blocks": "none"}):
            session = mock.Mock()
            session.headers = {}
            session.request.return_value = mock.Mock(status_code=200, **{"json.return_value": body})
            verifier = PaymentVerifier(HttpLedgerClient("http://ledger", session=session))
            self.assertFalse(verifier.verify(BUYER, SELLER, 500, 1, MEMO), body)


if __name__ == '__main__':
    unittest.main()
