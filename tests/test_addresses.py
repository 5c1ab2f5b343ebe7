import unittest

from marketplace.ledger.addresses import (
    binary_address_from_address,
    binary_address_from_identity,
    hex_address_from_identity,
    is_valid_address,
)


class TestAddresses(unittest.TestCase):
    def test_address_is_deterministic_and_32_bytes(self):
        first = hex_address_from_identity("alice")
        self.assertEqual(first, hex_address_from_identity("alice"))
        self.assertEqual(len(first), 64)
        self.assertEqual(len(binary_address_from_identity("alice")), 32)

    def test_identities_and_subaccounts_get_distinct_addresses(self):
        self.assertNotEqual(hex_address_from_identity("alice"), hex_address_from_identity("bob"))
        self.assertNotEqual(hex_address_from_identity("alice", 0), hex_address_from_identity("alice", 1))

    def test_hex_round_trip(self):
        address = hex_address_from_identity("alice")
        self.assertEqual(binary_address_from_address(address), binary_address_from_identity("alice"))

    def test_corrupted_checksum_is_rejected(self):
        address = hex_address_from_identity("alice")
        corrupted = ("0" if address[0] != "0" else "1") + address[1:]
        self.assertFalse(is_valid_address(corrupted))
        with self.assertRaises(ValueError):
            binary_address_from_address(corrupted)

    def test_bad_input_is_rejected(self):
        self.assertFalse(is_valid_address("not-hex"))
        self.assertFalse(is_valid_address("abcd"))
        self.assertFalse(is_valid_address(None))
        with self.assertRaises(ValueError):
            binary_address_from_identity("")


if __name__ == '__main__':
    unittest.main()
