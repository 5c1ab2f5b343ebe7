"""
Ledger account addresses.

An address is the 32-byte account identifier of an identity: a big-endian
CRC32 checksum followed by sha224("\\x0aaccount-id" || identity || subaccount).
Clients exchange it as 64 hex characters.
"""

import hashlib
import zlib

ACCOUNT_DOMAIN_SEPARATOR = b"\x0aaccount-id"
SUBACCOUNT_LENGTH = 32
ADDRESS_LENGTH = 32


def _subaccount_bytes(subaccount):
    if subaccount < 0:
        raise ValueError("subaccount must be non-negative")
    return subaccount.to_bytes(SUBACCOUNT_LENGTH, "big")


def binary_address_from_identity(identity: str, subaccount: int = 0) -> bytes:
    if not identity:
        raise ValueError("identity must not be empty")
    digest = hashlib.sha224(
        ACCOUNT_DOMAIN_SEPARATOR + identity.encode("utf-8") + _subaccount_bytes(subaccount)
    ).digest()
    checksum = zlib.crc32(digest).to_bytes(4, "big")
    return checksum + digest


def hex_address_from_identity(identity: str, subaccount: int = 0) -> str:
    return binary_address_from_identity(identity, subaccount).hex()


def binary_address_from_address(address: str) -> bytes:
    """Decode a hex address, rejecting bad lengths and checksums."""
    try:
        raw = bytes.fromhex(address)
    except (TypeError, ValueError):
        raise ValueError(f"address is not valid hex: {address!r}")
    if len(raw) != ADDRESS_LENGTH:
        raise ValueError(f"address must be {ADDRESS_LENGTH} bytes, got {len(raw)}")
    checksum, digest = raw[:4], raw[4:]
    if zlib.crc32(digest).to_bytes(4, "big") != checksum:
        raise ValueError("address checksum mismatch")
    return raw


def is_valid_address(address) -> bool:
    try:
        binary_address_from_address(address)
    except ValueError:
        return False
    return True
