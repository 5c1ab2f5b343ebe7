from marketplace.ledger.addresses import (
    binary_address_from_address,
    binary_address_from_identity,
    hex_address_from_identity,
    is_valid_address,
)
from marketplace.ledger.http import HttpLedgerClient
from marketplace.ledger.memory import InMemoryLedger
from marketplace.ledger.types import Block, Transfer


def create_ledger_client(config):
    if config["LEDGER_BACKEND"] == "memory":
        return InMemoryLedger(owner=config["SERVICE_IDENTITY"])
    return HttpLedgerClient(
        config["LEDGER_URL"],
        timeout=config["LEDGER_TIMEOUT"],
        token=config.get("LEDGER_TOKEN"),
    )


__all__ = [
    "Block",
    "Transfer",
    "HttpLedgerClient",
    "InMemoryLedger",
    "create_ledger_client",
    "binary_address_from_address",
    "binary_address_from_identity",
    "hex_address_from_identity",
    "is_valid_address",
]
