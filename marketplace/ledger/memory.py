"""
In-process ledger with the same contract as HttpLedgerClient.

Used for local development (LEDGER_BACKEND=memory) and in tests. It keeps an
append-only list of blocks, balances per address and ICRC-2 style allowances.
Calls are made on behalf of `owner` unless a `caller` identity is passed.
"""

import threading
import time
from collections import defaultdict

from marketplace.errors import TransferRejected
from marketplace.ledger.addresses import binary_address_from_address, hex_address_from_identity
from marketplace.ledger.types import Block, Transfer

MINTING_IDENTITY = "minter"


class InMemoryLedger:
    def __init__(self, owner, fee=0, clock=time.time):
        self.owner = owner
        self.fee = fee
        self.clock = clock
        self._blocks = []
        self._balances = defaultdict(int)
        self._allowances = defaultdict(int)
        self._lock = threading.Lock()

    def _append(self, memo, operation):
        block = Block(index=len(self._blocks), memo=memo, operation=operation, timestamp=self.clock())
        self._blocks.append(block)
        return block.index

    def mint(self, to, amount, memo=0):
        binary_address_from_address(to)
        with self._lock:
            self._balances[to] += amount
            return self._append(memo, Transfer(hex_address_from_identity(MINTING_IDENTITY), to, amount))

    def approve(self, owner_identity, spender_identity, amount):
        owner = hex_address_from_identity(owner_identity)
        spender = hex_address_from_identity(spender_identity)
        with self._lock:
            self._allowances[(owner, spender)] = amount

    def allowance(self, owner_identity, spender_identity):
        key = (hex_address_from_identity(owner_identity), hex_address_from_identity(spender_identity))
        return self._allowances[key]

    def _move(self, source, to, amount, fee):
        if amount <= 0:
            raise TransferRejected("amount must be positive")
        try:
            binary_address_from_address(to)
        except ValueError as e:
            raise TransferRejected(f"invalid destination: {e}")
        if self._balances[source] < amount + fee:
            raise TransferRejected(f"insufficient funds, balance={self._balances[source]}")
        self._balances[source] -= amount + fee
        self._balances[to] += amount

    def transfer(self, to, amount, memo, fee=None, caller=None):
        source = hex_address_from_identity(caller or self.owner)
        fee = self.fee if fee is None else fee
        if fee != self.fee:
            raise TransferRejected(f"bad fee, expected {self.fee}")
        with self._lock:
            self._move(source, to, amount, fee)
            return self._append(memo, Transfer(source, to, amount, fee))

    def transfer_from(self, owner, to, amount, memo):
        spender = hex_address_from_identity(self.owner)
        with self._lock:
            allowed = self._allowances[(owner, spender)]
            if allowed < amount + self.fee:
                raise TransferRejected(f"insufficient allowance, allowance={allowed}")
            self._move(owner, to, amount, self.fee)
            self._allowances[(owner, spender)] = allowed - amount - self.fee
            return self._append(memo, Transfer(owner, to, amount, self.fee))

    def query_blocks(self, start, length):
        with self._lock:
            return list(self._blocks[start:start + length])

    def transfer_fee(self):
        return self.fee

    def balance(self, address):
        return self._balances[address]
