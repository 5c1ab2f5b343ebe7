"""
HTTP client for the token ledger.
Every call is bounded by a timeout. Transport failures and malformed replies
raise LedgerUnavailable; error replies raise TransferRejected.
"""

import logging

import requests

from marketplace.errors import LedgerUnavailable, TransferRejected
from marketplace.ledger.types import Block

logger = logging.getLogger(__name__)


class HttpLedgerClient:
    def __init__(self, base_url, timeout=5.0, token=None, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method, path, payload=None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Ledger call %s %s failed: %s", method, path, e)
            raise LedgerUnavailable(f"ledger unreachable: {e}")

        if response.status_code >= 500:
            raise LedgerUnavailable(f"ledger returned {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise LedgerUnavailable(f"ledger returned a non-JSON body for {path}")

        if not 200 <= response.status_code < 300:
            error = data.get("error", data) if isinstance(data, dict) else data
            raise TransferRejected(str(error))
        if not isinstance(data, dict):
            raise LedgerUnavailable(f"ledger returned an unexpected body for {path}")
        return data

    def _parse(self, path, parse, data):
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Malformed ledger reply for %s: %r", path, e)
            raise LedgerUnavailable(f"ledger returned a malformed reply for {path}")

    def transfer(self, to, amount, memo, fee=None):
        if fee is None:
            fee = self.transfer_fee()
        data = self._request("POST", "/transfer", {
            "to": to,
            "amount": amount,
            "memo": memo,
            "fee": fee,
        })
        return self._parse("/transfer", lambda d: int(d["block_index"]), data)

    def transfer_from(self, owner, to, amount, memo):
        data = self._request("POST", "/transfer_from", {
            "from": owner,
            "to": to,
            "amount": amount,
            "memo": memo,
        })
        return self._parse("/transfer_from", lambda d: int(d["block_index"]), data)

    def query_blocks(self, start, length):
        data = self._request("POST", "/query_blocks", {"start": start, "length": length})
        return self._parse("/query_blocks", lambda d: [Block.from_dict(b) for b in d.get("blocks", [])], data)

    def transfer_fee(self):
        data = self._request("GET", "/transfer_fee")
        return self._parse("/transfer_fee", lambda d: int(d["transfer_fee"]), data)

    def balance(self, address):
        data = self._request("GET", f"/balance/{address}")
        return self._parse("/balance", lambda d: int(d["balance"]), data)
