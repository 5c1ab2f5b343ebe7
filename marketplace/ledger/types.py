from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Transfer:
    from_address: str
    to_address: str
    amount: int
    fee: int = 0

    def to_dict(self):
        return {
            "from": self.from_address,
            "to": self.to_address,
            "amount": self.amount,
            "fee": self.fee,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            from_address=data["from"],
            to_address=data["to"],
            amount=int(data["amount"]),
            fee=int(data.get("fee", 0)),
        )


@dataclass(frozen=True)
class Block:
    index: int
    memo: int
    operation: Optional[Transfer] = None
    timestamp: Optional[float] = None

    def to_dict(self):
        return {
            "index": self.index,
            "memo": self.memo,
            "timestamp": self.timestamp,
            "operation": self.operation.to_dict() if self.operation else None,
        }

    @classmethod
    def from_dict(cls, data):
        operation = data.get("operation")
        return cls(
            index=int(data["index"]),
            memo=int(data.get("memo", 0)),
            operation=Transfer.from_dict(operation) if operation else None,
            timestamp=data.get("timestamp"),
        )
