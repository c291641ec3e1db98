from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Optional

KNOWN_CHAIN_NAMES = {
    1: "Ethereum Mainnet",
    8453: "Base",
    137: "Polygon",
    10: "Optimism",
    42161: "Arbitrum One",
    11155111: "Sepolia (Testnet)",
    84532: "Base Sepolia (Testnet)",
}


def chain_name(chain_id: int) -> str:
    return KNOWN_CHAIN_NAMES.get(chain_id, "Unknown Chain")


@dataclass(frozen=True)
class ChainConfig:
    chain_id: int
    name: str
    rpc_url: str
    native_symbol: str = "ETH"
    decimals: int = 18

    @property
    def reference(self) -> str:
        return f"evm:{self.chain_id}"

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ChainConfig":
        return cls(
            chain_id=int(payload["chain_id"]),
            name=payload["name"],
            rpc_url=payload["rpc_url"],
            native_symbol=payload.get("native_symbol", "ETH"),
            decimals=int(payload.get("decimals", 18)),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    rpc_url: str

    @property
    def reference(self) -> str:
        return f"solana:{self.name}"

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "NetworkConfig":
        return cls(name=payload["name"], rpc_url=payload["rpc_url"])

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class TxState(str, Enum):
    PENDING = "pending"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class TransactionStatus:
    state: TxState
    ref: Optional[str] = None
    height: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def pending(cls) -> "TransactionStatus":
        return cls(TxState.PENDING)

    @classmethod
    def submitted(cls, ref: str) -> "TransactionStatus":
        return cls(TxState.SUBMITTED, ref=ref)

    @classmethod
    def confirmed(cls, height: int) -> "TransactionStatus":
        return cls(TxState.CONFIRMED, height=height)

    @classmethod
    def failed(cls, reason: str) -> "TransactionStatus":
        return cls(TxState.FAILED, reason=reason)

    def __str__(self) -> str:
        if self.state is TxState.SUBMITTED:
            return f"submitted({self.ref})"
        if self.state is TxState.CONFIRMED:
            return f"confirmed(#{self.height})"
        if self.state is TxState.FAILED:
            return f"failed({self.reason})"
        return self.state.value

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TransactionStatus":
        return cls(
            state=TxState(payload["state"]),
            ref=payload.get("ref"),
            height=payload.get("height"),
            reason=payload.get("reason"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"state": self.state.value}
        for key in ("ref", "height", "reason"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class TransactionRecord:
    id: int
    chain: str
    reference: str
    to: str
    amount: str
    timestamp: float
    status: TransactionStatus
    data: Optional[str] = None
    asset: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TransactionRecord":
        return cls(
            id=int(payload["id"]),
            chain=payload["chain"],
            reference=payload["reference"],
            to=payload["to"],
            amount=payload["amount"],
            timestamp=float(payload["timestamp"]),
            status=TransactionStatus.from_dict(payload["status"]),
            data=payload.get("data"),
            asset=payload.get("asset"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "chain": self.chain,
            "reference": self.reference,
            "to": self.to,
            "amount": self.amount,
            "timestamp": self.timestamp,
            "status": self.status.to_dict(),
            "data": self.data,
            "asset": self.asset,
        }

