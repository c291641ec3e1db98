"""
EIP-1559 transaction builder.

Builds the typed (0x02) envelope by hand on top of the RLP encoder, so
the bytes handed to the signing oracle are fully under our control:

    0x02 || rlp([chainId, nonce, maxPriorityFeePerGas, maxFeePerGas,
                 gasLimit, to, value, data, accessList])

The signed form appends ``[v, r, s]`` to the same list.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..codec import rlp
from ..codec.numeric import decimal_to_bytes
from ..errors import InvalidAddress, IntegerOutOfRange
from ..keys.secp256k1 import ADDRESS_SIZE, parse_address
from ..utils import keccak256

TX_TYPE_EIP1559 = 0x02

DEFAULT_PRIORITY_FEE = 1_500_000_000  # 1.5 gwei

GAS_LIMIT_NATIVE = 21_000
GAS_LIMIT_TOKEN_TRANSFER = 100_000
GAS_LIMIT_SWAP = 300_000


@dataclass(frozen=True)
class SignatureCandidate:
    r: bytes
    s: bytes
    recovery_id: int

    def __post_init__(self) -> None:
        if len(self.r) != 32 or len(self.s) != 32:
            raise IntegerOutOfRange("Signature scalars must be 32 bytes each.")
        if self.recovery_id not in (0, 1):
            raise IntegerOutOfRange(
                f"Recovery id must be 0 or 1, got {self.recovery_id}.", value=self.recovery_id
            )

    @classmethod
    def from_signature(cls, signature: bytes, recovery_id: int) -> "SignatureCandidate":
        return cls(r=bytes(signature[:32]), s=bytes(signature[32:64]), recovery_id=recovery_id)


@dataclass(frozen=True)
class Eip1559Transaction:
    chain_id: int
    nonce: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    gas_limit: int
    to: bytes
    value: bytes = b""
    data: bytes = b""

    def __post_init__(self) -> None:
        if len(self.to) != ADDRESS_SIZE:
            raise InvalidAddress(
                f"Recipient must be {ADDRESS_SIZE} bytes, got {len(self.to)}.",
                address="0x" + bytes(self.to).hex(),
            )
        if self.value[:1] == b"\x00":
            raise IntegerOutOfRange("Value must be minimal big-endian (no leading zero byte).")

    @classmethod
    def create(
        cls,
        chain_id: int,
        nonce: int,
        max_priority_fee_per_gas: int,
        max_fee_per_gas: int,
        gas_limit: int,
        to: str,
        value_wei: str = "0",
        data: bytes = b"",
    ) -> "Eip1559Transaction":
        """Build from text inputs: hex ``to`` and decimal ``value_wei``."""
        return cls(
            chain_id=chain_id,
            nonce=nonce,
            max_priority_fee_per_gas=max_priority_fee_per_gas,
            max_fee_per_gas=max_fee_per_gas,
            gas_limit=gas_limit,
            to=parse_address(to),
            value=decimal_to_bytes(value_wei),
            data=bytes(data),
        )

    def _fields(self) -> list[bytes]:
        return [
            rlp.encode_uint(self.chain_id),
            rlp.encode_uint(self.nonce),
            rlp.encode_uint(self.max_priority_fee_per_gas),
            rlp.encode_uint(self.max_fee_per_gas),
            rlp.encode_uint(self.gas_limit),
            rlp.encode_bytes(self.to),
            rlp.encode_bytes(self.value),
            rlp.encode_bytes(self.data),
            rlp.encode_list([]),  # accessList
        ]

    def signing_payload(self) -> bytes:
        return bytes([TX_TYPE_EIP1559]) + rlp.encode_list(self._fields())

    def signing_hash(self) -> bytes:
        return keccak256(self.signing_payload())

    def signed_payload(self, candidate: SignatureCandidate) -> bytes:
        items = self._fields() + [
            rlp.encode_uint(candidate.recovery_id),
            rlp.encode_int(int.from_bytes(candidate.r, "big")),
            rlp.encode_int(int.from_bytes(candidate.s, "big")),
        ]
        return bytes([TX_TYPE_EIP1559]) + rlp.encode_list(items)


def fee_parameters(gas_price: int, priority_fee: int = DEFAULT_PRIORITY_FEE) -> tuple[int, int]:
    """
    Derive EIP-1559 fees from ``eth_gasPrice``.

    Returns:
        (max_priority_fee_per_gas, max_fee_per_gas); the max fee is twice
        the quoted gas price and the tip never exceeds it.
    """
    max_fee = gas_price * 2
    return min(priority_fee, max_fee), max_fee
