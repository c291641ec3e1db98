"""
RLP encoder.

Only encoding is implemented: transactions are built and signed here,
never parsed. All length prefixes are minimal.
"""

from __future__ import annotations

from typing import Iterable

from ..errors import IntegerOutOfRange

UINT64_MAX = (1 << 64) - 1

_SHORT_STRING = 0x80
_LONG_STRING = 0xB7
_SHORT_LIST = 0xC0
_LONG_LIST = 0xF7


def _be_bytes(value: int) -> bytes:
    """Minimal big-endian representation; zero is the empty string."""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def _prefix(length: int, short_base: int, long_base: int) -> bytes:
    if length < 56:
        return bytes([short_base + length])
    length_bytes = _be_bytes(length)
    return bytes([long_base + len(length_bytes)]) + length_bytes


def encode_uint(value: int) -> bytes:
    """Encode an unsigned 64-bit integer."""
    if value < 0 or value > UINT64_MAX:
        raise IntegerOutOfRange(
            f"Value {value} does not fit an unsigned 64-bit integer.",
            value=value,
        )
    return encode_int(value)


def encode_int(value: int) -> bytes:
    """Encode a non-negative integer of any size (signature scalars)."""
    if value < 0:
        raise IntegerOutOfRange(f"Negative integer {value} cannot be RLP encoded.", value=value)
    if value == 0:
        return bytes([_SHORT_STRING])
    if value < _SHORT_STRING:
        return bytes([value])
    return encode_bytes(_be_bytes(value))


def encode_bytes(data: bytes) -> bytes:
    """Encode a byte string."""
    data = bytes(data)
    if len(data) == 1 and data[0] < _SHORT_STRING:
        return data
    return _prefix(len(data), _SHORT_STRING, _LONG_STRING) + data


def encode_list(items: Iterable[bytes]) -> bytes:
    """Encode a list whose items are already RLP encoded."""
    payload = b"".join(items)
    return _prefix(len(payload), _SHORT_LIST, _LONG_LIST) + payload
