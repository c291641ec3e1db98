"""
Numeric parsers.

Amounts travel as decimal strings (they routinely exceed 64 bits) and
are converted to big-endian byte strings at the edge of the codec.
"""

from __future__ import annotations

import re

from ..errors import AmountTooLarge, InvalidAmount, InvalidHex

_DECIMAL_RE = re.compile(r"[0-9]+")
_HUMAN_RE = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_HEX_RE = re.compile(r"[0-9a-fA-F]*")

WORD_SIZE = 32


def parse_decimal(text: str) -> int:
    """Parse a non-negative base-10 integer string."""
    if not isinstance(text, str) or not _DECIMAL_RE.fullmatch(text):
        raise InvalidAmount(f"Invalid amount: {text!r}", value=text)
    return int(text)


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian bytes; zero is the empty string."""
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


def decimal_to_bytes(text: str) -> bytes:
    """Decimal string to minimal big-endian bytes (``"0"`` -> ``b""``)."""
    return int_to_bytes(parse_decimal(text))


def int_to_fixed32(value: int) -> bytes:
    if value < 0:
        raise InvalidAmount(f"Negative amount: {value}", value=value)
    raw = int_to_bytes(value)
    if len(raw) > WORD_SIZE:
        raise AmountTooLarge(
            f"Amount needs {len(raw)} bytes, at most {WORD_SIZE} allowed.",
            value=value,
            size=len(raw),
        )
    return raw.rjust(WORD_SIZE, b"\x00")


def decimal_to_fixed32(text: str) -> bytes:
    """Decimal string right-aligned into a 32-byte big-endian word."""
    return int_to_fixed32(parse_decimal(text))


def hex_to_bytes(text: str) -> bytes:
    """Hex string (optional ``0x`` prefix) to bytes."""
    if not isinstance(text, str):
        raise InvalidHex(f"Expected a hex string, got {type(text).__name__}", value=text)
    body = text[2:] if text[:2] in ("0x", "0X") else text
    if len(body) % 2 or not _HEX_RE.fullmatch(body):
        raise InvalidHex(f"Invalid hex: {text!r}", value=text)
    return bytes.fromhex(body)


def parse_units(text: str, decimals: int) -> int:
    """Convert a human amount such as ``"1.25"`` into base units.

    Args:
        text: Decimal amount, optionally with a fractional part
        decimals: Number of decimal places of the asset

    Raises:
        InvalidAmount: If the text is not a plain decimal number or has
            more fractional digits than the asset supports
    """
    match = _HUMAN_RE.fullmatch(text.strip()) if isinstance(text, str) else None
    if match is None or not (match.group(1) or match.group(2)):
        raise InvalidAmount(f"Invalid amount: {text!r}", value=text)

    whole, fraction = match.group(1) or "0", match.group(2) or ""
    if len(fraction) > decimals:
        raise InvalidAmount(
            f"Amount {text!r} has more than {decimals} decimal places.",
            value=text,
            decimals=decimals,
        )
    return int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")


def format_units(value: int, decimals: int) -> str:
    """Base units to a human amount, trailing zeros trimmed (``1250000, 6`` -> ``"1.25"``)."""
    whole, fraction = divmod(value, 10**decimals)
    if not decimals or not fraction:
        return str(whole)
    return f"{whole}.{str(fraction).rjust(decimals, '0').rstrip('0')}"
