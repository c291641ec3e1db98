"""
Ed25519 keys and Solana-style addresses.

A Solana address is the raw 32-byte Ed25519 public key in base-58.
``is_on_curve`` mirrors the point-decompression test used on chain to
reject program-derived addresses that collide with real keys.
"""

from __future__ import annotations

import base58

from ..errors import InvalidAddress, InvalidPublicKeyLength

KEY_SIZE = 32

# Curve25519 field prime and twisted Edwards constant d = -121665/121666
P = 2**255 - 19
D = (-121665 * pow(121666, P - 2, P)) % P


def solana_address(public_key: bytes) -> str:
    public_key = bytes(public_key)
    if len(public_key) != KEY_SIZE:
        raise InvalidPublicKeyLength(
            f"Invalid Ed25519 public key length: {len(public_key)} bytes (expected {KEY_SIZE}).",
            length=len(public_key),
        )
    return base58.b58encode(public_key).decode("ascii")


def parse_solana_address(address: str) -> bytes:
    """Decode a base-58 address, requiring exactly 32 bytes."""
    try:
        raw = base58.b58decode(address)
    except ValueError as exc:
        raise InvalidAddress(f"Invalid base-58 address: {address!r}", address=address) from exc
    if len(raw) != KEY_SIZE:
        raise InvalidAddress(
            f"Invalid address length: {len(raw)} bytes (expected {KEY_SIZE}).",
            address=address,
        )
    return raw


def is_on_curve(point: bytes) -> bool:
    """True if the 32 bytes decode to a point on the Ed25519 curve.

    The sign bit is ignored and ``y`` is taken modulo p, matching
    compressed-Edwards decompression.
    """
    y = int.from_bytes(bytes(point), "little") & ((1 << 255) - 1)
    y %= P
    y2 = y * y % P
    u = (y2 - 1) % P
    v = (D * y2 + 1) % P
    x2 = u * pow(v, P - 2, P) % P
    if x2 == 0:
        return True
    # Euler's criterion
    return pow(x2, (P - 1) // 2, P) == 1
