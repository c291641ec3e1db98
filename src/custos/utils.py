from __future__ import annotations

import hashlib

from eth_hash.auto import keccak


def keccak256(data: bytes) -> bytes:
    """Keccak-256 digest (NOT the same as hashlib.sha3_256 / NIST SHA-3)."""
    return keccak(bytes(data))


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def to_0x_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()
