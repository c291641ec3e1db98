"""
Signing oracles.

An oracle holds (or fronts) private keys addressed by an opaque key
handle. It signs a 32-byte digest (secp256k1) or a raw message
(Ed25519) and returns exactly 64 bytes, ``r || s`` or the Ed25519
signature. No recovery id is ever returned.

The local oracles below keep keys in memory and back the CLI and the
tests; a remote key service only has to implement ``SigningOracle``.
"""

from __future__ import annotations

import logging
import secrets
from typing import Callable, Mapping, Protocol

import base58
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from ..codec.numeric import hex_to_bytes
from ..errors import InvalidHex, MissingKey, SigningFailed
from .ed25519 import solana_address

logger = logging.getLogger(__name__)

SIGNATURE_SIZE = 64


class SigningOracle(Protocol):
    def sign(self, data: bytes, key_handle: str) -> bytes:
        ...

    def public_key(self, key_handle: str) -> bytes:
        ...


class Secp256k1Oracle:
    """In-memory secp256k1 signer over 32-byte digests."""

    def __init__(self, private_keys: Mapping[str, str]) -> None:
        self._keys: dict[str, keys.PrivateKey] = {}
        for handle, private_key in private_keys.items():
            try:
                self._keys[handle] = keys.PrivateKey(hex_to_bytes(private_key))
            except (InvalidHex, EthKeysValidationError) as exc:
                raise MissingKey(f"Unusable secp256k1 key for handle {handle!r}.", key_handle=handle) from exc

    def _key(self, key_handle: str) -> keys.PrivateKey:
        try:
            return self._keys[key_handle]
        except KeyError:
            raise MissingKey(f"No secp256k1 key for handle {key_handle!r}.", key_handle=key_handle) from None

    def public_key(self, key_handle: str) -> bytes:
        """33-byte compressed SEC1 public key."""
        return self._key(key_handle).public_key.to_compressed_bytes()

    def sign(self, data: bytes, key_handle: str) -> bytes:
        if len(data) != 32:
            raise SigningFailed(f"Expected a 32-byte digest, got {len(data)} bytes.", key_handle=key_handle)
        try:
            key = self._key(key_handle)
        except MissingKey as exc:
            raise SigningFailed(str(exc), key_handle=key_handle) from exc
        signature = key.sign_msg_hash(bytes(data))
        logger.debug("secp256k1 signature produced for handle %s", key_handle)
        return signature.r.to_bytes(32, "big") + signature.s.to_bytes(32, "big")


class Ed25519Oracle:
    """In-memory Ed25519 signer over raw messages."""

    def __init__(self, seeds: Mapping[str, bytes]) -> None:
        self._keys = {
            handle: Ed25519PrivateKey.from_private_bytes(bytes(seed))
            for handle, seed in seeds.items()
        }

    def _key(self, key_handle: str) -> Ed25519PrivateKey:
        try:
            return self._keys[key_handle]
        except KeyError:
            raise MissingKey(f"No Ed25519 key for handle {key_handle!r}.", key_handle=key_handle) from None

    def public_key(self, key_handle: str) -> bytes:
        return self._key(key_handle).public_key().public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )

    def sign(self, data: bytes, key_handle: str) -> bytes:
        try:
            key = self._key(key_handle)
        except MissingKey as exc:
            raise SigningFailed(str(exc), key_handle=key_handle) from exc
        return key.sign(bytes(data))


class KeyRing:
    """Routes each key handle to the oracle that owns it."""

    def __init__(self, routes: Mapping[str, SigningOracle]) -> None:
        self._routes = dict(routes)

    def _oracle(self, key_handle: str) -> SigningOracle:
        try:
            return self._routes[key_handle]
        except KeyError:
            raise MissingKey(f"No key configured for handle {key_handle!r}.", key_handle=key_handle) from None

    def public_key(self, key_handle: str) -> bytes:
        return self._oracle(key_handle).public_key(key_handle)

    def sign(self, data: bytes, key_handle: str) -> bytes:
        try:
            oracle = self._oracle(key_handle)
        except MissingKey as exc:
            raise SigningFailed(str(exc), key_handle=key_handle) from exc
        return oracle.sign(data, key_handle)


def parse_solana_secret(secret: str) -> bytes:
    """
    Parse a Solana secret into a 32-byte Ed25519 seed.

    Accepts a hex seed (32 bytes) or the base-58 64-byte keypair format
    exported by common wallets (seed followed by public key).
    """
    secret = secret.strip()
    try:
        raw = hex_to_bytes(secret)
    except InvalidHex:
        try:
            raw = base58.b58decode(secret)
        except ValueError as exc:
            raise MissingKey("SOLANA_PRIVATE_KEY is neither hex nor base-58.") from exc
    if len(raw) not in (32, 64):
        raise MissingKey(f"SOLANA_PRIVATE_KEY must hold 32 or 64 bytes, got {len(raw)}.")
    return raw[:32]


def generate_evm_key(randbytes: Callable[[int], bytes] = secrets.token_bytes) -> tuple[str, str]:
    """
    Generate a new secp256k1 keypair.

    Returns:
        Tuple of (private_key_hex, checksummed address)
    """
    private_key = "0x" + randbytes(32).hex()
    return private_key, Account.from_key(private_key).address


def generate_solana_key(randbytes: Callable[[int], bytes] = secrets.token_bytes) -> tuple[str, str]:
    """
    Generate a new Ed25519 keypair.

    Returns:
        Tuple of (seed_hex, base-58 address)
    """
    seed = randbytes(32)
    oracle = Ed25519Oracle({"new": seed})
    return "0x" + seed.hex(), solana_address(oracle.public_key("new"))
