"""
secp256k1 keys and account-chain addresses.

The signing service hands out SEC1 public keys, usually compressed
(33 bytes). Addresses need the uncompressed point, so decompression is
done here with plain modular arithmetic: the field prime is 3 mod 4,
which makes the square root a single modular exponentiation.
"""

from __future__ import annotations

from typing import Optional

from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as EthKeysValidationError

from ..codec.numeric import hex_to_bytes
from ..errors import InvalidAddress, InvalidCompressedKey, InvalidHex, InvalidPublicKeyLength
from ..utils import keccak256

# p = 2^256 - 2^32 - 977
P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
HALF_N = N // 2

ADDRESS_SIZE = 20


def decompress_public_key(compressed: bytes) -> bytes:
    """
    Decompress a 33-byte SEC1 public key.

    Returns:
        65-byte uncompressed key ``0x04 || x || y``

    Raises:
        InvalidCompressedKey: Wrong length, wrong prefix, or x is not the
            abscissa of a curve point
    """
    compressed = bytes(compressed)
    if len(compressed) != 33:
        raise InvalidCompressedKey(
            f"Invalid compressed key length: {len(compressed)}", length=len(compressed)
        )

    prefix = compressed[0]
    if prefix not in (0x02, 0x03):
        raise InvalidCompressedKey(f"Invalid compression prefix: 0x{prefix:02x}", prefix=prefix)

    x = int.from_bytes(compressed[1:], "big")
    if x >= P:
        raise InvalidCompressedKey("x coordinate is not a field element.", prefix=prefix)

    # y^2 = x^3 + 7 (mod p)
    y_squared = (pow(x, 3, P) + 7) % P
    y = pow(y_squared, (P + 1) // 4, P)
    if y * y % P != y_squared:
        raise InvalidCompressedKey("x coordinate is not on secp256k1.", prefix=prefix)

    if (y & 1) != (prefix == 0x03):
        y = P - y

    return b"\x04" + x.to_bytes(32, "big") + y.to_bytes(32, "big")


def to_uncompressed(public_key: bytes) -> bytes:
    public_key = bytes(public_key)
    if len(public_key) == 65 and public_key[0] == 0x04:
        return public_key
    if len(public_key) == 33:
        return decompress_public_key(public_key)
    raise InvalidPublicKeyLength(
        f"Invalid public key length: {len(public_key)} bytes. "
        f"Expected 33 (compressed) or 65 (uncompressed).",
        length=len(public_key),
    )


def canonical_address(public_key: bytes) -> bytes:
    """20-byte account address: low 20 bytes of Keccak-256(x || y)."""
    return keccak256(to_uncompressed(public_key)[1:])[-ADDRESS_SIZE:]


def evm_address(public_key: bytes) -> str:
    """0x-prefixed lowercase hex address for a 33- or 65-byte public key."""
    return "0x" + canonical_address(public_key).hex()


def parse_address(address: str) -> bytes:
    """Decode a hex address, requiring exactly 20 bytes."""
    try:
        raw = hex_to_bytes(address)
    except InvalidHex as exc:
        raise InvalidAddress(f"Invalid address: {address!r}", address=address) from exc
    if len(raw) != ADDRESS_SIZE:
        raise InvalidAddress(
            f"Invalid address length: {len(raw)} bytes (expected {ADDRESS_SIZE}).",
            address=address,
        )
    return raw


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed-case form of an address."""
    addr = parse_address(address).hex()
    addr_hash = keccak256(addr.encode("ascii")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def normalize_s(s: int) -> tuple[int, bool]:
    """Move ``s`` into the lower half of the order (EIP-2).

    Returns the normalised value and whether it was flipped; flipping
    ``s`` swaps which recovery id matches the signer.
    """
    if s > HALF_N:
        return N - s, True
    return s, False


def recover_public_key(digest: bytes, r: int, s: int, recovery_id: int) -> Optional[bytes]:
    """Recover the uncompressed public key for one recovery id, or None."""
    try:
        signature = keys.Signature(vrs=(recovery_id, r, s))
        public_key = signature.recover_public_key_from_msg_hash(digest)
    except (BadSignature, EthKeysValidationError):
        return None
    return b"\x04" + public_key.to_bytes()
