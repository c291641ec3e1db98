"""
Signature finalization.

The signing oracle returns a bare 64-byte ``r || s``. Account-chain
transactions also need the recovery id (``v``, 0 or 1), which the
oracle never reports. Two strategies resolve it:

- LOCAL (preferred): recover the public key for each candidate id and
  broadcast only the one whose address equals the known signer.
- BROADCAST (fallback): submit candidate 0, then candidate 1, and keep
  the first the node accepts. This spends a real submission per guess
  and is only used when the signer address is unknown or the strategy
  is chosen explicitly.

Solana-style messages carry the signature as-is: one signature, one
submission, no loop.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

import base58

from ..errors import BroadcastExhausted, SigningFailed, TransportError
from ..keys.oracle import SIGNATURE_SIZE, SigningOracle
from ..keys.secp256k1 import canonical_address, normalize_s, parse_address, recover_public_key
from . import rpc
from .evm import Eip1559Transaction, SignatureCandidate
from .solana import Message, wire_transaction

logger = logging.getLogger(__name__)

RECOVERY_IDS = (0, 1)


class RecoveryStrategy(str, Enum):
    LOCAL = "local"
    BROADCAST = "broadcast"


def request_signature(oracle: SigningOracle, data: bytes, key_handle: str) -> bytes:
    """Ask the oracle for a signature and insist on exactly 64 bytes."""
    try:
        signature = oracle.sign(data, key_handle)
    except SigningFailed:
        raise
    except TransportError as exc:
        raise SigningFailed(f"Signing service failed: {exc}", key_handle=key_handle) from exc

    if signature is None or len(signature) != SIGNATURE_SIZE:
        raise SigningFailed(
            f"Invalid signature length: {0 if signature is None else len(signature)}",
            key_handle=key_handle,
        )
    return bytes(signature)


def signature_candidates(signature: bytes) -> list[SignatureCandidate]:
    """Both recovery-id candidates, with ``s`` in its low form."""
    r = int.from_bytes(signature[:32], "big")
    s, _flipped = normalize_s(int.from_bytes(signature[32:], "big"))
    return [
        SignatureCandidate(r=r.to_bytes(32, "big"), s=s.to_bytes(32, "big"), recovery_id=v)
        for v in RECOVERY_IDS
    ]


def resolve_recovery_id(
    digest: bytes, candidates: list[SignatureCandidate], signer: bytes
) -> Optional[SignatureCandidate]:
    """Pick the candidate whose recovered address is ``signer``."""
    for candidate in candidates:
        public_key = recover_public_key(
            digest,
            int.from_bytes(candidate.r, "big"),
            int.from_bytes(candidate.s, "big"),
            candidate.recovery_id,
        )
        if public_key is not None and canonical_address(public_key) == signer:
            return candidate
    return None


def finalize_evm(
    tx: Eip1559Transaction,
    oracle: SigningOracle,
    key_handle: str,
    transport: rpc.Transport,
    endpoint: str,
    signer_address: Optional[str] = None,
    strategy: RecoveryStrategy = RecoveryStrategy.LOCAL,
) -> str:
    """
    Sign an EIP-1559 transaction and broadcast it.

    Args:
        tx: Unsigned transaction
        oracle: Signing oracle holding the key
        key_handle: Key handle passed to the oracle
        transport: JSON-RPC transport
        endpoint: RPC endpoint of the target chain
        signer_address: Address of the key; required for LOCAL resolution
        strategy: Recovery-id strategy; falls back to BROADCAST when no
            signer address is known

    Returns:
        Transaction hash reported by the node

    Raises:
        SigningFailed: Oracle failure, or no candidate matches the signer
        BroadcastExhausted: BROADCAST strategy and both candidates rejected
        TransportError: LOCAL strategy and the node rejected the transaction
    """
    digest = tx.signing_hash()
    signature = request_signature(oracle, digest, key_handle)
    candidates = signature_candidates(signature)

    if strategy is RecoveryStrategy.LOCAL and signer_address is not None:
        match = resolve_recovery_id(digest, candidates, parse_address(signer_address))
        if match is None:
            raise SigningFailed(
                "Signature does not recover to the signer address.",
                key_handle=key_handle,
                signer=signer_address,
            )
        logger.info("Recovery id %d resolved locally; broadcasting", match.recovery_id)
        return rpc.send_raw_transaction(transport, endpoint, tx.signed_payload(match))

    return broadcast_candidates(tx, candidates, transport, endpoint)


def broadcast_candidates(
    tx: Eip1559Transaction,
    candidates: list[SignatureCandidate],
    transport: rpc.Transport,
    endpoint: str,
) -> str:
    """Submit each candidate in turn until the transport accepts one."""
    last_error: Optional[TransportError] = None
    for candidate in candidates:
        try:
            tx_hash = rpc.send_raw_transaction(transport, endpoint, tx.signed_payload(candidate))
        except TransportError as exc:
            logger.warning("Recovery id %d rejected: %s", candidate.recovery_id, exc)
            last_error = exc
            continue
        logger.info("Recovery id %d accepted: %s", candidate.recovery_id, tx_hash)
        return tx_hash

    raise BroadcastExhausted(
        f"All {len(candidates)} recovery-id candidates were rejected; last error: {last_error}",
        last_error=last_error,
    )


def finalize_solana(
    message: Message,
    oracle: SigningOracle,
    key_handle: str,
    transport: rpc.Transport,
    endpoint: str,
) -> str:
    """Sign a message with the fee payer's key and submit it once.

    Returns:
        Transaction signature (base-58) reported by the node
    """
    signature = request_signature(oracle, message.serialize(), key_handle)
    wire = wire_transaction(message, [signature])
    result = rpc.send_transaction(transport, endpoint, wire)
    logger.info("Solana transaction submitted: %s", result)
    expected = base58.b58encode(signature).decode("ascii")
    if result != expected:
        logger.warning("Node returned signature %s, expected %s", result, expected)
    return result
