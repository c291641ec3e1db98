"""
Error taxonomy for Custos.

Four families, each a closed set of kinds:

- ValidationError: malformed input, raised before any network call
- ConfigurationError: unknown chain/network, registry limits, missing keys
- TransportError: RPC or signing-service failures
- BroadcastExhausted: every recovery-id candidate was rejected

Every error carries a ``kind`` (an ``ErrorKind`` member) and the
structured context it was raised with, available as ``context`` and as
attributes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    # Validation
    INVALID_AMOUNT = "invalid_amount"
    AMOUNT_TOO_LARGE = "amount_too_large"
    ZERO_AMOUNT = "zero_amount"
    INVALID_HEX = "invalid_hex"
    INVALID_ADDRESS = "invalid_address"
    INVALID_COMPRESSED_KEY = "invalid_compressed_key"
    INVALID_PUBLIC_KEY_LENGTH = "invalid_public_key_length"
    INTEGER_OUT_OF_RANGE = "integer_out_of_range"

    # Configuration
    CHAIN_NOT_REGISTERED = "chain_not_registered"
    NETWORK_NOT_REGISTERED = "network_not_registered"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    MISSING_KEY = "missing_key"

    # Transport
    NETWORK_FAILURE = "network_failure"
    RPC_ERROR = "rpc_error"
    MALFORMED_RESPONSE = "malformed_response"
    SIGNING_FAILED = "signing_failed"
    BROADCAST_EXHAUSTED = "broadcast_exhausted"


class CustosError(Exception):
    kind: ErrorKind

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context
        for key, value in context.items():
            setattr(self, key, value)

    def __str__(self) -> str:
        return self.message


# ============ Validation ============


class ValidationError(CustosError, ValueError):
    pass


class InvalidAmount(ValidationError):
    kind = ErrorKind.INVALID_AMOUNT


class AmountTooLarge(ValidationError):
    kind = ErrorKind.AMOUNT_TOO_LARGE


class ZeroAmount(ValidationError):
    kind = ErrorKind.ZERO_AMOUNT


class InvalidHex(ValidationError):
    kind = ErrorKind.INVALID_HEX


class InvalidAddress(ValidationError):
    kind = ErrorKind.INVALID_ADDRESS


class InvalidCompressedKey(ValidationError):
    kind = ErrorKind.INVALID_COMPRESSED_KEY


class InvalidPublicKeyLength(ValidationError):
    kind = ErrorKind.INVALID_PUBLIC_KEY_LENGTH


class IntegerOutOfRange(ValidationError):
    kind = ErrorKind.INTEGER_OUT_OF_RANGE


# ============ Configuration ============


class ConfigurationError(CustosError):
    pass


class ChainNotRegistered(ConfigurationError):
    kind = ErrorKind.CHAIN_NOT_REGISTERED


class NetworkNotRegistered(ConfigurationError):
    kind = ErrorKind.NETWORK_NOT_REGISTERED


class CapacityExceeded(ConfigurationError):
    kind = ErrorKind.CAPACITY_EXCEEDED


class MissingKey(ConfigurationError):
    kind = ErrorKind.MISSING_KEY


# ============ Transport ============


class TransportError(CustosError):
    pass


class NetworkFailure(TransportError):
    kind = ErrorKind.NETWORK_FAILURE


class RpcError(TransportError):
    """The endpoint answered with a JSON-RPC ``error`` member."""

    kind = ErrorKind.RPC_ERROR


class MalformedResponse(TransportError):
    kind = ErrorKind.MALFORMED_RESPONSE


class SigningFailed(TransportError):
    kind = ErrorKind.SIGNING_FAILED


class BroadcastExhausted(TransportError):
    """Both recovery-id candidates were rejected by the transport."""

    kind = ErrorKind.BROADCAST_EXHAUSTED

    def __init__(self, message: str, last_error: Optional[TransportError] = None, **context: Any) -> None:
        super().__init__(message, last_error=last_error, **context)
