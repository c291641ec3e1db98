__version__ = "0.3.0"

__all__ = [
    # Wallet
    "Wallet",
    "Registry",
    # Models
    "ChainConfig",
    "NetworkConfig",
    "TransactionRecord",
    "TransactionStatus",
    "TxState",
    # Transaction building
    "Eip1559Transaction",
    "SignatureCandidate",
    "Message",
    "Instruction",
    "AccountMeta",
    "associated_token_address",
    "RecoveryStrategy",
    "finalize_evm",
    "finalize_solana",
    # Transport
    "HttpTransport",
    "Transport",
    # Signing
    "SigningOracle",
    "Secp256k1Oracle",
    "Ed25519Oracle",
    "KeyRing",
    # Errors
    "CustosError",
    "ErrorKind",
    "ValidationError",
    "ConfigurationError",
    "TransportError",
    "BroadcastExhausted",
]

from .chain.evm import Eip1559Transaction, SignatureCandidate
from .chain.finalize import RecoveryStrategy, finalize_evm, finalize_solana
from .chain.rpc import HttpTransport, Transport
from .chain.solana import AccountMeta, Instruction, Message, associated_token_address
from .errors import BroadcastExhausted, ConfigurationError, CustosError, ErrorKind, TransportError, ValidationError
from .keys.oracle import Ed25519Oracle, KeyRing, Secp256k1Oracle, SigningOracle
from .models import ChainConfig, NetworkConfig, TransactionRecord, TransactionStatus, TxState
from .registry import Registry
from .wallet import Wallet
