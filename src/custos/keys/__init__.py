"""
Keys - public-key handling and signing oracles.

- secp256k1: point decompression, account-chain addresses, recovery
- ed25519: Solana-style addresses and curve membership
- oracle: the signing-oracle protocol and in-memory implementations
"""
