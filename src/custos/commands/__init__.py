"""
Commands - CLI command implementations for Custos.

Each module groups related commands:
- keys:    Generate keys and show the custodial addresses
- chains:  Register account chains and Solana-style networks
- evm:     Balances, transfers, tokens and swaps on account chains
- sol:     Balances and transfers on Solana-style networks
- history: Show submitted transactions
"""
