"""
Chain - transaction assembly and submission for both chain families.

- rpc: JSON-RPC transport and typed calls
- evm: EIP-1559 transaction builder
- abi: call-data for token and swap contracts
- solana: compact message builder and associated accounts
- finalize: signing and recovery-id resolution
"""
