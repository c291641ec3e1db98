"""
Wallet - top-level operations for both chain families.

Each send is a sequential pipeline: nonce (or blockhash) lookup, fee
lookup, one signing round trip, then one or two broadcasts. Inputs are
validated and the chain/network is resolved before the first network
call. A ``TransactionRecord`` is written only after the node accepted
the transaction.

Operations against the same (chain, account) pair must not overlap:
two in-flight sends would observe the same nonce. ``Wallet`` does not
serialise them itself.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from .chain import abi, rpc
from .chain.evm import (
    GAS_LIMIT_NATIVE,
    GAS_LIMIT_SWAP,
    GAS_LIMIT_TOKEN_TRANSFER,
    Eip1559Transaction,
    fee_parameters,
)
from .chain.finalize import RecoveryStrategy, finalize_evm, finalize_solana
from .chain.solana import associated_token_address_str, build_token_transfer_message, build_transfer_message
from .codec.numeric import decimal_to_bytes, parse_decimal
from .config import EVM_KEY_HANDLE, SOLANA_KEY_HANDLE
from .errors import InvalidAddress, ZeroAmount
from .keys.ed25519 import parse_solana_address, solana_address
from .keys.oracle import SigningOracle
from .keys.secp256k1 import evm_address, parse_address
from .models import ChainConfig, NetworkConfig
from .registry import Registry

logger = logging.getLogger(__name__)


def _require_positive(amount: str) -> int:
    value = parse_decimal(amount)
    if value == 0:
        raise ZeroAmount("Amount must be greater than zero.", value=amount)
    return value


class Wallet:
    """Custodial wallet bound to one registry, oracle and transport."""

    def __init__(
        self,
        registry: Registry,
        oracle: SigningOracle,
        transport: rpc.Transport,
        evm_key_handle: str = EVM_KEY_HANDLE,
        solana_key_handle: str = SOLANA_KEY_HANDLE,
        recovery: RecoveryStrategy = RecoveryStrategy.LOCAL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.registry = registry
        self.oracle = oracle
        self.transport = transport
        self.evm_key_handle = evm_key_handle
        self.solana_key_handle = solana_key_handle
        self.recovery = recovery
        self.clock = clock
        self._addresses: dict[str, str] = {}

    # ============ Identity ============

    def evm_address(self) -> str:
        """Account-chain address of the custodial key (cached)."""
        if self.evm_key_handle not in self._addresses:
            public_key = self.oracle.public_key(self.evm_key_handle)
            self._addresses[self.evm_key_handle] = evm_address(public_key)
        return self._addresses[self.evm_key_handle]

    def solana_address(self) -> str:
        """Solana-style address of the custodial key (cached)."""
        if self.solana_key_handle not in self._addresses:
            public_key = self.oracle.public_key(self.solana_key_handle)
            self._addresses[self.solana_key_handle] = solana_address(public_key)
        return self._addresses[self.solana_key_handle]

    # ============ Account chains ============

    def native_balance(self, chain_id: int, address: Optional[str] = None) -> int:
        config = self.registry.chain(chain_id)
        if address is not None:
            parse_address(address)
        return rpc.get_balance(self.transport, config.rpc_url, address or self.evm_address())

    def token_balance(self, chain_id: int, token: str, owner: Optional[str] = None) -> int:
        config = self.registry.chain(chain_id)
        parse_address(token)
        data = abi.encode_balance_of(owner or self.evm_address())
        return abi.decode_uint256(rpc.eth_call(self.transport, config.rpc_url, token, data))

    def send_native(self, chain_id: int, to: str, amount_wei: str, gas_limit: Optional[int] = None) -> str:
        """Send the chain's native coin. Returns the transaction hash."""
        config = self.registry.chain(chain_id)
        to_bytes = parse_address(to)
        _require_positive(amount_wei)
        value = decimal_to_bytes(amount_wei)

        tx_hash = self._submit_evm(config, to_bytes, value, b"", gas_limit or GAS_LIMIT_NATIVE)
        self.registry.record_submission(
            chain=config.reference,
            reference=tx_hash,
            to=to,
            amount=amount_wei,
            timestamp=self.clock(),
            asset=config.native_symbol,
        )
        logger.info("Native transfer of %s wei to %s on %s: %s", amount_wei, to, config.name, tx_hash)
        return tx_hash

    def send_token(
        self, chain_id: int, token: str, to: str, amount: str, gas_limit: Optional[int] = None
    ) -> str:
        """ERC-20 transfer. Returns the transaction hash."""
        config = self.registry.chain(chain_id)
        token_bytes = parse_address(token)
        _require_positive(amount)
        data = abi.encode_transfer(to, amount)

        tx_hash = self._submit_evm(config, token_bytes, b"", data, gas_limit or GAS_LIMIT_TOKEN_TRANSFER)
        self.registry.record_submission(
            chain=config.reference,
            reference=tx_hash,
            to=to,
            amount=amount,
            timestamp=self.clock(),
            data="0x" + data.hex(),
            asset=token,
        )
        return tx_hash

    def quote_swap(
        self,
        chain_id: int,
        quoter: str,
        token_in: str,
        token_out: str,
        amount_in: str,
        fee: int = 3000,
    ) -> dict[str, int]:
        """Quote an exact-input single-pool swap through a quoter contract."""
        config = self.registry.chain(chain_id)
        parse_address(quoter)
        _require_positive(amount_in)
        abi.fee_word(fee)
        data = abi.encode_quote_exact_input_single(token_in, token_out, amount_in, fee)
        return abi.decode_quote(rpc.eth_call(self.transport, config.rpc_url, quoter, data))

    def execute_swap(
        self,
        chain_id: int,
        router: str,
        token_in: str,
        token_out: str,
        amount_in: str,
        amount_out_minimum: str,
        fee: int = 3000,
        recipient: Optional[str] = None,
        gas_limit: Optional[int] = None,
    ) -> str:
        """Exact-input single-pool swap. The router must already hold an allowance."""
        config = self.registry.chain(chain_id)
        router_bytes = parse_address(router)
        parse_address(token_in)
        parse_address(token_out)
        _require_positive(amount_in)
        parse_decimal(amount_out_minimum)
        abi.fee_word(fee)
        if recipient is not None:
            parse_address(recipient)
        data = abi.encode_exact_input_single(
            token_in,
            token_out,
            fee,
            recipient or self.evm_address(),
            amount_in,
            amount_out_minimum,
        )

        tx_hash = self._submit_evm(config, router_bytes, b"", data, gas_limit or GAS_LIMIT_SWAP)
        self.registry.record_submission(
            chain=config.reference,
            reference=tx_hash,
            to=router,
            amount=amount_in,
            timestamp=self.clock(),
            data="0x" + data.hex(),
            asset=token_in,
        )
        return tx_hash

    def _submit_evm(self, config: ChainConfig, to: bytes, value: bytes, data: bytes, gas_limit: int) -> str:
        sender = self.evm_address()
        nonce = rpc.get_nonce(self.transport, config.rpc_url, sender)
        gas_price = rpc.get_gas_price(self.transport, config.rpc_url)
        priority_fee, max_fee = fee_parameters(gas_price)

        tx = Eip1559Transaction(
            chain_id=config.chain_id,
            nonce=nonce,
            max_priority_fee_per_gas=priority_fee,
            max_fee_per_gas=max_fee,
            gas_limit=gas_limit,
            to=to,
            value=value,
            data=data,
        )
        logger.debug("Built EIP-1559 tx for chain %d, nonce %d", config.chain_id, nonce)
        return finalize_evm(
            tx,
            self.oracle,
            self.evm_key_handle,
            self.transport,
            config.rpc_url,
            signer_address=sender,
            strategy=self.recovery,
        )

    # ============ Solana-style chains ============

    def sol_balance(self, network: str, address: Optional[str] = None) -> int:
        config = self.registry.network(network)
        if address is not None:
            parse_solana_address(address)
        return rpc.get_sol_balance(self.transport, config.rpc_url, address or self.solana_address())

    def token_account(self, mint: str, owner: Optional[str] = None, legacy: bool = False) -> str:
        """Associated token account of ``owner`` (default: this wallet) for ``mint``."""
        return associated_token_address_str(owner or self.solana_address(), mint, legacy=legacy)

    def spl_balance(self, network: str, mint: str, owner: Optional[str] = None) -> int:
        config = self.registry.network(network)
        account = self.token_account(mint, owner)
        return rpc.get_token_account_balance(self.transport, config.rpc_url, account)

    def send_sol(self, network: str, to: str, lamports: str) -> str:
        """Native transfer. Returns the transaction signature."""
        config = self.registry.network(network)
        parse_solana_address(to)
        amount = _require_positive(lamports)

        owner = self.solana_address()
        blockhash = rpc.get_latest_blockhash(self.transport, config.rpc_url)
        message = build_transfer_message(owner, to, amount, blockhash)
        signature = finalize_solana(message, self.oracle, self.solana_key_handle, self.transport, config.rpc_url)
        self._record_solana(config, signature, to, lamports, asset="SOL")
        return signature

    def send_spl(
        self,
        network: str,
        mint: str,
        to_owner: str,
        amount: str,
        create_destination_account: bool = False,
    ) -> str:
        """Token transfer between associated accounts. Returns the signature."""
        config = self.registry.network(network)
        parse_solana_address(mint)
        parse_solana_address(to_owner)
        value = _require_positive(amount)

        owner = self.solana_address()
        blockhash = rpc.get_latest_blockhash(self.transport, config.rpc_url)
        message = build_token_transfer_message(
            owner,
            to_owner,
            mint,
            value,
            blockhash,
            create_destination_account=create_destination_account,
        )
        signature = finalize_solana(message, self.oracle, self.solana_key_handle, self.transport, config.rpc_url)
        self._record_solana(config, signature, to_owner, amount, asset=mint)
        return signature

    def _record_solana(self, config: NetworkConfig, signature: str, to: str, amount: str, asset: str) -> None:
        self.registry.record_submission(
            chain=config.reference,
            reference=signature,
            to=to,
            amount=amount,
            timestamp=self.clock(),
            asset=asset,
        )

    # ============ Cross-chain ============

    def transfer(self, target: str, to: str, amount: str) -> str:
        """
        Native transfer on any configured chain.

        Args:
            target: ``evm:<chain id>`` or ``solana:<network name>``
            to: Recipient in the target chain's address format
            amount: Amount in base units (wei / lamports)
        """
        family, _, name = target.partition(":")
        if family == "evm" and name.isdigit():
            return self.send_native(int(name), to, amount)
        if family == "solana" and name:
            return self.send_sol(name, to, amount)
        raise InvalidAddress(
            f"Unknown chain reference {target!r}; use 'evm:<chain id>' or 'solana:<network>'.",
            target=target,
        )
