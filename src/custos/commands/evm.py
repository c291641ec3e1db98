"""
EVM - balances, transfers, ERC-20 tokens and swaps on account chains.

Native amounts are given in whole coins (``--amount 0.01``) unless
``--raw`` is passed. Token amounts are raw base units unless
``--decimals`` says how to scale them.

Examples:
  custos balance --chain-id 8453
  custos send --chain-id 8453 --to 0x... --amount 0.01
  custos token transfer --chain-id 8453 --token 0x... --to 0x... --amount 5 --decimals 6
  custos swap quote --chain-id 8453 --quoter 0x... --token-in 0x... --token-out 0x... --amount 1000000
"""

from __future__ import annotations

from typing import Optional

import click

from ..chain.abi import FEE_TIERS
from ..codec.numeric import format_units, parse_units
from ..errors import CustosError
from .common import fail, open_wallet, show_submission


def _base_units(amount: str, decimals: Optional[int]) -> str:
    if decimals is None:
        return amount
    return str(parse_units(amount, decimals))


_fee_option = click.option(
    "--fee",
    default="3000",
    show_default=True,
    type=click.Choice([str(tier) for tier in FEE_TIERS]),
    callback=lambda _ctx, _param, value: int(value),
    help="Pool fee tier in hundredths of a basis point",
)


# ---------------------------------------------------------------------------
# Native coin
# ---------------------------------------------------------------------------

@click.command()
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--address", default=None, help="Account to query (default: custodial address)")
@click.pass_context
def balance(ctx: click.Context, chain_id: int, address: Optional[str]) -> None:
    """Show the native balance on an account chain."""
    try:
        with open_wallet(ctx) as wallet:
            config = wallet.registry.chain(chain_id)
            who = address or wallet.evm_address()
            wei = wallet.native_balance(chain_id, who)
    except CustosError as exc:
        fail(exc)

    click.echo(click.style("  Chain:   ", dim=True) + f"{config.name} ({chain_id})")
    click.echo(click.style("  Address: ", dim=True) + who)
    click.echo(
        click.style("  Balance: ", dim=True)
        + click.style(f"{format_units(wei, config.decimals)} {config.native_symbol}", fg="bright_white", bold=True)
        + click.style(f"  ({wei} base units)", dim=True)
    )


@click.command()
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--to", "recipient", required=True, help="Recipient address (0x...)")
@click.option("--amount", required=True, help="Amount in whole coins (e.g. 0.01)")
@click.option("--raw", is_flag=True, help="Treat --amount as base units (wei)")
@click.option("--gas-limit", default=None, type=int, help="Override the gas limit")
@click.pass_context
def send(
    ctx: click.Context,
    chain_id: int,
    recipient: str,
    amount: str,
    raw: bool,
    gas_limit: Optional[int],
) -> None:
    """Send the native coin of an account chain."""
    try:
        with open_wallet(ctx) as wallet:
            config = wallet.registry.chain(chain_id)
            wei = amount if raw else str(parse_units(amount, config.decimals))
            click.echo(f"  Sending {wei} base units to {recipient} on {config.name}...")
            tx_hash = wallet.send_native(chain_id, recipient, wei, gas_limit=gas_limit)
    except CustosError as exc:
        fail(exc)

    show_submission("Transaction submitted", tx_hash)


# ---------------------------------------------------------------------------
# ERC-20 tokens
# ---------------------------------------------------------------------------

@click.group()
def token() -> None:
    """ERC-20 token balance and transfer."""


@token.command("balance")
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--token", "token_address", required=True, help="Token contract address")
@click.option("--owner", default=None, help="Account to query (default: custodial address)")
@click.option("--decimals", default=None, type=int, help="Token decimals for display")
@click.pass_context
def token_balance(
    ctx: click.Context,
    chain_id: int,
    token_address: str,
    owner: Optional[str],
    decimals: Optional[int],
) -> None:
    """Show an ERC-20 balance."""
    try:
        with open_wallet(ctx) as wallet:
            value = wallet.token_balance(chain_id, token_address, owner)
    except CustosError as exc:
        fail(exc)

    shown = str(value) if decimals is None else format_units(value, decimals)
    click.echo(click.style("  Token:   ", dim=True) + token_address)
    click.echo(click.style("  Balance: ", dim=True) + click.style(shown, fg="bright_white", bold=True))


@token.command("transfer")
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--token", "token_address", required=True, help="Token contract address")
@click.option("--to", "recipient", required=True, help="Recipient address (0x...)")
@click.option("--amount", required=True, help="Amount (base units unless --decimals is given)")
@click.option("--decimals", default=None, type=int, help="Token decimals; scales --amount")
@click.option("--gas-limit", default=None, type=int, help="Override the gas limit")
@click.pass_context
def token_transfer(
    ctx: click.Context,
    chain_id: int,
    token_address: str,
    recipient: str,
    amount: str,
    decimals: Optional[int],
    gas_limit: Optional[int],
) -> None:
    """Transfer ERC-20 tokens from the custodial address."""
    try:
        raw_amount = _base_units(amount, decimals)
        with open_wallet(ctx) as wallet:
            tx_hash = wallet.send_token(chain_id, token_address, recipient, raw_amount, gas_limit=gas_limit)
    except CustosError as exc:
        fail(exc)

    show_submission("Token transfer submitted", tx_hash)


# ---------------------------------------------------------------------------
# Swaps (exact input, single pool)
# ---------------------------------------------------------------------------

@click.group()
def swap() -> None:
    """Quote and execute single-pool swaps."""


@swap.command("quote")
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--quoter", required=True, help="Quoter contract address")
@click.option("--token-in", required=True, help="Input token address")
@click.option("--token-out", required=True, help="Output token address")
@click.option("--amount", required=True, help="Input amount in base units")
@_fee_option
@click.pass_context
def swap_quote(
    ctx: click.Context,
    chain_id: int,
    quoter: str,
    token_in: str,
    token_out: str,
    amount: str,
    fee: int,
) -> None:
    """Quote the output of an exact-input swap."""
    try:
        with open_wallet(ctx) as wallet:
            quote = wallet.quote_swap(chain_id, quoter, token_in, token_out, amount, fee=fee)
    except CustosError as exc:
        fail(exc)

    click.echo(click.style("  Amount out:    ", dim=True) + click.style(str(quote["amount_out"]), fg="bright_white", bold=True))
    click.echo(click.style("  Ticks crossed: ", dim=True) + str(quote["initialized_ticks_crossed"]))
    click.echo(click.style("  Gas estimate:  ", dim=True) + str(quote["gas_estimate"]))


@swap.command("execute")
@click.option("--chain-id", required=True, type=int, help="Registered chain id")
@click.option("--router", required=True, help="Swap router contract address")
@click.option("--token-in", required=True, help="Input token address")
@click.option("--token-out", required=True, help="Output token address")
@click.option("--amount", required=True, help="Input amount in base units")
@click.option("--min-out", required=True, help="Minimum output amount in base units")
@click.option("--recipient", default=None, help="Output recipient (default: custodial address)")
@_fee_option
@click.option("--gas-limit", default=None, type=int, help="Override the gas limit")
@click.pass_context
def swap_execute(
    ctx: click.Context,
    chain_id: int,
    router: str,
    token_in: str,
    token_out: str,
    amount: str,
    min_out: str,
    recipient: Optional[str],
    fee: int,
    gas_limit: Optional[int],
) -> None:
    """Execute an exact-input swap. The router must already be approved."""
    try:
        with open_wallet(ctx) as wallet:
            tx_hash = wallet.execute_swap(
                chain_id,
                router,
                token_in,
                token_out,
                amount,
                min_out,
                fee=fee,
                recipient=recipient,
                gas_limit=gas_limit,
            )
    except CustosError as exc:
        fail(exc)

    show_submission("Swap submitted", tx_hash)
