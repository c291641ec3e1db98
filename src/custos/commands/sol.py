"""
Sol - balances and transfers on Solana-style networks.

SOL amounts are whole coins (9 decimals) unless ``--raw`` is passed.
Token amounts are raw base units unless ``--decimals`` is given.
"""

from __future__ import annotations

from typing import Optional

import click

from ..codec.numeric import format_units, parse_units
from ..errors import CustosError
from .common import fail, open_wallet, show_submission

LAMPORTS_DECIMALS = 9


@click.group()
def sol() -> None:
    """Solana-style network operations.

    \b
    Examples:
      custos sol balance --network devnet
      custos sol send --network devnet --to <address> --amount 0.5
      custos sol token-transfer --network devnet --mint <mint> --to <owner> --amount 100 --create-account
    """


@sol.command("balance")
@click.option("--network", required=True, help="Registered network name")
@click.option("--address", default=None, help="Account to query (default: custodial address)")
@click.pass_context
def sol_balance(ctx: click.Context, network: str, address: Optional[str]) -> None:
    """Show the SOL balance of an account."""
    try:
        with open_wallet(ctx) as wallet:
            who = address or wallet.solana_address()
            lamports = wallet.sol_balance(network, who)
    except CustosError as exc:
        fail(exc)

    click.echo(click.style("  Network: ", dim=True) + network)
    click.echo(click.style("  Address: ", dim=True) + who)
    click.echo(
        click.style("  Balance: ", dim=True)
        + click.style(f"{format_units(lamports, LAMPORTS_DECIMALS)} SOL", fg="bright_white", bold=True)
        + click.style(f"  ({lamports} lamports)", dim=True)
    )


@sol.command("send")
@click.option("--network", required=True, help="Registered network name")
@click.option("--to", "recipient", required=True, help="Recipient address (base-58)")
@click.option("--amount", required=True, help="Amount in SOL (e.g. 0.5)")
@click.option("--raw", is_flag=True, help="Treat --amount as lamports")
@click.pass_context
def sol_send(ctx: click.Context, network: str, recipient: str, amount: str, raw: bool) -> None:
    """Send SOL from the custodial address."""
    try:
        lamports = amount if raw else str(parse_units(amount, LAMPORTS_DECIMALS))
        with open_wallet(ctx) as wallet:
            signature = wallet.send_sol(network, recipient, lamports)
    except CustosError as exc:
        fail(exc)

    show_submission("Transaction submitted", signature)


@sol.command("token-balance")
@click.option("--network", required=True, help="Registered network name")
@click.option("--mint", required=True, help="Token mint address")
@click.option("--owner", default=None, help="Wallet owning the token account (default: custodial address)")
@click.option("--decimals", default=None, type=int, help="Token decimals for display")
@click.pass_context
def sol_token_balance(
    ctx: click.Context,
    network: str,
    mint: str,
    owner: Optional[str],
    decimals: Optional[int],
) -> None:
    """Show the balance of an associated token account."""
    try:
        with open_wallet(ctx) as wallet:
            account = wallet.token_account(mint, owner)
            value = wallet.spl_balance(network, mint, owner)
    except CustosError as exc:
        fail(exc)

    shown = str(value) if decimals is None else format_units(value, decimals)
    click.echo(click.style("  Mint:    ", dim=True) + mint)
    click.echo(click.style("  Account: ", dim=True) + account)
    click.echo(click.style("  Balance: ", dim=True) + click.style(shown, fg="bright_white", bold=True))


@sol.command("token-transfer")
@click.option("--network", required=True, help="Registered network name")
@click.option("--mint", required=True, help="Token mint address")
@click.option("--to", "recipient", required=True, help="Recipient wallet (owner) address")
@click.option("--amount", required=True, help="Amount (base units unless --decimals is given)")
@click.option("--decimals", default=None, type=int, help="Token decimals; scales --amount")
@click.option("--create-account", is_flag=True, help="Create the recipient's token account if missing")
@click.pass_context
def sol_token_transfer(
    ctx: click.Context,
    network: str,
    mint: str,
    recipient: str,
    amount: str,
    decimals: Optional[int],
    create_account: bool,
) -> None:
    """Transfer tokens between associated token accounts."""
    try:
        raw_amount = amount if decimals is None else str(parse_units(amount, decimals))
        with open_wallet(ctx) as wallet:
            signature = wallet.send_spl(
                network,
                mint,
                recipient,
                raw_amount,
                create_destination_account=create_account,
            )
    except CustosError as exc:
        fail(exc)

    show_submission("Token transfer submitted", signature)
