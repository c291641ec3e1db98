"""
Custos CLI

Command-line interface for the Custos custodial transaction engine.

Keys live in ~/.custos/.env; chain and network configs plus the
transaction history live in ~/.custos/registry.json.

Commands:
  keygen    - Generate custodial EVM and Solana keys
  address   - Show custodial addresses
  chain     - Register / list account chains
  network   - Register / list Solana-style networks
  balance   - Native balance on an account chain
  send      - Native transfer on an account chain
  token     - ERC-20 balance and transfer
  swap      - Quote / execute single-pool swaps
  sol       - Balances and transfers on Solana-style networks
  history   - Show submitted transactions
"""

from __future__ import annotations

import logging
import sys

import click

from . import __version__
from .chain.finalize import RecoveryStrategy


# ============ Banner ============


def _print_banner() -> None:
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("          C U S T O S", fg="bright_white", bold=True)
        + click.style(f"          v{__version__}", dim=True)
    )
    click.secho("        ─── Custodial Transaction Engine ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="custos")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic and signing steps")
@click.option(
    "--recovery",
    type=click.Choice([s.value for s in RecoveryStrategy]),
    default=RecoveryStrategy.LOCAL.value,
    show_default=True,
    help="How to find the recovery id of EVM signatures",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, recovery: str) -> None:
    """Custos - custodial wallet for EVM and Solana-style chains."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["recovery"] = recovery
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Commands ============

from .commands.chains import chain, network
from .commands.evm import balance, send, swap, token
from .commands.history import history
from .commands.keys import address, keygen
from .commands.sol import sol

cli.add_command(keygen)
cli.add_command(address)
cli.add_command(chain)
cli.add_command(network)
cli.add_command(balance)
cli.add_command(send)
cli.add_command(token)
cli.add_command(swap)
cli.add_command(sol)
cli.add_command(history)


# ============ Entry Points ============


def main() -> None:
    """Custos CLI entry point."""
    # Ensure UTF-8 output on Windows (for box-drawing symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
