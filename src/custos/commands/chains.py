"""
Chains - register account chains and Solana-style networks.

Re-adding a known chain id (or network name) replaces its config and
does not count against the registry capacity.
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import CustosError
from ..models import ChainConfig, NetworkConfig, chain_name
from .common import fail, load_registry


@click.group()
def chain() -> None:
    """Manage account-chain (EVM) configurations."""


@chain.command("add")
@click.option("--chain-id", required=True, type=int, help="Numeric chain id (e.g. 8453)")
@click.option("--rpc-url", required=True, help="JSON-RPC endpoint")
@click.option("--name", default=None, help="Display name (default: well-known name for the id)")
@click.option("--symbol", default="ETH", show_default=True, help="Native coin symbol")
@click.option("--decimals", default=18, show_default=True, type=int, help="Native coin decimals")
def chain_add(chain_id: int, rpc_url: str, name: Optional[str], symbol: str, decimals: int) -> None:
    """Register (or update) an account chain."""
    config = ChainConfig(
        chain_id=chain_id,
        name=name or chain_name(chain_id),
        rpc_url=rpc_url,
        native_symbol=symbol,
        decimals=decimals,
    )
    try:
        load_registry().register_chain(config)
    except CustosError as exc:
        fail(exc)
    click.echo(f"Chain {chain_id} ({config.name}) registered.")


@chain.command("list")
def chain_list() -> None:
    """List registered account chains."""
    chains = load_registry().list_chains()
    if not chains:
        click.echo("No chains configured.")
        return
    for config in chains:
        click.echo(
            click.style(f"  {config.chain_id:>10}  ", fg="bright_white", bold=True)
            + f"{config.name} ({config.native_symbol})"
            + click.style(f"  {config.rpc_url}", dim=True)
        )


@click.group()
def network() -> None:
    """Manage Solana-style network configurations."""


@network.command("add")
@click.option("--name", required=True, help="Network name (e.g. mainnet, devnet)")
@click.option("--rpc-url", required=True, help="JSON-RPC endpoint")
def network_add(name: str, rpc_url: str) -> None:
    """Register (or update) a Solana-style network."""
    try:
        load_registry().register_network(NetworkConfig(name=name, rpc_url=rpc_url))
    except CustosError as exc:
        fail(exc)
    click.echo(f"Network {name!r} registered.")


@network.command("list")
def network_list() -> None:
    """List registered Solana-style networks."""
    networks = load_registry().list_networks()
    if not networks:
        click.echo("No networks configured.")
        return
    for config in networks:
        click.echo(
            click.style(f"  {config.name:<10}  ", fg="bright_white", bold=True)
            + click.style(config.rpc_url, dim=True)
        )
