"""
History - list transactions the network accepted, newest first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import click

from .common import load_registry


@click.command()
@click.option("--limit", default=50, show_default=True, type=click.IntRange(min=1), help="Maximum records")
@click.option("--chain", "chain_ref", default=None, help="Filter by chain reference (evm:<id> or solana:<name>)")
def history(limit: int, chain_ref: Optional[str]) -> None:
    """Show submitted transactions."""
    records = load_registry().transactions(limit=limit, chain=chain_ref)
    if not records:
        click.echo("No transactions recorded.")
        return

    for record in records:
        when = datetime.fromtimestamp(record.timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        asset = f" {record.asset}" if record.asset else ""
        click.echo(
            click.style(f"  #{record.id:<4} ", fg="bright_white", bold=True)
            + click.style(f"{when}  {record.chain:<16} ", dim=True)
            + f"{record.amount}{asset} -> {record.to}"
        )
        click.echo(click.style(f"        {record.status}", dim=True))
