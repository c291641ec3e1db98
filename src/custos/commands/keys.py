"""
Keys - create the custodial keys and show their addresses.

``keygen`` writes ``EVM_PRIVATE_KEY`` and ``SOLANA_PRIVATE_KEY`` to
``~/.custos/.env``. Existing keys are kept unless ``--force`` is given.
"""

from __future__ import annotations

import sys

import click

from ..config import EVM_KEY_ENV, EVM_KEY_HANDLE, SOLANA_KEY_ENV, SOLANA_KEY_HANDLE, env_path, save_secret
from ..errors import CustosError, MissingKey
from ..keys.ed25519 import solana_address
from ..keys.oracle import generate_evm_key, generate_solana_key
from ..keys.secp256k1 import evm_address
from .common import has_secret, fail, load_key_ring


@click.command()
@click.option("--force", is_flag=True, help="Replace existing keys (irreversible)")
def keygen(force: bool) -> None:
    """Generate the custodial EVM and Solana keys."""
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("Keygen", fg="bright_white", bold=True)
        + click.style(" ─── Create custodial keys", fg="cyan")
    )
    click.echo()

    if force or not has_secret(EVM_KEY_ENV):
        private_key, address = generate_evm_key()
        save_secret(EVM_KEY_ENV, private_key)
        click.echo(click.style("  EVM:    ", dim=True) + click.style(address, fg="bright_white") + " (new)")
    else:
        click.secho("  EVM key already present, keeping it.", dim=True)

    if force or not has_secret(SOLANA_KEY_ENV):
        seed, address = generate_solana_key()
        save_secret(SOLANA_KEY_ENV, seed)
        click.echo(click.style("  Solana: ", dim=True) + click.style(address, fg="bright_white") + " (new)")
    else:
        click.secho("  Solana key already present, keeping it.", dim=True)

    click.echo()
    click.echo(click.style("  Config: ", dim=True) + click.style(str(env_path()), fg="bright_white"))
    click.secho(f"  IMPORTANT: Back up {env_path()}. Loss is irreversible.", fg="yellow", bold=True)
    click.echo()


@click.command()
def address() -> None:
    """Show the custodial addresses."""
    try:
        ring = load_key_ring()
    except CustosError as exc:
        fail(exc)

    found = False
    for label, handle, derive in (
        ("EVM:    ", EVM_KEY_HANDLE, evm_address),
        ("Solana: ", SOLANA_KEY_HANDLE, solana_address),
    ):
        try:
            value = derive(ring.public_key(handle))
        except MissingKey:
            value = None
        if value is None:
            click.echo(click.style(label, dim=True) + click.style("not configured", fg="yellow"))
        else:
            found = True
            click.echo(click.style(label, dim=True) + value)

    if not found:
        click.echo("Run 'custos keygen' to create keys.")
        sys.exit(1)
