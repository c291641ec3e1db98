"""
Shared plumbing for CLI commands: wallet construction and error output.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator, NoReturn

import click

from ..chain.finalize import RecoveryStrategy
from ..chain.rpc import HttpTransport
from ..config import (
    EVM_KEY_ENV,
    EVM_KEY_HANDLE,
    SOLANA_KEY_ENV,
    SOLANA_KEY_HANDLE,
    load_secret,
    registry_path,
)
from ..errors import CustosError
from ..keys.oracle import Ed25519Oracle, KeyRing, Secp256k1Oracle, SigningOracle, parse_solana_secret
from ..registry import Registry
from ..wallet import Wallet


def fail(exc: CustosError) -> NoReturn:
    """Print an error in the house style and exit with status 1."""
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(1)


def load_registry() -> Registry:
    return Registry.load(registry_path())


def load_key_ring() -> KeyRing:
    """
    Build a key ring from whichever secrets are configured.

    A handle without a secret is left unrouted; using it raises
    ``MissingKey`` from the key ring.
    """
    routes: dict[str, SigningOracle] = {}
    if has_secret(EVM_KEY_ENV):
        routes[EVM_KEY_HANDLE] = Secp256k1Oracle({EVM_KEY_HANDLE: load_secret(EVM_KEY_ENV)})
    if has_secret(SOLANA_KEY_ENV):
        seed = parse_solana_secret(load_secret(SOLANA_KEY_ENV))
        routes[SOLANA_KEY_HANDLE] = Ed25519Oracle({SOLANA_KEY_HANDLE: seed})
    return KeyRing(routes)


def has_secret(name: str) -> bool:
    try:
        load_secret(name)
    except CustosError:
        return False
    return True


@contextmanager
def open_wallet(ctx: click.Context) -> Iterator[Wallet]:
    """
    Yield a ``Wallet`` for one command.

    ``ctx.obj`` may carry a ``transport`` (used as-is, e.g. by tests) and
    the ``recovery`` strategy chosen on the command line.
    """
    obj = ctx.find_root().obj or {}
    recovery = RecoveryStrategy(obj.get("recovery", RecoveryStrategy.LOCAL.value))
    registry = load_registry()
    oracle = load_key_ring()

    transport = obj.get("transport")
    if transport is not None:
        yield Wallet(registry, oracle, transport, recovery=recovery)
        return

    with HttpTransport() as http:
        yield Wallet(registry, oracle, http, recovery=recovery)


def show_submission(label: str, reference: str) -> None:
    click.echo()
    click.echo(
        click.style("  ◆ ", fg="green")
        + click.style(label, fg="green", bold=True)
    )
    click.echo(click.style("    Reference: ", dim=True) + click.style(reference, fg="bright_white"))
    click.echo()
