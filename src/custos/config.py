"""
Local configuration.

Secrets live in ``~/.custos/.env`` (override the directory with
``CUSTOS_HOME``); the registry lives next to it in ``registry.json``.
Values already present in the process environment win over the file.

Recognised keys:
- EVM_PRIVATE_KEY: 0x-prefixed secp256k1 private key
- SOLANA_PRIVATE_KEY: hex Ed25519 seed or base-58 64-byte keypair
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values

from .errors import MissingKey

EVM_KEY_ENV = "EVM_PRIVATE_KEY"
SOLANA_KEY_ENV = "SOLANA_PRIVATE_KEY"

EVM_KEY_HANDLE = "evm"
SOLANA_KEY_HANDLE = "solana"


def custos_home() -> Path:
    return Path(os.environ.get("CUSTOS_HOME") or Path.home() / ".custos")


def env_path() -> Path:
    return custos_home() / ".env"


def registry_path() -> Path:
    return custos_home() / "registry.json"


def save_secret(name: str, value: str, path: Optional[Path] = None) -> Path:
    """
    Store a secret in the .env file, keeping any other entries.

    Returns:
        Path to the saved .env file
    """
    path = path or env_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    existing = {k: v for k, v in dotenv_values(path).items() if v is not None} if path.exists() else {}
    existing[name] = value

    lines = [f"{k}={v}" for k, v in existing.items()]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        path.chmod(0o600)

    return path


def load_secret(name: str, path: Optional[Path] = None) -> str:
    """
    Load a secret from the environment or the .env file.

    Raises:
        MissingKey: If the secret is set nowhere
    """
    value = os.environ.get(name)
    if not value:
        path = path or env_path()
        if path.exists():
            value = dotenv_values(path).get(name)
    if not value:
        raise MissingKey(
            f"{name} not found. Run 'custos keygen' or set {name} in {path or env_path()}",
            key=name,
        )
    return value.strip()


def load_evm_private_key(path: Optional[Path] = None) -> str:
    private_key = load_secret(EVM_KEY_ENV, path)
    if not private_key.startswith("0x"):
        private_key = "0x" + private_key
    return private_key


def load_solana_secret(path: Optional[Path] = None) -> str:
    return load_secret(SOLANA_KEY_ENV, path)
