"""Shared fixtures: in-memory keys, a scripted JSON-RPC transport, a temp registry."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any, Callable

import base58
import pytest

from custos.keys.oracle import Ed25519Oracle, KeyRing, Secp256k1Oracle
from custos.models import ChainConfig, NetworkConfig
from custos.registry import Registry
from custos.utils import keccak256

EVM_PRIVATE_KEY = "0x" + "4c" * 32
SOLANA_SEED = bytes(range(32))
BLOCKHASH = base58.b58encode(bytes([7]) * 32).decode("ascii")
BASE_RPC = "https://base.example/rpc"
DEVNET_RPC = "https://devnet.example/rpc"


class FakeTransport:
    """
    Scripted JSON-RPC transport.

    ``handlers`` maps a method name to either a plain result value or a
    callable taking the params and returning the full response dict
    (``{"result": ...}`` or ``{"error": ...}``).
    """

    def __init__(self, handlers: dict[str, Any]) -> None:
        self.handlers = handlers
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def call(self, endpoint: str, request: dict[str, Any]) -> dict[str, Any]:
        self.calls.append((endpoint, request))
        handler = self.handlers[request["method"]]
        if callable(handler):
            return handler(request["params"])
        return {"jsonrpc": "2.0", "id": request["id"], "result": handler}

    def methods(self) -> list[str]:
        return [request["method"] for _, request in self.calls]

    def params(self, method: str) -> list[list[Any]]:
        return [request["params"] for _, request in self.calls if request["method"] == method]


def accept_raw_transaction(params: list[Any]) -> dict[str, Any]:
    raw = bytes.fromhex(params[0][2:])
    return {"result": "0x" + keccak256(raw).hex()}


def accept_solana_transaction(params: list[Any]) -> dict[str, Any]:
    wire = base64.b64decode(params[0])
    return {"result": base58.b58encode(wire[1:65]).decode("ascii")}


def _reject(message: str = "invalid sender", code: int = -32000) -> Callable[[list[Any]], dict[str, Any]]:
    return lambda _params: {"error": {"code": code, "message": message}}


@pytest.fixture()
def reject() -> Callable[..., Callable[[list[Any]], dict[str, Any]]]:
    """Factory for handlers answering with a JSON-RPC error."""
    return _reject


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport(
        {
            "eth_getTransactionCount": "0x5",
            "eth_gasPrice": hex(10 * 10**9),
            "eth_getBalance": hex(2 * 10**18),
            "eth_call": "0x" + (1000).to_bytes(32, "big").hex(),
            "eth_sendRawTransaction": accept_raw_transaction,
            "getLatestBlockhash": {"context": {"slot": 1}, "value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 10}},
            "getBalance": {"context": {"slot": 1}, "value": 5_000_000},
            "getTokenAccountBalance": {"context": {"slot": 1}, "value": {"amount": "250", "decimals": 6}},
            "sendTransaction": accept_solana_transaction,
        }
    )


@pytest.fixture()
def oracle() -> KeyRing:
    return KeyRing(
        {
            "evm": Secp256k1Oracle({"evm": EVM_PRIVATE_KEY}),
            "solana": Ed25519Oracle({"solana": SOLANA_SEED}),
        }
    )


@pytest.fixture()
def registry(tmp_path: Path) -> Registry:
    registry = Registry(path=tmp_path / "registry.json")
    registry.register_chain(ChainConfig(chain_id=8453, name="Base", rpc_url=BASE_RPC))
    registry.register_network(NetworkConfig(name="devnet", rpc_url=DEVNET_RPC))
    return registry
