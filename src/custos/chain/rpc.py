"""
JSON-RPC transport and typed RPC helpers.

Lightweight alternative to web3.py / solana-py: httpx for HTTP, plain
dicts for requests. A response carrying a top-level ``error`` member is
a protocol failure no matter what the HTTP status said.
"""

from __future__ import annotations

import base64
import itertools
import logging
from typing import Any, Optional, Protocol

import httpx

from ..errors import MalformedResponse, NetworkFailure, RpcError

logger = logging.getLogger(__name__)

_request_ids = itertools.count(1)


class Transport(Protocol):
    def call(self, endpoint: str, request: dict[str, Any]) -> dict[str, Any]:
        ...


class HttpTransport:
    """POSTs JSON-RPC requests with a shared httpx client."""

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None) -> None:
        self._client = client or httpx.Client(timeout=timeout)

    def call(self, endpoint: str, request: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.post(endpoint, json=request)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise NetworkFailure(
                f"HTTP error calling {request.get('method')}: {exc}",
                endpoint=endpoint,
                method=request.get("method"),
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponse(
                f"Non-JSON response from {endpoint}: {response.text[:200]}",
                endpoint=endpoint,
                method=request.get("method"),
            ) from exc
        if not isinstance(data, dict):
            raise MalformedResponse(f"Unexpected JSON-RPC payload: {data!r}", endpoint=endpoint)
        return data

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpTransport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def rpc_call(transport: Transport, endpoint: str, method: str, params: list) -> Any:
    """
    Make a JSON-RPC call.

    Args:
        transport: Transport used for the round trip
        endpoint: RPC endpoint URL
        method: RPC method name (e.g., "eth_call")
        params: RPC parameters

    Returns:
        Result field from the RPC response

    Raises:
        RpcError: If the response carries an ``error`` member
        MalformedResponse: If the response has no ``result``
    """
    payload = {
        "jsonrpc": "2.0",
        "method": method,
        "params": params,
        "id": next(_request_ids),
    }
    logger.debug("RPC %s -> %s", method, endpoint)
    data = transport.call(endpoint, payload)

    if data.get("error") is not None:
        error = data["error"]
        message = error.get("message") if isinstance(error, dict) else str(error)
        code = error.get("code") if isinstance(error, dict) else None
        raise RpcError(f"RPC error: {message}", method=method, code=code, error=error)

    if "result" not in data:
        raise MalformedResponse(f"No result in {method} response: {data!r}", method=method)
    return data["result"]


def _hex_quantity(value: Any, method: str) -> int:
    if not isinstance(value, str):
        raise MalformedResponse(f"Expected hex quantity from {method}, got {value!r}", method=method)
    try:
        return int(value, 16)
    except ValueError as exc:
        raise MalformedResponse(f"Invalid hex quantity from {method}: {value!r}", method=method) from exc


# ============ Account chains ============


def get_nonce(transport: Transport, endpoint: str, address: str) -> int:
    """Next nonce for an address, counting pending transactions."""
    result = rpc_call(transport, endpoint, "eth_getTransactionCount", [address, "pending"])
    return _hex_quantity(result, "eth_getTransactionCount")


def get_gas_price(transport: Transport, endpoint: str) -> int:
    result = rpc_call(transport, endpoint, "eth_gasPrice", [])
    return _hex_quantity(result, "eth_gasPrice")


def get_balance(transport: Transport, endpoint: str, address: str) -> int:
    """Native balance in wei."""
    result = rpc_call(transport, endpoint, "eth_getBalance", [address, "latest"])
    return _hex_quantity(result, "eth_getBalance")


def eth_call(transport: Transport, endpoint: str, to: str, data: bytes) -> bytes:
    """Execute a read-only call and return the raw return data."""
    result = rpc_call(
        transport,
        endpoint,
        "eth_call",
        [{"to": to, "data": "0x" + data.hex()}, "latest"],
    )
    if not isinstance(result, str) or not result.startswith("0x"):
        raise MalformedResponse(f"Invalid eth_call result: {result!r}", method="eth_call")
    try:
        return bytes.fromhex(result[2:])
    except ValueError as exc:
        raise MalformedResponse(f"Invalid eth_call result: {result!r}", method="eth_call") from exc


def send_raw_transaction(transport: Transport, endpoint: str, raw_tx: bytes) -> str:
    """Broadcast a signed transaction; returns the transaction hash."""
    result = rpc_call(transport, endpoint, "eth_sendRawTransaction", ["0x" + raw_tx.hex()])
    if not isinstance(result, str):
        raise MalformedResponse(f"No tx hash in response: {result!r}", method="eth_sendRawTransaction")
    return result


# ============ Solana-style chains ============


def get_latest_blockhash(transport: Transport, endpoint: str) -> str:
    result = rpc_call(transport, endpoint, "getLatestBlockhash", [{"commitment": "finalized"}])
    try:
        return result["value"]["blockhash"]
    except (KeyError, TypeError) as exc:
        raise MalformedResponse(f"No blockhash in response: {result!r}", method="getLatestBlockhash") from exc


def get_sol_balance(transport: Transport, endpoint: str, address: str) -> int:
    """Balance in lamports."""
    result = rpc_call(transport, endpoint, "getBalance", [address])
    try:
        return int(result["value"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedResponse(f"No balance in response: {result!r}", method="getBalance") from exc


def get_token_account_balance(transport: Transport, endpoint: str, token_account: str) -> int:
    """Raw (base-unit) balance of a token account."""
    result = rpc_call(transport, endpoint, "getTokenAccountBalance", [token_account])
    try:
        return int(result["value"]["amount"])
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedResponse(
            f"No token amount in response: {result!r}", method="getTokenAccountBalance"
        ) from exc


def send_transaction(transport: Transport, endpoint: str, wire_tx: bytes) -> str:
    """Broadcast a signed transaction; returns its base-58 signature."""
    encoded = base64.b64encode(wire_tx).decode("ascii")
    result = rpc_call(transport, endpoint, "sendTransaction", [encoded, {"encoding": "base64"}])
    if not isinstance(result, str):
        raise MalformedResponse(f"No signature in response: {result!r}", method="sendTransaction")
    return result
