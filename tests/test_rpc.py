"""Unit tests for the JSON-RPC transport and typed RPC helpers."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from conftest import FakeTransport
from custos.chain import rpc
from custos.errors import MalformedResponse, NetworkFailure, RpcError

ENDPOINT = "https://rpc.example"


def _http(handler) -> rpc.HttpTransport:
    return rpc.HttpTransport(client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestHttpTransport:
    def test_posts_json_rpc(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x10"})

        with _http(handler) as transport:
            assert rpc.get_gas_price(transport, ENDPOINT) == 16

        assert seen[0]["method"] == "eth_gasPrice"
        assert seen[0]["jsonrpc"] == "2.0"
        assert seen[0]["params"] == []

    def test_http_error(self) -> None:
        transport = _http(lambda request: httpx.Response(502, text="bad gateway"))
        with pytest.raises(NetworkFailure):
            rpc.get_gas_price(transport, ENDPOINT)

    def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(NetworkFailure):
            rpc.get_gas_price(_http(handler), ENDPOINT)

    def test_non_json_body(self) -> None:
        transport = _http(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(MalformedResponse):
            rpc.get_gas_price(transport, ENDPOINT)

    def test_error_member_wins_over_http_200(self) -> None:
        transport = _http(
            lambda request: httpx.Response(
                200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "nonce too low"}}
            )
        )
        with pytest.raises(RpcError) as exc_info:
            rpc.get_nonce(transport, ENDPOINT, "0x" + "11" * 20)
        assert exc_info.value.code == -32000
        assert "nonce too low" in str(exc_info.value)


class TestTypedCalls:
    def test_missing_result(self) -> None:
        transport = FakeTransport({"eth_gasPrice": lambda params: {"jsonrpc": "2.0", "id": 1}})
        with pytest.raises(MalformedResponse):
            rpc.get_gas_price(transport, ENDPOINT)

    def test_bad_quantity(self) -> None:
        transport = FakeTransport({"eth_getBalance": "lots"})
        with pytest.raises(MalformedResponse):
            rpc.get_balance(transport, ENDPOINT, "0x" + "11" * 20)

    def test_eth_call_returns_bytes(self) -> None:
        transport = FakeTransport({"eth_call": "0x00ff"})
        assert rpc.eth_call(transport, ENDPOINT, "0x" + "11" * 20, b"\x01\x02") == b"\x00\xff"
        (params,) = transport.params("eth_call")
        assert params == [{"to": "0x" + "11" * 20, "data": "0x0102"}, "latest"]

    def test_eth_call_malformed(self) -> None:
        transport = FakeTransport({"eth_call": "0xzz"})
        with pytest.raises(MalformedResponse):
            rpc.eth_call(transport, ENDPOINT, "0x" + "11" * 20, b"")

    def test_send_raw_transaction(self) -> None:
        transport = FakeTransport({"eth_sendRawTransaction": "0xabc"})
        assert rpc.send_raw_transaction(transport, ENDPOINT, b"\x02\xc0") == "0xabc"
        assert transport.params("eth_sendRawTransaction") == [["0x02c0"]]

    def test_latest_blockhash(self) -> None:
        transport = FakeTransport({"getLatestBlockhash": {"value": {"blockhash": "abc", "lastValidBlockHeight": 9}}})
        assert rpc.get_latest_blockhash(transport, ENDPOINT) == "abc"

    def test_latest_blockhash_malformed(self) -> None:
        transport = FakeTransport({"getLatestBlockhash": {"value": None}})
        with pytest.raises(MalformedResponse):
            rpc.get_latest_blockhash(transport, ENDPOINT)

    def test_token_account_balance(self) -> None:
        transport = FakeTransport({"getTokenAccountBalance": {"value": {"amount": "18446744073709551616"}}})
        assert rpc.get_token_account_balance(transport, ENDPOINT, "acct") == 2**64

    def test_send_transaction_base64(self) -> None:
        transport = FakeTransport({"sendTransaction": "5sig"})
        assert rpc.send_transaction(transport, ENDPOINT, b"\x01\x02\x03") == "5sig"
        (params,) = transport.params("sendTransaction")
        assert base64.b64decode(params[0]) == b"\x01\x02\x03"
        assert params[1] == {"encoding": "base64"}
