"""
CLI integration tests using Click's test runner.

Commands run end-to-end against a temporary CUSTOS_HOME. Commands that
talk to a chain get the scripted transport through ``obj``, so no
network access is needed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner
from dotenv import dotenv_values

from conftest import EVM_PRIVATE_KEY, FakeTransport
from custos import __version__
from custos.cli import cli, main
from custos.keys.ed25519 import solana_address
from custos.registry import Registry

RECIPIENT = "0x7e5f4552091a69125d5dfcb7b8c2659029395bdf"


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def custos_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point CUSTOS_HOME at a temp directory with no keys in the environment."""
    home = tmp_path / ".custos"
    monkeypatch.setenv("CUSTOS_HOME", str(home))
    monkeypatch.delenv("EVM_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("SOLANA_PRIVATE_KEY", raising=False)
    return home


@pytest.fixture()
def configured(runner: CliRunner, custos_home: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keys in the environment plus one chain and one network."""
    monkeypatch.setenv("EVM_PRIVATE_KEY", EVM_PRIVATE_KEY)
    monkeypatch.setenv("SOLANA_PRIVATE_KEY", "0x" + bytes(range(32)).hex())
    assert runner.invoke(cli, ["chain", "add", "--chain-id", "8453", "--rpc-url", "https://base.example/rpc"]).exit_code == 0
    assert runner.invoke(cli, ["network", "add", "--name", "devnet", "--rpc-url", "https://devnet.example/rpc"]).exit_code == 0
    return custos_home


class TestVersionAndHelp:
    """Basic commands that need no configuration."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_banner(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "C U S T O S" in result.output
        assert "keygen" in result.output


class TestKeys:
    def test_keygen_writes_env(self, runner: CliRunner, custos_home: Path) -> None:
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0, result.output

        values = dotenv_values(custos_home / ".env")
        assert values["EVM_PRIVATE_KEY"].startswith("0x")
        assert len(values["EVM_PRIVATE_KEY"]) == 66
        assert len(values["SOLANA_PRIVATE_KEY"]) == 66

    def test_keygen_keeps_existing_keys(self, runner: CliRunner, custos_home: Path) -> None:
        runner.invoke(cli, ["keygen"])
        before = dotenv_values(custos_home / ".env")
        result = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        assert "already present" in result.output
        assert dotenv_values(custos_home / ".env") == before

    def test_keygen_force_replaces(self, runner: CliRunner, custos_home: Path) -> None:
        runner.invoke(cli, ["keygen"])
        before = dotenv_values(custos_home / ".env")
        runner.invoke(cli, ["keygen", "--force"])
        assert dotenv_values(custos_home / ".env")["EVM_PRIVATE_KEY"] != before["EVM_PRIVATE_KEY"]

    def test_address_after_keygen(self, runner: CliRunner, custos_home: Path) -> None:
        runner.invoke(cli, ["keygen"])
        result = runner.invoke(cli, ["address"])
        assert result.exit_code == 0
        assert "EVM:" in result.output
        assert "Solana:" in result.output
        assert "0x" in result.output

    def test_address_without_keys(self, runner: CliRunner, custos_home: Path) -> None:
        result = runner.invoke(cli, ["address"])
        assert result.exit_code == 1
        assert "custos keygen" in result.output


class TestChainsAndNetworks:
    def test_chain_add_and_list(self, runner: CliRunner, custos_home: Path) -> None:
        result = runner.invoke(cli, ["chain", "add", "--chain-id", "8453", "--rpc-url", "https://base.example/rpc"])
        assert result.exit_code == 0
        assert "Base" in result.output

        result = runner.invoke(cli, ["chain", "list"])
        assert "8453" in result.output
        assert "https://base.example/rpc" in result.output

        registry = Registry.load(custos_home / "registry.json")
        assert registry.chain(8453).name == "Base"

    def test_empty_lists(self, runner: CliRunner, custos_home: Path) -> None:
        assert "No chains configured." in runner.invoke(cli, ["chain", "list"]).output
        assert "No networks configured." in runner.invoke(cli, ["network", "list"]).output

    def test_network_add_and_list(self, runner: CliRunner, custos_home: Path) -> None:
        runner.invoke(cli, ["network", "add", "--name", "devnet", "--rpc-url", "https://devnet.example/rpc"])
        result = runner.invoke(cli, ["network", "list"])
        assert "devnet" in result.output


class TestAccountChainCommands:
    def test_balance(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(cli, ["balance", "--chain-id", "8453"], obj={"transport": transport})
        assert result.exit_code == 0, result.output
        assert "2 ETH" in result.output

    def test_unregistered_chain(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(cli, ["balance", "--chain-id", "1"], obj={"transport": transport})
        assert result.exit_code == 1
        assert "ERROR:" in result.output
        assert transport.calls == []

    def test_send_and_history(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["send", "--chain-id", "8453", "--to", RECIPIENT, "--amount", "0.001"],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output
        assert "Transaction submitted" in result.output
        assert "1000000000000000" in result.output

        history = runner.invoke(cli, ["history"])
        assert history.exit_code == 0
        assert "evm:8453" in history.output
        assert RECIPIENT in history.output

    def test_send_zero_amount(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["send", "--chain-id", "8453", "--to", RECIPIENT, "--amount", "0", "--raw"],
            obj={"transport": transport},
        )
        assert result.exit_code == 1
        assert "greater than zero" in result.output
        assert transport.calls == []

    def test_broadcast_recovery_option(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["--recovery", "broadcast", "send", "--chain-id", "8453", "--to", RECIPIENT, "--amount", "1", "--raw"],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output

    def test_token_transfer_with_decimals(
        self, runner: CliRunner, configured: Path, transport: FakeTransport
    ) -> None:
        result = runner.invoke(
            cli,
            [
                "token", "transfer",
                "--chain-id", "8453",
                "--token", "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
                "--to", RECIPIENT,
                "--amount", "2.5",
                "--decimals", "6",
            ],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output
        records = Registry.load(configured / "registry.json").transactions()
        assert records[0].amount == "2500000"

    def test_swap_quote(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        transport.handlers["eth_call"] = "0x" + b"".join(
            value.to_bytes(32, "big") for value in (995_000, 2**96, 1, 90_000)
        ).hex()
        result = runner.invoke(
            cli,
            [
                "swap", "quote",
                "--chain-id", "8453",
                "--quoter", "0x3d4e44eb1374240ce5f1b871ab261cd16335b76a",
                "--token-in", "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
                "--token-out", "0x4200000000000000000000000000000000000006",
                "--amount", "1000000",
                "--fee", "500",
            ],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output
        assert "995000" in result.output


class TestSolanaCommands:
    def test_balance(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(cli, ["sol", "balance", "--network", "devnet"], obj={"transport": transport})
        assert result.exit_code == 0, result.output
        assert "0.005 SOL" in result.output

    def test_send(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["sol", "send", "--network", "devnet", "--to", solana_address(b"\x05" * 32), "--amount", "0.000005"],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output
        records = Registry.load(configured / "registry.json").transactions(chain="solana:devnet")
        assert records[0].amount == "5000"

    def test_unknown_network(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["sol", "send", "--network", "mainnet", "--to", solana_address(b"\x05" * 32), "--amount", "1"],
            obj={"transport": transport},
        )
        assert result.exit_code == 1
        assert "ERROR:" in result.output

    def test_token_balance(self, runner: CliRunner, configured: Path, transport: FakeTransport) -> None:
        result = runner.invoke(
            cli,
            ["sol", "token-balance", "--network", "devnet", "--mint", solana_address(b"\x06" * 32), "--decimals", "2"],
            obj={"transport": transport},
        )
        assert result.exit_code == 0, result.output
        assert "2.5" in result.output


class TestHistory:
    def test_empty(self, runner: CliRunner, custos_home: Path) -> None:
        result = runner.invoke(cli, ["history"])
        assert result.exit_code == 0
        assert "No transactions recorded." in result.output


class TestEntryPoint:
    def test_main_runs_group(self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
        monkeypatch.setattr(sys, "argv", ["custos", "--version"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
