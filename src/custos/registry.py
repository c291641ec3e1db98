"""
Registry of chain/network configurations and transaction history.

One explicit object owns all mutable wallet state and is passed to
every operation. It performs no locking: callers run operations for the
same (chain, account) pair one at a time.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .errors import CapacityExceeded, ChainNotRegistered, NetworkNotRegistered
from .models import ChainConfig, NetworkConfig, TransactionRecord, TransactionStatus

logger = logging.getLogger(__name__)

MAX_CHAINS = 32
MAX_NETWORKS = 32
MAX_HISTORY = 500
DEFAULT_HISTORY_LIMIT = 50


@dataclass
class Registry:
    chains: dict[int, ChainConfig] = field(default_factory=dict)
    networks: dict[str, NetworkConfig] = field(default_factory=dict)
    history: list[TransactionRecord] = field(default_factory=list)
    tx_counter: int = 0
    path: Optional[Path] = None

    # ============ Chains ============

    def register_chain(self, config: ChainConfig) -> None:
        """Add a chain, or replace the config of an already known chain id."""
        if config.chain_id not in self.chains and len(self.chains) >= MAX_CHAINS:
            raise CapacityExceeded(
                f"At most {MAX_CHAINS} chains can be configured.",
                capacity=MAX_CHAINS,
                chain_id=config.chain_id,
            )
        self.chains[config.chain_id] = config
        self._save()

    def chain(self, chain_id: int) -> ChainConfig:
        try:
            return self.chains[chain_id]
        except KeyError:
            raise ChainNotRegistered(
                f"Chain {chain_id} not configured. Add it with 'custos chain add' first.",
                chain_id=chain_id,
            ) from None

    def list_chains(self) -> list[ChainConfig]:
        return sorted(self.chains.values(), key=lambda c: c.chain_id)

    # ============ Networks ============

    def register_network(self, config: NetworkConfig) -> None:
        if config.name not in self.networks and len(self.networks) >= MAX_NETWORKS:
            raise CapacityExceeded(
                f"At most {MAX_NETWORKS} networks can be configured.",
                capacity=MAX_NETWORKS,
                network=config.name,
            )
        self.networks[config.name] = config
        self._save()

    def network(self, name: str) -> NetworkConfig:
        try:
            return self.networks[name]
        except KeyError:
            raise NetworkNotRegistered(
                f"Network {name!r} not configured. Add it with 'custos network add' first.",
                network=name,
            ) from None

    def list_networks(self) -> list[NetworkConfig]:
        return sorted(self.networks.values(), key=lambda n: n.name)

    # ============ History ============

    def record_submission(
        self,
        chain: str,
        reference: str,
        to: str,
        amount: str,
        timestamp: float,
        data: Optional[str] = None,
        asset: Optional[str] = None,
    ) -> TransactionRecord:
        """Append a record for a transaction the network accepted."""
        self.tx_counter += 1
        record = TransactionRecord(
            id=self.tx_counter,
            chain=chain,
            reference=reference,
            to=to,
            amount=amount,
            timestamp=timestamp,
            status=TransactionStatus.submitted(reference),
            data=data,
            asset=asset,
        )
        self.history.append(record)
        if len(self.history) > MAX_HISTORY:
            del self.history[: len(self.history) - MAX_HISTORY]
        self._save()
        logger.debug("Recorded transaction #%d on %s: %s", record.id, chain, reference)
        return record

    def transactions(self, limit: Optional[int] = None, chain: Optional[str] = None) -> list[TransactionRecord]:
        """Most recent records first."""
        limit = DEFAULT_HISTORY_LIMIT if limit is None else limit
        records = [r for r in reversed(self.history) if chain is None or r.chain == chain]
        return records[:limit]

    # ============ Persistence ============

    def to_dict(self) -> dict[str, Any]:
        return {
            "chains": [c.to_dict() for c in self.list_chains()],
            "networks": [n.to_dict() for n in self.list_networks()],
            "history": [r.to_dict() for r in self.history],
            "tx_counter": self.tx_counter,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any], path: Optional[Path] = None) -> "Registry":
        chains = [ChainConfig.from_dict(c) for c in payload.get("chains", [])]
        networks = [NetworkConfig.from_dict(n) for n in payload.get("networks", [])]
        by_id = {c.chain_id: c for c in chains}
        by_name = {n.name: n for n in networks}
        if len(by_id) > MAX_CHAINS:
            raise CapacityExceeded(
                f"Registry lists {len(by_id)} chains; at most {MAX_CHAINS} are allowed.",
                capacity=MAX_CHAINS,
            )
        if len(by_name) > MAX_NETWORKS:
            raise CapacityExceeded(
                f"Registry lists {len(by_name)} networks; at most {MAX_NETWORKS} are allowed.",
                capacity=MAX_NETWORKS,
            )
        history = [TransactionRecord.from_dict(r) for r in payload.get("history", [])]
        # Oldest records go first, as in record_submission.
        history = history[-MAX_HISTORY:]
        return cls(
            chains=by_id,
            networks=by_name,
            history=history,
            tx_counter=int(payload.get("tx_counter", 0)),
            path=path,
        )

    @classmethod
    def load(cls, path: Path) -> "Registry":
        """Load from a JSON file; a missing file gives an empty registry bound to ``path``."""
        if not path.exists():
            return cls(path=path)
        with path.open("r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f), path=path)

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = json.dumps(self.to_dict(), indent=2, sort_keys=True).encode("utf-8")
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with tmp.open("wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            tmp.replace(self.path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
