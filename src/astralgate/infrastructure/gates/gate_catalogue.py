"""Build gate registries from gate-table documents.

A gate-table document is a JSON object keyed by gate name::

    {
      "astral": {
        "currency": "ilp",
        "cost_per_roll": 10,
        "free_roll_interval": 86400,
        "max_rolls": 10,
        "rewards": {"xp:player:sm": 400, "collectible:player:Red": 5}
      }
    }

Documents can come from the bundled defaults, a file on disk, or a remote
catalogue endpoint.
"""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Callable, Mapping

import httpx

from astralgate.application.services.balance_tables import DEFAULT_GATE_TABLES
from astralgate.application.services.gate_registry import GateRegistry
from astralgate.infrastructure.gates.table_gate import TableGateDefinition
from astralgate.infrastructure.resilient_http import get_json_with_retry


_logger = logging.getLogger(__name__)

_GATE_FIELDS = ("currency", "cost_per_roll", "free_roll_interval", "max_rolls")


def build_gate_registry(
    tables: Mapping[str, Mapping[str, Any]] | None = None,
    *,
    rng: random.Random | None = None,
    clock: Callable[[], int] | None = None,
) -> GateRegistry:
    registry = GateRegistry()
    for name, table in (DEFAULT_GATE_TABLES if tables is None else tables).items():
        if not isinstance(table, Mapping):
            raise ValueError(f"Gate table for {name} must be an object")
        rewards = table.get("rewards")
        if not isinstance(rewards, Mapping):
            raise ValueError(f"Gate table for {name} needs a rewards object")
        options = {key: table[key] for key in _GATE_FIELDS if key in table}
        registry.register(TableGateDefinition(str(name), rewards, rng=rng, clock=clock, **options))
    _logger.debug("Gate registry built", extra={"gates": registry.names()})
    return registry


def load_gate_tables(path: str | Path) -> dict[str, Any]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Gate catalogue {path} must contain a JSON object")
    return payload


class GateCatalogueClient:
    def __init__(
        self,
        base_url: str,
        *,
        path: str = "/gates.json",
        timeout: float = 5.0,
        retries: int = 1,
        backoff_seconds: float = 0.2,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._path = path
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def fetch_tables(self) -> dict[str, Any]:
        payload = get_json_with_retry(
            self.client,
            self._path,
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )
        gates = payload.get("gates", payload)
        if not isinstance(gates, dict):
            raise ValueError("Remote gate catalogue must contain a gates object")
        return gates

    def close(self) -> None:
        self.client.close()
