import logging
import os
import random

from astralgate.application.services.event_bus import EventBus
from astralgate.application.services.gate_registry import GateRegistry
from astralgate.application.services.gate_roll_engine import GateRollEngine
from astralgate.application.services.premium_audit_service import register_premium_audit_handlers
from astralgate.application.services.premium_service import PremiumService
from astralgate.application.services.reward_applier import RewardApplier
from astralgate.domain.repositories import PremiumAccountRepository
from astralgate.infrastructure.gates.gate_catalogue import GateCatalogueClient, build_gate_registry, load_gate_tables
from astralgate.infrastructure.inmemory.inmemory_premium_account_repo import InMemoryPremiumAccountRepository


_logger = logging.getLogger(__name__)


def _is_truthy(value: str | None, *, default: str = "0") -> bool:
    normalized = str(value if value is not None else default).strip().lower()
    return normalized in {"1", "true", "yes"}


def strict_invariants_enabled() -> bool:
    return _is_truthy(os.getenv("ASTRALGATE_STRICT_INVARIANTS"), default="0")


def _build_gate_registry() -> GateRegistry:
    seed_raw = os.getenv("ASTRALGATE_RNG_SEED", "").strip()
    rng = random.Random(int(seed_raw)) if seed_raw else None

    catalogue_path = os.getenv("ASTRALGATE_GATE_CATALOGUE_PATH", "").strip()
    if catalogue_path:
        return build_gate_registry(load_gate_tables(catalogue_path), rng=rng)

    catalogue_url = os.getenv("ASTRALGATE_GATE_CATALOGUE_URL", "").strip()
    if catalogue_url:
        client = GateCatalogueClient(
            catalogue_url,
            path=os.getenv("ASTRALGATE_GATE_CATALOGUE_ROUTE", "/gates.json"),
            timeout=float(os.getenv("ASTRALGATE_HTTP_TIMEOUT_S", "5")),
            retries=int(os.getenv("ASTRALGATE_HTTP_RETRIES", "1")),
            backoff_seconds=float(os.getenv("ASTRALGATE_HTTP_BACKOFF_S", "0.2")),
        )
        try:
            return build_gate_registry(client.fetch_tables(), rng=rng)
        finally:
            client.close()

    return build_gate_registry(rng=rng)


def _build_account_repository() -> PremiumAccountRepository:
    if not os.getenv("ASTRALGATE_DATABASE_URL", "").strip():
        return InMemoryPremiumAccountRepository()

    from astralgate.infrastructure.db.sql import connection
    from astralgate.infrastructure.db.sql.repos import SqlPremiumAccountRepository, ensure_schema

    try:
        ensure_schema(connection.engine)
    except Exception as exc:
        raise RuntimeError(f"Premium account store bootstrap failed: {exc}") from exc
    return SqlPremiumAccountRepository()


def create_premium_service() -> PremiumService:
    registry = _build_gate_registry()
    engine = GateRollEngine(registry, applier=RewardApplier(strict=strict_invariants_enabled()))
    event_bus = EventBus()
    register_premium_audit_handlers(event_bus)
    _logger.debug("Premium service ready", extra={"gates": registry.names()})
    return PremiumService(_build_account_repository(), engine, event_bus=event_bus)
