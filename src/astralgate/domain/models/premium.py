from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from astralgate.domain.errors import PremiumInvariantError


MAX_BALANCE = 2**63 - 1

_logger = logging.getLogger(__name__)


class PremiumTier(int, Enum):
    NONE = 0
    DONATOR = 1
    SUBSCRIBER = 2
    SUBSCRIBER_LIFETIME = 3

    @classmethod
    def normalize(cls, value: object) -> "PremiumTier":
        if isinstance(value, PremiumTier):
            return value
        try:
            return cls(int(value))  # type: ignore[arg-type]
        except (TypeError, ValueError):
            pass
        key = str(value or "").strip().upper()
        return cls.__members__.get(key, cls.NONE)


class UpgradeKind(str, Enum):
    ADVENTURE_LOG_SIZE = "adventure_log_size"
    BUFF_SCROLL_DURATION = "buff_scroll_duration"
    CHOICE_LOG_SIZE = "choice_log_size"
    ENCHANT_CAP = "enchant_cap"
    INVENTORY_SIZE = "inventory_size"
    ITEM_STAT_CAP = "item_stat_cap"
    MAX_PETS_IN_COMBAT = "max_pets_in_combat"
    MAX_QUESTS = "max_quests"
    MAX_STAMINA = "max_stamina"
    PET_MISSION_CAP = "pet_mission_cap"

    @classmethod
    def parse(cls, raw: object) -> Optional["UpgradeKind"]:
        if isinstance(raw, UpgradeKind):
            return raw
        key = str(raw or "").strip().lower().replace("-", "_").replace(" ", "_")
        try:
            return cls(key)
        except ValueError:
            return None


class PurchaseStatus(str, Enum):
    SUCCESS = "success"
    NOT_PURCHASABLE = "not_purchasable"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass(frozen=True)
class PurchaseResult:
    status: PurchaseStatus
    kind: UpgradeKind
    level: int
    cost: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == PurchaseStatus.SUCCESS


@dataclass
class PremiumAccount:
    player_id: str
    balance: int = 0
    tier: PremiumTier = PremiumTier.NONE
    upgrade_levels: Dict[UpgradeKind, int] = field(default_factory=dict)
    free_roll_markers: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.player_id = str(self.player_id)
        self.balance = max(0, int(self.balance or 0))
        self.tier = PremiumTier.normalize(self.tier)
        self.upgrade_levels = dict(self.upgrade_levels or {})
        self.free_roll_markers = {str(key): int(value) for key, value in dict(self.free_roll_markers or {}).items()}

    def can_afford(self, amount: int) -> bool:
        return self.balance >= int(amount)

    def credit(self, amount: int) -> int:
        amount = int(amount)
        if amount < 0:
            raise PremiumInvariantError(f"Cannot credit a negative amount: {amount}")
        if self.balance > MAX_BALANCE - amount:
            raise PremiumInvariantError(
                f"Crediting {amount} to {self.player_id} would exceed the maximum balance"
            )
        self.balance += amount
        return self.balance

    def debit(self, amount: int) -> int:
        """Remove ``amount`` from the balance, clamping at zero.

        Sufficiency is the caller's responsibility (see :meth:`can_afford`).
        """
        amount = int(amount)
        if amount < 0:
            raise PremiumInvariantError(f"Cannot debit a negative amount: {amount}")
        self.balance = max(0, self.balance - amount)
        return self.balance

    def upgrade_level(self, kind: UpgradeKind) -> int:
        return int(self.upgrade_levels.get(kind, 0) or 0)

    def upgrade_cost(self, kind: UpgradeKind, scale: Mapping[UpgradeKind, int]) -> Optional[int]:
        base = scale.get(kind)
        if not base:
            return None
        return int(base) ** (self.upgrade_level(kind) + 1)

    def purchase_upgrade(self, kind: UpgradeKind, scale: Mapping[UpgradeKind, int]) -> PurchaseResult:
        current_level = self.upgrade_level(kind)
        cost = self.upgrade_cost(kind, scale)
        if cost is None:
            return PurchaseResult(status=PurchaseStatus.NOT_PURCHASABLE, kind=kind, level=current_level)
        if not self.can_afford(cost):
            return PurchaseResult(
                status=PurchaseStatus.INSUFFICIENT_FUNDS,
                kind=kind,
                level=current_level,
                cost=cost,
            )

        self.debit(cost)
        self.upgrade_levels[kind] = current_level + 1
        return PurchaseResult(status=PurchaseStatus.SUCCESS, kind=kind, level=current_level + 1, cost=cost)

    def next_free_roll(self, gate_name: str) -> int:
        return int(self.free_roll_markers.get(str(gate_name), 0) or 0)

    def has_free_roll_marker(self, gate_name: str) -> bool:
        return str(gate_name) in self.free_roll_markers

    def set_free_roll_marker(self, gate_name: str, marker: int) -> None:
        self.free_roll_markers[str(gate_name)] = int(marker)

    def snapshot(self) -> dict[str, Any]:
        return {
            "player_id": self.player_id,
            "balance": int(self.balance),
            "tier": int(self.tier.value),
            "upgrade_levels": {kind.value: int(level) for kind, level in self.upgrade_levels.items()},
            "free_roll_markers": dict(self.free_roll_markers),
        }

    def restore(self, record: Mapping[str, Any]) -> None:
        restored = PremiumAccount.from_record(record)
        self.balance = restored.balance
        self.tier = restored.tier
        self.upgrade_levels = restored.upgrade_levels
        self.free_roll_markers = restored.free_roll_markers

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PremiumAccount":
        levels: Dict[UpgradeKind, int] = {}
        for raw_kind, raw_level in dict(record.get("upgrade_levels") or {}).items():
            kind = UpgradeKind.parse(raw_kind)
            if kind is None:
                _logger.warning(
                    "Dropping unknown upgrade kind from premium record",
                    extra={"player_id": record.get("player_id"), "upgrade_kind": raw_kind},
                )
                continue
            levels[kind] = max(0, int(raw_level or 0))
        return cls(
            player_id=str(record.get("player_id", "")),
            balance=int(record.get("balance", 0) or 0),
            tier=PremiumTier.normalize(record.get("tier", 0)),
            upgrade_levels=levels,
            free_roll_markers=dict(record.get("free_roll_markers") or {}),
        )
