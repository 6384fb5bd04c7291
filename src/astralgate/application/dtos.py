from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from astralgate.domain.models.reward import RewardToken


class RollStatus(str, Enum):
    OK = "ok"
    UNKNOWN_GATE = "unknown_gate"
    CANNOT_ROLL = "cannot_roll"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass(frozen=True)
class RollResult:
    status: RollStatus
    gate_name: str
    count: int
    rewards: tuple[RewardToken, ...] = ()
    free: bool = False
    cost: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status == RollStatus.OK

    @property
    def reward_labels(self) -> list[str]:
        return [str(token) for token in self.rewards]


@dataclass(frozen=True)
class AccountView:
    player_id: str
    balance: int
    tier: str
    upgrade_levels: dict[str, int]
    next_upgrade_costs: dict[str, Optional[int]]
    free_roll_markers: dict[str, int]
