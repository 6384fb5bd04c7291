from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from astralgate.domain.capabilities import GateDefinition, PlayerCapability
from astralgate.domain.models.premium import PremiumAccount


@dataclass(frozen=True)
class RollDecision:
    gate_name: str
    free: bool
    signal: int
    next_marker: Optional[int] = None


class RollScheduler:
    """Picks the billing path for a whole roll batch.

    A batch is either entirely free or entirely paid; the decision never looks
    at the roll count.
    """

    def decide(self, account: PremiumAccount, player: PlayerCapability, gate: GateDefinition) -> RollDecision:
        marker = account.free_roll_markers.get(gate.name)
        signal = int(gate.progress_signal(player))
        if not gate.can_roll_free(player, marker):
            return RollDecision(gate_name=gate.name, free=False, signal=signal)
        return RollDecision(
            gate_name=gate.name,
            free=True,
            signal=signal,
            next_marker=signal + int(gate.free_roll_interval()),
        )

    @staticmethod
    def commit(account: PremiumAccount, decision: RollDecision) -> None:
        if decision.free and decision.next_marker is not None:
            account.set_free_roll_marker(decision.gate_name, decision.next_marker)
