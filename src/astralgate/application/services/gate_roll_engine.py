from __future__ import annotations

import logging

from astralgate.application.dtos import RollResult, RollStatus
from astralgate.application.services.balance_tables import (
    STATISTIC_CURRENCY_ROLL,
    STATISTIC_FREE_ROLL,
    STATISTIC_GATE_TEMPLATE,
)
from astralgate.application.services.gate_registry import GateRegistry
from astralgate.application.services.reward_applier import RewardApplier
from astralgate.application.services.reward_resolver import RewardResolver
from astralgate.application.services.roll_scheduler import RollScheduler
from astralgate.domain.capabilities import PlayerCapability
from astralgate.domain.errors import PremiumInvariantError
from astralgate.domain.models.premium import PremiumAccount


class GateRollEngine:
    def __init__(
        self,
        registry: GateRegistry,
        *,
        scheduler: RollScheduler | None = None,
        resolver: RewardResolver | None = None,
        applier: RewardApplier | None = None,
    ) -> None:
        self._registry = registry
        self._scheduler = scheduler or RollScheduler()
        self._resolver = resolver or RewardResolver()
        self._applier = applier or RewardApplier()
        self._logger = logging.getLogger(__name__)

    @property
    def registry(self) -> GateRegistry:
        return self._registry

    def roll(self, account: PremiumAccount, player: PlayerCapability, gate_name: str, count: int = 1) -> RollResult:
        count = int(count)
        gate = self._registry.resolve(gate_name)
        if gate is None:
            return RollResult(status=RollStatus.UNKNOWN_GATE, gate_name=str(gate_name), count=count)
        if not gate.can_roll(player, count):
            return RollResult(status=RollStatus.CANNOT_ROLL, gate_name=gate.name, count=count)

        decision = self._scheduler.decide(account, player, gate)
        if not decision.free and not gate.can_afford(player, account, count):
            return RollResult(status=RollStatus.INSUFFICIENT_FUNDS, gate_name=gate.name, count=count)

        snapshot = account.snapshot()
        cost = 0
        try:
            raw_rewards = [gate.roll() for _ in range(count)]
            rewards = self._resolver.resolve(player, raw_rewards)
            planned = self._applier.plan(player, rewards)
            self._applier.check(planned)

            if decision.free:
                self._scheduler.commit(account, decision)
            else:
                cost = int(gate.spend_currency(player, account, count))

            self._applier.run(planned)

            player.increase_statistic(STATISTIC_FREE_ROLL if decision.free else STATISTIC_CURRENCY_ROLL, 1)
            player.increase_statistic(STATISTIC_GATE_TEMPLATE.format(gate=gate.name), 1)
        except Exception as exc:
            if cost:
                gate.refund_currency(player, account, cost)
            account.restore(snapshot)
            self._logger.exception(
                "Gate roll failed; account restored",
                extra={"player_id": account.player_id, "gate": gate.name, "count": count},
            )
            if isinstance(exc, PremiumInvariantError):
                raise
            raise PremiumInvariantError(f"Gate roll on {gate.name} failed: {exc}") from exc

        self._logger.info(
            "Gate rolled",
            extra={
                "player_id": account.player_id,
                "gate": gate.name,
                "count": count,
                "free": decision.free,
                "cost": cost,
            },
        )
        return RollResult(
            status=RollStatus.OK,
            gate_name=gate.name,
            count=count,
            rewards=tuple(rewards),
            free=decision.free,
            cost=cost,
        )
