from __future__ import annotations

import random
import time
from typing import Callable, Mapping

from astralgate.application.services.balance_tables import currency_for_magnitude
from astralgate.domain.capabilities import GateDefinition, PlayerCapability
from astralgate.domain.models.premium import PremiumAccount
from astralgate.domain.models.reward import RewardKind, RewardToken, parse_reward_token


GATE_CURRENCIES = ("ilp", "gold")


def _wall_clock_seconds() -> int:
    return int(time.time())


def validate_reward_table(gate_name: str, rewards: Mapping[object, object]) -> tuple[tuple[RewardToken, ...], tuple[int, ...]]:
    if not rewards:
        raise ValueError(f"Gate {gate_name} has an empty reward table")
    tokens: list[RewardToken] = []
    weights: list[int] = []
    for raw_token, raw_weight in rewards.items():
        token = parse_reward_token(raw_token)
        if token.kind == RewardKind.CURRENCY and currency_for_magnitude(token.magnitude) is None:
            raise ValueError(f"Gate {gate_name} offers a currency reward with no amount: {raw_token}")
        weight = int(raw_weight)
        if weight <= 0:
            raise ValueError(f"Gate {gate_name} has a non-positive weight for {raw_token}")
        tokens.append(token)
        weights.append(weight)
    return tuple(tokens), tuple(weights)


class TableGateDefinition(GateDefinition):
    """Gate backed by a weighted reward table.

    ``ilp`` gates charge the premium account; ``gold`` gates charge the
    player's gold. The free-roll cooldown is measured in clock seconds.
    """

    def __init__(
        self,
        name: str,
        rewards: Mapping[object, object],
        *,
        currency: str = "ilp",
        cost_per_roll: int = 0,
        free_roll_interval: int = 0,
        max_rolls: int = 10,
        rng: random.Random | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        normalized_currency = str(currency or "").strip().lower()
        if normalized_currency not in GATE_CURRENCIES:
            raise ValueError(f"Unsupported gate currency for {name}: {currency}")
        if int(cost_per_roll) < 0:
            raise ValueError(f"Gate {name} has a negative roll cost")
        if int(max_rolls) < 1:
            raise ValueError(f"Gate {name} must allow at least one roll")

        self.name = str(name)
        self.currency = normalized_currency
        self.cost_per_roll = int(cost_per_roll)
        self.max_rolls = int(max_rolls)
        self._free_roll_interval = max(0, int(free_roll_interval))
        self._tokens, self._weights = validate_reward_table(self.name, rewards)
        self._rng = rng or random.Random()
        self._clock = clock or _wall_clock_seconds

    @property
    def reward_table(self) -> dict[str, int]:
        return {str(token): weight for token, weight in zip(self._tokens, self._weights)}

    def progress_signal(self, player: PlayerCapability) -> int:
        return int(self._clock())

    def free_roll_interval(self) -> int:
        return self._free_roll_interval

    def roll_cost(self, count: int) -> int:
        return self.cost_per_roll * max(0, int(count))

    def can_afford(self, player: PlayerCapability, account: PremiumAccount, count: int) -> bool:
        cost = self.roll_cost(count)
        if self.currency == "ilp":
            return account.can_afford(cost)
        return int(player.gold) >= cost

    def spend_currency(self, player: PlayerCapability, account: PremiumAccount, count: int) -> int:
        cost = self.roll_cost(count)
        if self.currency == "ilp":
            account.debit(cost)
        else:
            player.spend_gold(cost)
        return cost

    def refund_currency(self, player: PlayerCapability, account: PremiumAccount, cost: int) -> None:
        if self.currency == "gold":
            player.gain_gold(cost)

    def roll(self) -> RewardToken:
        return self._rng.choices(self._tokens, weights=self._weights, k=1)[0]
