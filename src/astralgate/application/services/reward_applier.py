from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional

from astralgate.application.services.balance_tables import (
    COLLECTIBLE_DESCRIPTION_TEMPLATE,
    COLLECTIBLE_RARITY,
    COLLECTIBLE_STORYLINE,
    MATERIAL_NAME_TEMPLATE,
    XP_FRACTION_PERCENT,
    currency_for_magnitude,
    xp_for_magnitude,
)
from astralgate.application.services.reward_resolver import collectible_name
from astralgate.domain.capabilities import PlayerCapability
from astralgate.domain.errors import PremiumInvariantError
from astralgate.domain.models.reward import CollectibleDescriptor, RewardKind, RewardTarget, RewardToken


@dataclass(frozen=True)
class PlannedEffect:
    token: RewardToken
    action: Optional[Callable[[], None]] = None
    skip_reason: str = ""
    violation: bool = False

    @property
    def applicable(self) -> bool:
        return self.action is not None


def _skip(token: RewardToken, reason: str) -> PlannedEffect:
    return PlannedEffect(token=token, skip_reason=reason)


def _violation(token: RewardToken, reason: str) -> PlannedEffect:
    return PlannedEffect(token=token, skip_reason=reason, violation=True)


def _plan_xp(player: PlayerCapability, token: RewardToken) -> PlannedEffect:
    if token.magnitude not in XP_FRACTION_PERCENT:
        return _violation(token, "no xp fraction for magnitude")

    # The maximum is read when the effect runs: an earlier reward in the
    # batch may have levelled the receiver up.
    if token.target == RewardTarget.PLAYER:
        return PlannedEffect(
            token=token,
            action=lambda: player.gain_xp(xp_for_magnitude(player.xp_maximum, token.magnitude)),
        )

    companion = player.active_companion
    if companion is None:
        return _skip(token, "no active companion")
    return PlannedEffect(
        token=token,
        action=lambda: companion.gain_xp(xp_for_magnitude(companion.xp_maximum, token.magnitude)),
    )


def _plan_currency(player: PlayerCapability, token: RewardToken) -> PlannedEffect:
    if token.target != RewardTarget.PLAYER:
        return _violation(token, "currency can only be granted to the player")
    amount = currency_for_magnitude(token.magnitude)
    if amount is None:
        return _violation(token, "no currency amount for magnitude")
    return PlannedEffect(token=token, action=lambda: player.gain_gold(amount))


def _plan_collectible(player: PlayerCapability, token: RewardToken) -> PlannedEffect:
    variant = str(token.variant)
    descriptor = CollectibleDescriptor(
        name=collectible_name(variant),
        rarity=COLLECTIBLE_RARITY,
        description=COLLECTIBLE_DESCRIPTION_TEMPLATE.format(variant=variant),
        storyline=COLLECTIBLE_STORYLINE,
    )
    return PlannedEffect(token=token, action=lambda: player.try_find_collectible(descriptor))


def _plan_material(player: PlayerCapability, token: RewardToken) -> PlannedEffect:
    material = MATERIAL_NAME_TEMPLATE.format(variant=token.variant)
    stock = player.companion_materials
    return PlannedEffect(token=token, action=lambda: stock.add_ascension_material(material))


RewardPlanner = Callable[[PlayerCapability, RewardToken], PlannedEffect]

_PLANNERS: Dict[RewardKind, RewardPlanner] = {
    RewardKind.XP: _plan_xp,
    RewardKind.CURRENCY: _plan_currency,
    RewardKind.COLLECTIBLE: _plan_collectible,
    RewardKind.MATERIAL: _plan_material,
}

_UNHANDLED_KINDS = set(RewardKind) - set(_PLANNERS)
if _UNHANDLED_KINDS:
    raise ImportError(f"Reward kinds without an applier: {sorted(kind.value for kind in _UNHANDLED_KINDS)}")


class RewardApplier:
    def __init__(self, *, strict: bool = False) -> None:
        self._strict = bool(strict)
        self._logger = logging.getLogger(__name__)

    def plan(self, player: PlayerCapability, rewards: Iterable[RewardToken]) -> list[PlannedEffect]:
        planned: list[PlannedEffect] = []
        for token in rewards:
            planner = _PLANNERS.get(getattr(token, "kind", None))
            if planner is None:
                planned.append(_violation(token, "unknown reward kind"))
                continue
            planned.append(planner(player, token))
        return planned

    def check(self, planned: Iterable[PlannedEffect]) -> None:
        """Refuse a planned batch in strict mode if one token has no valid effect."""
        if not self._strict:
            return
        violations = [effect for effect in planned if effect.violation]
        if violations:
            details = ", ".join(f"{effect.token} ({effect.skip_reason})" for effect in violations)
            raise PremiumInvariantError(f"Reward batch contains unapplicable rewards: {details}")

    def apply(self, player: PlayerCapability, rewards: Iterable[RewardToken]) -> list[PlannedEffect]:
        """Apply every reward in order, after checking the whole batch.

        Strict mode refuses the batch before any effect runs if one token has
        no valid effect; otherwise such tokens are logged and skipped.
        """
        planned = self.plan(player, rewards)
        self.check(planned)
        return self.run(planned)

    def run(self, planned: list[PlannedEffect]) -> list[PlannedEffect]:
        for effect in planned:
            if effect.action is None:
                log = self._logger.error if effect.violation else self._logger.warning
                log(
                    "Reward skipped",
                    extra={"reward": str(effect.token), "reason": effect.skip_reason},
                )
                continue
            effect.action()
        return planned
