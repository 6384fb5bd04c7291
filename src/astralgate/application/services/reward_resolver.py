from __future__ import annotations

from typing import Iterable

from astralgate.application.services.balance_tables import COLLECTIBLE_NAME_TEMPLATE
from astralgate.domain.capabilities import PlayerCapability
from astralgate.domain.models.reward import RewardKind, RewardToken, material_reward


def collectible_name(variant: str) -> str:
    return COLLECTIBLE_NAME_TEMPLATE.format(variant=variant)


class RewardResolver:
    """Rewrites collectible rewards the player would receive twice.

    A collectible the player already holds becomes the crystal material of the
    same variant. Collectibles granted earlier in the same batch count as held,
    so a multi-roll batch never grants one soul twice. Every other token passes
    through untouched and the batch keeps its length and order.
    """

    def resolve(self, player: PlayerCapability, rewards: Iterable[RewardToken]) -> list[RewardToken]:
        granted_in_batch: set[str] = set()
        resolved: list[RewardToken] = []
        for token in rewards:
            if token.kind != RewardKind.COLLECTIBLE:
                resolved.append(token)
                continue
            variant = str(token.variant)
            if variant in granted_in_batch or player.has_collectible(collectible_name(variant)):
                resolved.append(material_reward(variant))
                continue
            granted_in_batch.add(variant)
            resolved.append(token)
        return resolved
