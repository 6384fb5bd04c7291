from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RewardKind(str, Enum):
    XP = "xp"
    CURRENCY = "currency"
    COLLECTIBLE = "collectible"
    MATERIAL = "material"


class RewardTarget(str, Enum):
    PLAYER = "player"
    COMPANION = "companion"


class RewardMagnitude(str, Enum):
    SMALL = "sm"
    MEDIUM = "md"
    LARGE = "lg"
    MAX = "max"


class ItemRarity(str, Enum):
    BASIC = "basic"
    PRO = "pro"
    IDLE = "idle"
    GODLY = "godly"
    GOATLY = "goatly"
    OMEGA = "omega"


MAGNITUDE_KINDS = frozenset({RewardKind.XP, RewardKind.CURRENCY})
VARIANT_KINDS = frozenset({RewardKind.COLLECTIBLE, RewardKind.MATERIAL})

_KIND_ALIASES = {
    "xp": RewardKind.XP,
    "currency": RewardKind.CURRENCY,
    "gold": RewardKind.CURRENCY,
    "collectible": RewardKind.COLLECTIBLE,
    "material": RewardKind.MATERIAL,
    "item": RewardKind.MATERIAL,
}

_TARGET_ALIASES = {
    "player": RewardTarget.PLAYER,
    "companion": RewardTarget.COMPANION,
    "pet": RewardTarget.COMPANION,
}

# Legacy tables name the reward family in the target slot ("collectible:Soul:Red").
_FAMILY_TARGETS = {
    ("collectible", "soul"): RewardTarget.PLAYER,
    ("item", "crystal"): RewardTarget.COMPANION,
    ("material", "crystal"): RewardTarget.COMPANION,
}

_MAGNITUDE_ALIASES = {
    "sm": RewardMagnitude.SMALL,
    "small": RewardMagnitude.SMALL,
    "md": RewardMagnitude.MEDIUM,
    "medium": RewardMagnitude.MEDIUM,
    "lg": RewardMagnitude.LARGE,
    "large": RewardMagnitude.LARGE,
    "max": RewardMagnitude.MAX,
}


@dataclass(frozen=True)
class RewardToken:
    kind: RewardKind
    target: RewardTarget
    magnitude: Optional[RewardMagnitude] = None
    variant: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind in MAGNITUDE_KINDS and self.magnitude is None:
            raise ValueError(f"{self.kind.value} rewards need a magnitude")
        if self.kind in VARIANT_KINDS and not self.variant:
            raise ValueError(f"{self.kind.value} rewards need a variant")

    @property
    def selector(self) -> str:
        if self.magnitude is not None:
            return self.magnitude.value
        return str(self.variant or "")

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.target.value}:{self.selector}"


@dataclass(frozen=True)
class CollectibleDescriptor:
    name: str
    rarity: ItemRarity
    description: str
    storyline: str


def xp_reward(target: RewardTarget | str, magnitude: RewardMagnitude | str) -> RewardToken:
    return RewardToken(
        kind=RewardKind.XP,
        target=RewardTarget(target),
        magnitude=RewardMagnitude(magnitude),
    )


def currency_reward(magnitude: RewardMagnitude | str) -> RewardToken:
    return RewardToken(kind=RewardKind.CURRENCY, target=RewardTarget.PLAYER, magnitude=RewardMagnitude(magnitude))


def collectible_reward(variant: str) -> RewardToken:
    return RewardToken(kind=RewardKind.COLLECTIBLE, target=RewardTarget.PLAYER, variant=str(variant))


def material_reward(variant: str) -> RewardToken:
    return RewardToken(kind=RewardKind.MATERIAL, target=RewardTarget.COMPANION, variant=str(variant))


def parse_reward_token(raw: str | RewardToken) -> RewardToken:
    """Parse ``kind:target:selector`` text into a token.

    Accepts the older gate-table vocabulary as well (``gold:player:sm``,
    ``xp:pet:md``, ``collectible:Soul:Red``, ``item:Crystal:Red``).
    """
    if isinstance(raw, RewardToken):
        return raw

    parts = [part.strip() for part in str(raw or "").split(":")]
    if len(parts) != 3 or not all(parts):
        raise ValueError(f"Malformed reward token: {raw!r}")
    raw_kind, raw_target, selector = parts

    kind = _KIND_ALIASES.get(raw_kind.lower())
    if kind is None:
        raise ValueError(f"Unknown reward kind in token: {raw!r}")

    target = _FAMILY_TARGETS.get((raw_kind.lower(), raw_target.lower())) or _TARGET_ALIASES.get(raw_target.lower())
    if target is None:
        raise ValueError(f"Unknown reward target in token: {raw!r}")

    if kind in MAGNITUDE_KINDS:
        magnitude = _MAGNITUDE_ALIASES.get(selector.lower())
        if magnitude is None:
            raise ValueError(f"Unknown reward magnitude in token: {raw!r}")
        return RewardToken(kind=kind, target=target, magnitude=magnitude)
    return RewardToken(kind=kind, target=target, variant=selector)
