from __future__ import annotations

from astralgate.domain.models.premium import UpgradeKind
from astralgate.domain.models.reward import ItemRarity, RewardMagnitude


UPGRADE_SCALE: dict[UpgradeKind, int] = {
    UpgradeKind.ADVENTURE_LOG_SIZE: 5,
    UpgradeKind.BUFF_SCROLL_DURATION: 10,
    UpgradeKind.CHOICE_LOG_SIZE: 5,
    UpgradeKind.ENCHANT_CAP: 25,
    UpgradeKind.INVENTORY_SIZE: 10,
    UpgradeKind.ITEM_STAT_CAP: 20,
    UpgradeKind.MAX_QUESTS: 15,
    UpgradeKind.MAX_STAMINA: 10,
    UpgradeKind.PET_MISSION_CAP: 20,
}

XP_FRACTION_PERCENT: dict[RewardMagnitude, int] = {
    RewardMagnitude.SMALL: 1,
    RewardMagnitude.MEDIUM: 5,
    RewardMagnitude.LARGE: 10,
    RewardMagnitude.MAX: 100,
}

# No MAX entry: a flat currency reward has no "max" amount.
CURRENCY_AMOUNTS: dict[RewardMagnitude, int] = {
    RewardMagnitude.SMALL: 1_000,
    RewardMagnitude.MEDIUM: 10_000,
    RewardMagnitude.LARGE: 100_000,
}

COLLECTIBLE_NAME_TEMPLATE = "Pet Soul: {variant}"
COLLECTIBLE_RARITY = ItemRarity.GOATLY
COLLECTIBLE_DESCRIPTION_TEMPLATE = (
    "A floating ball of... pet essence? Perhaps you can tame this {variant} soul."
)
COLLECTIBLE_STORYLINE = "Lore: Astral Gate"
MATERIAL_NAME_TEMPLATE = "Crystal{variant}"

STATISTIC_FREE_ROLL = "Astral Gate/Roll/Free"
STATISTIC_CURRENCY_ROLL = "Astral Gate/Roll/Currency"
STATISTIC_GATE_TEMPLATE = "Astral Gate/Gates/{gate}"

SOUL_VARIANTS: tuple[str, ...] = ("Red", "Orange", "Yellow", "Green", "Blue", "Purple")

DAY_SECONDS = 86_400

DEFAULT_GATE_TABLES: dict[str, dict[str, object]] = {
    "astral": {
        "currency": "ilp",
        "cost_per_roll": 10,
        "free_roll_interval": DAY_SECONDS,
        "max_rolls": 10,
        "rewards": {
            "xp:player:sm": 400,
            "xp:player:md": 150,
            "xp:player:lg": 40,
            "xp:player:max": 5,
            "xp:companion:sm": 400,
            "xp:companion:md": 150,
            "xp:companion:lg": 40,
            "xp:companion:max": 5,
            "currency:player:sm": 400,
            "currency:player:md": 150,
            "currency:player:lg": 30,
            **{f"collectible:player:{variant}": 5 for variant in SOUL_VARIANTS},
            **{f"material:companion:{variant}": 20 for variant in SOUL_VARIANTS},
        },
    },
    "golden": {
        "currency": "gold",
        "cost_per_roll": 50_000,
        "free_roll_interval": 0,
        "max_rolls": 10,
        "rewards": {
            "xp:player:sm": 500,
            "xp:player:md": 200,
            "xp:player:lg": 50,
            "xp:companion:sm": 500,
            "xp:companion:md": 200,
            "xp:companion:lg": 50,
            "currency:player:md": 150,
            "currency:player:lg": 25,
            **{f"material:companion:{variant}": 10 for variant in SOUL_VARIANTS},
        },
    },
}


def xp_for_magnitude(xp_maximum: int, magnitude: RewardMagnitude) -> int | None:
    percent = XP_FRACTION_PERCENT.get(magnitude)
    if percent is None:
        return None
    return max(0, int(xp_maximum)) * percent // 100


def currency_for_magnitude(magnitude: RewardMagnitude) -> int | None:
    return CURRENCY_AMOUNTS.get(magnitude)
