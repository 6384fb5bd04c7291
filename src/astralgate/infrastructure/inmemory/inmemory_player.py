from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from astralgate.domain.capabilities import CompanionCapability, CompanionMaterialStock, PlayerCapability
from astralgate.domain.models.reward import CollectibleDescriptor


@dataclass
class InMemoryCompanion(CompanionCapability):
    name: str
    xp: int = 0
    max_xp: int = 100

    @property
    def xp_maximum(self) -> int:
        return int(self.max_xp)

    def gain_xp(self, amount: int) -> None:
        self.xp += max(0, int(amount))


@dataclass
class InMemoryMaterialStock(CompanionMaterialStock):
    materials: Counter = field(default_factory=Counter)

    def add_ascension_material(self, name: str) -> None:
        self.materials[str(name)] += 1


@dataclass
class InMemoryPlayer(PlayerCapability):
    name: str
    xp: int = 0
    max_xp: int = 1000
    gold_on_hand: int = 0
    companion: Optional[InMemoryCompanion] = None
    materials: InMemoryMaterialStock = field(default_factory=InMemoryMaterialStock)
    collectibles: Dict[str, CollectibleDescriptor] = field(default_factory=dict)
    statistics: Counter = field(default_factory=Counter)
    journal: List[str] = field(default_factory=list)

    @property
    def xp_maximum(self) -> int:
        return int(self.max_xp)

    @property
    def gold(self) -> int:
        return int(self.gold_on_hand)

    @property
    def active_companion(self) -> Optional[InMemoryCompanion]:
        return self.companion

    @property
    def companion_materials(self) -> InMemoryMaterialStock:
        return self.materials

    def increase_statistic(self, name: str, amount: int) -> None:
        self.statistics[str(name)] += int(amount)

    def gain_xp(self, amount: int) -> None:
        self.xp += max(0, int(amount))

    def gain_gold(self, amount: int) -> None:
        self.gold_on_hand += max(0, int(amount))

    def spend_gold(self, amount: int) -> None:
        self.gold_on_hand = max(0, self.gold_on_hand - max(0, int(amount)))

    def try_find_collectible(self, descriptor: CollectibleDescriptor) -> bool:
        if descriptor.name in self.collectibles:
            return False
        self.collectibles[descriptor.name] = descriptor
        self.journal.append(f"Found collectible: {descriptor.name}")
        return True

    def has_collectible(self, name: str) -> bool:
        return str(name) in self.collectibles
