from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from astralgate.domain.models.premium import PremiumAccount
from astralgate.domain.models.reward import CollectibleDescriptor, RewardToken


class CompanionCapability(ABC):
    @property
    @abstractmethod
    def xp_maximum(self) -> int:
        raise NotImplementedError

    @abstractmethod
    def gain_xp(self, amount: int) -> None:
        raise NotImplementedError


class CompanionMaterialStock(ABC):
    @abstractmethod
    def add_ascension_material(self, name: str) -> None:
        raise NotImplementedError


class PlayerCapability(ABC):
    """The narrow slice of a player that premium rewards are allowed to touch."""

    @property
    @abstractmethod
    def xp_maximum(self) -> int:
        raise NotImplementedError

    @property
    @abstractmethod
    def gold(self) -> int:
        raise NotImplementedError

    @property
    @abstractmethod
    def active_companion(self) -> Optional[CompanionCapability]:
        raise NotImplementedError

    @property
    @abstractmethod
    def companion_materials(self) -> CompanionMaterialStock:
        raise NotImplementedError

    @abstractmethod
    def increase_statistic(self, name: str, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def gain_xp(self, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def gain_gold(self, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def spend_gold(self, amount: int) -> None:
        raise NotImplementedError

    @abstractmethod
    def try_find_collectible(self, descriptor: CollectibleDescriptor) -> bool:
        raise NotImplementedError

    @abstractmethod
    def has_collectible(self, name: str) -> bool:
        raise NotImplementedError


class GateDefinition(ABC):
    """A named loot table that can be rolled for premium rewards.

    The progress signal is whatever monotonically increasing value the gate
    measures its free-roll cooldown in (wall-clock seconds for the bundled
    gates). Free-roll markers stored on the account use the same unit.
    """

    name: str
    max_rolls: int = 10

    def can_roll(self, player: PlayerCapability, count: int) -> bool:
        return 1 <= int(count) <= int(self.max_rolls)

    @abstractmethod
    def progress_signal(self, player: PlayerCapability) -> int:
        raise NotImplementedError

    @abstractmethod
    def free_roll_interval(self) -> int:
        raise NotImplementedError

    def can_roll_free(self, player: PlayerCapability, marker: Optional[int]) -> bool:
        if self.free_roll_interval() <= 0:
            return False
        if marker is None:
            return True
        return self.progress_signal(player) >= int(marker)

    @abstractmethod
    def roll_cost(self, count: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def can_afford(self, player: PlayerCapability, account: PremiumAccount, count: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def spend_currency(self, player: PlayerCapability, account: PremiumAccount, count: int) -> int:
        raise NotImplementedError

    def refund_currency(self, player: PlayerCapability, account: PremiumAccount, cost: int) -> None:
        """Give back a charge taken by ``spend_currency`` outside the account.

        Charges against the premium account itself are undone by restoring
        the account, so gates billed in ILP need nothing here.
        """
        return None

    @abstractmethod
    def roll(self) -> RewardToken:
        raise NotImplementedError
