from abc import ABC, abstractmethod
from typing import Optional

from astralgate.domain.models.premium import PremiumAccount


class PremiumAccountRepository(ABC):
    @abstractmethod
    def get(self, player_id: str) -> Optional[PremiumAccount]:
        raise NotImplementedError

    @abstractmethod
    def save(self, account: PremiumAccount) -> None:
        raise NotImplementedError

    def get_or_create(self, player_id: str) -> PremiumAccount:
        """Load the whole account record, starting a fresh one for new players."""
        account = self.get(str(player_id))
        if account is None:
            account = PremiumAccount(player_id=str(player_id))
        return account
