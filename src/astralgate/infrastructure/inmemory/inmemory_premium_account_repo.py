from __future__ import annotations

import copy
from typing import Optional

from astralgate.domain.models.premium import PremiumAccount
from astralgate.domain.repositories import PremiumAccountRepository


class InMemoryPremiumAccountRepository(PremiumAccountRepository):
    def __init__(self) -> None:
        self._records: dict[str, dict[str, object]] = {}

    def get(self, player_id: str) -> Optional[PremiumAccount]:
        record = self._records.get(str(player_id))
        if record is None:
            return None
        return PremiumAccount.from_record(copy.deepcopy(record))

    def save(self, account: PremiumAccount) -> None:
        self._records[account.player_id] = copy.deepcopy(account.snapshot())
