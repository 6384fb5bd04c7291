from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager
from typing import Iterator, Mapping

from astralgate.application.dtos import AccountView, RollResult
from astralgate.application.services.balance_tables import UPGRADE_SCALE
from astralgate.application.services.event_bus import EventBus
from astralgate.application.services.gate_roll_engine import GateRollEngine
from astralgate.domain.capabilities import PlayerCapability
from astralgate.domain.events import GateRolledEvent, IlpGrantedEvent, UpgradePurchasedEvent
from astralgate.domain.models.premium import PremiumAccount, PurchaseResult, PurchaseStatus, UpgradeKind
from astralgate.domain.repositories import PremiumAccountRepository


class _AccountLock:
    __slots__ = ("lock", "__weakref__")

    def __init__(self) -> None:
        self.lock = threading.Lock()


class PremiumService:
    """Runs premium operations one account at a time.

    Each call loads the whole account record, runs the core operation and
    saves the record again only if the operation changed it. Calls for the
    same player id are serialized; different players never block each other.
    """

    def __init__(
        self,
        account_repo: PremiumAccountRepository,
        engine: GateRollEngine,
        *,
        event_bus: EventBus | None = None,
        upgrade_scale: Mapping[UpgradeKind, int] | None = None,
    ) -> None:
        self.account_repo = account_repo
        self.engine = engine
        self.event_bus = event_bus or EventBus()
        self.upgrade_scale = dict(UPGRADE_SCALE if upgrade_scale is None else upgrade_scale)
        # Entries disappear once no call holds the account's lock.
        self._locks: "weakref.WeakValueDictionary[str, _AccountLock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _account_lock(self, key: str) -> "_AccountLock":
        with self._locks_guard:
            holder = self._locks.get(key)
            if holder is None:
                holder = _AccountLock()
                self._locks[key] = holder
            return holder

    @contextmanager
    def _exclusive(self, player_id: str) -> Iterator[PremiumAccount]:
        key = str(player_id)
        holder = self._account_lock(key)
        with holder.lock:
            yield self.account_repo.get_or_create(key)

    def account_view(self, player_id: str) -> AccountView:
        with self._exclusive(player_id) as account:
            return AccountView(
                player_id=account.player_id,
                balance=account.balance,
                tier=account.tier.name,
                upgrade_levels={kind.value: level for kind, level in sorted(account.upgrade_levels.items())},
                next_upgrade_costs={
                    kind.value: account.upgrade_cost(kind, self.upgrade_scale) for kind in UpgradeKind
                },
                free_roll_markers=dict(account.free_roll_markers),
            )

    def grant_ilp(self, player_id: str, amount: int) -> int:
        with self._exclusive(player_id) as account:
            balance = account.credit(amount)
            self.account_repo.save(account)
        self.event_bus.publish(IlpGrantedEvent(player_id=str(player_id), amount=int(amount), balance_after=balance))
        return balance

    def purchase_upgrade(self, player_id: str, kind: UpgradeKind | str) -> PurchaseResult:
        upgrade = UpgradeKind.parse(kind)
        if upgrade is None:
            raise ValueError(f"Unknown upgrade kind: {kind}")

        with self._exclusive(player_id) as account:
            result = account.purchase_upgrade(upgrade, self.upgrade_scale)
            if result.status == PurchaseStatus.SUCCESS:
                self.account_repo.save(account)
            balance_after = account.balance

        if result.succeeded:
            self.event_bus.publish(
                UpgradePurchasedEvent(
                    player_id=str(player_id),
                    upgrade_kind=upgrade.value,
                    new_level=result.level,
                    cost=int(result.cost or 0),
                    balance_after=balance_after,
                )
            )
        return result

    def roll(self, player_id: str, player: PlayerCapability, gate_name: str, count: int = 1) -> RollResult:
        with self._exclusive(player_id) as account:
            result = self.engine.roll(account, player, gate_name, count)
            if result.succeeded:
                self.account_repo.save(account)

        if result.succeeded:
            self.event_bus.publish(
                GateRolledEvent(
                    player_id=str(player_id),
                    gate_name=result.gate_name,
                    roll_count=result.count,
                    free=result.free,
                    cost=result.cost,
                    rewards=tuple(result.reward_labels),
                )
            )
        return result
