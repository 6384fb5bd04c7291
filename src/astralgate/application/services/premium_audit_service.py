from __future__ import annotations

import logging

from astralgate.application.services.event_bus import EventBus
from astralgate.domain.events import GateRolledEvent, IlpGrantedEvent, UpgradePurchasedEvent


class PremiumAuditService:
    _HISTORY_MAX = 500

    def __init__(self, event_bus: EventBus) -> None:
        self.event_bus = event_bus
        self._history: list[dict[str, object]] = []
        self._logger = logging.getLogger(__name__)

    def register_handlers(self) -> None:
        self.event_bus.subscribe(IlpGrantedEvent, self.on_ilp_granted, priority=90)
        self.event_bus.subscribe(UpgradePurchasedEvent, self.on_upgrade_purchased, priority=90)
        self.event_bus.subscribe(GateRolledEvent, self.on_gate_rolled, priority=90)

    def history(self, player_id: str | None = None) -> list[dict[str, object]]:
        if player_id is None:
            return [dict(row) for row in self._history]
        return [dict(row) for row in self._history if row.get("player_id") == str(player_id)]

    def _record(self, row: dict[str, object]) -> None:
        self._history.append(row)
        if len(self._history) > self._HISTORY_MAX:
            del self._history[: -self._HISTORY_MAX]
        self._logger.info("Premium ledger entry", extra=dict(row))

    def on_ilp_granted(self, event: IlpGrantedEvent) -> None:
        self._record(
            {
                "kind": "ilp_granted",
                "player_id": event.player_id,
                "ilp_delta": int(event.amount),
                "balance_after": int(event.balance_after),
            }
        )

    def on_upgrade_purchased(self, event: UpgradePurchasedEvent) -> None:
        self._record(
            {
                "kind": "upgrade_purchased",
                "player_id": event.player_id,
                "ilp_delta": -int(event.cost),
                "balance_after": int(event.balance_after),
                "upgrade_kind": event.upgrade_kind,
                "new_level": int(event.new_level),
            }
        )

    def on_gate_rolled(self, event: GateRolledEvent) -> None:
        self._record(
            {
                "kind": "gate_rolled",
                "player_id": event.player_id,
                "gate": event.gate_name,
                "free": bool(event.free),
                "cost": int(event.cost),
                "rewards": list(event.rewards),
            }
        )


def register_premium_audit_handlers(event_bus: EventBus) -> PremiumAuditService:
    service = PremiumAuditService(event_bus)
    service.register_handlers()
    return service
