from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Type


PremiumEventHandler = Callable[[object], None]


class EventBus:
    """Synchronous fan-out of premium domain events.

    Handlers run in (priority, registration) order. A failing handler is logged
    and isolated so one listener can never undo a purchase or roll that has
    already been saved.
    """

    def __init__(self) -> None:
        self._handlers: DefaultDict[Type[object], List[tuple[int, int, PremiumEventHandler]]] = defaultdict(list)
        self._registrations = 0
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: PremiumEventHandler, *, priority: int = 100) -> None:
        rows = self._handlers[event_type]
        rows.append((int(priority), self._registrations, handler))
        rows.sort(key=lambda row: (row[0], row[1]))
        self._registrations += 1

    def unsubscribe(self, event_type: Type[object], handler: PremiumEventHandler) -> bool:
        rows = self._handlers.get(event_type, [])
        kept = [row for row in rows if row[2] is not handler]
        self._handlers[event_type] = kept
        return len(kept) != len(rows)

    def publish(self, event: object) -> List[Exception]:
        errors: List[Exception] = []
        for priority, _, handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception as exc:
                errors.append(exc)
                self._logger.exception(
                    "Premium event handler failed",
                    extra={
                        "event_type": type(event).__name__,
                        "handler": getattr(handler, "__qualname__", repr(handler)),
                        "priority": priority,
                    },
                )
        return errors
