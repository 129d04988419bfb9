"""
The store and service layer publish events when interesting state changes occur.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, DefaultDict

logger = logging.getLogger(__name__)


class EventCategory(Enum):
    INVENTORY_CHANGED = "InventoryChanged"
    LOCATIONS_CHANGED = "LocationsChanged"
    THEME_CHANGED = "ThemeChanged"
    DATA_PERSISTED = "DataPersisted"
    UNSAVED_FLAG_CHANGED = "UnsavedFlagChanged"


@dataclass(frozen=True)
class Event:
    """Base event type."""
    category: EventCategory
    payload: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Event], None]


class EventBus:
    """Simple synchronous pub/sub event bus."""

    def __init__(self) -> None:
        self._subscribers: DefaultDict[EventCategory, list[Handler]] = defaultdict(list)

    def subscribe(self, category: EventCategory, handler: Handler) -> None:
        # Registering the same handler twice for one category is a no-op.
        if not isinstance(category, EventCategory):
            raise ValueError(f"Unknown event category: {category!r}")
        handlers = self._subscribers[category]
        if handler not in handlers:
            handlers.append(handler)

    def unsubscribe(self, category: EventCategory, handler: Handler) -> None:
        handlers = self._subscribers.get(category, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, category: EventCategory, **payload: Any) -> list[BaseException]:
        """
        Calls every handler for `category` in registration order.

        A failing handler is logged and skipped; the failures are returned so
        callers (and tests) can inspect them.
        """
        event = Event(category=category, payload=payload)
        failures: list[BaseException] = []
        # Iterate over a copy so handlers may unsubscribe themselves.
        for handler in list(self._subscribers.get(category, [])):
            try:
                handler(event)
            except Exception as e:
                logger.exception("Handler %r failed for %s", handler, category.value)
                failures.append(e)
        return failures
