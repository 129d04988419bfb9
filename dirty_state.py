"""
Tracks whether the in-memory data differs from what was last saved or restored.
"""

from events import EventBus, EventCategory

UNSAVED_SUFFIX = " [* unsaved changes]"


class DirtyStateTracker:
    def __init__(self, event_bus: EventBus) -> None:
        self._events = event_bus
        self._dirty = False

    @property
    def has_unsaved_changes(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        """Called after an actual mutation of items or locations."""
        self._set(True)

    def mark_clean(self) -> None:
        """Called after a successful save or restore."""
        self._set(False)

    def status_text(self, message: str) -> str:
        return f"{message}{UNSAVED_SUFFIX}" if self._dirty else message

    def _set(self, value: bool) -> None:
        # Only transitions are announced.
        if self._dirty != value:
            self._dirty = value
            self._events.publish(EventCategory.UNSAVED_FLAG_CHANGED, has_unsaved_changes=value)
