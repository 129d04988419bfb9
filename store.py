"""
In-memory item store.

Single owner of the item list and the location list during a session. Every
mutation goes through this class so the dirty flag and the published events
always follow the same order: mutate, update the dirty flag, notify.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Iterable, Optional

from dirty_state import DirtyStateTracker
from errors import DuplicateError, NotFoundError, ValidationError
from events import EventBus, EventCategory
from item import InventoryItem, ItemDraft, clean_field

logger = logging.getLogger(__name__)


def location_sort_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


class ItemStore:
    def __init__(
        self,
        event_bus: EventBus,
        tracker: DirtyStateTracker,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._events = event_bus
        self._tracker = tracker
        self._clock = clock
        self._items: list[InventoryItem] = []
        self._locations: list[str] = []
        # Highest id handed out or loaded this session; ids are never reused.
        self._high_water = 0

    # ---- read side -------------------------------------------------------

    def __len__(self) -> int:
        return len(self._items)

    def items(self) -> tuple[InventoryItem, ...]:
        """Snapshot of all items in insertion order. Edits to it do not reach the store."""
        return tuple(i.copy() for i in self._items)

    def get(self, item_id: int) -> Optional[InventoryItem]:
        found = self._find(item_id)
        return found.copy() if found is not None else None

    def locations(self) -> tuple[str, ...]:
        return tuple(self._locations)

    def canonical_location(self, name: str) -> Optional[str]:
        """Returns the stored spelling of `name` (case-insensitive), or None."""
        wanted = (name or "").strip().casefold()
        for loc in self._locations:
            if loc.casefold() == wanted:
                return loc
        return None

    def has_location(self, name: str) -> bool:
        return self.canonical_location(name) is not None

    def next_id(self) -> int:
        current_max = max((i.id for i in self._items), default=0)
        return max(current_max, self._high_water) + 1

    # ---- items -------------------------------------------------------------

    def add_item(self, draft: ItemDraft) -> InventoryItem:
        clean = draft.validated()
        item = InventoryItem.from_draft(self.next_id(), clean, self._clock())
        self._items.append(item)
        self._high_water = item.id

        self._tracker.mark_dirty()
        self._events.publish(EventCategory.INVENTORY_CHANGED, action="added", item=item.copy())
        return item.copy()

    def update_item(self, item_id: int, **fields) -> bool:
        """
        Applies the given fields to an item.

        Returns False (no event, dirty flag untouched) when every value already
        matches. All fields are validated before any is applied.
        """
        item = self._find(item_id)
        if item is None:
            raise NotFoundError(f"Item id {item_id} not found.")

        cleaned = {name: clean_field(name, value) for name, value in fields.items()}
        changes = {name: value for name, value in cleaned.items() if getattr(item, name) != value}
        if not changes:
            return False

        for name, value in changes.items():
            setattr(item, name, value)
        item.last_updated = self._clock()

        self._tracker.mark_dirty()
        self._events.publish(
            EventCategory.INVENTORY_CHANGED,
            action="updated",
            item=item.copy(),
            changed_fields=sorted(changes),
        )
        return True

    def delete_item(self, item_id: int) -> bool:
        """Removes an item. Returns False if it was already gone."""
        item = self._find(item_id)
        if item is None:
            logger.info("Delete skipped: item id %s not found", item_id)
            return False

        self._items.remove(item)
        self._tracker.mark_dirty()
        self._events.publish(EventCategory.INVENTORY_CHANGED, action="deleted", item=item.copy())
        return True

    def import_items(self, drafts: Iterable[ItemDraft], locations: Iterable[str] = ()) -> list[InventoryItem]:
        """
        Appends a batch of drafts with fresh ids and merges unknown locations.

        The whole batch is validated first; one bad draft leaves the store untouched.
        """
        cleaned = [d.validated() for d in drafts]
        new_locations = self._unknown_locations(list(locations) + [d.location for d in cleaned])
        if not cleaned and not new_locations:
            return []

        if new_locations:
            self._locations.extend(new_locations)
            self._locations.sort(key=location_sort_key)

        now = self._clock()
        added = []
        for draft in cleaned:
            if draft.location:
                # Use the stored spelling of the location.
                draft = replace(draft, location=self.canonical_location(draft.location))
            item = InventoryItem.from_draft(self.next_id(), draft, now)
            self._items.append(item)
            self._high_water = item.id
            added.append(item.copy())

        self._tracker.mark_dirty()
        if added:
            self._events.publish(EventCategory.INVENTORY_CHANGED, action="imported", items=added)
        if new_locations:
            self._events.publish(EventCategory.LOCATIONS_CHANGED, action="imported", locations=new_locations)
        return added

    # ---- locations -----------------------------------------------------------

    def add_location(self, name: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Location name cannot be empty.")
        value = name.strip()
        if self.has_location(value):
            raise DuplicateError(f"Location '{value}' already exists.")

        self._locations.append(value)
        self._locations.sort(key=location_sort_key)

        self._tracker.mark_dirty()
        self._events.publish(EventCategory.LOCATIONS_CHANGED, action="added", location=value)
        return value

    def remove_location(self, name: str) -> bool:
        """Removes a location (case-insensitive). Items keep their location text."""
        existing = self.canonical_location(name)
        if existing is None:
            return False

        self._locations.remove(existing)
        self._tracker.mark_dirty()
        self._events.publish(EventCategory.LOCATIONS_CHANGED, action="removed", location=existing)
        return True

    # ---- bulk replace ------------------------------------------------------

    def replace_all(self, items: Iterable[InventoryItem], locations: Iterable[str]) -> None:
        """
        Swaps in freshly loaded data (startup or restore). Memory then matches
        disk, so the dirty flag is cleared rather than set.
        """
        unique_items: list[InventoryItem] = []
        seen_ids: set[int] = set()
        for item in items:
            if item.id in seen_ids:
                logger.warning("Skipping item with duplicate id %s", item.id)
                continue
            seen_ids.add(item.id)
            unique_items.append(item.copy())

        unique_locations: list[str] = []
        seen_locations: set[str] = set()
        for loc in locations:
            loc = loc.strip()
            if not loc or loc.casefold() in seen_locations:
                continue
            seen_locations.add(loc.casefold())
            unique_locations.append(loc)
        unique_locations.sort(key=location_sort_key)

        self._items = unique_items
        self._locations = unique_locations
        self._high_water = max(self._high_water, max(seen_ids, default=0))

        self._tracker.mark_clean()
        self._events.publish(EventCategory.INVENTORY_CHANGED, action="replaced", count=len(self._items))
        self._events.publish(EventCategory.LOCATIONS_CHANGED, action="replaced", count=len(self._locations))

    # ---- helpers -------------------------------------------------------------

    def _find(self, item_id: int) -> Optional[InventoryItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def _unknown_locations(self, candidates: Iterable[str]) -> list[str]:
        known = {loc.casefold() for loc in self._locations}
        result = []
        for loc in candidates:
            loc = (loc or "").strip()
            if loc and loc.casefold() not in known:
                known.add(loc.casefold())
                result.append(loc)
        return result
