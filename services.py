"""
Service layer
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

import csv_codec
from dirty_state import DirtyStateTracker
from errors import NotFoundError, ValidationError
from events import EventBus, EventCategory
from item import InventoryItem, ItemDraft, clean_field
from labels import LabelGenerator
from query import QuerySpec, apply_query, find_by_inventory_number, find_by_name
from storage import JsonStorage
from store import ItemStore

logger = logging.getLogger(__name__)


class QuitChoice(Enum):
    SAVE_AND_QUIT = "save"
    DISCARD_AND_QUIT = "discard"
    CANCEL = "cancel"


class InventoryService:
    def __init__(
        self,
        store: ItemStore,
        storage: JsonStorage,
        tracker: DirtyStateTracker,
        event_bus: EventBus,
        labels: Optional[LabelGenerator] = None,
        quit_prompt: Optional[Callable[[], QuitChoice]] = None,
    ) -> None:
        # Service coordinates the store, the data files and the dirty flag.
        self._store = store
        self._storage = storage
        self._tracker = tracker
        self._events = event_bus
        self._labels = labels or LabelGenerator()
        self._quit_prompt = quit_prompt

    @property
    def store(self) -> ItemStore:
        return self._store

    @property
    def has_unsaved_changes(self) -> bool:
        return self._tracker.has_unsaved_changes

    def status_text(self, message: str) -> str:
        return self._tracker.status_text(message)

    # ---- persistence ---------------------------------------------------------

    def load(self) -> None:
        """Initial load at startup. Missing or broken files give an empty store."""
        self._store.replace_all(self._storage.load_items(), self._storage.load_locations())

    def save(self) -> None:
        """Writes both files. On failure the error propagates and the data stays dirty."""
        self._storage.save_items(self._store.items())
        self._storage.save_locations(self._store.locations())
        self._tracker.mark_clean()
        self._events.publish(EventCategory.DATA_PERSISTED, action="saved")

    def restore(self) -> None:
        """Discards in-memory changes and reloads both files."""
        self.load()
        self._events.publish(EventCategory.DATA_PERSISTED, action="restored")

    # ---- items ---------------------------------------------------------------

    def add_item(self, draft: ItemDraft, create_location: bool = False) -> InventoryItem:
        clean = draft.validated()
        location, is_new = self._resolve_location(clean.location, create_location)
        if is_new:
            self._store.add_location(location)
        return self._store.add_item(
            ItemDraft(
                inventory_number=clean.inventory_number,
                name=clean.name,
                description=clean.description,
                quantity=clean.quantity,
                location=location,
            )
        )

    def update_item(self, item_id: int, create_location: bool = False, **fields) -> bool:
        if self._store.get(item_id) is None:
            raise NotFoundError(f"Item id {item_id} not found.")
        cleaned = {name: clean_field(name, value) for name, value in fields.items()}

        if "location" in cleaned:
            location, is_new = self._resolve_location(cleaned["location"], create_location)
            if is_new:
                self._store.add_location(location)
            cleaned["location"] = location
        return self._store.update_item(item_id, **cleaned)

    def delete_item(self, item_id: int) -> bool:
        return self._store.delete_item(item_id)

    def add_location(self, name: str) -> str:
        return self._store.add_location(name)

    def remove_location(self, name: str) -> bool:
        return self._store.remove_location(name)

    def _resolve_location(self, location: str, create: bool) -> tuple[str, bool]:
        # Existing locations keep their stored spelling; new ones need confirmation.
        if not location:
            raise ValidationError("Please select a location.")
        existing = self._store.canonical_location(location)
        if existing is not None:
            return existing, False
        if not create:
            raise ValidationError(f"Location '{location}' does not exist.")
        return location, True

    # ---- queries -------------------------------------------------------------

    def query(self, spec: QuerySpec) -> list[InventoryItem]:
        return apply_query(self._store.items(), spec)

    def find_by_name(self, text: str) -> list[InventoryItem]:
        return find_by_name(self._store.items(), text)

    def find_by_inventory_number(self, text: str) -> list[InventoryItem]:
        return find_by_inventory_number(self._store.items(), text)

    # ---- import / export -----------------------------------------------------

    def import_csv(self, path: Union[str, Path]) -> list[InventoryItem]:
        """
        Appends the file's rows as new items and merges its locations.

        The JSON files are not touched, so the data is left marked as unsaved.
        """
        parsed = csv_codec.import_items(path)
        added = self._store.import_items(parsed.drafts, parsed.locations)
        logger.info("Imported %d items from %s", len(added), path)
        return added

    def export_csv(self, path: Union[str, Path]) -> int:
        return csv_codec.export_items(path, self._store.items())

    def labels_for_all(self) -> Optional[Path]:
        return self._labels.all_items(self._store.items())

    def labels_for_location(self, location: str) -> Optional[Path]:
        return self._labels.for_location(self._store.items(), location)

    def labels_for_inventory_number(self, pattern: str) -> Optional[Path]:
        return self._labels.for_inventory_number(self._store.items(), pattern)

    # ---- quit ----------------------------------------------------------------

    def request_quit(self) -> bool:
        """
        Returns True when the application may exit.

        With unsaved changes the quit prompt decides; a failed save during
        Save & Quit raises PersistenceError so the caller keeps running.
        """
        if not self._tracker.has_unsaved_changes:
            return True
        if self._quit_prompt is None:
            logger.warning("Quit refused: unsaved changes and no quit prompt configured")
            return False

        choice = self._quit_prompt()
        if choice is QuitChoice.SAVE_AND_QUIT:
            self.save()
            return True
        if choice is QuitChoice.DISCARD_AND_QUIT:
            logger.info("Quitting without saving")
            return True
        return False


def build_service(
    items_file: Union[str, Path] = "inventory.json",
    locations_file: Union[str, Path] = "locations.json",
    labels_dir: Union[str, Path] = ".",
    event_bus: Optional[EventBus] = None,
    quit_prompt: Optional[Callable[[], QuitChoice]] = None,
) -> InventoryService:
    """Wires the collaborators together. Data is not loaded until `load()`."""
    bus = event_bus or EventBus()
    tracker = DirtyStateTracker(bus)
    store = ItemStore(bus, tracker)
    return InventoryService(
        store,
        JsonStorage(items_file, locations_file),
        tracker,
        bus,
        labels=LabelGenerator(labels_dir),
        quit_prompt=quit_prompt,
    )
