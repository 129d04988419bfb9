"""
JSON file persistence for items and locations.

Design goals:
- Forgiving on load: a missing, empty or malformed file degrades to an empty
  collection with a logged warning instead of stopping the application.
- Strict on save: any write failure surfaces as PersistenceError.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from errors import PersistenceError, ValidationError
from item import InventoryItem
from store import location_sort_key

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class JsonStorage:
    def __init__(self, items_path: PathLike = "inventory.json", locations_path: PathLike = "locations.json") -> None:
        self.items_path = Path(items_path)
        self.locations_path = Path(locations_path)

    # ---- items ---------------------------------------------------------------

    def load_items(self) -> list[InventoryItem]:
        data = self._read_array(self.items_path, "inventory")
        items = []
        for index, record in enumerate(data):
            try:
                items.append(InventoryItem.from_dict(record))
            except ValidationError as e:
                # One bad record should not cost the user the rest of the file.
                logger.warning("Skipping inventory record %d in %s: %s", index, self.items_path, e)
        logger.info("Loaded %d items from %s", len(items), self.items_path)
        return items

    def save_items(self, items: Iterable[InventoryItem]) -> None:
        records = [i.to_dict() for i in items]
        self._write_json(self.items_path, records, "inventory")
        logger.info("Saved %d items to %s", len(records), self.items_path)

    # ---- locations -------------------------------------------------------------

    def load_locations(self) -> list[str]:
        data = self._read_array(self.locations_path, "locations")
        locations = []
        for value in data:
            if isinstance(value, str) and value.strip():
                locations.append(value.strip())
            else:
                logger.warning("Skipping invalid location entry %r in %s", value, self.locations_path)
        logger.info("Loaded %d locations from %s", len(locations), self.locations_path)
        return locations

    def save_locations(self, locations: Iterable[str]) -> None:
        ordered = sorted(locations, key=location_sort_key)
        self._write_json(self.locations_path, ordered, "locations")
        logger.info("Saved %d locations to %s", len(ordered), self.locations_path)

    # ---- helpers -------------------------------------------------------------

    @staticmethod
    def _read_array(path: Path, label: str) -> list[Any]:
        if not path.exists():
            logger.warning("%s file does not exist at %s", label.capitalize(), path)
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Error reading %s from %s: %s", label, path, e)
            return []
        if not text.strip():
            logger.warning("%s file %s is empty", label.capitalize(), path)
            return []
        try:
            data: Optional[Any] = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Malformed JSON in %s file %s: %s", label, path, e)
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning("%s file %s does not contain a JSON array", label.capitalize(), path)
            return []
        return data

    @staticmethod
    def _write_json(path: Path, data: Any, label: str) -> None:
        try:
            text = json.dumps(data, indent=2, ensure_ascii=False)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error saving %s to %s: %s", label, path, e)
            raise PersistenceError(f"Failed to save {label} to {path}: {e}") from e
