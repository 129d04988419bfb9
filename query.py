"""
Query helpers over an item snapshot: sort + filter for the table view, and the
single-field searches behind the Find menu entries.

Nothing here mutates its input.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union

from errors import ValidationError
from item import InventoryItem


class SortColumn(Enum):
    ID = "Id"
    INVENTORY_NUMBER = "InventoryNumber"
    NAME = "Name"
    QUANTITY = "Quantity"
    LOCATION = "Location"
    LAST_UPDATED = "LastUpdated"

    @classmethod
    def parse(cls, value: Any) -> Optional["SortColumn"]:
        """Accepts a member, its value or its name (any case). None if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        wanted = value.strip().replace(" ", "").replace("_", "").casefold()
        for column in cls:
            if wanted in (column.value.casefold(), column.name.replace("_", "").casefold()):
                return column
        return None


def _timestamp_key(item: InventoryItem) -> float:
    return item.last_updated.timestamp() if item.last_updated is not None else float("-inf")


_SORT_KEYS: dict[SortColumn, Callable[[InventoryItem], Any]] = {
    SortColumn.ID: lambda i: i.id,
    SortColumn.INVENTORY_NUMBER: lambda i: i.inventory_number.casefold(),
    SortColumn.NAME: lambda i: i.name.casefold(),
    SortColumn.QUANTITY: lambda i: i.quantity,
    SortColumn.LOCATION: lambda i: i.location.casefold(),
    SortColumn.LAST_UPDATED: _timestamp_key,
}


ALL_LOCATIONS = "all"


def location_filter_key(value: Optional[str]) -> str:
    """Normalised location filter; empty when every location is wanted."""
    key = (value or "").strip().casefold()
    return "" if key == ALL_LOCATIONS else key


@dataclass(frozen=True)
class QuerySpec:
    """Active sort/filter settings for the table view. Session-only."""

    sort_column: Union[SortColumn, str] = SortColumn.ID
    sort_ascending: bool = True
    text_filter: Optional[str] = ""
    # None, blank or "all" (any case) means all locations.
    location_filter: Optional[str] = None

    def describe(self) -> str:
        column = SortColumn.parse(self.sort_column) or SortColumn.ID
        parts = [f"sort={column.value} {'asc' if self.sort_ascending else 'desc'}"]
        text = (self.text_filter or "").strip()
        if text:
            parts.append(f"text='{text}'")
        location = location_filter_key(self.location_filter)
        if location:
            parts.append(f"location='{self.location_filter.strip()}'")
        return ", ".join(parts)


def apply_query(items: Iterable[InventoryItem], spec: QuerySpec) -> list[InventoryItem]:
    """Returns the filtered, sorted view of `items` described by `spec`."""
    result = list(items)

    location = location_filter_key(spec.location_filter)
    if location:
        result = [i for i in result if i.location.casefold() == location]

    text = (spec.text_filter or "").strip().casefold()
    if text:
        # Location has its own filter and is not part of free-text matching.
        result = [
            i for i in result
            if text in i.name.casefold()
            or text in i.inventory_number.casefold()
            or text in i.description.casefold()
        ]

    column = SortColumn.parse(spec.sort_column)
    if column is None:
        # Unknown column: id ascending regardless of the requested direction.
        return sorted(result, key=_SORT_KEYS[SortColumn.ID])

    # sorted() is stable for reverse=True as well, so equal keys keep input order.
    return sorted(result, key=_SORT_KEYS[column], reverse=not spec.sort_ascending)


def _search(items: Iterable[InventoryItem], text: str, attr: str) -> list[InventoryItem]:
    needle = (text or "").strip().casefold()
    if not needle:
        raise ValidationError("Please enter a search term.")
    return [i for i in items if needle in getattr(i, attr).casefold()]


def find_by_name(items: Iterable[InventoryItem], text: str) -> list[InventoryItem]:
    return _search(items, text, "name")


def find_by_inventory_number(items: Iterable[InventoryItem], text: str) -> list[InventoryItem]:
    return _search(items, text, "inventory_number")


def items_at_location(items: Iterable[InventoryItem], location: str) -> list[InventoryItem]:
    """Exact (case-insensitive) location match, ordered by inventory number then name."""
    wanted = (location or "").strip().casefold()
    matches = [i for i in items if i.location.casefold() == wanted]
    return sorted(matches, key=lambda i: (i.inventory_number.casefold(), i.name.casefold()))


def items_matching_inventory_number(items: Iterable[InventoryItem], pattern: str) -> list[InventoryItem]:
    """
    Items whose inventory number contains `pattern` (case-insensitive), ordered
    by inventory number then name. A blank pattern selects every item.
    """
    wanted = (pattern or "").strip().casefold()
    matches = [i for i in items if wanted in i.inventory_number.casefold()]
    return sorted(matches, key=lambda i: (i.inventory_number.casefold(), i.name.casefold()))
