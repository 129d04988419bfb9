"""
Inventory item domain model.

This file defines the tracked record, the draft used to create one, and the
field validation rules both share.
"""

import re
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Optional

from errors import ValidationError

# Fields a caller may change after creation. `id` and `last_updated` are store-owned.
UPDATABLE_FIELDS = ("inventory_number", "name", "description", "quantity", "location")

_REQUIRED_TEXT = {"inventory_number": "Inventory number", "name": "Name"}

# fromisoformat before 3.11 needs exactly 3 or 6 fractional digits and no "Z" suffix.
_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> datetime:
    """Parses an ISO 8601 timestamp, including the 7-digit fractions .NET writes."""
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip(), count=1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def clean_field(field_name: str, value: Any) -> Any:
    """Validates one updatable field and returns its normalised value."""
    if field_name not in UPDATABLE_FIELDS:
        raise ValidationError(f"Unknown item field '{field_name}'.")

    if field_name == "quantity":
        # bool is an int subclass; reject it explicitly.
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("Quantity must be a whole number.")
        if value < 0:
            raise ValidationError("Quantity cannot be negative.")
        return value

    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name.replace('_', ' ').capitalize()} must be text.")
    value = value.strip()
    if field_name in _REQUIRED_TEXT and not value:
        raise ValidationError(f"{_REQUIRED_TEXT[field_name]} cannot be empty.")
    return value


@dataclass(frozen=True)
class ItemDraft:
    """Field values for an item that has not been given an id yet."""

    inventory_number: str
    name: str
    description: str = ""
    quantity: int = 0
    location: str = ""

    def validated(self) -> "ItemDraft":
        """Returns a trimmed copy, raising ValidationError on the first bad field."""
        return ItemDraft(**{f: clean_field(f, getattr(self, f)) for f in UPDATABLE_FIELDS})


@dataclass
class InventoryItem:
    """
    One component record. Several records may share an inventory number
    when they make up a single logical asset.
    """

    id: int
    inventory_number: str
    name: str
    description: str = ""
    quantity: int = 0
    location: str = ""
    last_updated: Optional[datetime] = None

    def __post_init__(self) -> None:
        if isinstance(self.id, bool) or not isinstance(self.id, int) or self.id < 1:
            raise ValidationError("Item id must be a positive integer.")
        for f in UPDATABLE_FIELDS:
            setattr(self, f, clean_field(f, getattr(self, f)))

    @classmethod
    def from_draft(cls, item_id: int, draft: ItemDraft, timestamp: datetime) -> "InventoryItem":
        return cls(
            id=item_id,
            inventory_number=draft.inventory_number,
            name=draft.name,
            description=draft.description,
            quantity=draft.quantity,
            location=draft.location,
            last_updated=timestamp,
        )

    def copy(self) -> "InventoryItem":
        return replace(self)

    def to_dict(self) -> dict:
        """Return the JSON shape used by the items file."""
        return {
            "Id": self.id,
            "InventoryNumber": self.inventory_number,
            "Name": self.name,
            "Description": self.description,
            "Quantity": self.quantity,
            "Location": self.location,
            "LastUpdated": self.last_updated.isoformat() if self.last_updated else None,
        }

    @staticmethod
    def from_dict(data: dict) -> "InventoryItem":
        """Re-create an item from a dict produced by to_dict."""
        if not isinstance(data, dict):
            raise ValidationError("Item record must be a JSON object.")
        try:
            raw_ts = data.get("LastUpdated")
            return InventoryItem(
                id=data["Id"],
                inventory_number=data["InventoryNumber"],
                name=data["Name"],
                description=data.get("Description") or "",
                quantity=data.get("Quantity", 0),
                location=data.get("Location") or "",
                last_updated=parse_timestamp(raw_ts) if raw_ts else None,
            )
        except ValidationError:
            raise
        except KeyError as e:
            raise ValidationError(f"Item record is missing field {e}.") from e
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Item record has a bad value: {e}") from e

    def __str__(self) -> str:
        return f"[Inv# {self.inventory_number}] [{self.id}] {self.name} ({self.quantity} pcs) - Loc: {self.location}"
