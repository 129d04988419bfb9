"""
CSV import/export of inventory items.

Export writes every field. Import reads drafts only: ids and timestamps in the
file are ignored because the store assigns its own.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Union

from errors import PersistenceError, ValidationError
from item import InventoryItem, ItemDraft

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["Id", "InventoryNumber", "Name", "Description", "Quantity", "Location", "LastUpdated"]
_REQUIRED_COLUMNS = ("InventoryNumber", "Name")


@dataclass
class CsvImport:
    drafts: list[ItemDraft] = field(default_factory=list)
    # Distinct (case-insensitive) non-empty locations seen in the file, in file order.
    locations: list[str] = field(default_factory=list)


def export_items(path: Union[str, Path], items: Iterable[InventoryItem]) -> int:
    """Writes items to `path` and returns how many rows were written."""
    count = 0
    try:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
            writer.writeheader()
            for item in items:
                row = item.to_dict()
                row["LastUpdated"] = row["LastUpdated"] or ""
                writer.writerow(row)
                count += 1
    except OSError as e:
        logger.error("Error exporting to CSV %s: %s", path, e)
        raise PersistenceError(f"Failed to export CSV to {path}: {e}") from e
    logger.info("Exported %d items to %s", count, path)
    return count


def _parse_quantity(raw: str, line: int) -> int:
    raw = (raw or "").strip()
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"Row {line}: quantity '{raw}' is not a whole number.") from None


def import_items(path: Union[str, Path]) -> CsvImport:
    """
    Reads drafts from a CSV file.

    The file is parsed completely before anything is returned; the first bad
    row raises ValidationError naming its line number.
    """
    result = CsvImport()
    seen_locations: set[str] = set()
    try:
        # utf-8-sig drops a BOM written by spreadsheet tools.
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            missing = [c for c in _REQUIRED_COLUMNS if c not in header]
            if missing:
                raise ValidationError(f"CSV file is missing column(s): {', '.join(missing)}.")

            for row in reader:
                line = reader.line_num
                draft = ItemDraft(
                    inventory_number=row.get("InventoryNumber") or "",
                    name=row.get("Name") or "",
                    description=row.get("Description") or "",
                    quantity=_parse_quantity(row.get("Quantity"), line),
                    location=row.get("Location") or "",
                )
                try:
                    draft = draft.validated()
                except ValidationError as e:
                    raise ValidationError(f"Row {line}: {e.message}") from e
                result.drafts.append(draft)

                if draft.location and draft.location.casefold() not in seen_locations:
                    seen_locations.add(draft.location.casefold())
                    result.locations.append(draft.location)
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Error importing from CSV %s: %s", path, e)
        raise PersistenceError(f"Failed to read CSV file {path}: {e}") from e
    except csv.Error as e:
        raise ValidationError(f"CSV file {path} is malformed: {e}") from e

    logger.info("Read %d items and %d locations from %s", len(result.drafts), len(result.locations), path)
    return result
