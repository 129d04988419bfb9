import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from errors import PersistenceError
from item import InventoryItem
from storage import JsonStorage


class JsonStorageTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self._tmp.name)
        self.storage = JsonStorage(self.dir / "inventory.json", self.dir / "locations.json")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_files_load_empty(self) -> None:
        with self.assertLogs("storage", level="WARNING"):
            self.assertEqual(self.storage.load_items(), [])
            self.assertEqual(self.storage.load_locations(), [])

    def test_malformed_json_loads_empty_with_warning(self) -> None:
        self.storage.items_path.write_text("[{not json", encoding="utf-8")
        self.storage.locations_path.write_text('{"a": 1}', encoding="utf-8")
        with self.assertLogs("storage", level="WARNING") as logs:
            self.assertEqual(self.storage.load_items(), [])
            self.assertEqual(self.storage.load_locations(), [])
        self.assertTrue(any("Malformed JSON" in line for line in logs.output))

    def test_empty_file_loads_empty(self) -> None:
        self.storage.items_path.write_text("  \n", encoding="utf-8")
        with self.assertLogs("storage", level="WARNING"):
            self.assertEqual(self.storage.load_items(), [])

    def test_round_trip_with_unicode(self) -> None:
        items = [
            InventoryItem(
                id=1,
                inventory_number="A-1",
                name="Größenmesser 測定器",
                description="Ünïcödé ✓",
                quantity=3,
                location="Regal Ä",
                last_updated=datetime(2024, 5, 1, 10, 30, 15, 123456),
            ),
            InventoryItem(id=7, inventory_number="B-2", name="Cable", quantity=0, location="Bench",
                          last_updated=datetime(2024, 5, 2, 8, 0)),
        ]
        self.storage.save_items(items)
        self.assertEqual(self.storage.load_items(), items)

        text = self.storage.items_path.read_text(encoding="utf-8")
        self.assertIn("Größenmesser", text)
        self.assertIn('\n  {\n    "Id": 1,', text)

    def test_items_file_uses_original_field_names(self) -> None:
        item = InventoryItem(id=1, inventory_number="A-1", name="Widget", last_updated=datetime(2024, 1, 1))
        self.storage.save_items([item])
        data = json.loads(self.storage.items_path.read_text(encoding="utf-8"))
        self.assertEqual(
            sorted(data[0]),
            ["Description", "Id", "InventoryNumber", "LastUpdated", "Location", "Name", "Quantity"],
        )

    def test_bad_record_is_skipped(self) -> None:
        records = [
            {"Id": 1, "InventoryNumber": "A-1", "Name": "Good", "Quantity": 1, "Location": "Shelf1",
             "LastUpdated": "2024-01-01T00:00:00"},
            {"Id": 2, "InventoryNumber": "A-2", "Quantity": 1},
            {"Id": 3, "InventoryNumber": "A-3", "Name": "Negative", "Quantity": -4},
            "not an object",
        ]
        self.storage.items_path.write_text(json.dumps(records), encoding="utf-8")
        with self.assertLogs("storage", level="WARNING"):
            loaded = self.storage.load_items()
        self.assertEqual([i.id for i in loaded], [1])

    def test_loads_seven_digit_fractional_timestamps(self) -> None:
        records = [
            {"Id": 1, "InventoryNumber": "A-1", "Name": "Widget", "Quantity": 2, "Location": "Shelf1",
             "LastUpdated": "2025-04-10T14:23:45.1234567+02:00"},
            {"Id": 2, "InventoryNumber": "A-2", "Name": "Gadget", "Quantity": 1, "Location": "Shelf1",
             "LastUpdated": "2025-04-10T12:00:00.5Z"},
        ]
        self.storage.items_path.write_text(json.dumps(records), encoding="utf-8")
        loaded = self.storage.load_items()
        self.assertEqual([i.id for i in loaded], [1, 2])
        self.assertEqual(
            loaded[0].last_updated,
            datetime(2025, 4, 10, 14, 23, 45, 123456, tzinfo=timezone(timedelta(hours=2))),
        )
        self.assertEqual(loaded[1].last_updated, datetime(2025, 4, 10, 12, 0, 0, 500000, tzinfo=timezone.utc))

    def test_locations_saved_sorted(self) -> None:
        self.storage.save_locations(["Shelf2", "attic", "Bench"])
        data = json.loads(self.storage.locations_path.read_text(encoding="utf-8"))
        self.assertEqual(data, ["attic", "Bench", "Shelf2"])
        self.assertEqual(self.storage.load_locations(), ["attic", "Bench", "Shelf2"])

    def test_save_creates_parent_directory(self) -> None:
        storage = JsonStorage(self.dir / "nested" / "inv.json", self.dir / "nested" / "loc.json")
        storage.save_locations(["A"])
        self.assertTrue((self.dir / "nested" / "loc.json").exists())

    def test_save_failure_raises_persistence_error(self) -> None:
        blocker = self.dir / "blocker"
        blocker.write_text("", encoding="utf-8")
        storage = JsonStorage(blocker / "inventory.json", blocker / "locations.json")
        with self.assertLogs("storage", level="ERROR"):
            with self.assertRaises(PersistenceError):
                storage.save_items([])


if __name__ == "__main__":
    unittest.main(verbosity=2)
