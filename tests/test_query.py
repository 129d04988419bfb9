import unittest
from datetime import datetime

from errors import ValidationError
from item import InventoryItem
from query import (
    QuerySpec,
    SortColumn,
    apply_query,
    find_by_inventory_number,
    find_by_name,
    items_at_location,
    items_matching_inventory_number,
)


def _item(item_id, inv, name, qty=1, loc="Shelf1", desc="", day=1):
    return InventoryItem(
        id=item_id,
        inventory_number=inv,
        name=name,
        description=desc,
        quantity=qty,
        location=loc,
        last_updated=datetime(2024, 3, day, 9, 0),
    )


class QueryTests(unittest.TestCase):
    def setUp(self) -> None:
        # All sortable keys are distinct across these items.
        self.items = [
            _item(3, "B-7", "Monitor", qty=2, loc="Desk", desc="27 inch display", day=5),
            _item(1, "A-1", "Widget", qty=5, loc="Shelf1", day=3),
            _item(4, "C-2", "keyboard", qty=9, loc="attic", desc="Wireless", day=1),
            _item(2, "A-2", "Laptop", qty=1, loc="Bench", desc="Widget tester", day=4),
        ]

    def test_text_filter_scenario(self) -> None:
        store = [_item(1, "A-1", "Widget", qty=5, loc="Shelf1")]
        self.assertEqual([i.id for i in apply_query(store, QuerySpec(text_filter="wid"))], [1])
        self.assertEqual(apply_query(store, QuerySpec(text_filter="zzz")), [])

    def test_text_filter_matches_name_number_and_description(self) -> None:
        result = apply_query(self.items, QuerySpec(text_filter="WIDGET"))
        self.assertEqual([i.id for i in result], [1, 2])
        result = apply_query(self.items, QuerySpec(text_filter="c-2"))
        self.assertEqual([i.id for i in result], [4])

    def test_text_filter_ignores_location(self) -> None:
        self.assertEqual(apply_query(self.items, QuerySpec(text_filter="attic")), [])

    def test_location_filter_is_exact_and_case_insensitive(self) -> None:
        result = apply_query(self.items, QuerySpec(location_filter="SHELF1"))
        self.assertEqual([i.id for i in result], [1])
        self.assertEqual(apply_query(self.items, QuerySpec(location_filter="Shelf")), [])

    def test_blank_location_filter_means_all(self) -> None:
        self.assertEqual(len(apply_query(self.items, QuerySpec(location_filter="  "))), 4)
        self.assertEqual(len(apply_query(self.items, QuerySpec(location_filter=None))), 4)

    def test_all_location_filter_means_all(self) -> None:
        for value in ("all", "ALL", " All "):
            with self.subTest(value=value):
                self.assertEqual(len(apply_query(self.items, QuerySpec(location_filter=value))), 4)
        spec = QuerySpec(text_filter="widget", location_filter="All")
        self.assertEqual([i.id for i in apply_query(self.items, spec)], [1, 2])

    def test_filters_combine(self) -> None:
        spec = QuerySpec(text_filter="widget", location_filter="bench")
        self.assertEqual([i.id for i in apply_query(self.items, spec)], [2])

    def test_sort_inventory_number_descending(self) -> None:
        items = [_item(1, "A-1", "One"), _item(2, "A-2", "Two")]
        spec = QuerySpec(sort_column=SortColumn.INVENTORY_NUMBER, sort_ascending=False)
        self.assertEqual([i.inventory_number for i in apply_query(items, spec)], ["A-2", "A-1"])

    def test_sort_by_each_column(self) -> None:
        expected = {
            SortColumn.ID: [1, 2, 3, 4],
            SortColumn.INVENTORY_NUMBER: [1, 2, 3, 4],
            SortColumn.NAME: [4, 2, 3, 1],
            SortColumn.QUANTITY: [2, 3, 1, 4],
            SortColumn.LOCATION: [4, 2, 3, 1],
            SortColumn.LAST_UPDATED: [4, 1, 2, 3],
        }
        for column, ids in expected.items():
            with self.subTest(column=column):
                result = apply_query(self.items, QuerySpec(sort_column=column))
                self.assertEqual([i.id for i in result], ids)

    def test_descending_is_exact_reverse_for_distinct_keys(self) -> None:
        for column in SortColumn:
            with self.subTest(column=column):
                asc = apply_query(self.items, QuerySpec(sort_column=column, sort_ascending=True))
                desc = apply_query(self.items, QuerySpec(sort_column=column, sort_ascending=False))
                self.assertEqual([i.id for i in desc], [i.id for i in reversed(asc)])

    def test_equal_keys_keep_input_order(self) -> None:
        items = [_item(5, "A-1", "x"), _item(2, "A-1", "y"), _item(9, "A-1", "z")]
        for ascending in (True, False):
            spec = QuerySpec(sort_column=SortColumn.INVENTORY_NUMBER, sort_ascending=ascending)
            self.assertEqual([i.id for i in apply_query(items, spec)], [5, 2, 9])

    def test_unknown_sort_column_falls_back_to_id_ascending(self) -> None:
        spec = QuerySpec(sort_column="Colour", sort_ascending=False)
        self.assertEqual([i.id for i in apply_query(self.items, spec)], [1, 2, 3, 4])

    def test_sort_column_accepts_strings(self) -> None:
        self.assertIs(SortColumn.parse("Inventory Number"), SortColumn.INVENTORY_NUMBER)
        self.assertIs(SortColumn.parse("last_updated"), SortColumn.LAST_UPDATED)
        self.assertIs(SortColumn.parse("quantity"), SortColumn.QUANTITY)
        self.assertIsNone(SortColumn.parse(42))

    def test_query_is_pure(self) -> None:
        original = [i.copy() for i in self.items]
        spec = QuerySpec(sort_column=SortColumn.NAME, text_filter="zzz")
        self.assertEqual(apply_query(self.items, spec), [])
        spec = QuerySpec(sort_column=SortColumn.QUANTITY, sort_ascending=False)
        first = apply_query(self.items, spec)
        second = apply_query(self.items, spec)
        self.assertEqual(first, second)
        self.assertEqual(self.items, original)

    def test_empty_input(self) -> None:
        self.assertEqual(apply_query([], QuerySpec(text_filter="x", location_filter="y")), [])

    def test_find_by_name_and_number(self) -> None:
        self.assertEqual([i.id for i in find_by_name(self.items, "top")], [2])
        self.assertEqual([i.id for i in find_by_inventory_number(self.items, "a-")], [1, 2])
        self.assertEqual(find_by_name(self.items, "nothing"), [])
        with self.assertRaises(ValidationError):
            find_by_name(self.items, "  ")

    def test_label_selections(self) -> None:
        items = self.items + [_item(7, "A-1", "Bracket", loc="shelf1")]
        self.assertEqual([i.id for i in items_at_location(items, "Shelf1")], [7, 1])
        self.assertEqual([i.id for i in items_matching_inventory_number(items, "a-1")], [7, 1])
        self.assertEqual([i.id for i in items_matching_inventory_number(items, "a-")], [7, 1, 2])
        self.assertEqual([i.id for i in items_matching_inventory_number(items, " ")], [7, 1, 2, 3, 4])
        self.assertEqual(items_matching_inventory_number(items, "Z-9"), [])

    def test_describe(self) -> None:
        spec = QuerySpec(sort_column=SortColumn.NAME, sort_ascending=False, text_filter="wid", location_filter="Bench")
        self.assertEqual(spec.describe(), "sort=Name desc, text='wid', location='Bench'")

    def test_describe_without_filters(self) -> None:
        spec = QuerySpec(text_filter=None, location_filter="all")
        self.assertEqual(spec.describe(), "sort=Id asc")
        self.assertEqual([i.id for i in apply_query(self.items, spec)], [1, 2, 3, 4])


if __name__ == "__main__":
    unittest.main(verbosity=2)
