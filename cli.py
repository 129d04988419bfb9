"""
Command-line interface (CLI) for the inventory manager.

A menu loop over the service layer. The table view subscribes to store events
and re-runs the active query whenever items or locations change.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from errors import InventoryError, PersistenceError
from events import Event, EventBus, EventCategory
from item import InventoryItem, ItemDraft
from query import QuerySpec, SortColumn
from services import InventoryService, QuitChoice, build_service
from settings import Settings, parse_args


def _prompt_non_empty(prompt: str) -> str:
    # Keep prompting until user provides a non-empty string.
    while True:
        value = input(prompt).strip()
        if value:
            return value
        print("Input cannot be empty. Please try again.")


def _prompt_int(prompt: str, *, min_value: Optional[int] = None, default: Optional[int] = None) -> int:
    # Keep prompting until user provides a valid integer (with optional min constraint).
    while True:
        raw = input(prompt).strip()
        if raw == "" and default is not None:
            return default
        try:
            value = int(raw)
        except ValueError:
            print("Please enter a valid whole number (integer).")
            continue

        if min_value is not None and value < min_value:
            print(f"Please enter a value >= {min_value}.")
            continue

        return value


def _prompt_text(prompt: str, default: str) -> str:
    # Empty input keeps the current value; "-" clears it.
    value = input(f"{prompt} [{default}]: ").strip()
    if value == "-":
        return ""
    return value or default


def _prompt_yes_no(prompt: str, default: bool = False) -> bool:
    hint = "Y/n" if default else "y/N"
    raw = input(f"{prompt} [{hint}]: ").strip().lower()
    if not raw:
        return default
    return raw in ("y", "yes")


def _prompt_quit_choice() -> QuitChoice:
    print("You have unsaved changes.")
    while True:
        raw = input("(S)ave & quit, (D)iscard & quit, or (C)ancel? ").strip().lower()
        if raw in ("s", "save"):
            return QuitChoice.SAVE_AND_QUIT
        if raw in ("d", "discard"):
            return QuitChoice.DISCARD_AND_QUIT
        if raw in ("c", "cancel", ""):
            return QuitChoice.CANCEL
        print("Please answer S, D or C.")


def _print_item(item: InventoryItem) -> None:
    updated = item.last_updated.strftime("%Y-%m-%d %H:%M") if item.last_updated else "-"
    print(
        f"- id={item.id} | inv#={item.inventory_number} | name={item.name} | qty={item.quantity} | "
        f"loc={item.location} | updated={updated}"
    )
    if item.description:
        print(f"    {item.description}")


def _print_locations(locations: list[str]) -> None:
    if locations:
        print("Locations:")
        for idx, loc in enumerate(locations, start=1):
            print(f" {idx}) {loc}")


def _pick_location(service: InventoryService) -> Optional[str]:
    """Chooses one saved location by number or name. None when there are none."""
    locations = service.store.locations()
    if not locations:
        print("No locations defined.")
        return None
    _print_locations(locations)
    while True:
        raw = _prompt_non_empty("Location (number or name): ")
        if raw.isdigit() and 1 <= int(raw) <= len(locations):
            return locations[int(raw) - 1]
        existing = service.store.canonical_location(raw)
        if existing is not None:
            return existing
        print("Please choose an existing location.")


def _prompt_location(service: InventoryService, current: Optional[str] = None) -> tuple[str, bool]:
    """Returns (location, create_new). Accepts a list number or a name."""
    locations = service.store.locations()
    _print_locations(locations)
    while True:
        prompt = "Location (number or name)"
        raw = _prompt_text(prompt, current) if current else _prompt_non_empty(f"{prompt}: ")
        if raw.isdigit() and 1 <= int(raw) <= len(locations):
            return locations[int(raw) - 1], False
        existing = service.store.canonical_location(raw)
        if existing is not None:
            return existing, False
        if _prompt_yes_no(f"Location '{raw}' does not exist. Create it?"):
            return raw, True
        print("Please choose an existing location.")


class TableView:
    """Holds the active sort/filter settings and redraws on store events."""

    def __init__(self, service: InventoryService, bus: EventBus) -> None:
        self.service = service
        self.spec = QuerySpec()
        self.auto_refresh = False
        bus.subscribe(EventCategory.INVENTORY_CHANGED, self._on_inventory_changed)
        bus.subscribe(EventCategory.UNSAVED_FLAG_CHANGED, self._on_unsaved_changed)
        bus.subscribe(EventCategory.DATA_PERSISTED, self._on_persisted)

    def render(self, items: Optional[Sequence[InventoryItem]] = None) -> None:
        shown = self.service.query(self.spec) if items is None else list(items)
        if not shown:
            print("No items to display.")
        for item in shown:
            _print_item(item)
        print(f"Displaying {len(shown)} of {len(self.service.store)} items ({self.spec.describe()}).")

    def _on_inventory_changed(self, event: Event) -> None:
        if self.auto_refresh:
            self.render()

    def _on_unsaved_changed(self, event: Event) -> None:
        if event.payload.get("has_unsaved_changes"):
            print("[status] You have unsaved changes.")

    def _on_persisted(self, event: Event) -> None:
        print(f"[status] Data {event.payload.get('action', 'saved')}.")


def _edit_sort_filter(view: TableView) -> None:
    columns = list(SortColumn)
    print("Sort by:")
    for idx, column in enumerate(columns, start=1):
        print(f" {idx}) {column.value}")
    current = view.spec
    current_idx = columns.index(SortColumn.parse(current.sort_column) or SortColumn.ID) + 1
    choice = _prompt_int(f"Column [{current_idx}]: ", min_value=1, default=current_idx)
    column = columns[choice - 1] if choice <= len(columns) else SortColumn.ID
    ascending = _prompt_yes_no("Ascending?", default=current.sort_ascending)
    text = input(f"Filter text (name/inv#/description, '-' to clear) [{current.text_filter}]: ").strip()
    if text == "":
        text = current.text_filter
    elif text == "-":
        text = ""
    location = input(f"Location filter ('all' to clear) [{current.location_filter or 'all'}]: ").strip()
    if location == "":
        location = current.location_filter
    elif location.lower() == "all":
        location = None
    view.spec = QuerySpec(sort_column=column, sort_ascending=ascending, text_filter=text, location_filter=location)


def _handle_labels(service: InventoryService) -> None:
    print(" 1) All items\n 2) By location\n 3) By inventory number")
    choice = _prompt_int("Labels for: ", min_value=1)
    if choice == 1:
        path = service.labels_for_all()
    elif choice == 2:
        location = _pick_location(service)
        if location is None:
            return
        path = service.labels_for_location(location)
    elif choice == 3:
        pattern = input("Inventory number contains (blank for all): ").strip()
        path = service.labels_for_inventory_number(pattern)
    else:
        print("Invalid choice.")
        return
    print(f"Labels generated: {path}" if path else "No matching items; no labels generated.")


def run(settings: Optional[Settings] = None) -> None:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.numeric_log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("Inventory Manager")
    print("-----------------")

    bus = EventBus()
    service = build_service(
        settings.items_file,
        settings.locations_file,
        settings.labels_dir,
        event_bus=bus,
        quit_prompt=_prompt_quit_choice,
    )
    view = TableView(service, bus)
    service.load()
    view.auto_refresh = True
    status = f"Loaded {len(service.store)} items and {len(service.store.locations())} locations."

    try:
        while True:
            print(f"\n[status] {service.status_text(status)}")
            print("Menu:")
            print("  1) List items              9) Add location")
            print("  2) Add item               10) Remove location")
            print("  3) Edit item              11) Save data")
            print("  4) Delete item            12) Restore data from disk")
            print("  5) Sort / filter          13) Import CSV")
            print("  6) Find by name           14) Export CSV")
            print("  7) Find by inventory #    15) Generate labels (PDF)")
            print("  8) List locations         16) Quit")

            choice = _prompt_int("Choose an option: ", min_value=1)

            try:
                if choice == 1:
                    view.render()
                    status = "Listed items."

                elif choice == 2:
                    inventory_number = _prompt_non_empty("Inventory number: ")
                    preview = service.store.next_id()
                    name = _prompt_non_empty(f"Name (new item id will be {preview}): ")
                    description = input("Description (optional): ").strip()
                    quantity = _prompt_int("Quantity (>= 0): ", min_value=0)
                    location, create = _prompt_location(service)
                    draft = ItemDraft(inventory_number, name, description, quantity, location)
                    item = service.add_item(draft, create_location=create)
                    status = f"Added item id={item.id}."

                elif choice == 3:
                    item_id = _prompt_int("Item id: ", min_value=1)
                    current = service.store.get(item_id)
                    if current is None:
                        status = f"Item id {item_id} not found."
                        continue
                    fields = {
                        "inventory_number": _prompt_text("Inventory number", current.inventory_number),
                        "name": _prompt_text("Name", current.name),
                        "description": _prompt_text("Description", current.description),
                        "quantity": _prompt_int(
                            f"Quantity [{current.quantity}]: ", min_value=0, default=current.quantity
                        ),
                    }
                    fields["location"], create = _prompt_location(service, current.location)
                    changed = service.update_item(item_id, create_location=create, **fields)
                    status = f"Updated item id={item_id}." if changed else "No changes made."

                elif choice == 4:
                    item_id = _prompt_int("Item id: ", min_value=1)
                    current = service.store.get(item_id)
                    if current is not None and not _prompt_yes_no(f"Delete '{current.name}'?"):
                        status = "Delete cancelled."
                        continue
                    deleted = service.delete_item(item_id)
                    status = f"Deleted item id={item_id}." if deleted else f"Item id {item_id} not found."

                elif choice == 5:
                    _edit_sort_filter(view)
                    view.render()
                    status = "Sort/Filter applied."

                elif choice == 6:
                    results = service.find_by_name(_prompt_non_empty("Name contains: "))
                    view.render(results)
                    status = f"Found {len(results)} item(s)."

                elif choice == 7:
                    results = service.find_by_inventory_number(_prompt_non_empty("Inventory number contains: "))
                    view.render(results)
                    status = f"Found {len(results)} item(s)."

                elif choice == 8:
                    locations = service.store.locations()
                    for loc in locations:
                        print(f"- {loc}")
                    status = f"Displayed {len(locations)} location(s)."

                elif choice == 9:
                    added = service.add_location(_prompt_non_empty("Location name: "))
                    status = f"Added location '{added}'."

                elif choice == 10:
                    name = _prompt_non_empty("Location to remove: ")
                    removed = service.remove_location(name)
                    status = f"Removed location '{name}'." if removed else f"Location '{name}' not found."

                elif choice == 11:
                    service.save()
                    status = "Data saved successfully."

                elif choice == 12:
                    if _prompt_yes_no("Reload data from disk? This discards any unsaved changes."):
                        service.restore()
                        status = "Data restored successfully from disk."
                    else:
                        status = "Restore cancelled."

                elif choice == 13:
                    added_items = service.import_csv(_prompt_non_empty("CSV file to import: "))
                    status = f"Imported {len(added_items)} item(s)."

                elif choice == 14:
                    count = service.export_csv(_prompt_non_empty("CSV file to write: "))
                    status = f"Exported {count} item(s)."

                elif choice == 15:
                    _handle_labels(service)
                    status = "Label generation finished."

                elif choice == 16:
                    if service.request_quit():
                        print("Goodbye.")
                        return
                    status = "Quit cancelled."

                else:
                    print("Invalid choice. Please try again.")

            except PersistenceError as e:
                print(f"File error: {e.message}")
                status = "Operation failed; your changes are still in memory."
            except InventoryError as e:
                print(f"Error: {e.message}")
                status = "Operation aborted."

    except (KeyboardInterrupt, EOFError):
        print("\nExiting...")


def main(argv: Optional[Sequence[str]] = None) -> None:
    run(parse_args(argv))


if __name__ == "__main__":
    main()
