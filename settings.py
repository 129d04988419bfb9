"""
Runtime settings: data file locations and log level.

Relative paths resolve against the working directory.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class Settings:
    items_file: str = "inventory.json"
    locations_file: str = "locations.json"
    labels_dir: str = "."
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level '{self.log_level}'.")

    @property
    def numeric_log_level(self) -> int:
        return logging.getLevelName(self.log_level.upper())


def parse_args(argv: Optional[Sequence[str]] = None) -> Settings:
    ap = argparse.ArgumentParser(description="Terminal inventory manager")
    ap.add_argument("--items-file", default=Settings.items_file, help="Inventory JSON file")
    ap.add_argument("--locations-file", default=Settings.locations_file, help="Locations JSON file")
    ap.add_argument("--labels-dir", default=Settings.labels_dir, help="Directory for generated label PDFs")
    ap.add_argument(
        "--log-level",
        default=Settings.log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity (stderr)",
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="Shorthand for --log-level INFO")
    args = ap.parse_args(argv)

    level = args.log_level
    if args.verbose and level not in ("DEBUG", "INFO"):
        level = "INFO"
    return Settings(
        items_file=args.items_file,
        locations_file=args.locations_file,
        labels_dir=args.labels_dir,
        log_level=level,
    )
