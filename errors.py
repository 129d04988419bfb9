"""
Error taxonomy shared by the store, persistence and service layers.

Each error carries a `kind` so the UI can pick a message without inspecting text.
"""

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    PERSISTENCE = "persistence"


class InventoryError(Exception):
    """Base class for every recoverable inventory failure."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError, ValueError):
    """Required field empty, negative quantity, unknown location, bad import row."""

    kind = ErrorKind.VALIDATION


class NotFoundError(InventoryError, LookupError):
    """Operation targeted an item id that no longer exists."""

    kind = ErrorKind.NOT_FOUND


class DuplicateError(InventoryError, ValueError):
    kind = ErrorKind.DUPLICATE


class PersistenceError(InventoryError, RuntimeError):
    """Reading or writing a data file failed. In-memory state is left as-is."""

    kind = ErrorKind.PERSISTENCE
