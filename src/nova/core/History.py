# nova/core/History.py
"""History Module for Nova Editor
===============================
This module provides the `History` class, the edit operation log behind undo
and redo. Every mutating keystroke records exactly one invertible operation:

- `InsertOp(offset, text)`: `text` was inserted at `offset`.
- `DeleteOp(offset, text)`: `text` (the removed bytes) was deleted at `offset`.

The log is a list plus an index marking the next operation to redo. Pushing a
new operation truncates the redo tail (no branching history), and the oldest
entries are evicted once the capacity is exceeded.

Bulk mutations that have no inverse (replace-all, loading another file) must
call `clear()`.
"""
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union


if TYPE_CHECKING:
    from nova.core.TextDocument import TextDocument

DEFAULT_CAPACITY = 1000


@dataclass(frozen=True)
class InsertOp:
    offset: int
    text: bytes

    def apply(self, document: "TextDocument") -> int:
        document.insert(self.offset, self.text)
        return self.offset + len(self.text)

    def inverse(self) -> "DeleteOp":
        return DeleteOp(self.offset, self.text)


@dataclass(frozen=True)
class DeleteOp:
    offset: int
    text: bytes

    def apply(self, document: "TextDocument") -> int:
        document.delete_range(self.offset, len(self.text))
        return self.offset

    def inverse(self) -> InsertOp:
        return InsertOp(self.offset, self.text)


EditOp = Union[InsertOp, DeleteOp]


## ==================== History Class (Undo/Redo) ====================
class History:
    """Class History
    ===================
    Manages the undo and redo operation log for one document.

    Attributes:
        document (TextDocument): The document operations are replayed against.
        capacity (int): Maximum number of operations kept.
        cursor_offset (Optional[int]): Where the cursor belongs after the last
            successful undo/redo, or None if neither has run yet.

    Methods:
        push(op):
            Records a new operation, discarding anything that could be redone.
        clear():
            Drops every operation.
        undo() -> bool:
            Reverts the operation before the log position.
        redo() -> bool:
            Re-applies the operation at the log position.
    """

    def __init__(self, document: "TextDocument", capacity: int = DEFAULT_CAPACITY):
        self.document = document
        self.capacity = max(1, capacity)
        self._ops: list[EditOp] = []
        self._position = 0
        self.cursor_offset: Optional[int] = None

    def __len__(self) -> int:
        return len(self._ops)

    @property
    def position(self) -> int:
        return self._position

    @property
    def operations(self) -> tuple[EditOp, ...]:
        return tuple(self._ops)

    def can_undo(self) -> bool:
        return self._position > 0

    def can_redo(self) -> bool:
        return self._position < len(self._ops)

    def push(self, op: EditOp) -> None:
        """Adds a new operation to the log."""
        if not op.text:
            logging.debug(f"History: Ignoring empty {type(op).__name__}.")
            return
        del self._ops[self._position:]
        self._ops.append(op)
        if len(self._ops) > self.capacity:
            del self._ops[: len(self._ops) - self.capacity]
        self._position = len(self._ops)
        logging.debug(f"History: {type(op).__name__} at {op.offset} added. History size: {len(self._ops)}")

    def record_insert(self, offset: int, text: bytes) -> None:
        self.push(InsertOp(offset, bytes(text)))

    def record_delete(self, offset: int, text: bytes) -> None:
        self.push(DeleteOp(offset, bytes(text)))

    def clear(self) -> None:
        """Drops all entries and resets the log position."""
        self._ops.clear()
        self._position = 0
        self.cursor_offset = None
        logging.debug("History: Undo/Redo log cleared.")

    def rebind(self, document: "TextDocument") -> None:
        """Points the log at a new document and clears it."""
        self.document = document
        self.clear()

    def undo(self) -> bool:
        """Undoes the operation before the log position.

        Returns:
            bool: True if an operation was reverted, False if there was nothing to undo.
        """
        if not self.can_undo():
            logging.debug("History: Nothing to undo.")
            return False
        self._position -= 1
        op = self._ops[self._position]
        self.cursor_offset = op.inverse().apply(self.document)
        logging.debug(f"History: Undid {type(op).__name__} at {op.offset}. Position: {self._position}")
        return True

    def redo(self) -> bool:
        """Re-applies the operation at the log position.

        Returns:
            bool: True if an operation was re-applied, False if there was nothing to redo.
        """
        if not self.can_redo():
            logging.debug("History: Nothing to redo.")
            return False
        op = self._ops[self._position]
        self.cursor_offset = op.apply(self.document)
        self._position += 1
        logging.debug(f"History: Redid {type(op).__name__} at {op.offset}. Position: {self._position}")
        return True
