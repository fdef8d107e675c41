# src/nova/core/__init__.py
"""Public facade for nova.core: re-export main classes from CamelCase modules.

Keeps Java-like file names (GapBuffer.py, History.py, ...),
but provides flat imports for convenience and stability.
"""

# Re-export classes/symbols from CamelCase modules
from .GapBuffer import GapBuffer  # noqa: F401
from .History import DeleteOp, History, InsertOp  # noqa: F401
from .KeyMap import KeyEvent, KeyMap  # noqa: F401
from .LineIndex import LineIndex  # noqa: F401
from .Nova import Nova, Snapshot  # noqa: F401
from .TextDocument import TextDocument  # noqa: F401


__all__ = [
    "GapBuffer",
    "LineIndex",
    "TextDocument",
    "History",
    "InsertOp",
    "DeleteOp",
    "KeyEvent",
    "KeyMap",
    "Nova",
    "Snapshot",
]
