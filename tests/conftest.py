# tests/conftest.py
"""Pytest configuration with shared fixtures for the Nova editor tests."""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import MagicMock

import pytest

from nova.core.KeyMap import KeyEvent
from nova.core.Nova import Nova
from nova.core.TextDocument import TextDocument


# --- Base fixtures for curses and configuration ---
@pytest.fixture
def mock_stdscr() -> MagicMock:
    """Create a mock of the `curses` stdscr for testing UI components.

    Returns:
        MagicMock: A mocked `stdscr` with terminal size set to (24, 80).
    """
    stdscr = MagicMock()
    stdscr.getmaxyx.return_value = (24, 80)
    return stdscr


@pytest.fixture
def mock_config() -> dict[str, dict[str, Any]]:
    """Provide a baseline configuration for Nova tests.

    Auto-indent is off so Enter splits lines exactly; tests that need it
    switch it on explicitly.
    """
    return {
        "editor": {
            "tab_size": 4,
            "use_spaces": True,
            "auto_indent": False,
            "show_line_numbers": True,
            "show_help_bar": True,
        },
        "keybindings": {},
    }


# --- Editor fixtures ---
class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_editor(mock_config: dict[str, dict[str, Any]], clock: FakeClock) -> Callable[..., Nova]:
    """Factory building a `Nova` controller over an in-memory document."""

    def _make(text: str = "", path: Any = None, viewport_height: int = 10, **editor_cfg: Any) -> Nova:
        config = {**mock_config, "editor": {**mock_config["editor"], **editor_cfg}}
        document = TextDocument.from_text(text, path)
        return Nova(config, viewport_height=viewport_height, document=document, clock=clock)

    return _make


def key(spec: str) -> KeyEvent:
    """Build a key press from a spec like "ctrl+q", "enter" or "x"."""
    if len(spec) == 1:
        return KeyEvent.char(spec)
    if spec.startswith("ctrl+") and len(spec) == 6:
        return KeyEvent.ctrl(spec[-1])
    return KeyEvent.named(spec)


@pytest.fixture
def keys() -> Callable[[str], KeyEvent]:
    """Return the key-spec helper: `keys("ctrl+q")`, `keys("enter")`, `keys("x")`."""
    return key


@pytest.fixture
def press() -> Callable[..., None]:
    """Return a helper feeding key specs to an editor: `press(editor, "ctrl+f", "enter")`."""

    def _press(editor: Nova, *specs: str) -> None:
        for spec in specs:
            editor.handle_key(key(spec))

    return _press


@pytest.fixture
def type_text() -> Callable[[Nova, str], None]:
    """Return a helper typing printable characters into an editor."""

    def _type(editor: Nova, text: str) -> None:
        for ch in text:
            editor.handle_key(KeyEvent.char(ch))

    return _type
