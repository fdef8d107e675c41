# tests/test_main.py
"""Tests for the command-line entry helpers in `nova.main`."""

from pathlib import Path
from unittest.mock import patch

from nova.main import _resolve_cli_path, main_app_runner


def test_resolve_cli_path():
    assert _resolve_cli_path(["nova"]) is None
    assert _resolve_cli_path(["nova", "  "]) is None
    assert _resolve_cli_path(["nova", "notes.txt"]) == Path("notes.txt")
    assert _resolve_cli_path(["nova", "~/x.rs"]) == Path.home() / "x.rs"


def test_main_app_runner_builds_editor_for_path(tmp_path, mock_stdscr):
    target = tmp_path / "new.py"
    with patch("nova.ui.TerminalApp.TerminalApp") as app_cls, patch("nova.main.signal") as signal_mock:
        main_app_runner(mock_stdscr, {}, target)

    stdscr, editor = app_cls.call_args.args
    assert stdscr is mock_stdscr
    assert editor.document.path == target
    assert editor.document.language == "python"
    app_cls.return_value.run.assert_called_once()
    signal_mock.signal.assert_called_once()
