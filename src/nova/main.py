# src/nova/main.py
"""
Nova Main Entry Point
=====================

Launches the Nova editor:
1) Configuration & Logging: loads config and initializes logging first.
2) Core Import: imports the controller after logging is ready.
3) Curses Wrapper: safely initializes/tears down curses to avoid terminal corruption.
4) Application Run: creates the controller for the optional CLI path and runs the loop.
"""

from __future__ import annotations

import curses
import locale
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from nova.utils.logging_config import setup_logging
from nova.utils.utils import load_config

logger = logging.getLogger("nova")


def _resolve_cli_path(argv: list[str]) -> Optional[Path]:
    """
    Resolve an optional CLI path from argv[1]. The file does NOT need to exist:
    a missing file opens as an empty document bound to that path.
    """
    if len(argv) <= 1:
        return None
    raw = argv[1].strip()
    if not raw:
        return None
    return Path(raw).expanduser()


def main_app_runner(stdscr: "curses.window", config: dict[str, Any], file_to_open: Optional[Path]) -> None:
    """
    Target for `curses.wrapper`: builds the controller and runs the terminal loop.
    """
    from nova.core.Nova import Nova
    from nova.ui.TerminalApp import TerminalApp

    # Ctrl+Z is undo; ignore terminal suspension.
    if hasattr(signal, "SIGTSTP"):
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    editor = Nova.from_path(file_to_open, config)
    TerminalApp(stdscr, editor).run()


def start() -> None:
    """
    Loads configuration, sets up logging and locale, and runs the editor via curses.wrapper.
    """
    try:
        config: dict[str, Any] = load_config()
        setup_logging(config)
    except Exception as e:
        # Logging is not ready; print to stderr and exit.
        print(f"FATAL: Could not initialize configuration or logging system: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("Nova editor starting up...")
    try:
        locale.setlocale(locale.LC_ALL, "")
    except locale.Error:
        logger.warning("Could not set system locale. Character rendering may be affected.")

    try:
        curses.wrapper(main_app_runner, config, _resolve_cli_path(sys.argv))
        logger.info("Nova editor shut down gracefully.")
    except Exception:
        logger.critical("Unhandled exception at the top level.", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    start()
