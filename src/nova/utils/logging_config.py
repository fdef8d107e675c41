# nova/utils/logging_config.py
"""nova.utils.logging_config
===========================

Logging configuration for the Nova editor. It defines the global logger
objects and a single setup function, `setup_logging`, which configures
application-wide handlers and levels from the ``[logging]`` table of the
configuration.

Features:
    - Rotating file logging for general application events (editor.log).
    - Optional console logging to stderr (off by default: curses owns the terminal).
    - Optional separate error log file (error.log) for ERROR and CRITICAL events.
    - Optional key event tracing (keytrace.log) enabled via the NOVA_KEYTRACE environment variable.
    - Automatic creation of the log directory, with fallback to the system temp directory on failure.
    - Safe reconfiguration: clears existing handlers to avoid duplicate logs when called multiple times.
    - Never raises; errors are reported to stderr and logging continues best-effort.

Globals:
    logger: Main application logger ("nova").
    KEY_LOGGER: Logger for raw key-press trace events ("nova.keyevents").
"""

import logging
import logging.handlers
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, Optional


# ======================== Global loggers ========================
# Created at import time, unconfigured until ``setup_logging()`` runs.
logger = logging.getLogger("nova")
KEY_LOGGER = logging.getLogger("nova.keyevents")

KEYTRACE_ENV = "NOVA_KEYTRACE"
FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)-15s - %(message)s (%(filename)s:%(lineno)d)"


def _default_log_dir() -> Path:
    return Path.home() / ".config" / "nova"


def _prepare_log_path(filename: str, log_dir: Path) -> str:
    """Returns a writable path for `filename` inside `log_dir`, or in the temp dir."""
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return str(log_dir / filename)
    except OSError as e_mkdir:
        print(f"Error creating log directory '{log_dir}': {e_mkdir}", file=sys.stderr)
        fallback = os.path.join(tempfile.gettempdir(), f"nova-{filename}")
        print(f"Logging to temporary file: '{fallback}'", file=sys.stderr)
        return fallback


def _rotating_handler(path: str, max_bytes: int, backups: int) -> Optional[logging.Handler]:
    try:
        return logging.handlers.RotatingFileHandler(
            path, maxBytes=max_bytes, backupCount=backups, encoding="utf-8"
        )
    except OSError as e:
        print(f"Error setting up log file '{path}': {e}. File logging may be impaired.", file=sys.stderr)
        return None


def setup_logging(config: Optional[dict[str, Any]] = None) -> None:
    """Configures application-wide logging handlers and log levels.

    Up to four independent handlers are installed:

    1. File handler: rotating editor.log capturing everything from
       `file_level` (default DEBUG) upward.
    2. Console handler: optional stderr output at `console_level`
       (default WARNING), enabled by `log_to_console`.
    3. Error-file handler: optional rotating error.log with ERROR and
       CRITICAL events only, enabled by `separate_error_log`.
    4. Key-event handler: rotating keytrace.log attached to
       ``nova.keyevents`` when ``NOVA_KEYTRACE`` is ``1/true/yes``.

    Args:
        config (dict | None): Application configuration. Only the
            ``["logging"]`` table is consulted; besides the keys above,
            `log_file` names editor.log explicitly (its directory also
            receives error.log and keytrace.log). By default the files go
            to ``~/.config/nova``.
    """
    if config is None:
        config = {}
    logging_config = config.get("logging", {})

    log_file = logging_config.get("log_file") or ""
    if log_file:
        log_path = Path(log_file).expanduser()
        log_dir, log_name = log_path.parent, log_path.name
    else:
        log_dir, log_name = _default_log_dir(), "editor.log"

    log_file_level_str = str(logging_config.get("file_level", "DEBUG")).upper()
    log_file_level = getattr(logging, log_file_level_str, logging.DEBUG)

    file_formatter = logging.Formatter(FILE_FORMAT)
    log_filename = _prepare_log_path(log_name, log_dir)
    file_handler = _rotating_handler(log_filename, 2 * 1024 * 1024, 5)
    if file_handler:
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(log_file_level)

    console_handler = None
    if logging_config.get("log_to_console", False):
        console_level_str = str(logging_config.get("console_level", "WARNING")).upper()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s - %(name)-12s - %(message)s"))
        console_handler.setLevel(getattr(logging, console_level_str, logging.WARNING))

    error_file_handler = None
    if logging_config.get("separate_error_log", False):
        error_file_handler = _rotating_handler(os.path.join(os.path.dirname(log_filename), "error.log"),
                                               1 * 1024 * 1024, 3)
        if error_file_handler:
            error_file_handler.setFormatter(file_formatter)
            error_file_handler.setLevel(logging.ERROR)

    root_logger = logging.getLogger()
    root_logger.handlers = []  # Clear existing root handlers to avoid duplicates
    for handler in (file_handler, console_handler, error_file_handler):
        if handler:
            root_logger.addHandler(handler)
    root_logger.setLevel(log_file_level)

    # Key Event Logger
    KEY_LOGGER.propagate = False
    KEY_LOGGER.setLevel(logging.DEBUG)
    KEY_LOGGER.handlers = []
    KEY_LOGGER.disabled = False

    if os.environ.get(KEYTRACE_ENV, "").lower() in {"1", "true", "yes"}:
        key_trace_filename = os.path.join(os.path.dirname(log_filename), "keytrace.log")
        key_trace_handler = _rotating_handler(key_trace_filename, 1 * 1024 * 1024, 3)
        if key_trace_handler:
            key_trace_handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
            KEY_LOGGER.addHandler(key_trace_handler)
            logging.info("Key event tracing enabled, logging to '%s'.", key_trace_filename)
        else:
            KEY_LOGGER.disabled = True
    else:
        KEY_LOGGER.addHandler(logging.NullHandler())
        KEY_LOGGER.disabled = True
        logging.debug("Key event tracing is disabled.")

    logging.info(
        "Logging setup complete. Root logger level: %s.",
        logging.getLevelName(root_logger.level),
    )
    if file_handler:
        logging.info(f"File logging to '{log_filename}' at level: {logging.getLevelName(file_handler.level)}.")
    if console_handler:
        logging.info(f"Console logging to stderr at level: {logging.getLevelName(console_handler.level)}.")
    if error_file_handler:
        logging.info("Error logging to 'error.log' at level: ERROR.")
