# tests/utils/test_logging_config.py
"""Unit tests for logging configuration utility.
=================================================

Tests for the logging setup utility in `nova.utils.logging_config`.

This module verifies that `setup_logging`:
- Creates rotating file handlers for the main log and a separate error log
  when `separate_error_log` is enabled.
- Honors the configured levels for each handler.
- Keeps console logging off unless `log_to_console` is set.
- Enables key tracing only through the ``NOVA_KEYTRACE`` environment variable.

Every test writes its log files into a temporary directory and restores the
root logger afterwards.
"""

import logging

import pytest

from nova.utils import logging_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    for handler in logging_config.KEY_LOGGER.handlers:
        handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    logging_config.KEY_LOGGER.handlers = []
    logging_config.KEY_LOGGER.disabled = False


def test_setup_logging_creates_handlers(tmp_path, monkeypatch) -> None:
    """Main and error rotating handlers are installed with their levels."""
    monkeypatch.delenv(logging_config.KEYTRACE_ENV, raising=False)
    logging_config.setup_logging(
        {
            "logging": {
                "file_level": "INFO",
                "console_level": "ERROR",
                "log_to_console": False,
                "separate_error_log": True,
                "log_file": str(tmp_path / "logs" / "editor.log"),
            }
        }
    )

    root = logging.getLogger()
    assert [type(h).__name__ for h in root.handlers] == ["RotatingFileHandler", "RotatingFileHandler"]
    assert root.handlers[0].level == logging.INFO
    assert root.handlers[1].level == logging.ERROR
    assert (tmp_path / "logs" / "editor.log").exists()
    assert (tmp_path / "logs" / "error.log").exists()
    assert logging_config.KEY_LOGGER.disabled is True


def test_setup_logging_defaults_to_config_dir(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    logging_config.setup_logging({})
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.DEBUG
    assert (tmp_path / ".config" / "nova" / "editor.log").exists()


def test_console_handler_is_optional(tmp_path) -> None:
    logging_config.setup_logging(
        {"logging": {"log_to_console": True, "console_level": "warning", "log_file": str(tmp_path / "e.log")}}
    )
    stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    assert len(stream_handlers) == 1
    assert stream_handlers[0].level == logging.WARNING


def test_unknown_level_falls_back_to_debug(tmp_path) -> None:
    logging_config.setup_logging({"logging": {"file_level": "LOUD", "log_file": str(tmp_path / "e.log")}})
    assert logging.getLogger().handlers[0].level == logging.DEBUG


def test_keytrace_enabled_by_environment(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv(logging_config.KEYTRACE_ENV, "1")
    logging_config.setup_logging({"logging": {"log_file": str(tmp_path / "e.log")}})

    key_logger = logging_config.KEY_LOGGER
    assert key_logger.disabled is False
    assert key_logger.propagate is False
    key_logger.debug("key=ctrl+q")
    for handler in key_logger.handlers:
        handler.flush()
    assert "key=ctrl+q" in (tmp_path / "keytrace.log").read_text()
