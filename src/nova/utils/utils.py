# nova/utils/utils.py
"""
nova.utils.utils.py
===================

This module provides the core utility functions for the Nova editor.

Key functionalities include:
- Automatic User Configuration: creates `~/.config/nova/config.toml` from the
  embedded defaults on first run.
- Robust Configuration Loading: loads the hardcoded default configuration and
  recursively merges user settings from the TOML file over it.
- Editing Settings: the small `Settings` value the editing core consumes
  (tab width, spaces vs. tabs, auto-indent).
- Language Detection: maps a file path to a language tag through a static
  extension table, with Pygments as a fallback for unlisted extensions.
- Helper Utilities: directory listing for the open-file command, display
  width measurement with wcwidth, dictionary deep-merge.

The application is always runnable, even if the user configuration file is
missing or corrupted, by falling back to the embedded defaults.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import toml
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.util import ClassNotFound
from wcwidth import wcswidth, wcwidth

logger = logging.getLogger("nova")

PathLike = Union[str, Path]

# This dictionary is the built-in configuration. It serves as the ultimate
# fallback, ensuring the application can ALWAYS start.
DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "tab_size": 4,
        "use_spaces": True,
        "auto_indent": True,
        "show_line_numbers": True,
        "show_help_bar": True,
    },
    "keybindings": {
        "find": "ctrl+f", "replace": "ctrl+\\", "goto_line": "ctrl+g",
        "undo": "ctrl+z", "redo": "ctrl+y", "quit": "ctrl+q",
        "save_file": "ctrl+s", "open_file": "ctrl+o",
        "help": ["ctrl+h", "f1"],
        "delete_line": "ctrl+k", "delete_to_line_start": "ctrl+u",
        "delete_char": ["ctrl+d", "delete"],
        "toggle_line_numbers": "ctrl+b", "toggle_help_bar": "ctrl+t",
    },
    "logging": {
        "file_level": "DEBUG",
        "console_level": "WARNING",
        "log_to_console": False,
        "separate_error_log": False,
        "log_file": "",
    },
    "files": {
        "known_extensions": [
            "txt", "rs", "js", "ts", "py", "go", "md", "json", "toml", "yaml",
            "c", "h", "cpp", "hpp", "sh", "bash", "zsh", "html", "css", "xml",
        ],
        "open_candidates_limit": 10,
    },
}

LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    "txt": "plaintext",
    "rs": "rust",
    "js": "javascript", "mjs": "javascript",
    "ts": "typescript", "mts": "typescript",
    "py": "python",
    "rb": "ruby",
    "go": "go",
    "java": "java",
    "c": "c", "h": "c",
    "cpp": "cpp", "cc": "cpp", "cxx": "cpp", "hpp": "cpp",
    "cs": "csharp",
    "php": "php",
    "sh": "bash", "bash": "bash", "zsh": "bash",
    "json": "json",
    "yaml": "yaml", "yml": "yaml",
    "toml": "toml",
    "xml": "xml",
    "html": "html", "htm": "html",
    "css": "css",
    "md": "markdown",
}

PLAIN_TEXT = "plaintext"


# --- Configuration ---

def get_config_dir() -> Path:
    return Path.home() / ".config" / "nova"


def get_user_config_path() -> Path:
    return get_config_dir() / "config.toml"


def ensure_user_config_exists() -> None:
    """Writes the default configuration to `~/.config/nova/config.toml` if missing."""
    try:
        user_config_path = get_user_config_path()
        user_config_path.parent.mkdir(parents=True, exist_ok=True)
        if not user_config_path.exists():
            user_config_path.write_text(toml.dumps(DEFAULT_CONFIG), encoding="utf-8")
            logger.info(f"Created user config template at: {user_config_path}")
    except OSError as e:
        logger.critical(f"Could not create user configuration file: {e}", exc_info=True)


def load_config(path: Optional[PathLike] = None) -> Dict[str, Any]:
    """
    Loads and merges configurations, ensuring the application can always run.

    Args:
        path: Explicit configuration file. When omitted, the user file in
            `~/.config/nova` is used (and created from the defaults if missing).
    """
    final_config = deep_merge({}, DEFAULT_CONFIG)
    logger.debug("Loaded embedded default configuration.")

    if path is None:
        ensure_user_config_exists()
        config_path = get_user_config_path()
    else:
        config_path = Path(path)

    if config_path.is_file():
        try:
            user_config = toml.load(config_path)
            final_config = deep_merge(final_config, user_config)
            logger.info(f"Successfully loaded and merged user config from {config_path}")
        except (OSError, toml.TomlDecodeError) as e:
            logger.error(f"Could not parse user config '{config_path}': {e}. Using defaults.")

    return final_config


def deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Recursively merges the `override` dictionary into the `base` dictionary.
    """
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class Settings:
    """Editing preferences consumed by the Tab and Enter keys."""

    tab_size: int = 4
    use_spaces: bool = True
    auto_indent: bool = True

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]]) -> "Settings":
        editor_cfg = (config or {}).get("editor", {})
        if not isinstance(editor_cfg, dict):
            logger.warning(f"Ignoring malformed [editor] section: {editor_cfg!r}")
            editor_cfg = {}
        try:
            tab_size = int(editor_cfg.get("tab_size", cls.tab_size))
        except (TypeError, ValueError):
            logger.warning(f"Invalid tab_size {editor_cfg.get('tab_size')!r}, using {cls.tab_size}.")
            tab_size = cls.tab_size
        return cls(
            tab_size=max(1, tab_size),
            use_spaces=bool(editor_cfg.get("use_spaces", cls.use_spaces)),
            auto_indent=bool(editor_cfg.get("auto_indent", cls.auto_indent)),
        )

    @property
    def indent_unit(self) -> str:
        return " " * self.tab_size if self.use_spaces else "\t"


# --- Files and languages ---

def detect_language(path: Optional[PathLike]) -> str:
    """
    Returns the language tag for `path`.

    The static extension table wins; for anything else Pygments is asked for
    a lexer and its first alias is used. Unknown files are `plaintext`.
    """
    if not path:
        return PLAIN_TEXT
    name = Path(path).name
    ext = Path(name).suffix[1:]
    if ext in LANGUAGE_BY_EXTENSION:
        return LANGUAGE_BY_EXTENSION[ext]
    try:
        lexer = get_lexer_for_filename(name)
    except ClassNotFound:
        return PLAIN_TEXT
    if isinstance(lexer, TextLexer) or not lexer.aliases:
        return PLAIN_TEXT
    return lexer.aliases[0]


def has_known_extension(path: PathLike, known_extensions: Optional[List[str]] = None) -> bool:
    if known_extensions is None:
        known_extensions = DEFAULT_CONFIG["files"]["known_extensions"]
    ext = Path(path).suffix[1:].lower()
    return bool(ext) and ext in known_extensions


def list_candidate_files(directory: PathLike = ".", limit: int = 10) -> List[Path]:
    """Returns up to `limit` regular files of `directory`, sorted by name."""
    try:
        entries = sorted(p for p in Path(directory).iterdir() if p.is_file())
    except OSError as e:
        logger.error(f"Could not list directory '{directory}': {e}")
        return []
    return entries[:limit]


def get_display_width(text: str) -> int:
    """Return the printable width of *text* in terminal cells."""
    if text.isascii():
        return len(text)
    width = wcswidth(text)
    if width < 0:
        width = sum(max(wcwidth(ch), 0) for ch in text)
    return width
