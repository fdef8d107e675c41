# tests/test_utils.py
"""Unit tests for `nova.utils.utils`.
======================================

Covers configuration merging and loading, the `Settings` value, language
detection (static table and Pygments fallback) and the file helpers used by
the open-file command.
"""

import pytest

from nova.utils import utils
from nova.utils.utils import (
    DEFAULT_CONFIG,
    Settings,
    deep_merge,
    detect_language,
    get_display_width,
    has_known_extension,
    list_candidate_files,
    load_config,
)


# --- Configuration ---

def test_deep_merge_nested_dicts_do_not_mutate_inputs():
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    override = {"a": {"y": 3}, "c": 4}
    merged = deep_merge(base, override)
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}


def test_load_config_merges_user_file(tmp_path):
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text('[editor]\ntab_size = 8\n\n[keybindings]\nfind = "ctrl+e"\n')
    config = load_config(cfg_file)
    assert config["editor"]["tab_size"] == 8
    assert config["editor"]["use_spaces"] is True
    assert config["keybindings"]["find"] == "ctrl+e"
    assert config["keybindings"]["quit"] == DEFAULT_CONFIG["keybindings"]["quit"]


def test_load_config_with_broken_toml_uses_defaults(tmp_path, caplog):
    cfg_file = tmp_path / "config.toml"
    cfg_file.write_text("[editor\ntab_size = ")
    config = load_config(cfg_file)
    assert config == DEFAULT_CONFIG
    assert "Could not parse user config" in caplog.text


def test_load_config_creates_user_template(tmp_path, monkeypatch):
    monkeypatch.setattr(utils, "get_config_dir", lambda: tmp_path / "nova")
    config = load_config()
    assert (tmp_path / "nova" / "config.toml").is_file()
    assert config["editor"]["tab_size"] == DEFAULT_CONFIG["editor"]["tab_size"]


def test_settings_from_config_coerces_values(caplog):
    settings = Settings.from_config({"editor": {"tab_size": "2", "use_spaces": 0, "auto_indent": 1}})
    assert settings == Settings(tab_size=2, use_spaces=False, auto_indent=True)
    assert settings.indent_unit == "\t"

    assert Settings.from_config({"editor": {"tab_size": "wide"}}).tab_size == 4
    assert Settings.from_config({"editor": {"tab_size": 0}}).tab_size == 1
    assert Settings.from_config(None) == Settings()
    assert Settings.from_config({"editor": "nonsense"}) == Settings()


# --- Languages and files ---

@pytest.mark.parametrize(
    "path, expected",
    [
        ("main.rs", "rust"),
        ("script.py", "python"),
        ("README.md", "markdown"),
        ("app/Main.kt", "kotlin"),
        ("a.txt", "plaintext"),
        ("notes.zzqqx", "plaintext"),
        (None, "plaintext"),
    ],
)
def test_detect_language(path, expected):
    assert detect_language(path) == expected


def test_has_known_extension():
    assert has_known_extension("a.PY")
    assert has_known_extension("notes.txt")
    assert not has_known_extension("archive.tar.gz")
    assert not has_known_extension("Makefile")
    assert has_known_extension("x.zig", ["zig"])


def test_list_candidate_files_sorted_and_limited(tmp_path):
    for name in ["c.txt", "a.txt", "b.txt"]:
        (tmp_path / name).write_text("")
    (tmp_path / "subdir").mkdir()
    assert [p.name for p in list_candidate_files(tmp_path)] == ["a.txt", "b.txt", "c.txt"]
    assert [p.name for p in list_candidate_files(tmp_path, limit=2)] == ["a.txt", "b.txt"]
    assert list_candidate_files(tmp_path / "missing") == []


def test_get_display_width():
    assert get_display_width("abc") == 3
    assert get_display_width("日本") == 4
    assert get_display_width("") == 0
