# tests/test_core/test_text_document.py
"""TextDocument Tests
====================

Tests for the document layer:
1. Trailing-terminator normalization and its protection.
2. Line-oriented editing (insert_at, insert_newline, delete_range).
3. Wrapping search, case-insensitive and backward search.
4. Global and single replacement.
5. Loading and saving, including encodings, CRLF files and the trailing-newline flag.
"""

from pathlib import Path

import chardet
import pytest

from nova.core.TextDocument import TextDocument


# --- Normalization ---

def test_new_document_is_one_empty_line():
    doc = TextDocument()
    assert doc.to_bytes() == b"\n"
    assert doc.num_lines() == 1
    assert doc.get_line(0) == ""
    assert doc.file_name == "[No Name]"
    assert doc.language == "plaintext"
    assert doc.modified is False


def test_content_without_terminator_is_normalized():
    doc = TextDocument.from_text("abc")
    assert doc.to_bytes() == b"abc\n"
    assert doc.trailing_newline is False


def test_final_terminator_cannot_be_deleted():
    doc = TextDocument.from_text("ab\n")
    assert doc.delete_range(0, 10) == b"ab"
    assert doc.to_bytes() == b"\n"
    assert doc.delete_range(0, 1) == b""
    assert doc.num_lines() == 1


def test_insert_past_the_end_lands_before_terminator():
    doc = TextDocument.from_text("ab\n")
    assert doc.insert(50, "c") == 2
    assert doc.text == "abc\n"


# --- Editing ---

def test_insert_at_marks_modified():
    doc = TextDocument.from_text("abc\n")
    doc.insert_at(0, 1, "X")
    assert doc.text == "aXbc\n"
    assert doc.modified is True


def test_insert_newline_splits_line():
    doc = TextDocument.from_text("hello world\n")
    doc.insert_newline(0, 5)
    assert doc.num_lines() == 2
    assert doc.get_line(0) == "hello"
    assert doc.get_line(1) == " world"


def test_delete_range_joins_lines():
    doc = TextDocument.from_text("foo\nbar\n")
    assert doc.delete_range(3, 1) == b"\n"
    assert doc.text == "foobar\n"


def test_out_of_range_positions_clamp():
    doc = TextDocument.from_text("foo\nbar\n")
    assert doc.get_line(7) == ""
    assert doc.line_length(7) == 3
    assert doc.clamp_position(9, 9) == (1, 3)
    assert doc.clamp_position(-1, -1) == (0, 0)


def test_character_boundaries_over_multibyte_text():
    doc = TextDocument.from_text("aé😀\n")
    assert doc.next_char_offset(0) == 1
    assert doc.next_char_offset(1) == 3
    assert doc.next_char_offset(3) == 7
    assert doc.prev_char_offset(7) == 3
    assert doc.prev_char_offset(3) == 1
    assert doc.align_to_char(5) == 3
    assert doc.align_to_char(2) == 1


def test_leading_whitespace():
    doc = TextDocument.from_text("    x\n\t y\n")
    assert doc.leading_whitespace(0) == "    "
    assert doc.leading_whitespace(1) == "\t "


# --- Search ---

def test_search_wraps_past_end():
    doc = TextDocument.from_text("foo\nbar\nfoo\n")
    assert doc.find("foo", 2, 0) == (0, 0)


def test_search_starts_after_the_given_position():
    doc = TextDocument.from_text("foo\nbar\nfoo\n")
    assert doc.find("foo", 0, 0) == (2, 0)
    assert doc.find("bar", 0, 0) == (1, 0)


def test_search_empty_or_missing_query():
    doc = TextDocument.from_text("foo\n")
    assert doc.find("", 0, 0) is None
    assert doc.find("zzz", 0, 0) is None


def test_search_single_occurrence_is_found_from_itself():
    doc = TextDocument.from_text("only one\n")
    assert doc.find("one", 0, 5) == (0, 5)


def test_case_insensitive_search():
    doc = TextDocument.from_text("Hello\nHELLO\n")
    assert doc.find("hello", 0, 0) is None
    assert doc.find("hello", 0, 0, case_sensitive=False) == (1, 0)


def test_backward_search_wraps_from_end():
    doc = TextDocument.from_text("foo\nbar\nfoo\n")
    assert doc.find("foo", 2, 0, backward=True) == (0, 0)
    assert doc.find("foo", 0, 0, backward=True) == (2, 0)


# --- Replace ---

def test_replace_all_counts_occurrences():
    doc = TextDocument.from_text("cat cat cat\n")
    assert doc.replace_all("cat", "dog") == 3
    assert doc.text == "dog dog dog\n"
    assert doc.modified is True


def test_replace_all_with_zero_matches_keeps_document():
    doc = TextDocument.from_text("cat\n")
    assert doc.replace_all("cow", "dog") == 0
    assert doc.text == "cat\n"
    assert doc.modified is False


def test_replace_all_case_insensitive_and_special_characters():
    doc = TextDocument.from_text("A.b a.B\n")
    assert doc.replace_all("a.b", r"\1", case_sensitive=False) == 2
    assert doc.text == "\\1 \\1\n"


def test_replace_all_keeps_internal_terminator():
    doc = TextDocument.from_text("a\nb\n")
    assert doc.replace_all("\n", "") == 1
    assert doc.text == "ab\n"


def test_replace_next_replaces_single_occurrence():
    doc = TextDocument.from_text("cat cat\n")
    assert doc.replace_next("cat", "dog", 0, 2) == (0, 4)
    assert doc.text == "cat dog\n"
    assert doc.replace_next("cow", "dog", 0, 0) is None


def test_replace_next_matches_up_to_the_final_terminator():
    doc = TextDocument.from_text("b\nxb\n")
    assert doc.replace_next("b\n", "Y", 1, 1) == (0, 0)
    assert doc.text == "Yxb\n"


# --- Persistence ---

def test_load_and_save_preserve_trailing_newline(tmp_path: Path):
    with_nl = tmp_path / "with.txt"
    without_nl = tmp_path / "without.txt"
    with_nl.write_bytes(b"one\ntwo\n")
    without_nl.write_bytes(b"one\ntwo")

    doc1 = TextDocument.from_file(with_nl)
    doc2 = TextDocument.from_file(without_nl)
    assert doc1.to_bytes() == doc2.to_bytes() == b"one\ntwo\n"

    doc1.insert_at(1, 3, "!")
    doc2.insert_at(1, 3, "!")
    assert doc1.save() and doc2.save()
    assert with_nl.read_bytes() == b"one\ntwo!\n"
    assert without_nl.read_bytes() == b"one\ntwo!"
    assert doc1.modified is False


def test_empty_document_saves_as_empty_file(tmp_path: Path):
    target = tmp_path / "empty.md"
    doc = TextDocument()
    assert doc.save_as(target) is True
    assert target.read_bytes() == b""
    assert doc.path == target
    assert doc.language == "markdown"


def test_file_holding_only_a_newline_saves_unchanged(tmp_path: Path):
    target = tmp_path / "blank.txt"
    target.write_bytes(b"\n")
    doc = TextDocument.from_file(target)
    assert doc.trailing_newline is True
    assert doc.num_lines() == 1
    assert doc.save() is True
    assert target.read_bytes() == b"\n"


def test_new_document_saves_exactly_what_was_typed(tmp_path: Path):
    target = tmp_path / "new.txt"
    doc = TextDocument.for_new_file(target)
    assert doc.trailing_newline is False
    assert TextDocument().trailing_newline is False

    doc.insert_at(0, 0, "hi")
    assert doc.save() is True
    assert target.read_bytes() == b"hi"

    doc.insert_newline(0, 2)
    assert doc.save() is True
    assert target.read_bytes() == b"hi\n"


def test_crlf_file_is_edited_with_lf_and_saved_with_crlf(tmp_path: Path):
    target = tmp_path / "dos.txt"
    target.write_bytes(b"abc\r\ndef\r\n")
    doc = TextDocument.from_file(target)
    assert doc.text == "abc\ndef\n"
    assert doc.line_length(0) == 3
    assert doc.line_ending == "\r\n"

    doc.insert_at(0, 3, "X")
    assert doc.save() is True
    assert target.read_bytes() == b"abcX\r\ndef\r\n"


def test_save_without_path_fails():
    doc = TextDocument.from_text("x")
    doc.insert(0, "y")
    assert doc.save() is False
    assert doc.modified is True


def test_save_failure_keeps_modified_flag(tmp_path: Path):
    doc = TextDocument.from_text("x\n")
    doc.insert(0, "y")
    assert doc.save_as(tmp_path / "missing-dir" / "a.txt") is False
    assert doc.modified is True
    assert doc.path is None


def test_save_as_rederives_language(tmp_path: Path):
    doc = TextDocument.from_text("print(1)\n", tmp_path / "a.txt")
    assert doc.language == "plaintext"
    assert doc.save_as(tmp_path / "a.py")
    assert doc.language == "python"


def test_open_or_create_missing_file(tmp_path: Path):
    doc = TextDocument.open_or_create(tmp_path / "new.rs")
    assert doc.path == tmp_path / "new.rs"
    assert doc.text == "\n"
    assert doc.language == "rust"
    assert doc.modified is False


def test_from_file_raises_for_missing_file(tmp_path: Path):
    with pytest.raises(OSError):
        TextDocument.from_file(tmp_path / "nope.txt")


def test_non_utf8_file_falls_back_to_latin1(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(chardet, "detect", lambda raw: {"encoding": "ISO-8859-1", "confidence": 0.5})
    target = tmp_path / "latin.txt"
    original = "café olé déjà vu, à bientôt, ça va très bien\n" * 20
    target.write_bytes(original.encode("latin-1"))

    doc = TextDocument.from_file(target)
    assert doc.encoding == "latin-1"
    assert doc.get_line(0).startswith("café")

    doc.insert_at(0, 0, "é")
    assert doc.save()
    assert target.read_bytes() == ("é" + original).encode(doc.encoding)


def test_confident_chardet_guess_is_used(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(chardet, "detect", lambda raw: {"encoding": "windows-1252", "confidence": 0.9})
    target = tmp_path / "cp.txt"
    target.write_bytes("price: 5€\n".encode("windows-1252"))

    doc = TextDocument.from_file(target)
    assert doc.encoding == "windows-1252"
    assert doc.get_line(0) == "price: 5€"
