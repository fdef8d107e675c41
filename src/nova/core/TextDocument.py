# nova/core/TextDocument.py
"""TextDocument Module for Nova Editor
===================================
This module provides the `TextDocument` class, which composes a `GapBuffer`
with a `LineIndex` and the file metadata of one open document.

Key Features:
-------------
- Line-oriented and offset-oriented editing; every mutation updates the store,
  then rebuilds the index, then marks the document as modified.
- Internal normalization: the buffer always ends with exactly one line
  terminator. The terminator is protected from deletion and stripped again on
  save unless the file on disk had one (`trailing_newline`). CRLF files are
  edited with LF terminators and written back with CRLF (`line_ending`).
- Wrapping substring search (forward or backward, optionally ASCII
  case-insensitive) and global or single replacement.
- File loading with encoding detection (strict UTF-8 first, chardet second)
  and saving in the detected encoding.

Positions are byte offsets; `(line, column)` columns are byte columns. The
`prev_char_offset`/`next_char_offset` helpers step over whole UTF-8 characters.
"""
import logging
import re
from pathlib import Path
from typing import Optional, Union

import chardet

from nova.core.GapBuffer import GapBuffer
from nova.core.LineIndex import LineIndex
from nova.utils.utils import detect_language

logger = logging.getLogger("nova")

PathLike = Union[str, Path]
Position = tuple[int, int]

NEWLINE = b"\n"
CRLF = "\r\n"
CHARDET_MIN_CONFIDENCE = 0.75
NO_NAME = "[No Name]"


def _encode(text: Union[str, bytes]) -> bytes:
    return text.encode("utf-8") if isinstance(text, str) else bytes(text)


def _is_continuation(byte: int) -> bool:
    return 0x80 <= byte < 0xC0


def decode_file_bytes(raw: bytes, source: str = "<bytes>") -> tuple[str, str]:
    """Decodes raw file content and returns `(text, encoding)`.

    Strict UTF-8 is tried first; otherwise chardet's guess is used when it is
    confident enough, and latin-1 (which cannot fail) is the last resort.
    """
    try:
        return raw.decode("utf-8"), "utf-8"
    except UnicodeDecodeError:
        pass

    result = chardet.detect(raw[: 1024 * 20])
    guess = result.get("encoding")
    confidence = result.get("confidence") or 0.0
    logger.debug(f"Chardet detected encoding '{guess}' with confidence {confidence:.2f} for '{source}'.")
    if guess and confidence >= CHARDET_MIN_CONFIDENCE:
        try:
            return raw.decode(guess, errors="replace"), guess
        except LookupError:
            logger.warning(f"Unknown encoding '{guess}' reported for '{source}', using latin-1.")
    return raw.decode("latin-1"), "latin-1"


## ==================== TextDocument Class ====================
class TextDocument:
    """Class TextDocument
    ===================
    One editable document: byte store, line index and file metadata.

    Attributes:
        path (Optional[Path]): File the document is bound to, if any.
        modified (bool): Whether there are unsaved changes.
        language (str): Language tag derived from the path extension.
        encoding (str): Encoding used to read and write the file.
        trailing_newline (bool): Whether the saved file ends with a terminator.
            Defaults to whether `content` ends with one, so an empty document
            saves as an empty file.
        line_ending (str): Terminator written to disk, "\n" or "\r\n".
    """

    def __init__(
        self,
        content: Union[str, bytes] = b"",
        path: Optional[PathLike] = None,
        *,
        encoding: str = "utf-8",
        trailing_newline: Optional[bool] = None,
        line_ending: str = "\n",
    ) -> None:
        data = _encode(content)
        if trailing_newline is None:
            trailing_newline = data.endswith(NEWLINE)
        if not data.endswith(NEWLINE):
            data += NEWLINE
        self._store = GapBuffer(data)
        self._index = LineIndex(self._store)
        self.path: Optional[Path] = Path(path) if path else None
        self.encoding = encoding
        self.trailing_newline = trailing_newline
        self.line_ending = line_ending
        self.modified = False
        self.language = detect_language(self.path)

    def __repr__(self) -> str:
        return (
            f"TextDocument(path={self.path!r}, lines={self.num_lines()}, "
            f"modified={self.modified}, language={self.language!r})"
        )

    # --- Construction ---

    @classmethod
    def from_text(cls, text: Union[str, bytes], path: Optional[PathLike] = None) -> "TextDocument":
        return cls(_encode(text), path)

    @classmethod
    def from_file(cls, path: PathLike) -> "TextDocument":
        """Loads `path`. Raises `OSError` if the file cannot be read."""
        path = Path(path)
        raw = path.read_bytes()
        text, encoding = decode_file_bytes(raw, str(path))
        line_ending = "\n"
        if CRLF in text:
            text = text.replace(CRLF, "\n")
            line_ending = CRLF
        doc = cls(text, path, encoding=encoding, line_ending=line_ending)
        logger.info(f"Loaded '{path}' ({len(raw)} bytes, encoding={encoding}, language={doc.language}).")
        return doc

    @classmethod
    def for_new_file(cls, path: PathLike) -> "TextDocument":
        return cls(b"", path)

    @classmethod
    def open_or_create(cls, path: PathLike) -> "TextDocument":
        """Loads `path`, or returns an empty document bound to it if it cannot be read."""
        try:
            return cls.from_file(path)
        except OSError as e:
            logger.info(f"Could not read '{path}' ({e}); starting a new document.")
            return cls.for_new_file(path)

    # --- Read access ---

    @property
    def text(self) -> str:
        return self._store.to_text()

    def to_bytes(self) -> bytes:
        return self._store.to_bytes()

    @property
    def file_name(self) -> str:
        return self.path.name if self.path else NO_NAME

    def total_length(self) -> int:
        return len(self._store)

    def num_lines(self) -> int:
        return self._index.num_lines()

    def line_length(self, line: int) -> int:
        return self._index.line_length(line)

    def line_bytes(self, line: int) -> bytes:
        start = self._index.line_start(line)
        return self._store.get_range(start, start + self._index.line_length(line))

    def get_line(self, line: int) -> str:
        if line < 0 or line >= self.num_lines():
            return ""
        return self.line_bytes(line).decode("utf-8", errors="replace")

    def leading_whitespace(self, line: int) -> str:
        text = self.get_line(line)
        return text[: len(text) - len(text.lstrip(" \t"))]

    def offset_of(self, line: int, col: int) -> int:
        return self._index.offset_of(line, col)

    def line_col_of(self, offset: int) -> Position:
        return self._index.line_of(offset)

    def clamp_position(self, line: int, col: int) -> Position:
        line = self._index.clamp_line(line)
        return line, max(0, min(col, self.line_length(line)))

    def align_to_char(self, offset: int) -> int:
        """Moves `offset` back to the first byte of the character it falls in."""
        offset = max(0, min(offset, self.total_length()))
        chunk = self._store.get_range(max(0, offset - 3), offset + 1)
        pos = offset - max(0, offset - 3)
        while 0 < pos < len(chunk) and _is_continuation(chunk[pos]):
            pos -= 1
            offset -= 1
        return offset

    def prev_char_offset(self, offset: int) -> int:
        """Offset of the start of the character before `offset`."""
        offset = max(0, min(offset, self.total_length()))
        if offset == 0:
            return 0
        chunk = self._store.get_range(max(0, offset - 4), offset)
        pos = len(chunk) - 1
        while pos > 0 and _is_continuation(chunk[pos]):
            pos -= 1
        return offset - (len(chunk) - pos)

    def next_char_offset(self, offset: int) -> int:
        """Offset just past the character that starts at `offset`."""
        total = self.total_length()
        offset = max(0, min(offset, total))
        if offset >= total:
            return total
        chunk = self._store.get_range(offset, offset + 4)
        pos = 1
        while pos < len(chunk) and _is_continuation(chunk[pos]):
            pos += 1
        return offset + pos

    # --- Mutation ---

    def _max_edit_offset(self) -> int:
        """Offset of the protected final terminator."""
        return self.total_length() - 1

    def _after_mutation(self) -> None:
        self._index.rebuild(self._store)
        self.modified = True

    def insert(self, offset: int, text: Union[str, bytes]) -> int:
        """Inserts `text` at `offset` and returns the (clamped) offset used."""
        data = _encode(text)
        offset = max(0, min(offset, self._max_edit_offset()))
        if not data:
            return offset
        self._store.insert(offset, data)
        self._after_mutation()
        return offset

    def delete_range(self, offset: int, length: int) -> bytes:
        """Deletes up to `length` bytes at `offset`; returns the removed bytes.

        The final terminator is never removed.
        """
        limit = self._max_edit_offset()
        offset = max(0, min(offset, limit))
        length = min(length, limit - offset)
        if length <= 0:
            return b""
        removed = self._store.delete(offset, length)
        self._after_mutation()
        return removed

    def insert_at(self, line: int, col: int, text: Union[str, bytes]) -> int:
        return self.insert(self.offset_of(line, col), text)

    def insert_newline(self, line: int, col: int) -> int:
        """Splits `line` at `col` into two lines."""
        return self.insert(self.offset_of(line, col), NEWLINE)

    def _replace_content(self, data: bytes) -> None:
        if not data.endswith(NEWLINE):
            data += NEWLINE
        self._store = GapBuffer(data)
        self._after_mutation()

    # --- Search and replace ---

    def _find_offset(self, needle: bytes, start: int, case_sensitive: bool, backward: bool,
                     inclusive: bool = False, limit: Optional[int] = None) -> Optional[int]:
        haystack = self._store.to_bytes()
        if limit is not None:
            haystack = haystack[:limit]
        if not case_sensitive:
            haystack = haystack.lower()
            needle = needle.lower()
        if backward:
            end = start + len(needle) - (0 if inclusive else 1)
            pos = haystack.rfind(needle, 0, max(end, 0))
            if pos == -1:
                pos = haystack.rfind(needle)
        else:
            pos = haystack.find(needle, start if inclusive else start + 1)
            if pos == -1:
                pos = haystack.find(needle)
        return None if pos == -1 else pos

    def find(
        self,
        query: Union[str, bytes],
        from_line: int,
        from_col: int,
        case_sensitive: bool = True,
        backward: bool = False,
    ) -> Optional[Position]:
        """Finds `query` strictly after `(from_line, from_col)`, wrapping around.

        Backward search looks strictly before the start and wraps from the end.
        Returns the match position, or None for an empty query or no match.
        """
        needle = _encode(query)
        if not needle:
            return None
        pos = self._find_offset(needle, self.offset_of(from_line, from_col), case_sensitive, backward)
        if pos is None:
            logger.debug(f"find: {query!r} not found.")
            return None
        return self.line_col_of(pos)

    def _pattern(self, old: bytes, case_sensitive: bool) -> "re.Pattern[bytes]":
        return re.compile(re.escape(old), 0 if case_sensitive else re.IGNORECASE)

    def replace_all(self, old: Union[str, bytes], new: Union[str, bytes], case_sensitive: bool = True) -> int:
        """Replaces every occurrence of `old` and returns the number of replacements.

        This is a bulk mutation with no inverse operation: callers holding an
        edit history must clear it, whatever the count.
        """
        old_b, new_b = _encode(old), _encode(new)
        if not old_b:
            return 0
        body = self._store.to_bytes()[:-1]
        replaced, count = self._pattern(old_b, case_sensitive).subn(lambda _m: new_b, body)
        if count:
            self._replace_content(replaced + NEWLINE)
        logger.debug(f"replace_all: {old!r} -> {new!r}, {count} replacement(s).")
        return count

    def replace_next(
        self,
        old: Union[str, bytes],
        new: Union[str, bytes],
        from_line: int,
        from_col: int,
        case_sensitive: bool = True,
    ) -> Optional[Position]:
        """Replaces the first occurrence at or after `(from_line, from_col)`, wrapping.

        Returns the position of the replacement, or None if nothing matched.
        """
        old_b, new_b = _encode(old), _encode(new)
        if not old_b:
            return None
        start = self.offset_of(from_line, from_col)
        pos = self._find_offset(
            old_b, start, case_sensitive, backward=False, inclusive=True, limit=self._max_edit_offset()
        )
        if pos is None:
            return None
        self._store.delete(pos, len(old_b))
        self._store.insert(pos, new_b)
        self._after_mutation()
        return self.line_col_of(pos)

    # --- Persistence ---

    def serialize(self) -> bytes:
        """Returns the on-disk representation (UTF-8) of the document."""
        data = self._store.to_bytes()
        if not self.trailing_newline:
            data = data[:-1]
        if self.line_ending == CRLF:
            data = data.replace(NEWLINE, CRLF.encode())
        return data

    def _write(self, path: Path) -> bool:
        text = self.serialize().decode("utf-8", errors="replace")
        try:
            with open(path, "w", encoding=self.encoding, errors="replace", newline="") as f:
                f.write(text)
        except (OSError, LookupError) as e:
            logger.error(f"Failed to write '{path}': {e}", exc_info=True)
            return False
        logger.info(f"Saved '{path}' ({len(text)} characters, encoding={self.encoding}).")
        return True

    def save(self) -> bool:
        """Writes the document to its path; the modified flag is cleared only on success."""
        if self.path is None:
            logger.warning("save: document has no path.")
            return False
        if not self._write(self.path):
            return False
        self.modified = False
        self.language = detect_language(self.path)
        return True

    def save_as(self, path: PathLike) -> bool:
        """Writes the document to `path` and rebinds it on success."""
        if not path or not str(path).strip():
            logger.warning("save_as: empty file name.")
            return False
        target = Path(path).expanduser()
        if not self._write(target):
            return False
        self.path = target
        self.modified = False
        self.language = detect_language(self.path)
        return True
