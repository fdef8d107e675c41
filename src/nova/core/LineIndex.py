# nova/core/LineIndex.py
"""LineIndex Module for Nova Editor
=================================
Derived lookup structure that turns flat byte offsets of a `GapBuffer` into
`(line, column)` pairs and back.

The index is an ordered list of line-start offsets. Offset 0 is always the
first entry and the total store length is always the last one (the closing
sentinel), so `num_lines() == len(index) - 1 >= 1`. A terminator that ends the
store closes the last line; it does not open an empty one.

The index is rebuilt from scratch after every mutation. Out-of-range
arguments are clamped rather than rejected.
"""
import logging
from bisect import bisect_right
from typing import TYPE_CHECKING, Optional


if TYPE_CHECKING:
    from nova.core.GapBuffer import GapBuffer

logger = logging.getLogger("nova")

NEWLINE = b"\n"


## ==================== LineIndex Class ====================
class LineIndex:
    """Class LineIndex
    ===================
    Line-start offsets over a byte store.

    Attributes:
        _starts (list[int]): Line-start offsets followed by the sentinel.
        _terminated (bool): Whether the store ends with a line terminator.
    """

    def __init__(self, store: Optional["GapBuffer"] = None) -> None:
        self._starts: list[int] = [0, 0]
        self._terminated = False
        if store is not None:
            self.rebuild(store)

    def rebuild(self, store: "GapBuffer") -> None:
        """Rescans the whole store once and replaces the index."""
        data = store.to_bytes()
        starts = [0]
        pos = data.find(NEWLINE)
        while pos != -1:
            starts.append(pos + 1)
            pos = data.find(NEWLINE, pos + 1)
        total = len(data)
        if len(starts) == 1 or starts[-1] != total:
            starts.append(total)
        self._starts = starts
        self._terminated = data.endswith(NEWLINE)

    @property
    def offsets(self) -> tuple[int, ...]:
        return tuple(self._starts)

    def num_lines(self) -> int:
        return len(self._starts) - 1

    def total_length(self) -> int:
        return self._starts[-1]

    def clamp_line(self, line: int) -> int:
        return max(0, min(line, self.num_lines() - 1))

    def line_start(self, line: int) -> int:
        return self._starts[self.clamp_line(line)]

    def line_length(self, line: int) -> int:
        """Length of `line` in bytes, excluding its terminator."""
        line = self.clamp_line(line)
        length = self._starts[line + 1] - self._starts[line]
        is_last = line == self.num_lines() - 1
        if length > 0 and (not is_last or self._terminated):
            length -= 1
        return length

    def line_end(self, line: int) -> int:
        """Offset of the terminator of `line` (or the sentinel if it has none)."""
        return self.line_start(line) + self.line_length(line)

    def line_of(self, offset: int) -> tuple[int, int]:
        """Maps a byte offset to `(line, column)`."""
        offset = max(0, min(offset, self.total_length()))
        line = self.clamp_line(bisect_right(self._starts, offset) - 1)
        col = min(offset - self._starts[line], self.line_length(line))
        return line, col

    def offset_of(self, line: int, col: int) -> int:
        """Maps `(line, column)` to a byte offset; the column never overflows."""
        line = self.clamp_line(line)
        col = max(0, min(col, self.line_length(line)))
        return self._starts[line] + col
