# nova/core/GapBuffer.py
"""GapBuffer Module for Nova Editor
=================================
This module provides the `GapBuffer` class, the byte store that backs every
Nova document. The text lives in two growable byte runs separated by a
conceptual gap which is relocated to the active edit point, so typing at a
stable location costs O(1) and a jump costs O(distance moved).

All positions handed to and returned from the public API are logical byte
offsets into the concatenation of both runs. The runs themselves are an
internal detail: the run after the gap is stored in reverse order, which lets
the gap move by appending/popping at the tail of both arrays.

Decoding to `str` is lossy (`errors="replace"`) and only happens at the
presentation boundary; offset arithmetic never decodes.
"""
import logging
from typing import Union


logger = logging.getLogger("nova")

BytesLike = Union[bytes, bytearray, str]


def _as_bytes(text: BytesLike) -> bytes:
    if isinstance(text, str):
        return text.encode("utf-8")
    return bytes(text)


## ==================== GapBuffer Class ====================
class GapBuffer:
    """Class GapBuffer
    ===================
    Two-run byte storage with a movable gap.

    Attributes:
        _before (bytearray): Bytes in front of the gap, in document order.
        _after (bytearray): Bytes behind the gap, stored reversed.

    Methods:
        insert(offset, text):
            Inserts bytes at `offset` (clamped to the document length).
        delete(offset, length) -> bytes:
            Removes up to `length` bytes starting at `offset` and returns them.
        get_range(start, end) -> bytes:
            Returns the bytes in `[start, end)`, clamped to valid bounds.
        to_bytes() -> bytes / to_text() -> str:
            Materializes the whole document.
    """

    def __init__(self, data: BytesLike = b"") -> None:
        self._before = bytearray(_as_bytes(data))
        self._after = bytearray()

    def __len__(self) -> int:
        return len(self._before) + len(self._after)

    def __repr__(self) -> str:
        return f"GapBuffer(len={len(self)}, gap={self.gap_position})"

    @property
    def gap_position(self) -> int:
        """Logical offset where the gap currently sits."""
        return len(self._before)

    def _clamp(self, offset: int) -> int:
        return max(0, min(offset, len(self)))

    def _move_gap(self, offset: int) -> None:
        """Relocates the gap so that it starts at `offset`.

        Only the bytes between the old and the new gap position are copied.
        """
        gap = len(self._before)
        if offset < gap:
            moved = self._before[offset:]
            del self._before[offset:]
            self._after += moved[::-1]
        elif offset > gap:
            count = offset - gap
            moved = self._after[-count:]
            del self._after[-count:]
            self._before += moved[::-1]

    def insert(self, offset: int, text: BytesLike) -> int:
        """Inserts `text` at `offset` and returns the offset actually used."""
        data = _as_bytes(text)
        offset = self._clamp(offset)
        if not data:
            return offset
        self._move_gap(offset)
        self._before += data
        return offset

    def delete(self, offset: int, length: int) -> bytes:
        """Deletes up to `length` bytes at `offset`.

        Deleting past the end of the document is a silent no-op for the
        excess. Returns the bytes that were removed, in document order.
        """
        offset = self._clamp(offset)
        if length <= 0:
            return b""
        self._move_gap(offset)
        count = min(length, len(self._after))
        if count == 0:
            return b""
        removed = bytes(self._after[-count:][::-1])
        del self._after[-count:]
        return removed

    def get_range(self, start: int, end: int) -> bytes:
        """Returns the bytes in `[start, end)`, stitched across the gap."""
        start = self._clamp(start)
        end = self._clamp(end)
        if start >= end:
            return b""
        gap = len(self._before)
        result = bytearray()
        if start < gap:
            result += self._before[start:min(end, gap)]
        if end > gap:
            # Positions behind the gap are counted from the tail of _after.
            tail = len(self._after)
            lo = max(start, gap) - gap
            hi = end - gap
            result += self._after[tail - hi:tail - lo][::-1]
        return bytes(result)

    def to_bytes(self) -> bytes:
        return bytes(self._before) + bytes(self._after[::-1])

    def to_text(self) -> str:
        return self.to_bytes().decode("utf-8", errors="replace")
