# tests/test_core/test_line_index.py
"""LineIndex Tests
=================

Tests for the line-start index over a gap buffer: construction, the
offset <-> (line, column) mapping, clamping of out-of-range arguments and
consistency after random mutations.
"""

import random

import pytest

from nova.core.GapBuffer import GapBuffer
from nova.core.LineIndex import LineIndex


def index_for(data: bytes) -> LineIndex:
    return LineIndex(GapBuffer(data))


def test_empty_store_has_one_empty_line():
    idx = index_for(b"")
    assert idx.offsets == (0, 0)
    assert idx.num_lines() == 1
    assert idx.line_length(0) == 0


def test_trailing_terminator_closes_last_line():
    idx = index_for(b"abc\n")
    assert idx.offsets == (0, 4)
    assert idx.num_lines() == 1
    assert idx.line_length(0) == 3


def test_multiple_lines():
    idx = index_for(b"foo\nbar\n\nbaz\n")
    assert idx.offsets == (0, 4, 8, 9, 13)
    assert idx.num_lines() == 4
    assert [idx.line_length(i) for i in range(4)] == [3, 3, 0, 3]


def test_unterminated_last_line_keeps_its_length():
    idx = index_for(b"ab\ncd")
    assert idx.num_lines() == 2
    assert idx.line_length(1) == 2
    assert idx.line_end(1) == 5


def test_line_of_and_offset_of():
    idx = index_for(b"foo\nbar\n")
    assert idx.line_of(0) == (0, 0)
    assert idx.line_of(3) == (0, 3)
    assert idx.line_of(4) == (1, 0)
    assert idx.line_of(6) == (1, 2)
    assert idx.offset_of(1, 2) == 6


def test_offset_of_clamps_column_to_line_length():
    idx = index_for(b"foo\nbarbaz\n")
    assert idx.offset_of(0, 50) == 3  # never overflows into line 1
    assert idx.offset_of(0, -2) == 0


@pytest.mark.parametrize("line", [-1, 2, 100])
def test_out_of_range_lines_clamp(line):
    idx = index_for(b"foo\nbar\n")
    expected = 0 if line < 0 else 1
    assert idx.line_start(line) == idx.line_start(expected)
    assert idx.line_length(line) == 3


def test_line_of_past_end_maps_to_last_line():
    idx = index_for(b"foo\nbar\n")
    assert idx.line_of(8) == (1, 3)
    assert idx.line_of(1000) == (1, 3)
    assert idx.line_of(-4) == (0, 0)


@pytest.mark.parametrize("seed", [3, 11, 99])
def test_index_stays_consistent_after_random_edits(seed):
    """After every mutation the index agrees with a fresh scan of the text."""
    rng = random.Random(seed)
    buf = GapBuffer(b"\n")
    idx = LineIndex(buf)
    for _ in range(200):
        if len(buf) > 1 and rng.random() < 0.35:
            buf.delete(rng.randrange(0, len(buf) - 1), rng.randrange(1, 4))
        else:
            buf.insert(rng.randrange(0, len(buf)), rng.choice([b"x", b"\n", b"ab\n", "é".encode()]))
        if not buf.to_bytes().endswith(b"\n"):
            buf.insert(len(buf), b"\n")
        idx.rebuild(buf)

        data = buf.to_bytes()
        # The closing terminator does not open a new line.
        assert idx.num_lines() == data.count(b"\n")
        assert idx.total_length() == len(data)
        for line in range(idx.num_lines()):
            start = idx.offset_of(line, 0)
            assert idx.line_of(start) == (line, 0)
            assert data[start:start + idx.line_length(line)].count(b"\n") == 0
