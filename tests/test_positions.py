from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.utils import PositionCursor, from_line_column, to_line_column


def test_to_line_column_is_one_based() -> None:
    text = "first line\nsecond line\n\nfourth"

    assert tuple(to_line_column(text, 0)) == (1, 1)
    assert tuple(to_line_column(text, 6)) == (1, 7)
    assert tuple(to_line_column(text, 11)) == (2, 1)
    assert tuple(to_line_column(text, 23)) == (3, 1)
    assert tuple(to_line_column(text, len(text))) == (4, 7)


def test_empty_document_maps_to_first_line() -> None:
    assert tuple(to_line_column("", 0)) == (1, 1)


def test_carriage_return_counts_as_a_character() -> None:
    text = "ab\r\ncd"
    # "\r" is an ordinary character on line 1; "c" starts line 2.
    assert tuple(to_line_column(text, 2)) == (1, 3)
    assert tuple(to_line_column(text, 4)) == (2, 1)


def test_from_line_column_inverts_every_offset() -> None:
    text = "Alpha beta.\nGamma\n\nDelta epsilon"
    for offset in range(len(text) + 1):
        line, column = to_line_column(text, offset)
        assert from_line_column(text, line, column) == offset


@pytest.mark.parametrize("offset", [-1, 6])
def test_out_of_range_offsets_raise(offset: int) -> None:
    with pytest.raises(ValueError):
        to_line_column("hello", offset)


def test_from_line_column_rejects_positions_outside_document() -> None:
    text = "one\ntwo"
    with pytest.raises(ValueError):
        from_line_column(text, 3, 1)
    with pytest.raises(ValueError):
        from_line_column(text, 1, 6)
    with pytest.raises(ValueError):
        from_line_column(text, 0, 1)


def test_cursor_matches_direct_conversion_in_any_order() -> None:
    text = "line one\nline two\nline three\n\nlast"
    cursor = PositionCursor(text)
    offsets = [0, 3, 9, 20, 31, 5, len(text), 12, 12, 0]
    for offset in offsets:
        assert cursor.position(offset) == to_line_column(text, offset)

    cursor.reset()
    assert tuple(cursor.position(10)) == tuple(to_line_column(text, 10))
