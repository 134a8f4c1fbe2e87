"""Offset <-> line/column conversion.

Lines and columns are 1-based. Only ``\\n`` separates lines; a ``\\r`` is
counted as an ordinary character so positions are identical whatever line
ending convention the document uses.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    line: int
    column: int

    def __iter__(self):
        yield self.line
        yield self.column


def _check_offset(text: str, offset: int) -> None:
    if offset < 0 or offset > len(text):
        raise ValueError(f"offset {offset} outside document of length {len(text)}")


def to_line_column(text: str, offset: int) -> Position:
    """Return the 1-based (line, column) for ``offset``.

    ``offset`` may equal ``len(text)`` (end of document). Empty text at
    offset 0 maps to line 1, column 1.
    """

    _check_offset(text, offset)
    line = text.count("\n", 0, offset) + 1
    last_newline = text.rfind("\n", 0, offset)
    return Position(line=line, column=offset - last_newline)


def from_line_column(text: str, line: int, column: int) -> int:
    """Inverse of :func:`to_line_column`."""

    if line < 1 or column < 1:
        raise ValueError("line and column are 1-based")
    line_start = 0
    for _ in range(line - 1):
        newline = text.find("\n", line_start)
        if newline == -1:
            raise ValueError(f"line {line} beyond end of document")
        line_start = newline + 1
    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)
    offset = line_start + column - 1
    # Column may point one past the last character of the line (at the newline
    # or at end of document) but not further.
    if offset > line_end:
        raise ValueError(f"column {column} beyond end of line {line}")
    return offset


class PositionCursor:
    """Incremental offset mapper for a single document.

    Resolving offsets in ascending order only scans the text between the
    previous and the current offset. Moving backwards scans back from the
    cursor rather than restarting at the top of the document.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        self._offset = 0
        self._line = 1
        self._line_start = 0

    def position(self, offset: int) -> Position:
        text = self._text
        _check_offset(text, offset)
        if offset >= self._offset:
            self._line += text.count("\n", self._offset, offset)
            newline = text.rfind("\n", self._offset, offset)
            if newline != -1:
                self._line_start = newline + 1
        else:
            self._line -= text.count("\n", offset, self._offset)
            self._line_start = text.rfind("\n", 0, offset) + 1
        self._offset = offset
        return Position(line=self._line, column=offset - self._line_start + 1)

    def reset(self) -> None:
        self._offset = 0
        self._line = 1
        self._line_start = 0
