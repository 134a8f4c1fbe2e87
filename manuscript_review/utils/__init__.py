"""Utility modules shared across the package."""

from __future__ import annotations

from .positions import Position, PositionCursor, from_line_column, to_line_column
from .text_utils import count_words, match_case, normalise_message, pluralise

__all__ = [
    "Position",
    "PositionCursor",
    "from_line_column",
    "to_line_column",
    "count_words",
    "match_case",
    "normalise_message",
    "pluralise",
]
