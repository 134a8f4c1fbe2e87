"""Small text helpers shared by the rule corpus, validators and aggregator."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\S+")
_TRAILING_PUNCT_RE = re.compile(r"[\s.!?;:,]+$")


def count_words(text: str) -> int:
    return len(_WORD_RE.findall(text))


def normalise_message(message: str) -> str:
    """Canonical form used when comparing messages for duplicates."""

    collapsed = _WHITESPACE_RE.sub(" ", message).strip().lower()
    return _TRAILING_PUNCT_RE.sub("", collapsed)


def match_case(source: str, replacement: str) -> str:
    """Return ``replacement`` with the capitalisation pattern of ``source``.

    >>> match_case("Their", "there")
    'There'
    >>> match_case("THEIR", "there")
    'THERE'
    """

    if not source or not replacement:
        return replacement
    if source.isupper() and len(source) > 1:
        return replacement.upper()
    if source[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def pluralise(noun: str, irregular: dict[str, str] | None = None) -> str:
    """Best-effort English plural for a singular countable noun."""

    lower = noun.lower()
    if irregular and lower in irregular:
        return match_case(noun, irregular[lower])
    if re.search(r"[^aeiou]y$", lower):
        return noun[:-1] + "ies"
    if re.search(r"(?:s|x|z|ch|sh)$", lower):
        return noun + "es"
    return noun + "s"


def line_bounds(text: str, offset: int) -> tuple[int, int]:
    """Return ``(start, end)`` of the line containing ``offset`` (newline excluded)."""

    start = text.rfind("\n", 0, offset) + 1
    end = text.find("\n", offset)
    if end == -1:
        end = len(text)
    return start, end


def strip_span(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink ``[start, end)`` so it excludes leading/trailing whitespace."""

    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end
