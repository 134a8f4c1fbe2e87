"""Sentence, paragraph and section context for rule filters.

:class:`ContextAnalyzer` splits a document once and then answers
``context_at(offset)`` queries by binary search, so the pattern engine can
ask for the context of thousands of matches without re-splitting the text.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field

from ..models import SectionType
from ..utils.text_utils import strip_span
from .sections import Heading, extract_headings

# Sentence boundary: terminal punctuation (optionally followed by closing
# quotes/brackets), whitespace, then something that can open a sentence.
_BOUNDARY_RE = re.compile(r"[.!?]+[\"'”’)\]]*\s+(?=[A-Z0-9\"“'‘(\[])")
_PARAGRAPH_BREAK_RE = re.compile(r"\n[ \t\r\f\v]*\n\s*")
_ABBREVIATION_RE = re.compile(
    r"(?:^|[^A-Za-z])(?:e\.g|i\.e|et al|dr|mr|mrs|ms|prof|vs|fig|figs|cf|eq|approx|vol|pp|p|[A-Z])\.$",
    re.IGNORECASE,
)
_EXTRA_NON_TERMINAL = re.compile(r"(?:^|[^A-Za-z])(?:etc|al)\.$", re.IGNORECASE)
_YEAR_RE = re.compile(r"\b(?:1[5-9]\d{2}|20\d{2})[a-z]?\b|\bn\.d\.")
_IEEE_INNER_RE = re.compile(r"^\s*\d+(?:\s*[,–-]\s*\d+)*\s*$")

_SECTION_LOOKBACK = 200
_KEYWORD_SECTIONS: tuple[tuple[tuple[str, ...], SectionType], ...] = (
    (("abstract",), SectionType.ABSTRACT),
    (("introduction",), SectionType.INTRODUCTION),
    (("method", "material"), SectionType.METHODOLOGY),
    (("result", "finding"), SectionType.RESULTS),
    (("discussion",), SectionType.DISCUSSION),
    (("conclusion",), SectionType.CONCLUSION),
)


@dataclass(frozen=True)
class Span:
    start: int
    end: int

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end

    def slice(self, text: str) -> str:
        return text[self.start : self.end]


@dataclass(frozen=True)
class RuleContext:
    """Context handed to rule filters and suggestion generators."""

    text: str = field(repr=False)
    offset: int
    sentence: Span
    paragraph: Span
    section: SectionType | None = None

    @property
    def sentence_text(self) -> str:
        return self.sentence.slice(self.text)

    @property
    def paragraph_text(self) -> str:
        return self.paragraph.slice(self.text)

    def in_quotation(self) -> bool:
        return is_in_quotation(self.text, self.offset)

    def in_citation(self) -> bool:
        return is_in_citation(self.text, self.offset)

    def at_sentence_start(self) -> bool:
        return is_at_sentence_start(self.text, self.offset)


def ends_with_abbreviation(text: str, end: int, *, include_non_terminal: bool = False) -> bool:
    """True when ``text[:end]`` finishes with a known abbreviation such as ``e.g.``."""

    tail = text[max(0, end - 12) : end]
    if _ABBREVIATION_RE.search(tail):
        return True
    return include_non_terminal and bool(_EXTRA_NON_TERMINAL.search(tail))


def split_paragraphs(text: str) -> list[Span]:
    spans: list[Span] = []
    start = 0
    for match in _PARAGRAPH_BREAK_RE.finditer(text):
        s, e = strip_span(text, start, match.start())
        if s < e:
            spans.append(Span(s, e))
        start = match.end()
    s, e = strip_span(text, start, len(text))
    if s < e:
        spans.append(Span(s, e))
    return spans


def _split_block(text: str, block: Span) -> list[Span]:
    spans: list[Span] = []
    start = block.start
    for match in _BOUNDARY_RE.finditer(text, block.start, block.end):
        if match.group(0)[0] == "." and ends_with_abbreviation(text, match.start() + 1):
            continue
        punct_end = match.start() + len(match.group(0).rstrip())
        s, e = strip_span(text, start, punct_end)
        if s < e:
            spans.append(Span(s, e))
        start = match.end()
    s, e = strip_span(text, start, block.end)
    if s < e:
        spans.append(Span(s, e))
    return spans


def split_sentences(text: str) -> list[Span]:
    """Abbreviation-aware sentence spans, never crossing a paragraph break."""

    spans: list[Span] = []
    for paragraph in split_paragraphs(text):
        spans.extend(_split_block(text, paragraph))
    return spans


def is_in_quotation(text: str, offset: int) -> bool:
    before = text[:offset]
    if before.count('"') % 2 == 1:
        return True
    return before.rfind("“") > before.rfind("”")


def is_in_citation(text: str, offset: int) -> bool:
    """True inside an author-year parenthetical or an IEEE-style bracket."""

    for opener, closer in (("(", ")"), ("[", "]")):
        open_at = text.rfind(opener, 0, offset)
        if open_at == -1 or text.rfind(closer, 0, offset) > open_at:
            continue
        close_at = text.find(closer, offset)
        if close_at == -1:
            continue
        inner = text[open_at + 1 : close_at]
        if "\n" in inner:
            continue
        if opener == "(" and _YEAR_RE.search(inner):
            return True
        if opener == "[" and _IEEE_INNER_RE.match(inner):
            return True
    return False


def is_at_sentence_start(text: str, offset: int) -> bool:
    prefix = text[:offset]
    stripped = prefix.rstrip()
    if not stripped:
        return True
    if re.search(r"\n[ \t\r\f\v]*\n\s*$", prefix):
        return True
    trimmed = stripped.rstrip("\"'”’)]")
    if not trimmed or trimmed[-1] not in ".!?":
        return False
    return not ends_with_abbreviation(trimmed, len(trimmed))


class ContextAnalyzer:
    """Precomputed context lookups for one document."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.paragraphs = split_paragraphs(text)
        self.sentences = split_sentences(text)
        self.headings: list[Heading] = extract_headings(text)
        self._paragraph_starts = [span.start for span in self.paragraphs]
        self._sentence_starts = [span.start for span in self.sentences]
        self._heading_starts = [heading.start for heading in self.headings]

    @staticmethod
    def _lookup(spans: list[Span], starts: list[int], offset: int) -> Span | None:
        index = bisect_right(starts, offset) - 1
        if index >= 0 and spans[index].contains(offset):
            return spans[index]
        return None

    def sentence_at(self, offset: int) -> Span:
        return self._lookup(self.sentences, self._sentence_starts, offset) or Span(0, len(self.text))

    def paragraph_at(self, offset: int) -> Span:
        return self._lookup(self.paragraphs, self._paragraph_starts, offset) or Span(0, len(self.text))

    def section_at(self, offset: int) -> SectionType | None:
        index = bisect_right(self._heading_starts, offset) - 1
        if index >= 0:
            for heading in reversed(self.headings[: index + 1]):
                if heading.section_type is not SectionType.OTHER:
                    return heading.section_type
            return None
        return self._keyword_section(offset)

    def _keyword_section(self, offset: int) -> SectionType | None:
        paragraph = self.paragraph_at(offset)
        window = self.text[max(0, paragraph.start - _SECTION_LOOKBACK) : paragraph.end].lower()
        for keywords, section_type in _KEYWORD_SECTIONS:
            if any(keyword in window for keyword in keywords):
                return section_type
        return None

    def context_at(self, offset: int) -> RuleContext:
        return RuleContext(
            text=self.text,
            offset=offset,
            sentence=self.sentence_at(offset),
            paragraph=self.paragraph_at(offset),
            section=self.section_at(offset),
        )
