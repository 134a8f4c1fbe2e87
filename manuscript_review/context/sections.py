"""Heading detection and section classification.

Headings are recognised line by line:

* markdown headings (``#`` to ``######``), level = number of hashes
* numbered headings (``2.1 Participants``), level = number of numeric parts
* ALL CAPS lines and Title Case lines standing on their own after a blank
  line (or at the top of the document), level 1

Both the context analyzer (section labels for rule filters) and the
structure validator consume the headings produced here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator

from ..models import SectionType
from ..utils.text_utils import count_words

_MARKDOWN_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
_NUMBERED_RE = re.compile(r"^(\d+(?:\.\d+)*)\.?\s+(\S.*)$")
_CAPTION_RE = re.compile(r"^(?:table|figure|fig\.)\s+\d+", re.IGNORECASE)
_HEADING_WORD_RE = re.compile(r"^(?:[A-Za-z][A-Za-z'’/\-]*|\d+|&|\(\w+\))$")
_CONNECTORS = frozenset(
    {"a", "an", "and", "as", "at", "by", "for", "from", "in", "into", "of", "on", "or", "the", "to", "vs", "with", "&"}
)
_MAX_HEADING_WORDS = 10
_MAX_HEADING_LENGTH = 100

_EXACT_TITLES: dict[str, SectionType] = {
    "summary": SectionType.ABSTRACT,
    "background": SectionType.LITERATURE_REVIEW,
    "analysis": SectionType.DISCUSSION,
    "approach": SectionType.METHODOLOGY,
}

# Substring keywords, checked in order; earlier entries win.
_SECTION_KEYWORDS: tuple[tuple[str, SectionType], ...] = (
    ("results and discussion", SectionType.DISCUSSION),
    ("abstract", SectionType.ABSTRACT),
    ("executive summary", SectionType.ABSTRACT),
    ("introduction", SectionType.INTRODUCTION),
    ("literature cited", SectionType.REFERENCES),
    ("references", SectionType.REFERENCES),
    ("reference list", SectionType.REFERENCES),
    ("bibliography", SectionType.REFERENCES),
    ("works cited", SectionType.REFERENCES),
    ("literature review", SectionType.LITERATURE_REVIEW),
    ("review of literature", SectionType.LITERATURE_REVIEW),
    ("related work", SectionType.LITERATURE_REVIEW),
    ("theoretical framework", SectionType.LITERATURE_REVIEW),
    ("method", SectionType.METHODOLOGY),
    ("materials", SectionType.METHODOLOGY),
    ("experimental setup", SectionType.METHODOLOGY),
    ("result", SectionType.RESULTS),
    ("finding", SectionType.RESULTS),
    ("evaluation", SectionType.RESULTS),
    ("discussion", SectionType.DISCUSSION),
    ("conclusion", SectionType.CONCLUSION),
    ("concluding", SectionType.CONCLUSION),
    ("acknowledg", SectionType.ACKNOWLEDGMENTS),
    ("appendix", SectionType.APPENDIX),
    ("appendices", SectionType.APPENDIX),
)


@dataclass(frozen=True)
class Heading:
    """A detected heading line. ``start``/``end`` cover the trimmed line."""

    title: str
    start: int
    end: int
    level: int
    section_type: SectionType

    @property
    def normalised_title(self) -> str:
        return normalise_title(self.title)


@dataclass(frozen=True)
class SectionBlock:
    """A heading plus the text that belongs to it.

    ``body_end`` stops at the next heading of any level; ``full_end`` stops at
    the next heading of the same or a higher level, so it includes nested
    subsections.
    """

    heading: Heading
    body_start: int
    body_end: int
    full_end: int

    def body(self, text: str) -> str:
        return text[self.body_start : self.body_end]

    def full_body(self, text: str) -> str:
        return text[self.body_start : self.full_end]

    def word_count(self, text: str) -> int:
        return count_words(self.full_body(text))


def normalise_title(title: str) -> str:
    cleaned = title.strip().lstrip("#").strip()
    cleaned = re.sub(r"^\d+(?:\.\d+)*\.?\s+", "", cleaned)
    cleaned = re.sub(r"^(?:chapter|section)\s+\w+[:.]?\s*", "", cleaned, flags=re.IGNORECASE)
    cleaned = cleaned.rstrip(":").strip()
    return re.sub(r"\s+", " ", cleaned).lower()


def classify_section(title: str) -> SectionType:
    """Map a heading title onto a :class:`SectionType`."""

    normalised = normalise_title(title)
    if normalised in _EXACT_TITLES:
        return _EXACT_TITLES[normalised]
    for keyword, section_type in _SECTION_KEYWORDS:
        if keyword in normalised:
            return section_type
    return SectionType.OTHER


def _looks_like_heading_text(title: str) -> bool:
    if not title or len(title) > _MAX_HEADING_LENGTH:
        return False
    if title[-1] in ".!?,;":
        return False
    words = title.rstrip(":").split()
    if not words or len(words) > _MAX_HEADING_WORDS:
        return False
    if not all(_HEADING_WORD_RE.match(word) for word in words):
        return False
    letters = [ch for ch in title if ch.isalpha()]
    if len(letters) < 2:
        return False
    if "".join(letters).isupper():
        return True
    if not words[0][0].isupper():
        return False
    for word in words[1:]:
        if word.lower() in _CONNECTORS or word[0].isdigit() or word[0] == "(":
            continue
        if not word[0].isupper():
            return False
    return True


def _classify_line(line: str, previous_blank: bool) -> tuple[str, int] | None:
    if _CAPTION_RE.match(line):
        return None
    markdown = _MARKDOWN_RE.match(line)
    if markdown:
        return markdown.group(2).strip(), len(markdown.group(1))

    numbered = _NUMBERED_RE.match(line)
    if numbered and _looks_like_heading_text(numbered.group(2).strip()):
        level = len(numbered.group(1).split("."))
        return line, level

    if previous_blank and _looks_like_heading_text(line):
        return line, 1
    return None


def iter_lines(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, line)`` pairs with line endings removed."""

    offset = 0
    for raw in text.splitlines(keepends=True):
        yield offset, raw.rstrip("\r\n")
        offset += len(raw)


def extract_headings(text: str) -> list[Heading]:
    headings: list[Heading] = []
    previous_blank = True
    for offset, raw_line in iter_lines(text):
        line = raw_line.strip()
        if not line:
            previous_blank = True
            continue
        classified = _classify_line(line, previous_blank)
        previous_blank = False
        if classified is None:
            continue
        title, level = classified
        start = offset + raw_line.index(line[0])
        headings.append(
            Heading(
                title=title,
                start=start,
                end=start + len(line),
                level=level,
                section_type=classify_section(title),
            )
        )
    return headings


def section_blocks(text: str, headings: list[Heading] | None = None) -> list[SectionBlock]:
    if headings is None:
        headings = extract_headings(text)
    blocks: list[SectionBlock] = []
    for index, heading in enumerate(headings):
        following = headings[index + 1 :]
        body_end = following[0].start if following else len(text)
        full_end = next(
            (item.start for item in following if item.level <= heading.level),
            len(text),
        )
        blocks.append(
            SectionBlock(
                heading=heading,
                body_start=heading.end,
                body_end=body_end,
                full_end=full_end,
            )
        )
    return blocks
