"""Citation validation.

Supports APA, Harvard, MLA, IEEE and Chicago conventions:

* the style is detected from in-text citation counts unless one is given
* parenthetical citations are split on ``;`` and parsed segment by segment
* narrative citations (``Smith (2020)``) are recognised for cross-referencing
* the reference list under a References/Bibliography/Works Cited heading is
  parsed and each entry is format-checked; DOIs and ISBNs are validated
* every author-year citation whose surname and year are not in the
  reference list (or IEEE number not listed) yields a missing-reference
  finding scoped exactly to the citation text
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from ..context import extract_headings
from ..models import CitationStyle, Finding, FindingSource, IssueType, RuleCategory, Severity

logger = logging.getLogger(__name__)

_NAME = r"[A-Z][A-Za-z'’\-]+"
_AUTHORS = rf"{_NAME}(?:(?:,\s*{_NAME})*,?\s+(?:&|and)\s+{_NAME}|\s+et\s+al\.?)?"

_PARENTHETICAL_RE = re.compile(r"\(([^()\n]{2,300})\)")
_SEGMENT_PREFIX_RE = re.compile(r"^(?:see\s+(?:also\s+)?|e\.g\.,?\s+|cf\.\s+)", re.IGNORECASE)
_AUTHOR_YEAR_RE = re.compile(
    rf"^(?P<authors>{_AUTHORS})(?P<sep>\s*,\s*|\s+)(?P<year>\d{{4}}[a-z]?|n\.d\.)(?P<rest>(?:\s*,.*)?)$"
)
_AUTHOR_PAGE_RE = re.compile(
    rf"^(?P<authors>{_AUTHORS})\s+(?P<prefix>pp?\.\s*)?(?P<pages>\d{{1,4}}(?:\s*[-–]\s*\d{{1,4}})?)$"
)
_NARRATIVE_RE = re.compile(rf"\b(?P<authors>{_AUTHORS})\s+\((?P<year>\d{{4}}[a-z]?|n\.d\.)\)")
_IEEE_RE = re.compile(r"\[(\d+(?:\s*[,–-]\s*\d+)*)\]")
_CHICAGO_RE = re.compile(r"\[\^\d+\]|[¹²³⁴⁵⁶⁷⁸⁹⁰]+")
_REFERENCES_HEADING_RE = re.compile(
    r"^[ \t]*(?:#{1,6}[ \t]+)?(?:\d+(?:\.\d+)*\.?[ \t]+)?"
    r"(?:references|reference list|bibliography|works cited|literature cited)[ \t]*:?[ \t]*$",
    re.IGNORECASE | re.MULTILINE,
)
_ENTRY_NUMBER_RE = re.compile(r"^\s*(?:\[(\d+)\]|(\d+)\.)\s*")
_ENTRY_SURNAME_RE = re.compile(rf"^({_NAME})")
_ENTRY_PAREN_YEAR_RE = re.compile(r"\((\d{4})[a-z]?\)")
_ENTRY_YEAR_RE = re.compile(r"\b(1[5-9]\d{2}|20\d{2})[a-z]?\b")
_DOI_RE = re.compile(r"\bdoi(?::|\.org/)\s*(\S+)", re.IGNORECASE)
_DOI_VALID_RE = re.compile(r"^10\.\d{4,}/[-._;()/:A-Za-z0-9]+$")
_ISBN_RE = re.compile(r"\bISBN(?:-1[03])?:?\s*([0-9Xx][0-9Xx \-]{8,16}[0-9Xx])", re.IGNORECASE)

# Capitalised words that introduce numbered items rather than authors.
_NON_AUTHOR_WORDS = frozenset(
    {
        "table", "tables", "figure", "figures", "fig", "eq", "equation", "section", "chapter",
        "appendix", "study", "experiment", "phase", "step", "group", "level", "model",
        "hypothesis", "wave", "time", "day", "week", "session", "trial", "item", "condition",
        "sample", "version", "part", "page", "vol", "no", "in", "the", "this", "see", "since",
        "during", "from", "until", "and", "or", "of", "on", "at", "by", "for", "after",
        "before", "between", "year", "years", "january", "february", "march", "april", "may",
        "june", "july", "august", "september", "october", "november", "december",
    }
)

MIN_PLAUSIBLE_YEAR = 1600
MAX_PLAUSIBLE_YEAR = 2100

# Detection tie order: earlier styles win equal counts.
_STYLE_ORDER = (
    CitationStyle.APA,
    CitationStyle.HARVARD,
    CitationStyle.MLA,
    CitationStyle.IEEE,
    CitationStyle.CHICAGO,
)


@dataclass(frozen=True)
class Citation:
    """One in-text citation (a single author-year or author-page reference)."""

    text: str
    start: int
    end: int
    authors: str = ""
    year: str | None = None
    pages: str | None = None
    separator: str = ""
    page_prefix: str = ""
    narrative: bool = False
    numbers: tuple[int, ...] = ()

    @property
    def surname(self) -> str:
        match = re.match(_NAME, self.authors)
        return match.group(0) if match else ""

    @property
    def key(self) -> str | None:
        if not self.year or not self.surname:
            return None
        return _reference_key(self.surname, self.year)

    @property
    def has_comma(self) -> bool:
        return "," in self.separator


@dataclass(frozen=True)
class ReferenceEntry:
    text: str
    start: int
    end: int
    surname: str | None
    year: str | None
    number: int | None
    parenthesised_year: bool

    @property
    def key(self) -> str | None:
        if not self.surname or not self.year:
            return None
        return _reference_key(self.surname, self.year)


@dataclass(frozen=True)
class ReferenceSection:
    start: int
    end: int
    entries: tuple[ReferenceEntry, ...]

    def contains(self, offset: int) -> bool:
        return self.start <= offset < self.end


def _reference_key(surname: str, year: str) -> str:
    digits = re.sub(r"[^0-9]", "", year) or year.lower()
    return f"{surname.lower()}{digits}"


def _is_author(authors: str) -> bool:
    first = re.match(_NAME, authors)
    return bool(first) and first.group(0).lower() not in _NON_AUTHOR_WORDS


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def find_reference_section(text: str) -> ReferenceSection | None:
    """Locate the reference list: the last matching heading up to the next heading."""

    headings = list(_REFERENCES_HEADING_RE.finditer(text))
    if not headings:
        return None
    heading = headings[-1]
    body_start = heading.end()
    following = [item.start for item in extract_headings(text) if item.start >= body_start]
    body_end = following[0] if following else len(text)
    return ReferenceSection(
        start=heading.start(),
        end=body_end,
        entries=tuple(_parse_entries(text, body_start, body_end)),
    )


def _parse_entries(text: str, start: int, end: int) -> Iterable[ReferenceEntry]:
    offset = start
    for raw in text[start:end].splitlines(keepends=True):
        line = raw.strip()
        line_start = offset + (raw.index(line[0]) if line else 0)
        offset += len(raw)
        if not line:
            continue
        number = None
        body = line
        numbered = _ENTRY_NUMBER_RE.match(line)
        if numbered:
            number = int(numbered.group(1) or numbered.group(2))
            body = line[numbered.end() :]
        surname_match = _ENTRY_SURNAME_RE.match(body)
        paren_year = _ENTRY_PAREN_YEAR_RE.search(body)
        year_match = paren_year or _ENTRY_YEAR_RE.search(body)
        yield ReferenceEntry(
            text=line,
            start=line_start,
            end=line_start + len(line),
            surname=surname_match.group(1) if surname_match else None,
            year=year_match.group(1) if year_match else None,
            number=number,
            parenthesised_year=paren_year is not None,
        )


def _parse_segment(segment: str, start: int) -> Citation | None:
    author_year = _AUTHOR_YEAR_RE.match(segment)
    if author_year and _is_author(author_year.group("authors")):
        return Citation(
            text=segment,
            start=start,
            end=start + len(segment),
            authors=author_year.group("authors"),
            year=author_year.group("year"),
            separator=author_year.group("sep"),
        )
    author_page = _AUTHOR_PAGE_RE.match(segment)
    if author_page and _is_author(author_page.group("authors")):
        return Citation(
            text=segment,
            start=start,
            end=start + len(segment),
            authors=author_page.group("authors"),
            pages=author_page.group("pages"),
            page_prefix=author_page.group("prefix") or "",
        )
    return None


def find_parenthetical_citations(text: str, *, skip: ReferenceSection | None = None) -> list[Citation]:
    """Parse ``(...)`` groups into citations.

    A group with one citation is scoped to the whole parenthetical including
    the brackets; a group with several ``;``-separated citations yields one
    citation per segment.
    """

    citations: list[Citation] = []
    for match in _PARENTHETICAL_RE.finditer(text):
        if skip is not None and skip.contains(match.start()):
            continue
        inner_start = match.start(1)
        segments: list[Citation] = []
        position = inner_start
        for raw in match.group(1).split(";"):
            stripped = raw.strip()
            seg_start = position + (raw.index(stripped) if stripped else 0)
            position += len(raw) + 1
            prefix = _SEGMENT_PREFIX_RE.match(stripped)
            if prefix:
                seg_start += prefix.end()
                stripped = stripped[prefix.end() :]
            if not stripped:
                continue
            citation = _parse_segment(stripped, seg_start)
            if citation is not None:
                segments.append(citation)
        if len(segments) == 1 and ";" not in match.group(1):
            only = segments[0]
            segments = [
                Citation(
                    text=match.group(0),
                    start=match.start(),
                    end=match.end(),
                    authors=only.authors,
                    year=only.year,
                    pages=only.pages,
                    separator=only.separator,
                    page_prefix=only.page_prefix,
                )
            ]
        citations.extend(segments)
    return citations


def find_narrative_citations(text: str, *, skip: ReferenceSection | None = None) -> list[Citation]:
    citations: list[Citation] = []
    for match in _NARRATIVE_RE.finditer(text):
        if skip is not None and skip.contains(match.start()):
            continue
        if not _is_author(match.group("authors")):
            continue
        citations.append(
            Citation(
                text=match.group(0),
                start=match.start(),
                end=match.end(),
                authors=match.group("authors"),
                year=match.group("year"),
                narrative=True,
            )
        )
    return citations


def _expand_numbers(inner: str) -> tuple[int, ...]:
    numbers: list[int] = []
    for part in re.split(r"\s*,\s*", inner.strip()):
        bounds = re.split(r"\s*[–-]\s*", part)
        if len(bounds) == 2 and bounds[0].isdigit() and bounds[1].isdigit():
            low, high = int(bounds[0]), int(bounds[1])
            numbers.extend([low, high] if high < low else range(low, high + 1))
        elif part.isdigit():
            numbers.append(int(part))
    return tuple(numbers)


def _is_ascending(inner: str) -> bool:
    listed: list[int] = []
    for part in re.split(r"\s*,\s*", inner.strip()):
        bounds = [int(item) for item in re.split(r"\s*[–-]\s*", part) if item.isdigit()]
        if len(bounds) == 2 and bounds[1] < bounds[0]:
            return False
        listed.extend(bounds)
    return all(later > earlier for earlier, later in zip(listed, listed[1:]))


def find_ieee_citations(text: str, *, skip: ReferenceSection | None = None) -> list[Citation]:
    citations: list[Citation] = []
    for match in _IEEE_RE.finditer(text):
        if skip is not None and skip.contains(match.start()):
            continue
        citations.append(
            Citation(
                text=match.group(0),
                start=match.start(),
                end=match.end(),
                numbers=_expand_numbers(match.group(1)),
            )
        )
    return citations


def detect_citation_style(text: str) -> CitationStyle | None:
    """Pick the dominant style by counting citation shapes.

    Counts are compared in the fixed order APA, Harvard, MLA, IEEE, Chicago;
    the first style with the highest count wins. ``None`` when nothing looks
    like a citation.
    """

    references = find_reference_section(text)
    counts: Counter[CitationStyle] = Counter()
    for citation in find_parenthetical_citations(text, skip=references):
        if citation.year is None:
            counts[CitationStyle.MLA] += 1
        elif citation.has_comma:
            counts[CitationStyle.APA] += 1
        else:
            counts[CitationStyle.HARVARD] += 1
    counts[CitationStyle.IEEE] += len(find_ieee_citations(text, skip=references))
    counts[CitationStyle.CHICAGO] += sum(
        1 for match in _CHICAGO_RE.finditer(text) if references is None or not references.contains(match.start())
    )
    best = max(counts.values(), default=0)
    if best == 0:
        return None
    for style in _STYLE_ORDER:
        if counts[style] == best:
            return style
    return None


# ---------------------------------------------------------------------------
# Standalone identifiers
# ---------------------------------------------------------------------------


def validate_doi(doi: str) -> bool:
    return bool(_DOI_VALID_RE.match(doi.strip()))


def validate_isbn(isbn: str) -> bool:
    """Checksum validation for ISBN-10 and ISBN-13."""

    cleaned = re.sub(r"[\s-]", "", isbn).upper()
    if len(cleaned) == 10:
        if not cleaned[:9].isdigit() or not (cleaned[9].isdigit() or cleaned[9] == "X"):
            return False
        total = sum(int(digit) * (10 - index) for index, digit in enumerate(cleaned[:9]))
        total += 10 if cleaned[9] == "X" else int(cleaned[9])
        return total % 11 == 0
    if len(cleaned) == 13:
        if not cleaned.isdigit():
            return False
        total = sum(int(digit) * (1 if index % 2 == 0 else 3) for index, digit in enumerate(cleaned))
        return total % 10 == 0
    return False


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


def _finding(
    rule_id: str,
    start: int,
    end: int,
    original: str,
    message: str,
    *,
    severity: Severity = Severity.WARNING,
    issue_type: IssueType = IssueType.STYLE,
    suggestions: list[str] | None = None,
    explanation: str | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        source=FindingSource.CITATION,
        start_offset=start,
        end_offset=end,
        original=original,
        message=message,
        suggestions=suggestions or [],
        type=issue_type,
        severity=severity,
        category=RuleCategory.CITATION,
        explanation=explanation,
    )


def _year_findings(citations: Iterable[Citation]) -> list[Finding]:
    findings: list[Finding] = []
    for citation in citations:
        if not citation.year or not citation.year[:4].isdigit():
            continue
        year = int(citation.year[:4])
        if not MIN_PLAUSIBLE_YEAR <= year <= MAX_PLAUSIBLE_YEAR:
            findings.append(
                _finding(
                    "citation-year",
                    citation.start,
                    citation.end,
                    citation.text,
                    f"Implausible publication year {year} in citation.",
                )
            )
    return findings


def _replace_in(citation: Citation, old: str, new: str) -> str:
    return citation.text.replace(old, new, 1)


def _author_year_format_findings(style: CitationStyle, citations: Iterable[Citation]) -> list[Finding]:
    findings: list[Finding] = []
    for citation in citations:
        if citation.narrative or citation.year is None:
            continue
        if style is CitationStyle.APA:
            if not citation.has_comma:
                findings.append(
                    _finding(
                        "citation-apa-comma",
                        citation.start,
                        citation.end,
                        citation.text,
                        "APA citations separate author and year with a comma.",
                        issue_type=IssueType.PUNCTUATION,
                        suggestions=[_replace_in(citation, f"{citation.authors}{citation.separator}", f"{citation.authors}, ")],
                    )
                )
            if " and " in citation.authors:
                findings.append(
                    _finding(
                        "citation-apa-ampersand",
                        citation.start,
                        citation.end,
                        citation.text,
                        'APA parenthetical citations use "&" between authors.',
                        suggestions=[_replace_in(citation, " and ", " & ")],
                    )
                )
        elif style is CitationStyle.HARVARD and citation.has_comma:
            findings.append(
                _finding(
                    "citation-harvard-comma",
                    citation.start,
                    citation.end,
                    citation.text,
                    "Harvard citations do not use a comma between author and year.",
                    issue_type=IssueType.PUNCTUATION,
                    suggestions=[_replace_in(citation, f"{citation.authors}{citation.separator}", f"{citation.authors} ")],
                )
            )
    return findings


def _mla_findings(citations: Iterable[Citation]) -> list[Finding]:
    findings: list[Finding] = []
    for citation in citations:
        if citation.pages is None:
            continue
        if "&" in citation.authors:
            findings.append(
                _finding(
                    "citation-mla-ampersand",
                    citation.start,
                    citation.end,
                    citation.text,
                    'MLA citations use "and" between authors, not "&".',
                    suggestions=[_replace_in(citation, " & ", " and ")],
                )
            )
        if citation.page_prefix:
            findings.append(
                _finding(
                    "citation-mla-page-prefix",
                    citation.start,
                    citation.end,
                    citation.text,
                    'MLA citations give page numbers without "p." or "pp.".',
                    suggestions=[_replace_in(citation, citation.page_prefix, "")],
                )
            )
    return findings


def _ieee_findings(citations: Iterable[Citation], text: str, references: ReferenceSection | None) -> list[Finding]:
    listed = {entry.number for entry in references.entries if entry.number is not None} if references else set()
    findings: list[Finding] = []
    for citation in citations:
        inner = citation.text[1:-1]
        if not _is_ascending(inner):
            findings.append(
                _finding(
                    "citation-ieee-order",
                    citation.start,
                    citation.end,
                    citation.text,
                    "IEEE citation numbers should be in ascending order.",
                )
            )
        missing = [number for number in citation.numbers if number not in listed]
        if missing:
            findings.append(
                _finding(
                    "citation-missing-reference",
                    citation.start,
                    citation.end,
                    citation.text,
                    f"Reference {', '.join(str(number) for number in missing)} is not in the reference list.",
                    severity=Severity.ERROR,
                    issue_type=IssueType.GRAMMAR,
                    explanation="Add the numbered entry to the reference list or correct the citation.",
                )
            )
    return findings


def _chicago_findings(text: str, references: ReferenceSection | None) -> list[Finding]:
    findings: list[Finding] = []
    for match in _CHICAGO_RE.finditer(text):
        if references is not None and references.contains(match.start()):
            continue
        previous = text[match.start() - 1] if match.start() > 0 else ""
        if previous.isalnum():
            findings.append(
                _finding(
                    "citation-chicago-placement",
                    match.start(),
                    match.end(),
                    match.group(0),
                    "Chicago note numbers should follow punctuation rather than sit inside the sentence.",
                    severity=Severity.INFO,
                    issue_type=IssueType.PUNCTUATION,
                )
            )
    return findings


def _missing_reference_findings(
    citations: Iterable[Citation],
    references: ReferenceSection | None,
    *,
    by_surname_only: bool = False,
) -> list[Finding]:
    entries = references.entries if references else ()
    keys = {entry.key for entry in entries if entry.key}
    surnames = {entry.surname.lower() for entry in entries if entry.surname}
    findings: list[Finding] = []
    for citation in citations:
        if by_surname_only:
            if not citation.surname or citation.surname.lower() in surnames:
                continue
        else:
            if citation.key is None or citation.key in keys:
                continue
        findings.append(
            _finding(
                "citation-missing-reference",
                citation.start,
                citation.end,
                citation.text,
                f'Citation "{citation.text}" is not in the reference list.',
                severity=Severity.ERROR,
                issue_type=IssueType.GRAMMAR,
                explanation="Add this reference to the reference list or remove the citation.",
            )
        )
    return findings


_ENTRY_PATTERNS: dict[CitationStyle, tuple[re.Pattern[str], str]] = {
    CitationStyle.APA: (re.compile(rf"^{_NAME},\s+[A-Z]\."), "APA entries start with: Surname, Initial."),
    CitationStyle.HARVARD: (re.compile(rf"^{_NAME},\s+[A-Z]\."), "Harvard entries start with: Surname, Initial."),
    CitationStyle.MLA: (re.compile(rf"^{_NAME},\s+[A-Z][a-z]+"), "MLA entries start with: Surname, First name."),
    CitationStyle.CHICAGO: (re.compile(rf"^{_NAME},\s+[A-Z][a-z]+"), "Chicago entries start with: Surname, First name."),
}


def _entry_findings(style: CitationStyle, references: ReferenceSection | None) -> list[Finding]:
    if references is None:
        return []
    findings: list[Finding] = []
    for entry in references.entries:
        if style is CitationStyle.IEEE:
            if entry.number is None:
                findings.append(
                    _finding(
                        "citation-reference-format",
                        entry.start,
                        entry.end,
                        entry.text,
                        "IEEE reference entries are numbered, e.g. [1].",
                        severity=Severity.INFO,
                    )
                )
            continue
        pattern, message = _ENTRY_PATTERNS[style]
        body = _ENTRY_NUMBER_RE.sub("", entry.text, count=1)
        if not pattern.match(body):
            findings.append(
                _finding("citation-reference-format", entry.start, entry.end, entry.text, message, severity=Severity.INFO)
            )
        elif style is CitationStyle.APA and not entry.parenthesised_year:
            findings.append(
                _finding(
                    "citation-reference-format",
                    entry.start,
                    entry.end,
                    entry.text,
                    "APA entries give the year in parentheses after the authors.",
                    severity=Severity.INFO,
                )
            )
    return findings


def _identifier_findings(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _DOI_RE.finditer(text):
        doi = match.group(1).rstrip(".,;)]")
        if doi and not validate_doi(doi):
            start = match.start(1)
            findings.append(
                _finding(
                    "citation-doi",
                    start,
                    start + len(doi),
                    doi,
                    f'"{doi}" is not a well-formed DOI (expected 10.NNNN/suffix).',
                )
            )
    for match in _ISBN_RE.finditer(text):
        isbn = match.group(1)
        if not validate_isbn(isbn):
            findings.append(
                _finding(
                    "citation-isbn",
                    match.start(1),
                    match.end(1),
                    isbn,
                    f'"{isbn}" fails the ISBN checksum.',
                )
            )
    return findings


def validate_citations(text: str, *, style: CitationStyle | str | None = None) -> list[Finding]:
    """Run every citation check and return findings in document order."""

    if not text.strip():
        return []
    if isinstance(style, str) and not isinstance(style, CitationStyle):
        style = CitationStyle.parse(style)
    resolved = style or detect_citation_style(text)
    references = find_reference_section(text)
    findings = _identifier_findings(text)
    if resolved is None:
        return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset))

    logger.debug("Validating citations as %s", resolved.value)
    findings.extend(_entry_findings(resolved, references))

    if resolved is CitationStyle.IEEE:
        findings.extend(_ieee_findings(find_ieee_citations(text, skip=references), text, references))
    elif resolved is CitationStyle.CHICAGO:
        findings.extend(_chicago_findings(text, references))
    else:
        parenthetical = find_parenthetical_citations(text, skip=references)
        narrative = find_narrative_citations(text, skip=references)
        author_year = [citation for citation in parenthetical if citation.year is not None]
        findings.extend(_year_findings(author_year + narrative))
        if resolved is CitationStyle.MLA:
            author_page = [citation for citation in parenthetical if citation.pages is not None]
            findings.extend(_mla_findings(author_page))
            findings.extend(_missing_reference_findings(author_page, references, by_surname_only=True))
        else:
            findings.extend(_author_year_format_findings(resolved, author_year))
        findings.extend(_missing_reference_findings(author_year + narrative, references))

    return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset))
