"""Document structure validation.

Checks the heading outline of a manuscript against the sections expected for
its document type (journal article, thesis, dissertation, conference paper).
A document without detectable headings produces no structure findings.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..context import Heading, SectionBlock, extract_headings, normalise_title, section_blocks
from ..models import DocumentType, Finding, FindingSource, IssueType, RuleCategory, SectionType, Severity

logger = logging.getLogger(__name__)

MIN_SECTION_WORDS = 10
FRONT_MATTER_CHARS = 3000

ABSTRACT_WORD_LIMITS: dict[DocumentType, tuple[int, int]] = {
    DocumentType.JOURNAL_ARTICLE: (150, 300),
    DocumentType.DISSERTATION: (300, 500),
    DocumentType.THESIS: (250, 350),
    DocumentType.CONFERENCE_PAPER: (150, 200),
}

# Canonical top-level order; sections missing from this map are not ordered.
SECTION_ORDER: dict[SectionType, int] = {
    SectionType.ABSTRACT: 0,
    SectionType.INTRODUCTION: 1,
    SectionType.LITERATURE_REVIEW: 2,
    SectionType.METHODOLOGY: 3,
    SectionType.RESULTS: 4,
    SectionType.DISCUSSION: 5,
    SectionType.CONCLUSION: 6,
    SectionType.REFERENCES: 7,
    SectionType.APPENDIX: 8,
}


@dataclass(frozen=True)
class SectionRequirement:
    """One expected section.

    ``section_type`` is matched against classified headings; ``aliases`` are
    substrings of normalised heading titles that also satisfy the requirement
    (so "Results and Discussion" covers both sections).
    """

    label: str
    description: str
    section_type: SectionType | None = None
    aliases: tuple[str, ...] = ()
    required: bool = True


TITLE_PAGE = SectionRequirement("Title Page", "Title, author, institution and date", aliases=("title page",))

_COMMON_SECTIONS = (
    SectionRequirement("Abstract", "Brief summary of the research", SectionType.ABSTRACT, ("abstract", "summary")),
    SectionRequirement(
        "Introduction", "Research context, problem statement and objectives", SectionType.INTRODUCTION
    ),
    SectionRequirement(
        "Literature Review",
        "Review of existing research and theoretical foundation",
        SectionType.LITERATURE_REVIEW,
    ),
    SectionRequirement(
        "Methodology", "Research methods and procedures", SectionType.METHODOLOGY, ("method",)
    ),
    SectionRequirement(
        "Results", "Research findings without interpretation", SectionType.RESULTS, ("result", "finding")
    ),
    SectionRequirement("Discussion", "Interpretation of the results", SectionType.DISCUSSION, ("discussion",)),
    SectionRequirement(
        "Conclusion", "Summary, implications and future directions", SectionType.CONCLUSION, ("conclusion",)
    ),
    SectionRequirement("References", "List of all cited sources", SectionType.REFERENCES),
)

STRUCTURE_REQUIREMENTS: dict[DocumentType, tuple[SectionRequirement, ...]] = {
    DocumentType.JOURNAL_ARTICLE: _COMMON_SECTIONS,
    DocumentType.THESIS: (TITLE_PAGE, *_COMMON_SECTIONS),
    DocumentType.DISSERTATION: (
        TITLE_PAGE,
        _COMMON_SECTIONS[0],
        SectionRequirement(
            "Acknowledgments",
            "Recognition of support and contributions",
            SectionType.ACKNOWLEDGMENTS,
            required=False,
        ),
        SectionRequirement(
            "Table of Contents", "Chapters and sections with page numbers", aliases=("contents",)
        ),
        *_COMMON_SECTIONS[1:],
        SectionRequirement("Appendices", "Supplementary material", SectionType.APPENDIX, required=False),
    ),
    DocumentType.CONFERENCE_PAPER: (
        _COMMON_SECTIONS[0],
        _COMMON_SECTIONS[1],
        SectionRequirement(
            "Methodology", "Description of the research method", SectionType.METHODOLOGY, ("method", "approach")
        ),
        SectionRequirement(
            "Results", "Key findings and results", SectionType.RESULTS, ("result", "finding", "evaluation")
        ),
        _COMMON_SECTIONS[6],
        _COMMON_SECTIONS[7],
    ),
}

_METHOD_COMPONENTS = (
    (("participant", "subject", "sample"), "a description of the participants or sample"),
    (("procedure", "protocol"), "the research procedure"),
    (("material", "instrument", "tool", "equipment", "measure"), "the materials or instruments used"),
    (("analysis", "analyses", "statistical"), "the data analysis methods"),
)

_NUMBERED_ELEMENT_RE = re.compile(r"\b(?P<kind>Table|Figure|Fig\.)\s+(?P<number>\d+)\b")

_DOCUMENT_TYPE_MARKERS: tuple[tuple[DocumentType, tuple[re.Pattern[str], ...]], ...] = (
    (
        DocumentType.DISSERTATION,
        (
            re.compile(r"\bdissertation\b", re.IGNORECASE),
            re.compile(r"\bdoctor of philosophy\b|\bph\.?\s?d\.?(?=\W)", re.IGNORECASE),
        ),
    ),
    (
        DocumentType.THESIS,
        (
            re.compile(r"\bthesis\b", re.IGNORECASE),
            re.compile(r"\bmaster of\b|\bmaster's\b", re.IGNORECASE),
        ),
    ),
    (
        DocumentType.CONFERENCE_PAPER,
        (
            re.compile(r"\bproceedings\b", re.IGNORECASE),
            re.compile(r"\bconference\b|\bsymposium\b|\bworkshop\b", re.IGNORECASE),
        ),
    ),
)
_CHAPTER_HEADING_RE = re.compile(r"^\s*(?:#+\s*)?chapter\s+(?:\d+|[ivxlc]+)\b", re.IGNORECASE | re.MULTILINE)


def get_structure_requirements(document_type: DocumentType | str) -> tuple[SectionRequirement, ...]:
    if isinstance(document_type, str) and not isinstance(document_type, DocumentType):
        document_type = DocumentType(document_type.strip().lower())
    return STRUCTURE_REQUIREMENTS[document_type]


def detect_document_type(text: str) -> DocumentType:
    """Guess the document type from front-matter keywords.

    Scores each type by how many of its marker patterns occur in the first
    few thousand characters (plus chapter headings for dissertations); the
    highest score wins, earlier types win ties, and a journal article is the
    default.
    """

    front = text[:FRONT_MATTER_CHARS]
    best_type = DocumentType.JOURNAL_ARTICLE
    best_score = 0
    for document_type, markers in _DOCUMENT_TYPE_MARKERS:
        score = sum(1 for marker in markers if marker.search(front))
        if document_type is DocumentType.DISSERTATION and len(_CHAPTER_HEADING_RE.findall(text)) >= 3:
            score += 1
        if score > best_score:
            best_type, best_score = document_type, score
    return best_type


def _finding(
    rule_id: str,
    heading: Heading,
    text: str,
    message: str,
    *,
    severity: Severity = Severity.WARNING,
    explanation: str | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        source=FindingSource.STRUCTURE,
        start_offset=heading.start,
        end_offset=heading.end,
        original=text[heading.start : heading.end],
        message=message,
        type=IssueType.STYLE,
        severity=severity,
        category=RuleCategory.STRUCTURE,
        explanation=explanation,
    )


def _satisfies(heading: Heading, requirement: SectionRequirement) -> bool:
    if requirement.section_type is not None and heading.section_type is requirement.section_type:
        return True
    title = normalise_title(heading.title)
    return any(alias in title for alias in requirement.aliases)


def _has_title_page(text: str, headings: list[Heading]) -> bool:
    return bool(text[: headings[0].start].strip()) or any(
        _satisfies(heading, TITLE_PAGE) for heading in headings
    )


def check_required_sections(
    text: str, headings: list[Heading], document_type: DocumentType
) -> list[Finding]:
    findings: list[Finding] = []
    anchor = headings[0]
    for requirement in get_structure_requirements(document_type):
        if not requirement.required:
            continue
        if requirement is TITLE_PAGE:
            present = _has_title_page(text, headings)
        else:
            present = any(_satisfies(heading, requirement) for heading in headings)
        if not present:
            findings.append(
                _finding(
                    "structure-missing-section",
                    anchor,
                    text,
                    f"Missing required section: {requirement.label}.",
                    explanation=requirement.description,
                )
            )
    return findings


def check_section_order(text: str, headings: list[Heading]) -> list[Finding]:
    """Flag top-level sections that appear after a section they should precede."""

    ordered = [heading for heading in headings if heading.section_type in SECTION_ORDER]
    if not ordered:
        return []
    top_level = min(heading.level for heading in ordered)
    findings: list[Finding] = []
    furthest: Heading | None = None
    for heading in ordered:
        if heading.level != top_level:
            continue
        rank = SECTION_ORDER[heading.section_type]
        if furthest is not None and rank < SECTION_ORDER[furthest.section_type]:
            findings.append(
                _finding(
                    "structure-section-order",
                    heading,
                    text,
                    f'Section "{heading.title}" should come before "{furthest.title}".',
                    explanation="Standard order: abstract, introduction, literature review, methodology, "
                    "results, discussion, conclusion, references.",
                )
            )
            continue
        furthest = heading
    return findings


def check_section_content(
    text: str, blocks: list[SectionBlock], document_type: DocumentType
) -> list[Finding]:
    findings: list[Finding] = []
    minimum, maximum = ABSTRACT_WORD_LIMITS[document_type]
    for block in blocks:
        heading = block.heading
        word_count = block.word_count(text)
        if heading.section_type is SectionType.ABSTRACT:
            if word_count < minimum:
                findings.append(
                    _finding(
                        "structure-abstract-length",
                        heading,
                        text,
                        f"Abstract is too short ({word_count} words); aim for at least {minimum}.",
                        severity=Severity.INFO,
                    )
                )
            elif word_count > maximum:
                findings.append(
                    _finding(
                        "structure-abstract-length",
                        heading,
                        text,
                        f"Abstract is too long ({word_count} words); aim for at most {maximum}.",
                        severity=Severity.INFO,
                    )
                )
        elif word_count < MIN_SECTION_WORDS:
            findings.append(
                _finding(
                    "structure-empty-section",
                    heading,
                    text,
                    f'Section "{heading.title}" is empty or nearly empty.',
                )
            )
    return findings


def check_heading_hierarchy(text: str, headings: list[Heading]) -> list[Finding]:
    findings: list[Finding] = []
    for previous, heading in zip(headings, headings[1:]):
        if heading.level > previous.level + 1:
            findings.append(
                _finding(
                    "structure-heading-hierarchy",
                    heading,
                    text,
                    f"Heading level jumps from {previous.level} to {heading.level}.",
                )
            )
    return findings


def check_numbered_elements(text: str) -> list[Finding]:
    """Tables and figures should be numbered in the order they are first mentioned."""

    findings: list[Finding] = []
    seen: dict[str, set[int]] = {"Table": set(), "Figure": set()}
    for match in _NUMBERED_ELEMENT_RE.finditer(text):
        kind = "Table" if match.group("kind") == "Table" else "Figure"
        number = int(match.group("number"))
        if number in seen[kind]:
            continue
        expected = len(seen[kind]) + 1
        seen[kind].add(number)
        if number != expected:
            findings.append(
                Finding(
                    rule_id="structure-numbering",
                    source=FindingSource.STRUCTURE,
                    start_offset=match.start(),
                    end_offset=match.end(),
                    original=match.group(0),
                    message=f"{kind} {number} is mentioned before {kind} {expected}; number "
                    f"{kind.lower()}s in order of first mention.",
                    type=IssueType.STYLE,
                    severity=Severity.WARNING,
                    category=RuleCategory.STRUCTURE,
                )
            )
    return findings


def check_methodology(text: str, blocks: list[SectionBlock]) -> list[Finding]:
    block = next((item for item in blocks if item.heading.section_type is SectionType.METHODOLOGY), None)
    if block is None:
        return []
    content = block.full_body(text).lower()
    findings: list[Finding] = []
    for terms, description in _METHOD_COMPONENTS:
        if not any(term in content for term in terms):
            findings.append(
                _finding(
                    "structure-methodology",
                    block.heading,
                    text,
                    f"Methodology section may be missing {description}.",
                    severity=Severity.INFO,
                )
            )
    return findings


def validate_structure(text: str, *, document_type: DocumentType | str | None = None) -> list[Finding]:
    """Run every structure check; ``document_type`` is detected when omitted."""

    headings = extract_headings(text)
    if not headings:
        logger.debug("No headings detected; skipping structure validation")
        return []
    if isinstance(document_type, str) and not isinstance(document_type, DocumentType):
        document_type = DocumentType(document_type.strip().lower())
    resolved = document_type or detect_document_type(text)
    blocks = section_blocks(text, headings)

    findings = check_required_sections(text, headings, resolved)
    findings.extend(check_section_order(text, headings))
    findings.extend(check_section_content(text, blocks, resolved))
    findings.extend(check_heading_hierarchy(text, headings))
    findings.extend(check_numbered_elements(text))
    findings.extend(check_methodology(text, blocks))
    return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset))
