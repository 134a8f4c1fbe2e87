"""Enumerations shared by findings, rules and validators.

Values are lowercase strings so they serialise cleanly into reports and can
be compared directly with category strings coming from remote providers.
"""

from __future__ import annotations

from enum import Enum


class IssueType(str, Enum):
    """Closed set of suggestion kinds surfaced to the editor."""

    GRAMMAR = "grammar"
    PUNCTUATION = "punctuation"
    STYLE = "style"
    SPELLING = "spelling"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class Severity(str, Enum):
    """Severity of a finding. ``error`` outranks ``warning`` outranks ``info``."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


_SEVERITY_RANKS = {
    Severity.ERROR: 3,
    Severity.WARNING: 2,
    Severity.INFO: 1,
}


class RuleCategory(str, Enum):
    """Finer classification used to group rules and validator output."""

    GRAMMAR = "grammar"
    ACADEMIC_TONE = "academic-tone"
    CITATION = "citation"
    PUNCTUATION = "punctuation"
    WORDINESS = "wordiness"
    SPELLING = "spelling"
    STATISTICS = "statistics"
    STRUCTURE = "structure"
    TERMINOLOGY = "terminology"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class FindingSource(str, Enum):
    """Which detector produced a finding.

    Values:
        REMOTE: a remote linguistic service (LanguageTool or an alternate)
        OFFLINE: the local rule engine
        DICTIONARY: the optional dictionary speller inside the offline engine
        CITATION / STATISTICS / STRUCTURE: the specialised validators
        SENTENCES: the long-sentence check
        FIELD: discipline-specific terminology and conventions
    """

    REMOTE = "remote"
    OFFLINE = "offline"
    DICTIONARY = "dictionary"
    CITATION = "citation"
    STATISTICS = "statistics"
    STRUCTURE = "structure"
    SENTENCES = "sentences"
    FIELD = "field"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class SectionType(str, Enum):
    ABSTRACT = "abstract"
    INTRODUCTION = "introduction"
    LITERATURE_REVIEW = "literature-review"
    METHODOLOGY = "methodology"
    RESULTS = "results"
    DISCUSSION = "discussion"
    CONCLUSION = "conclusion"
    REFERENCES = "references"
    ACKNOWLEDGMENTS = "acknowledgments"
    APPENDIX = "appendix"
    OTHER = "other"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class CitationStyle(str, Enum):
    APA = "APA"
    MLA = "MLA"
    CHICAGO = "Chicago"
    IEEE = "IEEE"
    HARVARD = "Harvard"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]

    @classmethod
    def parse(cls, value: str) -> "CitationStyle":
        """Case-insensitive lookup used by the CLI and environment config."""

        cleaned = str(getattr(value, "value", value)).strip().lower()
        for member in cls:
            if member.value.lower() == cleaned:
                return member
        raise ValueError(f"Unknown citation style: {value!r}")


class DocumentType(str, Enum):
    JOURNAL_ARTICLE = "journal-article"
    DISSERTATION = "dissertation"
    THESIS = "thesis"
    CONFERENCE_PAPER = "conference-paper"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]


class AcademicField(str, Enum):
    """Discipline hint for terminology and convention checks."""

    STEM = "stem"
    SOCIAL_SCIENCES = "social-sciences"
    HUMANITIES = "humanities"
    MEDICINE = "medicine"
    ENGINEERING = "engineering"

    @classmethod
    def all_values(cls) -> list[str]:
        return [m.value for m in cls]

    @classmethod
    def parse(cls, value: str) -> "AcademicField":
        """Accepts "social-sciences", "Social Sciences" or "social_sciences"."""

        cleaned = str(getattr(value, "value", value)).strip().lower().replace("_", "-").replace(" ", "-")
        for member in cls:
            if member.value == cleaned:
                return member
        raise ValueError(f"Unknown academic field: {value!r}")


# Display labels for the report builders. Keyed by every IssueType member;
# tests assert the mapping stays exhaustive when members are added.
ISSUE_TYPE_LABELS: dict[IssueType, str] = {
    IssueType.GRAMMAR: "Grammar",
    IssueType.PUNCTUATION: "Punctuation",
    IssueType.STYLE: "Style",
    IssueType.SPELLING: "Spelling",
}
