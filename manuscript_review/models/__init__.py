"""Public model exports for the project.

Tests and other modules should import
``from manuscript_review.models import Finding, Severity``.
"""

from __future__ import annotations

from .enums import (
    ISSUE_TYPE_LABELS,
    AcademicField,
    CitationStyle,
    DocumentType,
    FindingSource,
    IssueType,
    RuleCategory,
    SectionType,
    Severity,
)
from .finding import Finding, Suggestion

__all__ = [
    "Finding",
    "Suggestion",
    "IssueType",
    "Severity",
    "RuleCategory",
    "FindingSource",
    "SectionType",
    "CitationStyle",
    "DocumentType",
    "AcademicField",
    "ISSUE_TYPE_LABELS",
]
