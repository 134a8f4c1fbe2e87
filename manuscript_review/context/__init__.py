"""Context derivation: sentences, paragraphs, headings and section labels."""

from __future__ import annotations

from .context_analyzer import (
    ContextAnalyzer,
    RuleContext,
    Span,
    ends_with_abbreviation,
    is_at_sentence_start,
    is_in_citation,
    is_in_quotation,
    split_paragraphs,
    split_sentences,
)
from .sections import (
    Heading,
    SectionBlock,
    classify_section,
    extract_headings,
    normalise_title,
    section_blocks,
)

__all__ = [
    "ContextAnalyzer",
    "RuleContext",
    "Span",
    "Heading",
    "SectionBlock",
    "classify_section",
    "extract_headings",
    "normalise_title",
    "section_blocks",
    "ends_with_abbreviation",
    "is_at_sentence_start",
    "is_in_citation",
    "is_in_quotation",
    "split_paragraphs",
    "split_sentences",
]
