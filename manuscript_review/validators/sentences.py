"""Long-sentence detection.

Runs alongside every grammar source, remote or offline, because neither
LanguageTool nor the offline rule set flags sentence length.
"""

from __future__ import annotations

from ..context import ContextAnalyzer
from ..models import Finding, FindingSource, IssueType, RuleCategory, Severity

LONG_SENTENCE_WORDS = 40


def validate_sentence_length(text: str, *, max_words: int = LONG_SENTENCE_WORDS) -> list[Finding]:
    """Flag each sentence with more than ``max_words`` whitespace-separated words."""

    findings: list[Finding] = []
    for span in ContextAnalyzer(text).sentences:
        sentence = span.slice(text)
        words = len(sentence.split())
        if words <= max_words:
            continue
        findings.append(
            Finding(
                rule_id="style-long-sentence",
                source=FindingSource.SENTENCES,
                start_offset=span.start,
                end_offset=span.end,
                original=sentence,
                message=f"Long sentence ({words} words). Consider breaking it up.",
                type=IssueType.STYLE,
                severity=Severity.INFO,
                category=RuleCategory.WORDINESS,
            )
        )
    return findings
