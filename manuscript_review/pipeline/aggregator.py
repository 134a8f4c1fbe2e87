"""Merge findings from every detector into the final suggestion list.

Order of precedence when two findings describe the same span and message:

1. the primary grammar source (the remote provider that answered, or the
   offline engine when every remote path failed)
2. offline findings that supplement a successful remote answer
3. validator findings, in validator order

The first finding seen for a ``(start, end, normalised message)`` key wins.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable

from ..engine import match_statistics
from ..models import Finding, Suggestion
from ..remote import LastProviderOutcome
from ..utils import PositionCursor, normalise_message

if TYPE_CHECKING:
    from .config import PipelineConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    suggestions: list[Suggestion] = field(default_factory=list)
    outcome: LastProviderOutcome = field(default_factory=LastProviderOutcome.offline)
    statistics: dict[str, object] = field(default_factory=dict)

    @property
    def offline_only(self) -> bool:
        return self.outcome.offline_only


def suggestion_id(index: int, finding: Finding) -> str:
    return f"{index:04d}-{finding.rule_id}"


def _in_range(finding: Finding, length: int) -> bool:
    return 0 <= finding.start_offset < finding.end_offset <= length


def merge_findings(
    document: str,
    ordered: Iterable[Finding],
    config: "PipelineConfig",
) -> list[Finding]:
    """Range check, filter, dedupe, sort and cap ``ordered`` (already in precedence order)."""

    length = len(document)
    seen: set[tuple[int, int, str]] = set()
    kept: list[Finding] = []
    dropped = 0
    for finding in ordered:
        if not _in_range(finding, length):
            dropped += 1
            logger.warning(
                "Dropping %s finding %s with out-of-range span [%d, %d) for a %d-character document",
                finding.source.value,
                finding.rule_id,
                finding.start_offset,
                finding.end_offset,
                length,
            )
            continue
        if not config.allows(finding):
            continue
        key = (finding.start_offset, finding.end_offset, normalise_message(finding.message))
        if key in seen:
            continue
        seen.add(key)
        kept.append(finding)

    kept.sort(key=lambda finding: (finding.start_offset, finding.end_offset))
    if len(kept) > config.max_suggestions:
        logger.info("Capping %d suggestions at %d", len(kept), config.max_suggestions)
        kept = kept[: config.max_suggestions]
    return kept


def to_suggestions(document: str, findings: Iterable[Finding]) -> list[Suggestion]:
    cursor = PositionCursor(document)
    suggestions: list[Suggestion] = []
    for index, finding in enumerate(findings, start=1):
        start = cursor.position(finding.start_offset)
        end = cursor.position(finding.end_offset)
        suggestions.append(
            Suggestion(
                **finding.model_dump(),
                id=suggestion_id(index, finding),
                start_line=start.line,
                start_column=start.column,
                end_line=end.line,
                end_column=end.column,
            )
        )
    return suggestions


def aggregate(
    document: str,
    *,
    primary: Iterable[Finding],
    supplementary: Iterable[Finding] = (),
    validator_findings: Iterable[Finding] = (),
    outcome: LastProviderOutcome,
    config: "PipelineConfig",
) -> AnalysisResult:
    ordered = [*primary, *supplementary, *validator_findings]
    merged = merge_findings(document, ordered, config)
    suggestions = to_suggestions(document, merged)

    statistics = match_statistics(suggestions)
    statistics["by_source"] = dict(Counter(suggestion.source.value for suggestion in suggestions))
    statistics["candidates"] = len(ordered)
    statistics["provider"] = outcome.provider
    statistics["offline_only"] = outcome.offline_only
    logger.debug("Aggregated %d candidate(s) into %d suggestion(s)", len(ordered), len(suggestions))
    return AnalysisResult(suggestions=suggestions, outcome=outcome, statistics=statistics)
