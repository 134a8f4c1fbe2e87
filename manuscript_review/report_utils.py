"""Markdown, CSV and JSON renderings of an analysis result.

Kept separate from the pipeline so the builders can be reused and tested
without running any detector.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from .models import ISSUE_TYPE_LABELS, IssueType, Severity

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .pipeline.aggregator import AnalysisResult


def _format_suggestions(replacements: list[str] | None, max_suggestions: int = 3) -> str:
    """Return a truncated suggestions string, or "—" when there are none.

    More than ``max_suggestions`` replacements are shown as the first few
    followed by "(+N more)".
    """
    if not replacements:
        return "—"
    if len(replacements) <= max_suggestions:
        return ", ".join(replacements)
    visible = ", ".join(replacements[:max_suggestions])
    remaining = len(replacements) - max_suggestions
    return f"{visible} (+{remaining} more)"


def _escape(value: str) -> str:
    return value.replace("|", "\\|").replace("\n", " ")


def _provider_line(result: "AnalysisResult") -> str:
    outcome = result.outcome
    if outcome.offline_only:
        return "- Remote checking unavailable: offline rules only"
    return f"- Grammar provider: {outcome.provider}"


def build_report_markdown(result: "AnalysisResult", *, title: str = "Manuscript Review Report") -> str:
    """Convert an analysis result into a Markdown report."""

    suggestions = result.suggestions
    lines: list[str] = []
    lines.append(f"# {title}")
    lines.append("")
    lines.append(f"- Total suggestions: {len(suggestions)}")
    lines.append(_provider_line(result))

    lines.append("")
    lines.append("## Totals by Type")
    for issue_type in IssueType:
        count = sum(1 for item in suggestions if item.type is issue_type)
        lines.append(f"- {ISSUE_TYPE_LABELS[issue_type]}: {count}")

    lines.append("")
    lines.append("## Totals by Severity")
    for severity in Severity:
        count = sum(1 for item in suggestions if item.severity is severity)
        lines.append(f"- {severity.value}: {count}")

    lines.append("")
    lines.append("---")
    lines.append("")
    lines.append("## Suggestions")
    if not suggestions:
        lines.append("")
        lines.append("_No issues found._")
        return "\n".join(lines)

    lines.append("")
    lines.append("| Line | Column | Rule | Type | Severity | Issue | Message | Suggestions |")
    lines.append("| --- | --- | --- | --- | --- | --- | --- | --- |")
    for item in suggestions:
        issue_text = _escape(item.original) if item.original else "—"
        lines.append(
            f"| {item.start_line} | {item.start_column} | `{item.rule_id}` | {ISSUE_TYPE_LABELS[item.type]} "
            f"| {item.severity.value} | {issue_text} | {_escape(item.message)} "
            f"| {_escape(_format_suggestions(item.suggestions))} |"
        )

    return "\n".join(lines)


def build_report_csv(result: "AnalysisResult") -> list[list[str]]:
    """Convert an analysis result into CSV rows; the first row holds the headers."""

    rows: list[list[str]] = []
    rows.append([
        "ID",
        "Line",
        "Column",
        "Start Offset",
        "End Offset",
        "Rule ID",
        "Source",
        "Type",
        "Severity",
        "Category",
        "Issue",
        "Message",
        "Suggestions",
    ])

    for item in result.suggestions:
        txt = _format_suggestions(item.suggestions)
        rows.append([
            item.id,
            str(item.start_line),
            str(item.start_column),
            str(item.start_offset),
            str(item.end_offset),
            item.rule_id,
            item.source.value,
            item.type.value,
            item.severity.value,
            item.category,
            item.original,
            item.message,
            "" if txt == "—" else txt,
        ])

    return rows


def build_report_json(result: "AnalysisResult", *, indent: int = 2) -> str:
    outcome = result.outcome
    payload = {
        "outcome": {
            "provider": outcome.provider,
            "status": outcome.status.value,
            "offline_only": outcome.offline_only,
            "attempts": [
                {"provider": attempt.provider, "status": attempt.status.value, "error": attempt.error}
                for attempt in outcome.attempts
            ],
        },
        "statistics": result.statistics,
        "suggestions": [item.model_dump(mode="json") for item in result.suggestions],
    }
    return json.dumps(payload, indent=indent, ensure_ascii=False)
