"""Regex engine that applies compiled rules to a document.

Offsets are always absolute positions in the original text. Long documents
are scanned in overlapping windows: a window starts every ``chunk_size``
characters and reads ``chunk_size + overlap`` characters, but it only
accepts matches that *start* inside its own ``chunk_size`` region. Each rule
keeps a cursor at the end of its last accepted match and later windows
resume from that cursor, so a match can never be reported twice and the
result equals a single pass for every match no longer than ``overlap``.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from ..context import RuleContext
from ..models import Finding, FindingSource, IssueType, RuleCategory, Severity
from ..rules import Rule

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 5000
DEFAULT_OVERLAP = 200

ContextFactory = Callable[[int], RuleContext]


class RuleCompileError(ValueError):
    """Raised when a rule pattern cannot be compiled."""

    def __init__(self, rule_id: str, reason: str) -> None:
        super().__init__(f"Rule {rule_id!r} is invalid: {reason}")
        self.rule_id = rule_id
        self.reason = reason


@dataclass(frozen=True)
class CompiledRule:
    rule: Rule
    regex: "re.Pattern[str]"

    @property
    def id(self) -> str:
        return self.rule.id


def compile_rules(rules: Iterable[Rule], *, disabled: Iterable[str] = ()) -> tuple[CompiledRule, ...]:
    """Compile ``rules`` in order, skipping the ids listed in ``disabled``."""

    skip = set(disabled)
    seen: set[str] = set()
    compiled: list[CompiledRule] = []
    for rule in rules:
        if rule.id in skip:
            continue
        if rule.id in seen:
            raise RuleCompileError(rule.id, "duplicate rule id")
        seen.add(rule.id)
        try:
            regex = rule.compile()
        except re.error as exc:
            raise RuleCompileError(rule.id, str(exc)) from exc
        compiled.append(CompiledRule(rule=rule, regex=regex))
    logger.debug("Compiled %d rule(s); %d disabled", len(compiled), len(skip))
    return tuple(compiled)


def _resume_position(match: "re.Match[str]") -> int:
    # Zero-width matches must still move the cursor forward.
    return match.end() if match.end() > match.start() else match.end() + 1


def iter_pattern_matches(
    regex: "re.Pattern[str]",
    text: str,
    start: int = 0,
    end: int | None = None,
) -> Iterator["re.Match[str]"]:
    """Yield successive matches of ``regex`` in ``text[start:end]``.

    The search runs on the full string with ``pos``/``endpos`` so that
    lookbehinds and word boundaries still see the surrounding characters.
    """

    limit = len(text) if end is None else min(end, len(text))
    position = max(0, start)
    while position <= limit:
        match = regex.search(text, position, limit)
        if match is None:
            return
        yield match
        position = _resume_position(match)


def _build_finding(
    rule: Rule,
    match: "re.Match[str]",
    create_context: ContextFactory | None,
) -> Finding | None:
    start, end = match.span()
    if end <= start:
        return None
    context = create_context(start) if create_context is not None and rule.needs_context else None
    if not rule.accepts(match, context):
        return None
    original = match.group(0)
    suggestions = [item for item in rule.suggestions_for(match, context) if item != original]
    return Finding(
        rule_id=rule.id,
        source=FindingSource.OFFLINE,
        start_offset=start,
        end_offset=end,
        original=original,
        message=rule.render_message(match),
        suggestions=suggestions,
        type=rule.type,
        severity=rule.severity,
        category=rule.category,
        explanation=rule.explanation,
    )


def apply_rules(
    compiled: Sequence[CompiledRule],
    text: str,
    *,
    create_context: ContextFactory | None = None,
) -> list[Finding]:
    """Scan ``text`` in a single pass per rule."""

    findings: list[Finding] = []
    for compiled_rule in compiled:
        for match in iter_pattern_matches(compiled_rule.regex, text):
            finding = _build_finding(compiled_rule.rule, match, create_context)
            if finding is not None:
                findings.append(finding)
    return findings


def apply_rules_in_chunks(
    compiled: Sequence[CompiledRule],
    text: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    create_context: ContextFactory | None = None,
) -> list[Finding]:
    """Scan ``text`` in overlapping windows without double-counting."""

    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0:
        raise ValueError("overlap must not be negative")

    length = len(text)
    cursors = {compiled_rule.id: 0 for compiled_rule in compiled}
    seen: set[tuple[str, int, int]] = set()
    findings: list[Finding] = []

    for window_start in range(0, length, chunk_size):
        region_end = min(window_start + chunk_size, length)
        window_end = min(window_start + chunk_size + overlap, length)
        for compiled_rule in compiled:
            rule_id = compiled_rule.id
            start = max(cursors[rule_id], window_start)
            for match in iter_pattern_matches(compiled_rule.regex, text, start, window_end):
                if match.start() >= region_end:
                    break
                if match.start() < cursors[rule_id]:
                    continue
                if match.end() == window_end and window_end < length:
                    # The window edge may have cut the match short; re-match
                    # against the whole text from the same start.
                    confirmed = compiled_rule.regex.match(text, match.start())
                    if confirmed is None:
                        continue
                    match = confirmed
                cursors[rule_id] = _resume_position(match)
                key = (rule_id, match.start(), match.end())
                if key in seen:
                    continue
                seen.add(key)
                finding = _build_finding(compiled_rule.rule, match, create_context)
                if finding is not None:
                    findings.append(finding)

    logger.debug(
        "Chunked scan of %d character(s) produced %d finding(s)",
        length,
        len(findings),
    )
    return findings


def match_rules(
    compiled: Sequence[CompiledRule],
    text: str,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_OVERLAP,
    create_context: ContextFactory | None = None,
) -> list[Finding]:
    """Scan directly for short texts and in windows for long ones."""

    if len(text) <= chunk_size:
        return apply_rules(compiled, text, create_context=create_context)
    return apply_rules_in_chunks(
        compiled,
        text,
        chunk_size=chunk_size,
        overlap=overlap,
        create_context=create_context,
    )


def _values(items: Iterable[object]) -> set[str]:
    return {str(getattr(item, "value", item)).lower() for item in items}


def filter_by_type(findings: Iterable[Finding], types: Iterable[IssueType | str]) -> list[Finding]:
    wanted = _values(types)
    return [finding for finding in findings if finding.type.value in wanted]


def filter_by_severity(findings: Iterable[Finding], severities: Iterable[Severity | str]) -> list[Finding]:
    wanted = _values(severities)
    return [finding for finding in findings if finding.severity.value in wanted]


def filter_by_category(findings: Iterable[Finding], categories: Iterable[RuleCategory | str]) -> list[Finding]:
    wanted = _values(categories)
    return [finding for finding in findings if finding.category in wanted]


def sort_findings(findings: Iterable[Finding]) -> list[Finding]:
    """Stable sort by ``(start, end)``; equal spans keep discovery order."""

    return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset))


def match_statistics(findings: Sequence[Finding]) -> dict[str, object]:
    return {
        "total": len(findings),
        "by_type": dict(Counter(finding.type.value for finding in findings)),
        "by_severity": dict(Counter(finding.severity.value for finding in findings)),
        "by_category": dict(Counter(finding.category for finding in findings)),
    }
