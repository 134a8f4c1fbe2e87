from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.context import ContextAnalyzer
from manuscript_review.engine import (
    RuleCompileError,
    apply_rules,
    apply_rules_in_chunks,
    compile_rules,
    filter_by_category,
    filter_by_severity,
    filter_by_type,
    match_rules,
    match_statistics,
    resolve_overlaps,
    sort_findings,
)
from manuscript_review.models import Finding, FindingSource, IssueType, RuleCategory, Severity
from manuscript_review.rules import Rule


def _rule(rule_id: str, pattern: str, **overrides) -> Rule:
    values = dict(
        id=rule_id,
        pattern=pattern,
        message="Found {match}.",
        type=IssueType.GRAMMAR,
        severity=Severity.WARNING,
        category=RuleCategory.GRAMMAR,
    )
    values.update(overrides)
    return Rule(**values)


def _finding(start: int, end: int, severity: Severity = Severity.WARNING, rule_id: str = "r") -> Finding:
    return Finding(
        rule_id=rule_id,
        source=FindingSource.OFFLINE,
        start_offset=start,
        end_offset=end,
        message="m",
        type=IssueType.GRAMMAR,
        severity=severity,
        category="grammar",
    )


def test_match_offsets_are_absolute_in_long_documents() -> None:
    compiled = compile_rules([_rule("needle", r"\bneedle\b")])
    text = "x" * 9950 + " needle " + "y" * 2042
    assert len(text) == 12000

    findings = match_rules(compiled, text, chunk_size=5000, overlap=200)

    assert [finding.span for finding in findings] == [(9951, 9957)]
    assert findings[0].original == "needle"
    assert findings[0].message == "Found needle."


def test_chunked_scan_equals_single_pass() -> None:
    compiled = compile_rules(
        [
            _rule("word", r"\bfoo bar\b"),
            _rule("digits", r"\d{3}"),
            _rule("spanning", r"alpha\s+omega"),
        ]
    )
    sentence = "foo bar 1234 alpha   omega and some filler text. "
    text = sentence * 80

    single = apply_rules(compiled, text)
    for chunk_size, overlap in [(97, 40), (250, 30), (1000, 20), (1000, 200)]:
        chunked = apply_rules_in_chunks(compiled, text, chunk_size=chunk_size, overlap=overlap)
        assert sort_findings(chunked) == sort_findings(single)


def test_chunk_boundary_does_not_duplicate_matches() -> None:
    compiled = compile_rules([_rule("boundary", r"boundary")])
    # The match straddles the first window edge.
    text = "a" * 95 + "boundary" + "b" * 100

    findings = apply_rules_in_chunks(compiled, text, chunk_size=100, overlap=20)

    assert [finding.span for finding in findings] == [(95, 103)]


def test_zero_width_matches_are_skipped_and_do_not_loop() -> None:
    compiled = compile_rules([_rule("empty", r"(?=x)")])
    assert apply_rules(compiled, "xxx") == []


def test_suggestions_equal_to_original_are_dropped() -> None:
    compiled = compile_rules(
        [_rule("same", r"\bsame\b", suggestion=lambda match, context: [match.group(0), "other"])]
    )
    findings = apply_rules(compiled, "the same text")
    assert findings[0].suggestions == ["other"]


def test_context_filter_can_veto_a_match() -> None:
    compiled = compile_rules(
        [_rule("vetoed", r"\bword\b", context_filter=lambda context, match: context.offset > 10)]
    )
    text = "word then another word"
    findings = apply_rules(compiled, text, create_context=ContextAnalyzer(text).context_at)
    assert [finding.start_offset for finding in findings] == [18]


def test_compile_rules_rejects_duplicates_and_bad_patterns() -> None:
    with pytest.raises(RuleCompileError, match="duplicate"):
        compile_rules([_rule("dup", "a"), _rule("dup", "b")])
    with pytest.raises(RuleCompileError) as excinfo:
        compile_rules([_rule("broken", "(unclosed")])
    assert excinfo.value.rule_id == "broken"


def test_compile_rules_skips_disabled_ids() -> None:
    compiled = compile_rules([_rule("keep", "a"), _rule("drop", "b")], disabled={"drop"})
    assert [item.id for item in compiled] == ["keep"]


def test_invalid_chunk_settings_raise() -> None:
    compiled = compile_rules([_rule("a", "a")])
    with pytest.raises(ValueError):
        apply_rules_in_chunks(compiled, "aaa", chunk_size=0)
    with pytest.raises(ValueError):
        apply_rules_in_chunks(compiled, "aaa", chunk_size=10, overlap=-1)


def test_filters_and_statistics() -> None:
    findings = [
        _finding(0, 2, Severity.ERROR),
        _finding(3, 5, Severity.INFO),
    ]

    assert len(filter_by_severity(findings, ["error"])) == 1
    assert len(filter_by_type(findings, [IssueType.GRAMMAR])) == 2
    assert filter_by_category(findings, [RuleCategory.SPELLING]) == []

    stats = match_statistics(findings)
    assert stats["total"] == 2
    assert stats["by_severity"] == {"error": 1, "info": 1}
    assert stats["by_category"] == {"grammar": 2}


def test_resolve_overlaps_prefers_higher_severity() -> None:
    first = _finding(0, 10, Severity.WARNING, "first")
    stronger = _finding(5, 12, Severity.ERROR, "stronger")
    equal = _finding(6, 8, Severity.ERROR, "equal")
    separate = _finding(20, 25, Severity.INFO, "separate")

    kept = resolve_overlaps([separate, equal, stronger, first])

    assert [finding.rule_id for finding in kept] == ["stronger", "separate"]


def test_resolve_overlaps_keeps_first_on_ties() -> None:
    a = _finding(0, 5, rule_id="a")
    b = _finding(0, 5, rule_id="b")
    assert [finding.rule_id for finding in resolve_overlaps([a, b])] == ["a"]
