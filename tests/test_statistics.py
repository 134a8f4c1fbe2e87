from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.models import FindingSource, IssueType, Severity
from manuscript_review.validators import validate_statistics
from manuscript_review.validators.statistics import (
    check_confidence_intervals,
    check_decimal_places,
    check_descriptive_notation,
    check_effect_sizes,
    check_large_numbers,
    check_p_values,
    check_sample_sizes,
    check_test_completeness,
    check_unit_spacing,
)


def _rules(findings) -> list[str]:
    return [finding.rule_id for finding in findings]


@pytest.mark.parametrize(
    "text, suggestion",
    [
        ("p=.05", "p = .05"),
        ("p = 0.05", "p = .05"),
        ("P = .05", "p = .05"),
        ("p = .04123", "p = .041"),
        ("p = .00001", "p < .001"),
        ("p = 0", "p < .001"),
    ],
)
def test_p_value_suggestions(text: str, suggestion: str) -> None:
    findings = check_p_values(text)

    assert len(findings) == 1
    assert findings[0].span == (0, len(text))
    assert findings[0].suggestions == [suggestion]


def test_well_formed_p_value_is_accepted() -> None:
    assert check_p_values("significant, p = .05, and p < .001") == []


def test_p_value_out_of_range_is_an_error() -> None:
    findings = check_p_values("p = 1.5")

    assert findings[0].severity is Severity.ERROR
    assert findings[0].type is IssueType.GRAMMAR
    assert findings[0].suggestions == []


def test_combined_p_value_problems_use_the_worst_severity() -> None:
    findings = check_p_values("P=0.05")

    assert len(findings) == 1
    assert findings[0].severity is Severity.WARNING
    assert findings[0].suggestions == ["p = .05"]
    assert findings[0].source is FindingSource.STATISTICS


def test_confidence_interval_format() -> None:
    text = "95% CI: 1.2-3.4"

    findings = check_confidence_intervals(text)

    assert _rules(findings) == ["stats-ci-format"]
    assert findings[0].suggestions == ["95% CI [1.2, 3.4]"]
    assert findings[0].span == (0, len(text))


def test_confidence_interval_level_and_bounds() -> None:
    assert check_confidence_intervals("95% CI [1.2, 3.4]") == []

    level = check_confidence_intervals("93% CI [1.2, 3.4]")
    assert _rules(level) == ["stats-ci-level"]
    assert level[0].original == "93% CI"

    bounds = check_confidence_intervals("95% CI [3.4, 1.2]")
    assert _rules(bounds) == ["stats-ci-bounds"]
    assert bounds[0].severity is Severity.ERROR


def test_confidence_interval_inside_parentheses() -> None:
    text = "(95% CI [0.10, 0.50])"
    assert check_confidence_intervals(text) == []


def test_effect_size_range_and_spacing() -> None:
    text = "η² = 1.4 and d=0.5 and Cohen's d = 0.8 and Cramér's V = 1.2"

    findings = check_effect_sizes(text)
    by_rule = {}
    for finding in findings:
        by_rule.setdefault(finding.rule_id, []).append(finding)

    assert [finding.original for finding in by_rule["stats-effect-size-range"]] == ["1.4", "1.2"]
    assert [finding.suggestions for finding in by_rule["stats-effect-size-spacing"]] == [["d = 0.5"]]


@pytest.mark.parametrize(
    "text, severity, suggestions",
    [
        ("A total of N = 25 took part.", Severity.INFO, []),
        ("A total of N=120 took part.", Severity.WARNING, ["N = 120"]),
        ("In the control group (N = 40) scores rose.", Severity.WARNING, ["n = 40"]),
    ],
)
def test_sample_size_checks(text: str, severity: Severity, suggestions: list[str]) -> None:
    findings = check_sample_sizes(text)

    assert _rules(findings) == ["stats-sample-size"]
    assert findings[0].severity is severity
    assert findings[0].suggestions == suggestions


def test_adequate_total_sample_is_not_flagged() -> None:
    assert check_sample_sizes("We recruited N = 200 adults and n = 12 pilots.") == []


def test_complete_test_reports_pass() -> None:
    text = "t(28) = 2.10, p = .045 and F(2, 27) = 4.56, p = .02, η² = .25"
    assert check_test_completeness(text) == []


def test_incomplete_test_reports() -> None:
    assert sorted(_rules(check_test_completeness("We found t = 2.10 overall."))) == [
        "stats-missing-df",
        "stats-missing-p",
    ]
    assert sorted(_rules(check_test_completeness("An effect, F = 3.2, p = .04, emerged."))) == [
        "stats-missing-df",
        "stats-missing-effect-size",
    ]
    assert _rules(check_test_completeness("The χ²(2) = 8.1 result.")) == ["stats-missing-p"]


def test_descriptive_notation() -> None:
    text = "Mean = 4.5, Std. Dev. = 1.2 and SD = -1.2"

    findings = check_descriptive_notation(text)
    notation = [finding for finding in findings if finding.rule_id == "stats-descriptive-notation"]
    negative = [finding for finding in findings if finding.rule_id == "stats-negative-sd"]

    assert [(finding.original, finding.suggestions) for finding in notation] == [
        ("Mean", ["M"]),
        ("Std. Dev.", ["SD"]),
    ]
    assert negative[0].original == "-1.2"
    assert negative[0].severity is Severity.ERROR


def test_decimal_places_keep_leading_zero_style() -> None:
    findings = check_decimal_places("M = 3.4567 and r = .4567 and SD = 1.25")

    assert [(finding.original, finding.suggestions) for finding in findings] == [
        ("3.4567", ["3.46"]),
        (".4567", [".46"]),
    ]


def test_unit_spacing() -> None:
    findings = check_unit_spacing("Each dose was 5mg in 10.5ml; the trial took 5 h.")

    assert [finding.suggestions for finding in findings] == [["5 mg"], ["10.5 ml"]]


def test_large_numbers_skip_identifiers() -> None:
    findings = check_large_numbers("We screened 12345 records.\nISBN 9780306406157\nIn 2020 we")

    assert [(finding.original, finding.suggestions) for finding in findings] == [("12345", ["12,345"])]


def test_validate_statistics_orders_findings() -> None:
    text = "Results: t = 2.123 with p=.05 for 5mg."

    findings = validate_statistics(text)

    starts = [finding.start_offset for finding in findings]
    assert starts == sorted(starts)
    assert {"stats-p-value", "stats-unit-spacing", "stats-decimal-places", "stats-missing-df"} <= set(_rules(findings))


@pytest.mark.parametrize("text", ["", "  ", "A paragraph with no numbers at all."])
def test_text_without_statistics_yields_nothing(text: str) -> None:
    assert validate_statistics(text) == []
