"""Statistical reporting checks (APA conventions).

Every check works on the raw text and emits findings scoped to the token it
inspects. Text without statistics simply yields nothing.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from ..models import Finding, FindingSource, IssueType, RuleCategory, Severity

logger = logging.getLogger(__name__)

STANDARD_CI_LEVELS = (90, 95, 99)
SMALL_SAMPLE_THRESHOLD = 30
TEST_CONTEXT_WINDOW = 100
SUBGROUP_CONTEXT_WINDOW = 60
MAX_P_DECIMALS = 3
MAX_STAT_DECIMALS = 2

_NUMBER = r"-?\d*\.?\d+"

_P_VALUE_RE = re.compile(
    rf"(?<![A-Za-z])(?P<letter>[pP])(?P<lsp>\s*)(?P<op>[=<>≤≥])(?P<rsp>\s*)(?P<value>{_NUMBER})"
)
_P_NEARBY_RE = re.compile(r"(?<![A-Za-z])[pP]\s*[=<>≤≥]\s*\.?\d")

_CI_RE = re.compile(
    r"(?P<level>\d{1,3}(?:\.\d+)?)%\s*CI(?P<sep>\s*[=:]?\s*)(?P<open>[\[(])?\s*"
    rf"(?P<lower>{_NUMBER})\s*(?P<delim>,|[-–]|to)\s*(?P<upper>{_NUMBER})"
    r"(?(open)\s*(?P<close>[\])]))"
)

_BOUNDED_EFFECT_SIZES = (
    ("partial eta-squared", r"ηp²|η²p|ηₚ²|partial\s+eta-squared"),
    ("eta-squared", r"η²|eta-squared"),
    ("omega-squared", r"ω²|omega-squared"),
    ("Cramér's V", r"Cram[eé]r['’]?s\s+V|(?<![A-Za-z])V"),
)
_EFFECT_SIZE_RE = re.compile(
    r"(?P<name>"
    + "|".join(pattern for _, pattern in _BOUNDED_EFFECT_SIZES)
    + r"|Cohen['’]?s\s+d|(?<![A-Za-z'’])d)"
    + rf"(?P<lsp>\s*)=(?P<rsp>\s*)(?P<value>{_NUMBER})"
)

_SAMPLE_RE = re.compile(r"(?<![A-Za-z])(?P<letter>[Nn])(?P<lsp>\s*)=(?P<rsp>\s*)(?P<size>\d+)(?![\d.])")
_SUBGROUP_RE = re.compile(
    r"\b(?:group|groups|condition|conditions|subsample|subgroup|arm|cohort|participants in)\b",
    re.IGNORECASE,
)

_STATISTICAL_TESTS: tuple[tuple[str, re.Pattern[str], bool], ...] = (
    # (name, pattern, requires degrees of freedom)
    ("t-test", re.compile(rf"(?<![A-Za-z])t\s*(?P<df>\(\s*[\d.]+\s*\))?\s*=\s*{_NUMBER}"), True),
    (
        "F-test",
        re.compile(rf"(?<![A-Za-z])F\s*(?P<df>\(\s*\d+\s*,\s*\d+\s*\))?\s*=\s*{_NUMBER}"),
        True,
    ),
    (
        "chi-square test",
        re.compile(rf"(?:χ²|χ2|chi-square)\s*(?P<df>\([^()]{{1,20}}\))?\s*=\s*{_NUMBER}", re.IGNORECASE),
        False,
    ),
    ("correlation", re.compile(rf"(?<![A-Za-z])r\s*(?P<df>\(\s*\d+\s*\))?\s*=\s*{_NUMBER}"), False),
)
_EFFECT_SIZE_NEARBY_RE = re.compile(r"η|ω|eta-squared|omega-squared|Cohen", re.IGNORECASE)

_DESCRIPTIVE_NOTATION = (
    (re.compile(r"\bMean(?=\s*=)"), "M", 'Use "M" instead of "Mean".'),
    (re.compile(r"\bStd\.?\s*Dev\.?(?=\s*=)"), "SD", 'Use "SD" instead of "Std. Dev.".'),
    (re.compile(r"\bStandard\s+Deviation(?=\s*=)", re.IGNORECASE), "SD", 'Use "SD" instead of "Standard Deviation".'),
    (re.compile(r"\bStandard\s+Error(?=\s*=)", re.IGNORECASE), "SE", 'Use "SE" instead of "Standard Error".'),
)
_NEGATIVE_SD_RE = re.compile(r"\bSD\s*=\s*(?P<value>-\d*\.?\d+)")

_DECIMALS_RE = re.compile(
    r"(?<![A-Za-z])(?P<stat>t|r|F|M|SD)\s*(?:\([^()]{1,20}\))?\s*=\s*(?P<value>-?\d*\.(?P<decimals>\d+))"
)

_UNITS = ("kHz", "MHz", "min", "mg", "ml", "mL", "kg", "cm", "mm", "ms", "μm", "µm", "nm", "Hz", "g", "L", "m", "h")
_UNIT_RE = re.compile(rf"(?<![\w.])(?P<number>\d+(?:\.\d+)?)(?P<unit>{'|'.join(_UNITS)})(?!\w)")

_LARGE_NUMBER_RE = re.compile(r"(?<![\w.,\-/:])\d{5,}(?!\d|[.,]\d|[\w\-/])")
_IDENTIFIER_PREFIX_RE = re.compile(r"(?:ISBN|ISSN|doi|DOI|https?://|arXiv)\S*\s*$")


def _finding(
    rule_id: str,
    start: int,
    end: int,
    original: str,
    message: str,
    *,
    severity: Severity = Severity.WARNING,
    issue_type: IssueType = IssueType.STYLE,
    suggestions: list[str] | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        source=FindingSource.STATISTICS,
        start_offset=start,
        end_offset=end,
        original=original,
        message=message,
        suggestions=suggestions or [],
        type=issue_type,
        severity=severity,
        category=RuleCategory.STATISTICS,
    )


def _decimal_places(value: str) -> int:
    _, _, decimals = value.partition(".")
    return len(decimals)


def _strip_leading_zero(value: str) -> str:
    if value.startswith("0."):
        return value[1:]
    if value.startswith("-0."):
        return "-" + value[2:]
    return value


def _round_like(value: str, places: int) -> str:
    rounded = f"{float(value):.{places}f}"
    if value.lstrip("-").startswith("."):
        rounded = _strip_leading_zero(rounded)
    return rounded


def _most_severe(severities: list[Severity]) -> Severity:
    return max(severities, key=lambda severity: severity.rank)


def check_p_values(text: str) -> list[Finding]:
    """One combined finding per p-value token that breaks a convention."""

    findings: list[Finding] = []
    for match in _P_VALUE_RE.finditer(text):
        op = match.group("op")
        raw_value = match.group("value")
        value = float(raw_value)
        problems: list[str] = []
        severities: list[Severity] = []
        fixed_value = raw_value
        fixed_op = op

        if match.group("letter") == "P":
            problems.append('use a lowercase, italic "p"')
            severities.append(Severity.WARNING)
        if match.group("lsp") != " " or match.group("rsp") != " ":
            problems.append(f'put single spaces around "{op}"')
            severities.append(Severity.WARNING)

        if value > 1 or value < 0:
            problems.append("p-values must lie between 0 and 1")
            severities.append(Severity.ERROR)
        elif value == 0:
            problems.append('report "p < .001" instead of a zero p-value')
            severities.append(Severity.ERROR)
            fixed_op, fixed_value = "<", ".001"
        else:
            if raw_value.startswith("0."):
                problems.append("drop the leading zero (p cannot exceed 1)")
                severities.append(Severity.WARNING)
                fixed_value = _strip_leading_zero(raw_value)
            if _decimal_places(raw_value) > MAX_P_DECIMALS:
                problems.append(f"report p-values to at most {MAX_P_DECIMALS} decimal places")
                severities.append(Severity.INFO)
                if value < 0.001:
                    fixed_op, fixed_value = "<", ".001"
                else:
                    fixed_value = _strip_leading_zero(f"{value:.{MAX_P_DECIMALS}f}")

        if not problems:
            continue
        suggestion = f"p {fixed_op} {fixed_value}"
        findings.append(
            _finding(
                "stats-p-value",
                match.start(),
                match.end(),
                match.group(0),
                "p-value format: " + "; ".join(problems) + ".",
                severity=_most_severe(severities),
                issue_type=IssueType.GRAMMAR if Severity.ERROR in severities else IssueType.STYLE,
                suggestions=[suggestion] if suggestion != match.group(0) else [],
            )
        )
    return findings


def check_confidence_intervals(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _CI_RE.finditer(text):
        level_text = match.group("level")
        lower_text = match.group("lower")
        upper_text = match.group("upper")
        level = float(level_text)
        if level not in STANDARD_CI_LEVELS:
            end = match.start("sep")
            findings.append(
                _finding(
                    "stats-ci-level",
                    match.start(),
                    end,
                    text[match.start() : end],
                    f"Unusual confidence level {level_text}%. Standard levels are 90%, 95% and 99%.",
                    severity=Severity.INFO,
                )
            )
        if float(lower_text) >= float(upper_text):
            findings.append(
                _finding(
                    "stats-ci-bounds",
                    match.start(),
                    match.end(),
                    match.group(0),
                    "Confidence interval lower bound must be less than the upper bound.",
                    severity=Severity.ERROR,
                    issue_type=IssueType.GRAMMAR,
                )
            )
        well_formed = (
            match.group("open") == "["
            and match.group("close") == "]"
            and match.group("delim") == ","
            and not match.group("sep").strip()
        )
        if not well_formed:
            suggestion = f"{level_text}% CI [{lower_text}, {upper_text}]"
            findings.append(
                _finding(
                    "stats-ci-format",
                    match.start(),
                    match.end(),
                    match.group(0),
                    f'Report confidence intervals in brackets with a comma: "{suggestion}".',
                    severity=Severity.WARNING,
                    issue_type=IssueType.PUNCTUATION,
                    suggestions=[suggestion],
                )
            )
    return findings


def _bounded_effect_size(name: str) -> str | None:
    for label, pattern in _BOUNDED_EFFECT_SIZES:
        if re.fullmatch(pattern, name):
            return label
    return None


def check_effect_sizes(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _EFFECT_SIZE_RE.finditer(text):
        name = match.group("name")
        raw_value = match.group("value")
        label = _bounded_effect_size(name)
        if label is not None and not 0 <= float(raw_value) <= 1:
            findings.append(
                _finding(
                    "stats-effect-size-range",
                    match.start("value"),
                    match.end("value"),
                    raw_value,
                    f"{label} must lie between 0 and 1.",
                    severity=Severity.ERROR,
                    issue_type=IssueType.GRAMMAR,
                )
            )
        if match.group("lsp") != " " or match.group("rsp") != " ":
            suggestion = f"{name} = {raw_value}"
            findings.append(
                _finding(
                    "stats-effect-size-spacing",
                    match.start(),
                    match.end(),
                    match.group(0),
                    f'Put single spaces around the equals sign: "{suggestion}".',
                    issue_type=IssueType.PUNCTUATION,
                    suggestions=[suggestion],
                )
            )
    return findings


def check_sample_sizes(text: str) -> list[Finding]:
    """Spacing, small total samples and ``N`` used for a subgroup."""

    findings: list[Finding] = []
    for match in _SAMPLE_RE.finditer(text):
        letter = match.group("letter")
        size = int(match.group("size"))
        problems: list[str] = []
        severities: list[Severity] = []
        fixed_letter = letter

        if match.group("lsp") != " " or match.group("rsp") != " ":
            problems.append('put single spaces around "="')
            severities.append(Severity.WARNING)
        if letter == "N":
            before = text[max(0, match.start() - SUBGROUP_CONTEXT_WINDOW) : match.start()]
            if _SUBGROUP_RE.search(before):
                problems.append('use lowercase "n" for a subgroup or condition')
                severities.append(Severity.WARNING)
                fixed_letter = "n"
            elif size < SMALL_SAMPLE_THRESHOLD:
                problems.append(f"small sample (N = {size}); consider discussing this as a limitation")
                severities.append(Severity.INFO)

        if not problems:
            continue
        suggestion = f"{fixed_letter} = {size}"
        findings.append(
            _finding(
                "stats-sample-size",
                match.start(),
                match.end(),
                match.group(0),
                "Sample size: " + "; ".join(problems) + ".",
                severity=_most_severe(severities),
                suggestions=[suggestion] if suggestion != match.group(0) else [],
            )
        )
    return findings


def check_test_completeness(text: str) -> list[Finding]:
    """Flag test statistics reported without p, effect size or df."""

    findings: list[Finding] = []
    for name, pattern, needs_df in _STATISTICAL_TESTS:
        for match in pattern.finditer(text):
            window = text[max(0, match.start() - TEST_CONTEXT_WINDOW) : match.end() + TEST_CONTEXT_WINDOW]
            if not _P_NEARBY_RE.search(window):
                findings.append(
                    _finding(
                        "stats-missing-p",
                        match.start(),
                        match.end(),
                        match.group(0),
                        f"{name[0].upper()}{name[1:]} reported without a p-value.",
                    )
                )
            if name == "F-test" and not _EFFECT_SIZE_NEARBY_RE.search(window):
                findings.append(
                    _finding(
                        "stats-missing-effect-size",
                        match.start(),
                        match.end(),
                        match.group(0),
                        "Consider reporting an effect size for the F-test (e.g. η² or ω²).",
                        severity=Severity.INFO,
                    )
                )
            if needs_df and match.group("df") is None:
                findings.append(
                    _finding(
                        "stats-missing-df",
                        match.start(),
                        match.end(),
                        match.group(0),
                        f"Report the degrees of freedom with the {name}.",
                    )
                )
    return findings


def check_descriptive_notation(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for pattern, replacement, message in _DESCRIPTIVE_NOTATION:
        for match in pattern.finditer(text):
            findings.append(
                _finding(
                    "stats-descriptive-notation",
                    match.start(),
                    match.end(),
                    match.group(0),
                    message,
                    suggestions=[replacement],
                )
            )
    for match in _NEGATIVE_SD_RE.finditer(text):
        findings.append(
            _finding(
                "stats-negative-sd",
                match.start("value"),
                match.end("value"),
                match.group("value"),
                "Standard deviation cannot be negative.",
                severity=Severity.ERROR,
                issue_type=IssueType.GRAMMAR,
            )
        )
    return findings


def check_decimal_places(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _DECIMALS_RE.finditer(text):
        if len(match.group("decimals")) <= MAX_STAT_DECIMALS:
            continue
        value = match.group("value")
        findings.append(
            _finding(
                "stats-decimal-places",
                match.start("value"),
                match.end("value"),
                value,
                f"Report {match.group('stat')} to {MAX_STAT_DECIMALS} decimal places.",
                severity=Severity.INFO,
                suggestions=[_round_like(value, MAX_STAT_DECIMALS)],
            )
        )
    return findings


def check_unit_spacing(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _UNIT_RE.finditer(text):
        suggestion = f"{match.group('number')} {match.group('unit')}"
        findings.append(
            _finding(
                "stats-unit-spacing",
                match.start(),
                match.end(),
                match.group(0),
                f'Separate the unit from the number: "{suggestion}".',
                issue_type=IssueType.PUNCTUATION,
                suggestions=[suggestion],
            )
        )
    return findings


def check_large_numbers(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for match in _LARGE_NUMBER_RE.finditer(text):
        line_start = text.rfind("\n", 0, match.start()) + 1
        if _IDENTIFIER_PREFIX_RE.search(text[line_start : match.start()]):
            continue
        suggestion = f"{int(match.group(0)):,}"
        findings.append(
            _finding(
                "stats-number-format",
                match.start(),
                match.end(),
                match.group(0),
                f'Use comma separators for large numbers: "{suggestion}".',
                severity=Severity.INFO,
                issue_type=IssueType.PUNCTUATION,
                suggestions=[suggestion],
            )
        )
    return findings


_CHECKS: tuple[Callable[[str], list[Finding]], ...] = (
    check_p_values,
    check_confidence_intervals,
    check_effect_sizes,
    check_sample_sizes,
    check_test_completeness,
    check_descriptive_notation,
    check_decimal_places,
    check_unit_spacing,
    check_large_numbers,
)


def validate_statistics(text: str) -> list[Finding]:
    """Run every statistics check and return findings in document order."""

    if not text.strip():
        return []
    findings: list[Finding] = []
    for check in _CHECKS:
        findings.extend(check(text))
    logger.debug("Statistics validator produced %d finding(s)", len(findings))
    return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset, finding.rule_id))
