"""Discipline-specific terminology and conventions.

Each :class:`FieldTerminology` lists terms a field discourages outright and
terms with a preferred replacement. When no field hint is given the field
is guessed from keyword counts, falling back to STEM.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from ..context import extract_headings, section_blocks
from ..models import AcademicField, Finding, FindingSource, IssueType, RuleCategory, SectionType, Severity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldTerminology:
    field: AcademicField
    label: str
    preferred_terms: dict[str, str]
    deprecated_terms: tuple[str, ...]
    required_elements: tuple[str, ...]


FIELD_TERMINOLOGY: dict[AcademicField, FieldTerminology] = {
    AcademicField.STEM: FieldTerminology(
        field=AcademicField.STEM,
        label="STEM",
        preferred_terms={
            "prove": "demonstrate",
            "obvious": "evident",
            "clearly": "as shown in",
            "very significant": "statistically significant",
        },
        deprecated_terms=("proof positive", "absolutely certain", "undeniable fact"),
        required_elements=("methodology", "results", "data", "analysis"),
    ),
    AcademicField.SOCIAL_SCIENCES: FieldTerminology(
        field=AcademicField.SOCIAL_SCIENCES,
        label="Social Sciences",
        preferred_terms={
            "subjects": "participants",
            "prove": "suggest",
            "normal": "typical",
            "abnormal": "atypical",
        },
        deprecated_terms=("crazy", "insane", "retarded", "normal people"),
        required_elements=("participants", "procedure", "instruments", "ethical approval"),
    ),
    AcademicField.HUMANITIES: FieldTerminology(
        field=AcademicField.HUMANITIES,
        label="Humanities",
        preferred_terms={"prove": "argue", "show": "suggest", "obviously": "arguably"},
        deprecated_terms=("clearly proves", "definitively shows"),
        required_elements=("sources", "analysis", "interpretation", "references"),
    ),
    AcademicField.MEDICINE: FieldTerminology(
        field=AcademicField.MEDICINE,
        label="Medicine",
        preferred_terms={"case": "patient case", "subjects": "patients or participants"},
        deprecated_terms=("victim", "suffering from", "afflicted with"),
        required_elements=("ethics approval", "informed consent", "patient demographics", "clinical measures"),
    ),
    AcademicField.ENGINEERING: FieldTerminology(
        field=AcademicField.ENGINEERING,
        label="Engineering",
        preferred_terms={},
        deprecated_terms=("perfect solution", "ideal system"),
        required_elements=("specifications", "constraints", "testing", "validation"),
    ),
}

# Detection order doubles as the tie-break order.
FIELD_KEYWORDS: dict[AcademicField, tuple[str, ...]] = {
    AcademicField.STEM: (
        "algorithm", "equation", "hypothesis", "experiment", "variable",
        "data analysis", "statistical", "coefficient",
    ),
    AcademicField.MEDICINE: (
        "patient", "clinical", "diagnosis", "treatment", "symptoms",
        "medical", "health", "disease", "therapy",
    ),
    AcademicField.ENGINEERING: (
        "design", "system", "implementation", "performance", "optimization",
        "specifications", "prototype",
    ),
    AcademicField.SOCIAL_SCIENCES: (
        "participants", "survey", "interview", "qualitative", "social",
        "cultural", "behavior", "psychology",
    ),
    AcademicField.HUMANITIES: (
        "interpretation", "narrative", "literature", "historical", "cultural",
        "philosophical", "textual analysis",
    ),
}

NON_SI_UNITS: dict[str, str] = {
    "inches": "cm or mm",
    "feet": "meters",
    "miles": "kilometers",
    "pounds": "kilograms",
    "ounces": "grams",
    "fahrenheit": "Celsius or Kelvin",
    "psi": "Pascals or kPa",
}
_UNIT_FIELDS = {AcademicField.STEM, AcademicField.ENGINEERING, AcademicField.MEDICINE}

ETHICS_KEYWORDS = (
    "ethics approval",
    "ethical approval",
    "irb approval",
    "institutional review board",
    "ethics committee",
    "informed consent",
    "ethical considerations",
)
_ETHICS_FIELDS = {AcademicField.MEDICINE, AcademicField.SOCIAL_SCIENCES}
_HUMAN_SUBJECT_RE = re.compile(r"\b(?:participants?|patients?)\b", re.IGNORECASE)


def _term_pattern(term: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(term)}\b", re.IGNORECASE)


def detect_academic_field(text: str) -> AcademicField:
    lowered = text.lower()
    best_field = AcademicField.STEM
    best_score = 0
    for academic_field, keywords in FIELD_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in lowered)
        if score > best_score:
            best_field, best_score = academic_field, score
    return best_field


def _resolve_field(text: str, field: AcademicField | str | None) -> AcademicField:
    if field is None:
        return detect_academic_field(text)
    if isinstance(field, AcademicField):
        return field
    return AcademicField.parse(field)


def _finding(
    rule_id: str,
    start: int,
    end: int,
    text: str,
    message: str,
    *,
    severity: Severity,
    category: RuleCategory = RuleCategory.TERMINOLOGY,
    suggestions: list[str] | None = None,
    explanation: str | None = None,
) -> Finding:
    return Finding(
        rule_id=rule_id,
        source=FindingSource.FIELD,
        start_offset=start,
        end_offset=end,
        original=text[start:end],
        message=message,
        suggestions=suggestions or [],
        type=IssueType.STYLE,
        severity=severity,
        category=category,
        explanation=explanation,
    )


def _already_preferred(text: str, start: int, end: int, term: str, preferred: str) -> bool:
    """True when the match sits inside the preferred phrase ("case" in "patient case")."""

    index = preferred.lower().find(term.lower())
    if index < 0:
        return False
    window_start = start - index
    if window_start < 0:
        return False
    return text[window_start : window_start + len(preferred)].lower() == preferred.lower()


def check_terminology(text: str, terminology: FieldTerminology) -> list[Finding]:
    findings: list[Finding] = []
    for term in terminology.deprecated_terms:
        for match in _term_pattern(term).finditer(text):
            findings.append(
                _finding(
                    "field-deprecated-term",
                    match.start(),
                    match.end(),
                    text,
                    f'Avoid using "{match.group(0)}" in {terminology.label} writing.',
                    severity=Severity.WARNING,
                    explanation="Consider rephrasing to use more appropriate terminology.",
                )
            )
    for term, preferred in terminology.preferred_terms.items():
        for match in _term_pattern(term).finditer(text):
            if _already_preferred(text, match.start(), match.end(), term, preferred):
                continue
            findings.append(
                _finding(
                    "field-preferred-term",
                    match.start(),
                    match.end(),
                    text,
                    f'In {terminology.label}, prefer "{preferred}" over "{match.group(0)}".',
                    severity=Severity.INFO,
                    suggestions=[preferred],
                )
            )
    return findings


def check_methodology_elements(text: str, terminology: FieldTerminology) -> list[Finding]:
    headings = extract_headings(text)
    block = next(
        (
            item
            for item in section_blocks(text, headings)
            if item.heading.section_type is SectionType.METHODOLOGY
        ),
        None,
    )
    if block is None:
        return []
    content = block.full_body(text).lower()
    findings: list[Finding] = []
    for element in terminology.required_elements:
        if element in content:
            continue
        findings.append(
            _finding(
                "field-methodology-element",
                block.heading.start,
                block.heading.end,
                text,
                f"{terminology.label} methodology should include information about {element}.",
                severity=Severity.WARNING,
                category=RuleCategory.STRUCTURE,
                explanation=f"Add details about {element} to strengthen your methodology section.",
            )
        )
    return findings


def check_units(text: str) -> list[Finding]:
    findings: list[Finding] = []
    for unit, si_unit in NON_SI_UNITS.items():
        for match in re.finditer(rf"\d+\s*{unit}\b", text, re.IGNORECASE):
            findings.append(
                _finding(
                    "field-non-si-unit",
                    match.start(),
                    match.end(),
                    text,
                    f"Consider using SI units: {si_unit} instead of {unit}.",
                    severity=Severity.INFO,
                    explanation=f"Convert to SI units ({si_unit}).",
                )
            )
    return findings


def check_ethics_statement(text: str, terminology: FieldTerminology) -> list[Finding]:
    lowered = text.lower()
    if any(keyword in lowered for keyword in ETHICS_KEYWORDS):
        return []
    mention = _HUMAN_SUBJECT_RE.search(text)
    if mention is None:
        return []
    return [
        _finding(
            "field-ethics-statement",
            mention.start(),
            mention.end(),
            text,
            f"{terminology.label} research with human participants requires an ethics approval statement.",
            severity=Severity.ERROR,
            category=RuleCategory.STRUCTURE,
            explanation="Add information about ethics approval and informed consent.",
        )
    ]


def validate_field_terminology(text: str, *, field: AcademicField | str | None = None) -> list[Finding]:
    """Run every check that applies to ``field`` (detected when omitted)."""

    if not text.strip():
        return []
    resolved = _resolve_field(text, field)
    terminology = FIELD_TERMINOLOGY[resolved]
    logger.debug("Validating %s terminology", terminology.label)

    findings = check_terminology(text, terminology)
    findings.extend(check_methodology_elements(text, terminology))
    if resolved in _UNIT_FIELDS:
        findings.extend(check_units(text))
    if resolved in _ETHICS_FIELDS:
        findings.extend(check_ethics_statement(text, terminology))
    return sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset, finding.rule_id))
