"""Finding and Suggestion models.

A :class:`Finding` is what any detector emits: offsets into the original
document, the flagged text, a message and candidate replacements. The
aggregator turns surviving findings into :class:`Suggestion` records by
adding a fresh id and resolved line/column positions.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import FindingSource, IssueType, Severity


class Finding(BaseModel):
    """Detector output anchored to a half-open ``[start_offset, end_offset)`` range.

    Fields:
    - rule_id: Rule identifier (offline rule id, remote rule id or validator tag)
    - source: Which detector produced the finding
    - start_offset / end_offset: Absolute offsets into the original document
    - original: The flagged substring
    - message: Human readable explanation
    - suggestions: Ordered replacement candidates; the first is the default
    - type / severity / category: Classification used for filtering
    - explanation: Optional longer guidance
    """

    model_config = ConfigDict(extra="forbid")

    rule_id: str
    source: FindingSource
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)
    original: str = ""
    message: str
    suggestions: List[str] = Field(default_factory=list)
    type: IssueType
    severity: Severity
    category: str
    explanation: str | None = None

    @field_validator("rule_id", "message", mode="before")
    def _strip_strings(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("category", mode="before")
    def _normalise_category(cls, value: object) -> str:
        if isinstance(value, str):
            return value.strip().lower()
        # str-valued enums such as RuleCategory
        return str(getattr(value, "value", value) or "").strip().lower()

    @field_validator("suggestions", mode="before")
    def _normalise_suggestions(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [value] if value.strip() else []
        cleaned: list[str] = []
        for item in value:  # type: ignore[union-attr]
            text = str(item)
            if text.strip() and text not in cleaned:
                cleaned.append(text)
        return cleaned

    @field_validator("explanation", mode="before")
    def _strip_explanation(cls, value: object) -> str | None:
        if value is None:
            return None
        return str(value).strip() or None

    @model_validator(mode="after")
    def final_checks(self) -> "Finding":
        if not self.rule_id:
            raise ValueError("rule_id must not be empty")
        if not self.message:
            raise ValueError("message must not be empty")
        if not self.category:
            raise ValueError("category must not be empty")
        if self.end_offset <= self.start_offset:
            raise ValueError("end_offset must be greater than start_offset")
        return self

    @property
    def span(self) -> tuple[int, int]:
        return (self.start_offset, self.end_offset)

    def overlaps(self, other: "Finding") -> bool:
        return self.start_offset < other.end_offset and other.start_offset < self.end_offset


class Suggestion(Finding):
    """A finalised finding with a unique id and 1-based line/column positions."""

    id: str
    start_line: int = Field(ge=1)
    start_column: int = Field(ge=1)
    end_line: int = Field(ge=1)
    end_column: int = Field(ge=1)

    @field_validator("id", mode="before")
    def _strip_id(cls, value: object) -> str:
        result = str(value or "").strip()
        if not result:
            raise ValueError("id must not be empty")
        return result
