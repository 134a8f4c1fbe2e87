"""Specialised validators: citations, statistics, structure, sentence length and field terminology.

Each validator is a plain ``text -> list[Finding]`` callable. Hints such as
the citation style or document type are bound with keyword arguments by
:func:`build_validators`, and :func:`run_validator` isolates failures so one
broken validator never takes the others down.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Callable

from ..models import Finding
from .citations import (
    detect_citation_style,
    find_reference_section,
    validate_citations,
    validate_doi,
    validate_isbn,
)
from .fields import detect_academic_field, validate_field_terminology
from .sentences import validate_sentence_length
from .statistics import validate_statistics
from .structure import detect_document_type, get_structure_requirements, validate_structure

if TYPE_CHECKING:
    from ..pipeline.config import PipelineConfig

logger = logging.getLogger(__name__)

Validator = Callable[[str], list[Finding]]


@dataclass(frozen=True)
class NamedValidator:
    name: str
    func: Validator

    def __call__(self, text: str) -> list[Finding]:
        return self.func(text)


def run_validator(validator: NamedValidator, text: str) -> list[Finding]:
    """Run one validator; an exception is logged and yields no findings."""

    try:
        return list(validator(text))
    except Exception:
        logger.exception("Validator %s failed; continuing without its findings", validator.name)
        return []


def build_validators(config: "PipelineConfig") -> list[NamedValidator]:
    return [
        NamedValidator("citations", partial(validate_citations, style=config.citation_style)),
        NamedValidator("statistics", validate_statistics),
        NamedValidator("structure", partial(validate_structure, document_type=config.document_type)),
        NamedValidator("sentences", validate_sentence_length),
        NamedValidator("fields", partial(validate_field_terminology, field=config.academic_field)),
    ]


__all__ = [
    "NamedValidator",
    "Validator",
    "build_validators",
    "detect_academic_field",
    "detect_citation_style",
    "detect_document_type",
    "find_reference_section",
    "get_structure_requirements",
    "run_validator",
    "validate_citations",
    "validate_doi",
    "validate_field_terminology",
    "validate_isbn",
    "validate_sentence_length",
    "validate_statistics",
    "validate_structure",
]
