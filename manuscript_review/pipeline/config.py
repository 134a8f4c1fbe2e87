"""Pipeline configuration.

:class:`PipelineConfig` is the single owner of analysis settings and of the
compiled rule cache. Values can come from keyword arguments or from
``MANUSCRIPT_*`` environment variables (optionally loaded from a ``.env``
file with python-dotenv).
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Iterable

from dotenv import load_dotenv

from ..engine.pattern_matcher import DEFAULT_CHUNK_SIZE, DEFAULT_OVERLAP, CompiledRule, compile_rules
from ..models import AcademicField, CitationStyle, DocumentType, Finding, IssueType, RuleCategory, Severity
from ..rules import ALL_RULES, BRITISH_SPELLING_RULES, DEFAULT_DISABLED_RULES, Rule

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en-US"
DEFAULT_MAX_SUGGESTIONS = 1000

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _split_names(value: str | None) -> list[str]:
    if not value:
        return []
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def _normalise_filter(values: Iterable[Any] | None, allowed: Iterable[str], label: str) -> frozenset[str] | None:
    if values is None:
        return None
    if isinstance(values, str):
        values = _split_names(values)
    allowed_set = set(allowed)
    cleaned: set[str] = set()
    for value in values:
        text = str(getattr(value, "value", value)).strip().lower()
        if text not in allowed_set:
            raise ValueError(f"Unknown {label} '{text}'")
        cleaned.add(text)
    return frozenset(cleaned)


def _read_int_env(var_name: str, *, default: int) -> int:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", var_name, raw, default)
        return default


def _read_float_env(var_name: str, *, default: float) -> float:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", var_name, raw, default)
        return default


def _read_bool_env(var_name: str, *, default: bool) -> bool:
    raw = os.environ.get(var_name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning("Ignoring malformed %s=%r; using %s", var_name, raw, default)
    return default


@dataclass
class PipelineConfig:
    """Settings shared by every stage of one analysis pipeline.

    ``enabled_categories``/``enabled_types``/``enabled_severities`` are
    ``None`` for "everything" or a set of enum values. ``disabled_rules``
    replaces the default disabled set; British spelling rules are always
    switched off for ``en-GB``.
    """

    language: str = DEFAULT_LANGUAGE
    enabled_categories: Iterable[RuleCategory | str] | None = None
    enabled_types: Iterable[IssueType | str] | None = None
    enabled_severities: Iterable[Severity | str] | None = None
    max_suggestions: int = DEFAULT_MAX_SUGGESTIONS
    document_type: DocumentType | str | None = None
    citation_style: CitationStyle | str | None = None
    academic_field: AcademicField | str | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    overlap: int = DEFAULT_OVERLAP
    remove_overlapping: bool = True
    use_remote: bool = True
    remote_timeout: float = 30.0
    remote_attempts: int = 3
    retry_base_delay: float = 1.0
    debounce_seconds: float = 1.0
    dictionary_spelling: bool = False
    disabled_rules: Iterable[str] = field(default_factory=lambda: frozenset(DEFAULT_DISABLED_RULES))
    ignored_words: Iterable[str] = field(default_factory=frozenset)
    rules: Iterable[Rule] = ALL_RULES
    _compiled: tuple[CompiledRule, ...] | None = field(default=None, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.language = (self.language or DEFAULT_LANGUAGE).strip()
        self.enabled_categories = _normalise_filter(
            self.enabled_categories, RuleCategory.all_values(), "category"
        )
        self.enabled_types = _normalise_filter(self.enabled_types, IssueType.all_values(), "issue type")
        self.enabled_severities = _normalise_filter(
            self.enabled_severities, Severity.all_values(), "severity"
        )
        if isinstance(self.document_type, str) and not isinstance(self.document_type, DocumentType):
            self.document_type = DocumentType(self.document_type.strip().lower())
        if isinstance(self.citation_style, str) and not isinstance(self.citation_style, CitationStyle):
            self.citation_style = CitationStyle.parse(self.citation_style)
        if isinstance(self.academic_field, str) and not isinstance(self.academic_field, AcademicField):
            self.academic_field = AcademicField.parse(self.academic_field)
        self.disabled_rules = frozenset(self.disabled_rules)
        self.ignored_words = frozenset(word.lower() for word in self.ignored_words)
        self.rules = tuple(self.rules)

        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if self.overlap < 0:
            raise ValueError("overlap must not be negative")
        if self.max_suggestions < 0:
            raise ValueError("max_suggestions must not be negative")
        if self.remote_attempts < 1:
            raise ValueError("remote_attempts must be at least 1")
        if self.remote_timeout <= 0:
            raise ValueError("remote_timeout must be positive")
        self.retry_base_delay = max(0.0, self.retry_base_delay)
        self.debounce_seconds = max(0.0, self.debounce_seconds)

    @property
    def is_british(self) -> bool:
        return self.language.lower().replace("_", "-") == "en-gb"

    @property
    def effective_disabled_rules(self) -> frozenset[str]:
        disabled = set(self.disabled_rules)
        if self.is_british:
            disabled.update(BRITISH_SPELLING_RULES)
        return frozenset(disabled)

    def compiled_rules(self) -> tuple[CompiledRule, ...]:
        """Compile the rule set once per config; later calls reuse the cache."""

        with self._lock:
            if self._compiled is None:
                self._compiled = compile_rules(self.rules, disabled=self.effective_disabled_rules)
            return self._compiled

    def allows(self, finding: Finding) -> bool:
        # Remote findings carry provider category ids ("typos"), so the issue
        # type also counts as a category match.
        if self.enabled_categories is not None and not (
            finding.category in self.enabled_categories or finding.type.value in self.enabled_categories
        ):
            return False
        if self.enabled_types is not None and finding.type.value not in self.enabled_types:
            return False
        if self.enabled_severities is not None and finding.severity.value not in self.enabled_severities:
            return False
        return True

    def with_overrides(self, **changes: Any) -> "PipelineConfig":
        """Return a copy with ``changes`` applied and an empty rule cache."""

        return replace(self, **changes)

    @classmethod
    def from_env(cls, dotenv_path: str | Path | None = None, **overrides: Any) -> "PipelineConfig":
        """Build a config from ``MANUSCRIPT_*`` variables plus explicit overrides.

        Malformed numeric or boolean values fall back to the defaults with a
        warning. Keyword ``overrides`` always win over the environment.
        """

        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        values: dict[str, Any] = {
            "language": os.environ.get("MANUSCRIPT_LANGUAGE") or DEFAULT_LANGUAGE,
            "max_suggestions": _read_int_env("MANUSCRIPT_MAX_SUGGESTIONS", default=DEFAULT_MAX_SUGGESTIONS),
            "chunk_size": _read_int_env("MANUSCRIPT_CHUNK_SIZE", default=DEFAULT_CHUNK_SIZE),
            "overlap": _read_int_env("MANUSCRIPT_OVERLAP", default=DEFAULT_OVERLAP),
            "remove_overlapping": _read_bool_env("MANUSCRIPT_REMOVE_OVERLAPPING", default=True),
            "use_remote": _read_bool_env("MANUSCRIPT_USE_REMOTE", default=True),
            "remote_timeout": _read_float_env("MANUSCRIPT_REMOTE_TIMEOUT", default=30.0),
            "remote_attempts": _read_int_env("MANUSCRIPT_REMOTE_ATTEMPTS", default=3),
            "retry_base_delay": _read_float_env("MANUSCRIPT_RETRY_BASE_DELAY", default=1.0),
            "debounce_seconds": _read_float_env("MANUSCRIPT_DEBOUNCE_SECONDS", default=1.0),
            "dictionary_spelling": _read_bool_env("MANUSCRIPT_DICTIONARY_SPELLING", default=False),
        }

        for var_name, key in (
            ("MANUSCRIPT_CATEGORIES", "enabled_categories"),
            ("MANUSCRIPT_TYPES", "enabled_types"),
            ("MANUSCRIPT_SEVERITIES", "enabled_severities"),
        ):
            names = _split_names(os.environ.get(var_name))
            if names:
                values[key] = names

        extra_disabled = _split_names(os.environ.get("MANUSCRIPT_DISABLED_RULES"))
        if extra_disabled:
            values["disabled_rules"] = frozenset(DEFAULT_DISABLED_RULES) | set(extra_disabled)

        document_type = (os.environ.get("MANUSCRIPT_DOCUMENT_TYPE") or "").strip().lower()
        if document_type:
            if document_type in DocumentType.all_values():
                values["document_type"] = document_type
            else:
                logger.warning("Ignoring unknown MANUSCRIPT_DOCUMENT_TYPE=%r", document_type)

        citation_style = (os.environ.get("MANUSCRIPT_CITATION_STYLE") or "").strip()
        if citation_style:
            try:
                values["citation_style"] = CitationStyle.parse(citation_style)
            except ValueError:
                logger.warning("Ignoring unknown MANUSCRIPT_CITATION_STYLE=%r", citation_style)

        academic_field = (os.environ.get("MANUSCRIPT_FIELD") or "").strip()
        if academic_field:
            try:
                values["academic_field"] = AcademicField.parse(academic_field)
            except ValueError:
                logger.warning("Ignoring unknown MANUSCRIPT_FIELD=%r", academic_field)

        values.update(overrides)
        return cls(**values)
