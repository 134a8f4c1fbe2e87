"""Rule model, rule corpus and default rule configuration."""

from __future__ import annotations

from .academic_rules import (
    ALL_RULES,
    COMMON_MISSPELLINGS,
    RULES_BY_CATEGORY,
    get_rule,
    rules_by_severity,
    rules_by_type,
)
from .rule import Rule
from .rule_config import BRITISH_SPELLING_RULES, DEFAULT_DISABLED_RULES, DEFAULT_IGNORED_WORDS

__all__ = [
    "ALL_RULES",
    "BRITISH_SPELLING_RULES",
    "COMMON_MISSPELLINGS",
    "DEFAULT_DISABLED_RULES",
    "DEFAULT_IGNORED_WORDS",
    "RULES_BY_CATEGORY",
    "Rule",
    "get_rule",
    "rules_by_severity",
    "rules_by_type",
]
