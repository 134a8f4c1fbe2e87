"""Offline detection: pattern engine, overlap resolver, dictionary speller."""

from __future__ import annotations

from .dictionary_speller import DictionarySpeller
from .offline_checker import OfflineChecker
from .overlap import resolve_overlaps, spans_overlap
from .pattern_matcher import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_OVERLAP,
    CompiledRule,
    RuleCompileError,
    apply_rules,
    apply_rules_in_chunks,
    compile_rules,
    filter_by_category,
    filter_by_severity,
    filter_by_type,
    iter_pattern_matches,
    match_rules,
    match_statistics,
    sort_findings,
)

__all__ = [
    "CompiledRule",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_OVERLAP",
    "DictionarySpeller",
    "OfflineChecker",
    "RuleCompileError",
    "apply_rules",
    "apply_rules_in_chunks",
    "compile_rules",
    "filter_by_category",
    "filter_by_severity",
    "filter_by_type",
    "iter_pattern_matches",
    "match_rules",
    "match_statistics",
    "resolve_overlaps",
    "sort_findings",
    "spans_overlap",
]
