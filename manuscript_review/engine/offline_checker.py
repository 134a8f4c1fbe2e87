"""The local rule engine as one detector: rules, optional dictionary, overlaps."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..context import ContextAnalyzer
from ..models import Finding
from .dictionary_speller import DictionarySpeller
from .overlap import resolve_overlaps
from .pattern_matcher import match_rules, sort_findings

if TYPE_CHECKING:
    from ..pipeline.config import PipelineConfig

logger = logging.getLogger(__name__)


class OfflineChecker:
    """Run the compiled rule corpus against a document.

    Pure local computation; safe to call from several threads at once because
    the only shared state is the config's compiled rule cache (lock-protected)
    and the speller's thread-local checkers.
    """

    name = "offline"

    def __init__(self, config: "PipelineConfig", *, speller: DictionarySpeller | None = None) -> None:
        self.config = config
        self._speller = speller

    @property
    def speller(self) -> DictionarySpeller:
        if self._speller is None:
            self._speller = DictionarySpeller(
                self.config.language,
                ignored_words=self.config.ignored_words,
            )
        return self._speller

    def check(self, text: str) -> list[Finding]:
        if not text:
            return []
        analyzer = ContextAnalyzer(text)
        findings = match_rules(
            self.config.compiled_rules(),
            text,
            chunk_size=self.config.chunk_size,
            overlap=self.config.overlap,
            create_context=analyzer.context_at,
        )
        if self.config.dictionary_spelling:
            findings.extend(self.speller.check(text))
        if self.config.remove_overlapping:
            before = len(findings)
            findings = resolve_overlaps(findings)
            logger.debug("Overlap resolution removed %d finding(s)", before - len(findings))
        return sort_findings(findings)
