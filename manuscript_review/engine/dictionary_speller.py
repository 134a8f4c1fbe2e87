"""Dictionary-based spelling check built on pyspellchecker.

The check is optional (off by default) because a frequency dictionary knows
little research vocabulary; it only looks at lowercase words and skips
anything that looks like a name, an acronym, a number or a compound.
"""

from __future__ import annotations

import logging
import re
import threading
from typing import Iterable

from spellchecker import SpellChecker

from ..models import Finding, FindingSource, IssueType, RuleCategory, Severity
from ..rules import DEFAULT_IGNORED_WORDS

logger = logging.getLogger(__name__)

_WORD_PATTERN = re.compile(r"[A-Za-z][A-Za-z'\-]*")
_MIN_WORD_LENGTH = 3
RULE_ID = "dictionary-spelling"


def dictionary_language(language: str) -> str:
    """Map a BCP-47 tag such as ``en-GB`` onto a pyspellchecker dictionary."""

    return (language or "en").split("-")[0].split("_")[0].lower()


class DictionarySpeller:
    """Flag lowercase words the dictionary does not know."""

    def __init__(
        self,
        language: str = "en-US",
        *,
        ignored_words: Iterable[str] | None = None,
        max_candidates: int = 5,
        distance: int = 2,
    ) -> None:
        self.language = language
        self.max_candidates = max_candidates
        self.distance = distance
        words = set(DEFAULT_IGNORED_WORDS)
        if ignored_words:
            words.update(ignored_words)
        self.ignored_words = {word.lower() for word in words}
        self._local = threading.local()

    def spell_checker(self) -> SpellChecker:
        # One checker per worker thread; SpellChecker caches are not shared safely.
        if not hasattr(self._local, "spell"):
            self._local.spell = SpellChecker(
                language=dictionary_language(self.language),
                distance=self.distance,
            )
        return self._local.spell

    def _candidates(self, spell: SpellChecker, word: str) -> list[str]:
        candidates = spell.candidates(word) or set()
        ranked = sorted(
            (candidate for candidate in candidates if candidate != word),
            key=lambda candidate: (-spell.word_usage_frequency(candidate), candidate),
        )
        return ranked[: self.max_candidates]

    def check(self, text: str) -> list[Finding]:
        spell = self.spell_checker()
        words = [
            match
            for match in _WORD_PATTERN.finditer(text)
            if self._is_checkable(match.group())
        ]
        unknown = spell.unknown(match.group() for match in words)
        findings: list[Finding] = []
        for match in words:
            word = match.group()
            if word not in unknown:
                continue
            findings.append(
                Finding(
                    rule_id=RULE_ID,
                    source=FindingSource.DICTIONARY,
                    start_offset=match.start(),
                    end_offset=match.end(),
                    original=word,
                    message=f'"{word}" is not in the dictionary.',
                    suggestions=self._candidates(spell, word),
                    type=IssueType.SPELLING,
                    severity=Severity.WARNING,
                    category=RuleCategory.SPELLING,
                )
            )
        logger.debug("Dictionary speller flagged %d word(s)", len(findings))
        return findings

    def _is_checkable(self, word: str) -> bool:
        if len(word) < _MIN_WORD_LENGTH:
            return False
        if "-" in word or "'" in word:
            return False
        if not word.islower():
            return False
        return word not in self.ignored_words
