"""Construction of local LanguageTool servers.

Keeps custom spellings (research vocabulary), disabled rules and the Java
server configuration in one place so every local tool is built the same way.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

import language_tool_python

# Long manuscripts need more than the server's default check time limit.
DEFAULT_SERVER_CONFIG = {
    "requestLimitPeriodInSeconds": 60,
    "maxCheckTimeMillis": 120000,
}


class LanguageToolManager:
    """Factory for configured ``language_tool_python.LanguageTool`` instances."""

    def __init__(
        self,
        *,
        ignored_words: Iterable[str] | None = None,
        disabled_rules: Iterable[str] | None = None,
        base_language: str = "en-US",
        config: dict[str, Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.base_language = base_language
        self.logger = logger or logging.getLogger(__name__)
        self.config = dict(config) if config is not None else dict(DEFAULT_SERVER_CONFIG)
        self.disabled_rules = set(disabled_rules or [])
        self.ignored_words = self._dedupe_words(ignored_words)
        self._spellings_registered = False

    @staticmethod
    def _dedupe_words(words: Iterable[str] | None) -> tuple[str, ...]:
        cleaned = {word.strip() for word in words or [] if word and word.strip()}
        return tuple(sorted(cleaned))

    def _spellings_for(self, language: str) -> list[str] | None:
        # Spellings persist in the server's dictionary, so register them once.
        if not self.ignored_words or language != self.base_language or self._spellings_registered:
            return None
        self._spellings_registered = True
        self.logger.info("Registering %d custom spellings with LanguageTool", len(self.ignored_words))
        return list(self.ignored_words)

    def build_tool(
        self,
        language: str,
        *,
        extra_disabled_rules: Iterable[str] | None = None,
    ) -> Any:
        """Start (or connect to) a LanguageTool server for ``language``."""

        kwargs: dict[str, Any] = {}
        if self.config:
            kwargs["config"] = self.config
        spellings = self._spellings_for(language)
        if spellings:
            kwargs["newSpellings"] = spellings
            kwargs["new_spellings_persist"] = True

        tool = language_tool_python.LanguageTool(language, **kwargs)

        rules = set(self.disabled_rules)
        rules.update(extra_disabled_rules or [])
        if rules:
            tool.disabled_rules = rules
        return tool
