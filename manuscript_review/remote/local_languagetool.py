"""LanguageTool run locally through ``language_tool_python``.

Useful when the public API is rate limited or unreachable; the first call
downloads and starts a Java server, so construction is deferred until the
first check.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Iterable

from language_tool_python.utils import JavaError, PathError
from pydantic import ValidationError

from ..models import Finding, FindingSource
from ..rules import DEFAULT_IGNORED_WORDS
from .http_provider import DEFAULT_TIMEOUT
from .language_tool_manager import LanguageToolManager
from .languagetool import map_issue_type, map_severity
from .provider import TerminalProviderError

logger = logging.getLogger(__name__)


def finding_from_match(match: object, text: str, *, source_name: str = "languagetool-local") -> Finding | None:
    """Convert a ``language_tool_python`` match; returns None for unusable offsets."""

    rule_id = getattr(match, "ruleId", None) or source_name
    try:
        offset = int(getattr(match, "offset", -1))
        length = int(getattr(match, "errorLength", 0) or 0)
    except (TypeError, ValueError):
        logger.warning("Invalid offset/length for rule %s; skipping match", rule_id)
        return None
    if offset < 0 or length <= 0:
        return None

    issue_type = getattr(match, "ruleIssueType", None)
    category = str(getattr(match, "category", "") or "")
    try:
        return Finding(
            rule_id=rule_id,
            source=FindingSource.REMOTE,
            start_offset=offset,
            end_offset=offset + length,
            original=text[offset : offset + length],
            message=str(getattr(match, "message", "") or "Possible issue"),
            suggestions=list(getattr(match, "replacements", []) or []),
            type=map_issue_type(issue_type, category),
            severity=map_severity(issue_type),
            category=category.lower() or map_issue_type(issue_type, category).value,
        )
    except ValidationError as exc:
        logger.warning("Malformed match for rule %s; skipping: %s", rule_id, exc)
        return None


class LocalLanguageToolProvider:
    name = "languagetool-local"

    def __init__(
        self,
        *,
        manager: LanguageToolManager | None = None,
        disabled_rules: Iterable[str] | None = None,
    ) -> None:
        self.manager = manager or LanguageToolManager(ignored_words=DEFAULT_IGNORED_WORDS)
        self.disabled_rules = list(disabled_rules or [])
        self._tools: dict[str, Any] = {}
        self._lock = threading.Lock()

    def _tool(self, language: str) -> Any:
        with self._lock:
            if language not in self._tools:
                logger.info("Starting local LanguageTool for %s", language)
                self._tools[language] = self.manager.build_tool(
                    language, extra_disabled_rules=self.disabled_rules
                )
            return self._tools[language]

    def check(self, text: str, *, language: str) -> list[Finding]:
        if not text.strip():
            return []
        # Other LanguageToolError from the server propagates; the retry helper treats it as transient.
        try:
            tool = self._tool(language)
            matches = tool.check(text)
        except (JavaError, PathError) as exc:
            # Missing Java or a bad install path is permanent.
            raise TerminalProviderError(f"{self.name}: {exc}") from exc
        findings = [
            finding
            for finding in (finding_from_match(match, text, source_name=self.name) for match in matches or [])
            if finding is not None
        ]
        logger.debug("%s returned %d match(es)", self.name, len(findings))
        return findings

    def close(self) -> None:
        with self._lock:
            for tool in self._tools.values():
                tool.close()
            self._tools.clear()


def local_languagetool(
    *, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT
) -> LocalLanguageToolProvider:
    return LocalLanguageToolProvider()
