"""Alternate remote grammar services used as fallbacks after LanguageTool."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import requests
from pydantic import ValidationError

from ..models import Finding, FindingSource, IssueType, Severity
from .http_provider import DEFAULT_TIMEOUT, HttpGrammarProvider, load_provider_env
from .languagetool import parse_languagetool_matches
from .provider import ProviderConfigurationError, RemoteParseError

logger = logging.getLogger(__name__)

GRAMMARBOT_URL = "https://api.grammarbot.io/v2/check"
TEXTGEARS_URL = "https://api.textgears.com/grammar"
SAPLING_URL = "https://api.sapling.ai/api/v1/edits"


def _issue_type_from_label(label: str | None) -> IssueType:
    lowered = str(label or "").lower()
    if "spell" in lowered:
        return IssueType.SPELLING
    if "punctuation" in lowered:
        return IssueType.PUNCTUATION
    if "style" in lowered:
        return IssueType.STYLE
    return IssueType.GRAMMAR


class _KeyedProvider(HttpGrammarProvider):
    key_variable = ""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self.api_key = api_key

    def require_key(self) -> str:
        if not self.api_key:
            raise ProviderConfigurationError(f"{self.name}: {self.key_variable} is not set")
        return self.api_key


class GrammarBotProvider(_KeyedProvider):
    """GrammarBot speaks the LanguageTool response format."""

    name = "grammarbot"
    key_variable = "GRAMMARBOT_API_KEY"

    def check(self, text: str, *, language: str) -> list[Finding]:
        api_key = self.require_key()
        if not text.strip():
            return []
        payload = self.post(
            GRAMMARBOT_URL,
            data={"text": text, "language": language, "api_key": api_key},
        )
        return parse_languagetool_matches(payload, text, source_name=self.name)


def parse_textgears_errors(payload: Any, text: str, *, source_name: str = "textgears") -> list[Finding]:
    if not isinstance(payload, Mapping):
        raise RemoteParseError(f"{source_name}: response is not an object", response_text=repr(payload))
    response = payload.get("response")
    if not payload.get("status") or not isinstance(response, Mapping):
        logger.warning("%s: response reported no results", source_name)
        return []
    errors = response.get("errors") or []
    if not isinstance(errors, list):
        raise RemoteParseError(f"{source_name}: 'errors' is not a list", response_text=repr(payload))

    findings: list[Finding] = []
    for error in errors:
        if not isinstance(error, Mapping):
            continue
        try:
            offset = int(error.get("offset"))
            length = int(error.get("length"))
        except (TypeError, ValueError):
            logger.warning("%s: skipping error with invalid offset/length: %r", source_name, error)
            continue
        if offset < 0 or length <= 0:
            continue
        description = error.get("description")
        if isinstance(description, Mapping):
            message = description.get("en") or next(iter(description.values()), "")
        else:
            message = description or ""
        better = error.get("better") or []
        if not isinstance(better, list):
            better = []
        try:
            finding = Finding(
                rule_id=f"{source_name}-{error.get('id') or error.get('type') or 'issue'}",
                source=FindingSource.REMOTE,
                start_offset=offset,
                end_offset=offset + length,
                original=text[offset : offset + length],
                message=message or "Possible issue",
                suggestions=[item for item in better if isinstance(item, str)],
                type=_issue_type_from_label(error.get("type")),
                severity=Severity.ERROR,
                category=str(error.get("type") or "grammar"),
            )
        except ValidationError as exc:
            logger.warning("%s: skipping malformed error at offset %s: %s", source_name, offset, exc)
            continue
        findings.append(finding)
    return findings


class TextgearsProvider(_KeyedProvider):
    name = "textgears"
    key_variable = "TEXTGEARS_API_KEY"

    def check(self, text: str, *, language: str) -> list[Finding]:
        api_key = self.require_key()
        if not text.strip():
            return []
        payload = self.post(TEXTGEARS_URL, data={"text": text, "language": language, "key": api_key})
        return parse_textgears_errors(payload, text, source_name=self.name)


def parse_sapling_edits(payload: Any, text: str, *, source_name: str = "sapling") -> list[Finding]:
    """Sapling reports ``start``/``end`` relative to ``sentence_start``."""

    if not isinstance(payload, Mapping) or not isinstance(payload.get("edits", []), list):
        raise RemoteParseError(f"{source_name}: response has no 'edits' list", response_text=repr(payload))

    findings: list[Finding] = []
    for edit in payload.get("edits", []):
        if not isinstance(edit, Mapping):
            continue
        try:
            base = int(edit.get("sentence_start") or 0)
            start = base + int(edit.get("start"))
            end = base + int(edit.get("end"))
        except (TypeError, ValueError):
            logger.warning("%s: skipping edit with invalid offsets: %r", source_name, edit)
            continue
        if start < 0 or end <= start:
            continue
        error_type = str(edit.get("general_error_type") or edit.get("error_type") or "grammar")
        replacement = edit.get("replacement")
        try:
            finding = Finding(
                rule_id=f"{source_name}-{edit.get('error_type') or 'edit'}",
                source=FindingSource.REMOTE,
                start_offset=start,
                end_offset=end,
                original=text[start:end],
                message=f"Suggested edit ({error_type}).",
                suggestions=[replacement] if isinstance(replacement, str) and replacement else [],
                type=_issue_type_from_label(error_type),
                severity=Severity.WARNING,
                category=error_type,
            )
        except ValidationError as exc:
            logger.warning("%s: skipping malformed edit at offset %s: %s", source_name, start, exc)
            continue
        findings.append(finding)
    return findings


class SaplingProvider(_KeyedProvider):
    name = "sapling"
    key_variable = "SAPLING_API_KEY"

    def check(self, text: str, *, language: str) -> list[Finding]:
        api_key = self.require_key()
        if not text.strip():
            return []
        payload = self.post(
            SAPLING_URL,
            json={"key": api_key, "text": text, "session_id": "manuscript-review", "lang": language.split("-")[0]},
        )
        return parse_sapling_edits(payload, text, source_name=self.name)


def grammarbot_provider(*, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT) -> GrammarBotProvider:
    load_provider_env(dotenv_path)
    return GrammarBotProvider(api_key=os.environ.get("GRAMMARBOT_API_KEY"), timeout=timeout)


def textgears_provider(*, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT) -> TextgearsProvider:
    load_provider_env(dotenv_path)
    return TextgearsProvider(api_key=os.environ.get("TEXTGEARS_API_KEY"), timeout=timeout)


def sapling_provider(*, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT) -> SaplingProvider:
    load_provider_env(dotenv_path)
    return SaplingProvider(api_key=os.environ.get("SAPLING_API_KEY"), timeout=timeout)
