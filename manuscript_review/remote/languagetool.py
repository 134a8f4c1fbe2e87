"""LanguageTool HTTP API provider and response normalisation.

The public ``/v2/check`` endpoint takes a form-encoded request and answers
with ``matches[]`` records (offset, length, replacements, rule). Fields the
parser does not know about are ignored, and a single malformed match is
skipped with a warning rather than failing the whole response.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Iterable, Mapping

import requests
from pydantic import ValidationError

from ..models import Finding, FindingSource, IssueType, Severity
from .http_provider import DEFAULT_TIMEOUT, HttpGrammarProvider, load_provider_env
from .provider import ProviderConfigurationError, ProviderFactory, RemoteParseError

logger = logging.getLogger(__name__)

PUBLIC_API_URL = "https://api.languagetool.org/v2"
PREMIUM_API_URL = "https://api.languagetoolplus.com/v2"
ALTERNATE_API_URL = "https://languagetool.org/api/v2"

# Anonymous endpoints tried after the public API; credentials are optional.
LANGUAGETOOL_MIRRORS = {
    "languagetool-community": PREMIUM_API_URL,
    "languagetool-alt": ALTERNATE_API_URL,
}

_SPELLING_TYPES = {"misspelling"}
_SPELLING_CATEGORIES = {"typos", "spelling"}
_PUNCTUATION_TYPES = {"punctuation", "typography", "typographical"}
_PUNCTUATION_CATEGORIES = {"punctuation", "typography"}
_STYLE_TYPES = {"style", "register", "locale-violation"}
_STYLE_CATEGORIES = {"style", "redundancy", "register", "plain_english", "casing_style"}

_ERROR_ISSUE_TYPES = {"misspelling", "grammar"}
_INFO_ISSUE_TYPES = {"hint", "addition", "style"}


def map_issue_type(issue_type: str | None, category_id: str | None = None) -> IssueType:
    issue = (issue_type or "").strip().lower()
    category = (category_id or "").strip().lower()
    if issue in _SPELLING_TYPES or category in _SPELLING_CATEGORIES:
        return IssueType.SPELLING
    if issue in _PUNCTUATION_TYPES or category in _PUNCTUATION_CATEGORIES:
        return IssueType.PUNCTUATION
    if issue in _STYLE_TYPES or category in _STYLE_CATEGORIES:
        return IssueType.STYLE
    return IssueType.GRAMMAR


def map_severity(issue_type: str | None) -> Severity:
    issue = (issue_type or "").strip().lower()
    if issue in _ERROR_ISSUE_TYPES:
        return Severity.ERROR
    if issue in _INFO_ISSUE_TYPES:
        return Severity.INFO
    return Severity.WARNING


def _replacement_values(raw: Any) -> list[str]:
    values: list[str] = []
    for item in raw or []:
        if isinstance(item, Mapping):
            value = item.get("value")
        else:
            value = item
        if isinstance(value, str) and value:
            values.append(value)
    return values


def utf16_index_map(text: str) -> list[int] | None:
    """Map UTF-16 code-unit offsets onto Python string indices.

    LanguageTool counts offsets in UTF-16 code units, so every character
    outside the Basic Multilingual Plane occupies two units. Returns None
    when the text has no such characters and both counts agree.
    """

    if not any(ord(char) > 0xFFFF for char in text):
        return None
    mapping: list[int] = []
    for index, char in enumerate(text):
        mapping.append(index)
        if ord(char) > 0xFFFF:
            mapping.append(index)
    mapping.append(len(text))
    return mapping


def parse_languagetool_matches(
    payload: Any,
    text: str,
    *,
    source_name: str = "languagetool",
) -> list[Finding]:
    """Normalise a LanguageTool ``/check`` response into findings.

    Raises :class:`RemoteParseError` when the payload itself has the wrong
    shape; individual matches with unusable offsets or fields are skipped.
    """

    if not isinstance(payload, Mapping) or not isinstance(payload.get("matches", []), list):
        raise RemoteParseError(f"{source_name}: response has no 'matches' list", response_text=repr(payload))

    units = utf16_index_map(text)
    findings: list[Finding] = []
    for match in payload.get("matches", []):
        if not isinstance(match, Mapping):
            logger.warning("%s: skipping non-object match %r", source_name, match)
            continue
        try:
            offset = int(match.get("offset"))
            length = int(match.get("length"))
        except (TypeError, ValueError):
            logger.warning("%s: skipping match with invalid offset/length: %r", source_name, match)
            continue
        if offset < 0 or length <= 0:
            logger.warning("%s: skipping empty match at offset %s", source_name, offset)
            continue

        start, end = offset, offset + length
        if units is not None:
            if end >= len(units):
                logger.warning("%s: skipping match past the end of the text at offset %s", source_name, offset)
                continue
            start, end = units[start], units[end]

        rule = match.get("rule") if isinstance(match.get("rule"), Mapping) else {}
        category = rule.get("category") if isinstance(rule.get("category"), Mapping) else {}
        issue_type = rule.get("issueType")
        category_id = str(category.get("id") or "")
        message = match.get("message") or match.get("shortMessage") or "Possible issue"

        try:
            finding = Finding(
                rule_id=rule.get("id") or source_name,
                source=FindingSource.REMOTE,
                start_offset=start,
                end_offset=end,
                original=text[start:end],
                message=message,
                suggestions=_replacement_values(match.get("replacements")),
                type=map_issue_type(issue_type, category_id),
                severity=map_severity(issue_type),
                category=category_id.lower() or map_issue_type(issue_type, category_id).value,
                explanation=rule.get("description"),
            )
        except ValidationError as exc:
            logger.warning("%s: skipping malformed match at offset %s: %s", source_name, offset, exc)
            continue
        findings.append(finding)
    return findings


class LanguageToolProvider(HttpGrammarProvider):
    """Client for a LanguageTool ``/v2`` endpoint (public, premium or self-hosted)."""

    name = "languagetool"

    def __init__(
        self,
        *,
        api_url: str | None = None,
        username: str | None = None,
        api_key: str | None = None,
        enabled_rules: Iterable[str] | None = None,
        disabled_rules: Iterable[str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
        name: str | None = None,
        requires_credentials: bool = False,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self.requires_credentials = requires_credentials
        self.api_url = (api_url or PUBLIC_API_URL).rstrip("/")
        self.username = username
        self.api_key = api_key
        self.enabled_rules = list(enabled_rules or [])
        self.disabled_rules = list(disabled_rules or [])
        if name:
            self.name = name

    def build_form(self, text: str, language: str) -> dict[str, str]:
        form = {"text": text, "language": language}
        if self.enabled_rules:
            form["enabledRules"] = ",".join(self.enabled_rules)
        if self.disabled_rules:
            form["disabledRules"] = ",".join(self.disabled_rules)
        if self.username and self.api_key:
            form["username"] = self.username
            form["apiKey"] = self.api_key
        return form

    def check(self, text: str, *, language: str) -> list[Finding]:
        if self.requires_credentials and not (self.username and self.api_key):
            raise ProviderConfigurationError(
                f"{self.name}: LANGUAGETOOL_USERNAME and LANGUAGETOOL_API_KEY must be set"
            )
        if not text.strip():
            return []
        payload = self.post(f"{self.api_url}/check", data=self.build_form(text, language))
        findings = parse_languagetool_matches(payload, text, source_name=self.name)
        logger.debug("%s returned %d match(es)", self.name, len(findings))
        return findings


def public_languagetool(
    *, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT
) -> LanguageToolProvider:
    """Public API, or a self-hosted server when ``LANGUAGETOOL_URL`` is set."""

    load_provider_env(dotenv_path)
    return LanguageToolProvider(
        api_url=os.environ.get("LANGUAGETOOL_URL") or PUBLIC_API_URL,
        timeout=timeout,
    )


def premium_languagetool(
    *, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT
) -> LanguageToolProvider:
    load_provider_env(dotenv_path)
    return LanguageToolProvider(
        api_url=PREMIUM_API_URL,
        username=os.environ.get("LANGUAGETOOL_USERNAME"),
        api_key=os.environ.get("LANGUAGETOOL_API_KEY"),
        timeout=timeout,
        name="languagetoolplus",
        requires_credentials=True,
    )


def mirror_languagetool(name: str) -> ProviderFactory:
    """Return a factory for one of the anonymous ``LANGUAGETOOL_MIRRORS``."""

    api_url = LANGUAGETOOL_MIRRORS[name]

    def factory(
        *, dotenv_path: str | Path | None = None, timeout: float = DEFAULT_TIMEOUT
    ) -> LanguageToolProvider:
        load_provider_env(dotenv_path)
        return LanguageToolProvider(
            api_url=api_url,
            username=os.environ.get("LANGUAGETOOL_USERNAME"),
            api_key=os.environ.get("LANGUAGETOOL_API_KEY"),
            timeout=timeout,
            name=name,
        )

    return factory
