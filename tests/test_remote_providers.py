from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

import pytest
import requests

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.models import FindingSource, IssueType, Severity
from manuscript_review.remote import (
    GrammarBotProvider,
    LanguageToolProvider,
    ProviderConfigurationError,
    RemoteParseError,
    SaplingProvider,
    TerminalProviderError,
    TextgearsProvider,
    TransientProviderError,
    map_issue_type,
    map_severity,
    parse_languagetool_matches,
    parse_sapling_edits,
    parse_textgears_errors,
)
from manuscript_review.remote.languagetool import premium_languagetool, public_languagetool, utf16_index_map


class DummyResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class DummySession:
    """Records POST calls and returns a canned response (or raises)."""

    def __init__(self, response: DummyResponse | Exception) -> None:
        self.response = response
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def post(self, url: str, **kwargs: Any) -> DummyResponse:
        self.calls.append({"url": url, **kwargs})
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    def close(self) -> None:
        self.closed = True


TEXT = "Their are a error here."

LT_PAYLOAD = {
    "matches": [
        {
            "message": "Did you mean 'There'?",
            "offset": 0,
            "length": 5,
            "replacements": [{"value": "There"}, {"value": "They're"}],
            "rule": {
                "id": "THEIR_IS",
                "description": "their vs there",
                "issueType": "grammar",
                "category": {"id": "CONFUSED_WORDS", "name": "Confused words"},
            },
        },
        {
            "message": "Use 'an'.",
            "offset": 10,
            "length": 1,
            "replacements": [{"value": "an"}],
            "rule": {"id": "EN_A_VS_AN", "issueType": "misspelling", "category": {"id": "TYPOS"}},
        },
        {"message": "broken", "offset": "x", "length": 2},
        {"message": "empty", "offset": 3, "length": 0},
    ]
}


def test_parse_languagetool_matches() -> None:
    findings = parse_languagetool_matches(LT_PAYLOAD, TEXT)

    assert [finding.span for finding in findings] == [(0, 5), (10, 11)]
    first, second = findings
    assert first.rule_id == "THEIR_IS"
    assert first.original == "Their"
    assert first.suggestions == ["There", "They're"]
    assert first.category == "confused_words"
    assert first.type is IssueType.GRAMMAR
    assert first.severity is Severity.ERROR
    assert first.explanation == "their vs there"
    assert first.source is FindingSource.REMOTE
    assert second.type is IssueType.SPELLING
    assert second.category == "typos"


@pytest.mark.parametrize("payload", [None, [], {"matches": "nope"}])
def test_parse_languagetool_rejects_bad_payloads(payload: Any) -> None:
    with pytest.raises(RemoteParseError):
        parse_languagetool_matches(payload, TEXT)


@pytest.mark.parametrize(
    "issue_type, category, expected",
    [
        ("misspelling", None, IssueType.SPELLING),
        (None, "TYPOS", IssueType.SPELLING),
        ("typographical", None, IssueType.PUNCTUATION),
        (None, "PUNCTUATION", IssueType.PUNCTUATION),
        ("style", None, IssueType.STYLE),
        (None, "REDUNDANCY", IssueType.STYLE),
        ("grammar", "GRAMMAR", IssueType.GRAMMAR),
        (None, None, IssueType.GRAMMAR),
    ],
)
def test_map_issue_type(issue_type, category, expected) -> None:
    assert map_issue_type(issue_type, category) is expected


def test_map_severity() -> None:
    assert map_severity("grammar") is Severity.ERROR
    assert map_severity("hint") is Severity.INFO
    assert map_severity("uncategorized") is Severity.WARNING


def test_languagetool_provider_posts_form() -> None:
    session = DummySession(DummyResponse(payload=LT_PAYLOAD))
    provider = LanguageToolProvider(
        api_url="http://localhost:8081/v2/",
        disabled_rules=["WHITESPACE_RULE"],
        session=session,
        timeout=5.0,
    )

    findings = provider.check(TEXT, language="en-GB")

    assert len(findings) == 2
    call = session.calls[0]
    assert call["url"] == "http://localhost:8081/v2/check"
    assert call["data"]["language"] == "en-GB"
    assert call["data"]["disabledRules"] == "WHITESPACE_RULE"
    assert "apiKey" not in call["data"]
    assert call["timeout"] == 5.0


def test_languagetool_provider_skips_blank_text() -> None:
    session = DummySession(DummyResponse(payload=LT_PAYLOAD))
    assert LanguageToolProvider(session=session).check("   ", language="en-US") == []
    assert session.calls == []


@pytest.mark.parametrize(
    "response, error, status",
    [
        (DummyResponse(status_code=429), TransientProviderError, 429),
        (DummyResponse(status_code=503), TransientProviderError, 503),
        (DummyResponse(status_code=401), ProviderConfigurationError, 401),
        (DummyResponse(status_code=400), TerminalProviderError, 400),
    ],
)
def test_http_status_mapping(response, error, status) -> None:
    provider = LanguageToolProvider(session=DummySession(response))

    with pytest.raises(error) as excinfo:
        provider.check(TEXT, language="en-US")
    assert excinfo.value.status_code == status


def test_timeouts_are_transient_and_connection_errors_terminal() -> None:
    with pytest.raises(TransientProviderError):
        LanguageToolProvider(session=DummySession(requests.Timeout("slow"))).check(TEXT, language="en-US")

    with pytest.raises(TerminalProviderError) as excinfo:
        LanguageToolProvider(session=DummySession(requests.ConnectionError("down"))).check(
            TEXT, language="en-US"
        )
    assert not isinstance(excinfo.value, TransientProviderError)


def test_invalid_json_raises_parse_error_with_body() -> None:
    response = DummyResponse(payload=ValueError("bad json"), text="<html>oops</html>")

    with pytest.raises(RemoteParseError) as excinfo:
        LanguageToolProvider(session=DummySession(response)).check(TEXT, language="en-US")
    assert "<html>oops</html>" in str(excinfo.value)


def test_premium_provider_needs_credentials(monkeypatch) -> None:
    monkeypatch.delenv("LANGUAGETOOL_USERNAME", raising=False)
    monkeypatch.delenv("LANGUAGETOOL_API_KEY", raising=False)

    provider = premium_languagetool(dotenv_path=None)

    assert provider.name == "languagetoolplus"
    with pytest.raises(ProviderConfigurationError):
        provider.check(TEXT, language="en-US")


def test_public_provider_honours_custom_url(monkeypatch) -> None:
    monkeypatch.setenv("LANGUAGETOOL_URL", "http://lt.internal:8010/v2")
    assert public_languagetool().api_url == "http://lt.internal:8010/v2"


def test_keyed_providers_require_keys() -> None:
    for provider_cls in (GrammarBotProvider, TextgearsProvider, SaplingProvider):
        provider = provider_cls(api_key=None, session=DummySession(DummyResponse()))
        with pytest.raises(ProviderConfigurationError):
            provider.check(TEXT, language="en-US")


def test_grammarbot_uses_languagetool_format() -> None:
    session = DummySession(DummyResponse(payload=LT_PAYLOAD))

    findings = GrammarBotProvider(api_key="k", session=session).check(TEXT, language="en-US")

    assert len(findings) == 2
    assert session.calls[0]["data"]["api_key"] == "k"


def test_parse_textgears_errors() -> None:
    payload = {
        "status": True,
        "response": {
            "errors": [
                {
                    "id": "e1",
                    "offset": 0,
                    "length": 5,
                    "bad": "Their",
                    "better": ["There"],
                    "type": "grammar",
                    "description": {"en": "Wrong word."},
                },
                {"id": "e2", "offset": 10, "length": 1, "bad": "a", "better": ["an"], "type": "spelling"},
            ]
        },
    }

    findings = parse_textgears_errors(payload, TEXT)

    assert [finding.rule_id for finding in findings] == ["textgears-e1", "textgears-e2"]
    assert findings[0].message == "Wrong word."
    assert findings[1].type is IssueType.SPELLING
    assert parse_textgears_errors({"status": False}, TEXT) == []


def test_parse_sapling_edits_uses_sentence_offsets() -> None:
    text = "Fine sentence. Their are errors."
    payload = {
        "edits": [
            {
                "sentence_start": 15,
                "start": 0,
                "end": 9,
                "replacement": "There are",
                "error_type": "R:OTHER",
                "general_error_type": "Grammar",
            }
        ]
    }

    findings = parse_sapling_edits(payload, text)

    assert findings[0].span == (15, 24)
    assert findings[0].original == "Their are"
    assert findings[0].suggestions == ["There are"]


def test_sapling_sends_json_body() -> None:
    session = DummySession(DummyResponse(payload={"edits": []}))

    assert SaplingProvider(api_key="k", session=session).check(TEXT, language="en-GB") == []
    assert session.calls[0]["json"]["lang"] == "en"
    assert session.calls[0]["json"]["key"] == "k"


def test_close_closes_session() -> None:
    session = DummySession(DummyResponse())
    LanguageToolProvider(session=session).close()
    assert session.closed


def test_languagetool_offsets_count_utf16_units() -> None:
    text = "The 𝑝 value was signifcant."
    # LanguageTool counts the astral "𝑝" as two code units.
    utf16_offset = text.index("signifcant") + 1
    payload = {
        "matches": [
            {
                "message": "Possible spelling mistake.",
                "offset": utf16_offset,
                "length": len("signifcant"),
                "replacements": [{"value": "significant"}],
                "rule": {"id": "MORFOLOGIK_RULE_EN_US", "issueType": "misspelling"},
            },
            {"message": "Past the end.", "offset": len(text), "length": 2},
        ]
    }

    findings = parse_languagetool_matches(payload, text)

    assert len(findings) == 1
    assert findings[0].original == "signifcant"
    assert findings[0].span == (text.index("signifcant"), text.index("signifcant") + len("signifcant"))


def test_utf16_index_map_only_built_for_astral_text() -> None:
    assert utf16_index_map(TEXT) is None
    assert utf16_index_map("a😀b") == [0, 1, 1, 2, 3]


def test_malformed_languagetool_match_is_skipped() -> None:
    payload = {"matches": [{"message": "   ", "offset": 0, "length": 5}, *LT_PAYLOAD["matches"]]}

    findings = parse_languagetool_matches(payload, TEXT)

    assert [finding.span for finding in findings] == [(0, 5), (10, 11)]
    assert findings[0].rule_id == "THEIR_IS"


def test_textgears_original_comes_from_text_and_bad_errors_are_skipped() -> None:
    payload = {
        "status": True,
        "response": {
            "errors": [
                {"id": "e1", "offset": 0, "length": 5, "bad": 12345, "better": "There", "type": 7},
                {"id": "e2", "offset": 10, "length": 1, "description": {"en": "   "}, "type": "grammar"},
            ]
        },
    }

    findings = parse_textgears_errors(payload, TEXT)

    assert len(findings) == 1
    assert findings[0].original == "Their"
    assert findings[0].suggestions == []
    assert findings[0].category == "7"


def test_malformed_sapling_edit_is_skipped() -> None:
    payload = {
        "edits": [
            {"start": 0, "end": 5, "general_error_type": "   ", "replacement": "There"},
            {"start": 10, "end": 11, "general_error_type": "Grammar", "replacement": "an"},
        ]
    }

    findings = parse_sapling_edits(payload, TEXT)

    assert [finding.span for finding in findings] == [(10, 11)]
