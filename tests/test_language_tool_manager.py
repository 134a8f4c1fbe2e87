from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from language_tool_python.utils import JavaError, LanguageToolError, PathError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import manuscript_review.remote.language_tool_manager as manager_mod
from manuscript_review.models import FindingSource, IssueType, Severity
from manuscript_review.remote import (
    LanguageToolManager,
    LocalLanguageToolProvider,
    TerminalProviderError,
    TransientProviderError,
    call_with_retry,
)
from manuscript_review.remote.local_languagetool import finding_from_match


class DummyLanguageTool:
    created: list[tuple[str, dict]] = []

    def __init__(self, language, **kwargs):
        self.language = language
        self.kwargs = kwargs
        self.disabled_rules = set()
        self.closed = False
        self.checked: list[str] = []
        self.matches: list[object] = []
        DummyLanguageTool.created.append((language, kwargs))

    def check(self, text):
        self.checked.append(text)
        return self.matches

    def close(self):
        self.closed = True


def _patch(monkeypatch) -> None:
    DummyLanguageTool.created = []
    monkeypatch.setattr(manager_mod.language_tool_python, "LanguageTool", DummyLanguageTool)


def test_build_tool_registers_spellings_once(monkeypatch) -> None:
    _patch(monkeypatch)
    manager = LanguageToolManager(ignored_words=["ANOVA", " ", "Likert", "ANOVA"], disabled_rules={"RULE_A"})

    first = manager.build_tool("en-US", extra_disabled_rules=["RULE_B"])
    second = manager.build_tool("en-US")

    assert first.kwargs["newSpellings"] == ["ANOVA", "Likert"]
    assert first.kwargs["new_spellings_persist"] is True
    assert first.kwargs["config"] == manager_mod.DEFAULT_SERVER_CONFIG
    assert first.disabled_rules == {"RULE_A", "RULE_B"}
    assert "newSpellings" not in second.kwargs
    assert second.disabled_rules == {"RULE_A"}


def test_other_languages_skip_spellings(monkeypatch) -> None:
    _patch(monkeypatch)
    manager = LanguageToolManager(ignored_words=["ANOVA"], config={})

    tool = manager.build_tool("en-GB")

    assert tool.kwargs == {}
    assert tool.disabled_rules == set()


def _match(**overrides):
    values = {
        "ruleId": "MORFOLOGIK_RULE_EN_GB",
        "offset": 4,
        "errorLength": 6,
        "ruleIssueType": "misspelling",
        "category": "TYPOS",
        "message": "Possible spelling mistake found.",
        "replacements": ["results", "resets"],
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_finding_from_match() -> None:
    text = "The reslts were clear."

    finding = finding_from_match(_match(), text)

    assert finding is not None
    assert finding.span == (4, 10)
    assert finding.original == "reslts"
    assert finding.type is IssueType.SPELLING
    assert finding.severity is Severity.ERROR
    assert finding.category == "typos"
    assert finding.source is FindingSource.REMOTE
    assert finding_from_match(_match(errorLength=0), text) is None
    assert finding_from_match(_match(offset="bad"), text) is None


def test_local_provider_reuses_tool_per_language(monkeypatch) -> None:
    _patch(monkeypatch)
    provider = LocalLanguageToolProvider(
        manager=LanguageToolManager(config={}),
        disabled_rules=["WHITESPACE_RULE"],
    )
    text = "The reslts were clear."

    assert provider.check("   ", language="en-GB") == []
    assert DummyLanguageTool.created == []

    provider.check(text, language="en-GB")
    tool = provider._tools["en-GB"]
    tool.matches = [_match(), _match(offset=-1)]
    findings = provider.check(text, language="en-GB")

    assert len(DummyLanguageTool.created) == 1
    assert tool.disabled_rules == {"WHITESPACE_RULE"}
    assert [finding.original for finding in findings] == ["reslts"]
    assert findings[0].rule_id == "MORFOLOGIK_RULE_EN_GB"

    provider.close()
    assert tool.closed
    assert provider._tools == {}


class BrokenManager:
    def __init__(self, error: Exception) -> None:
        self.error = error
        self.builds = 0

    def build_tool(self, language: str, *, extra_disabled_rules=None):
        self.builds += 1
        raise self.error


@pytest.mark.parametrize("error", [JavaError("No java install detected"), PathError("bad download path")])
def test_missing_java_is_terminal_and_not_retried(error: Exception) -> None:
    manager = BrokenManager(error)
    provider = LocalLanguageToolProvider(manager=manager)
    sleeps: list[float] = []

    with pytest.raises(TerminalProviderError) as excinfo:
        call_with_retry(lambda: provider.check("Some text.", language="en-US"), attempts=3, sleep=sleeps.append)

    assert not isinstance(excinfo.value, TransientProviderError)
    assert excinfo.value.__cause__ is error
    assert manager.builds == 1
    assert sleeps == []


def test_server_errors_stay_transient() -> None:
    manager = BrokenManager(LanguageToolError("server crashed"))
    provider = LocalLanguageToolProvider(manager=manager)
    sleeps: list[float] = []

    with pytest.raises(LanguageToolError):
        call_with_retry(lambda: provider.check("Some text.", language="en-US"), attempts=2, sleep=sleeps.append)

    assert manager.builds == 2
    assert sleeps == [1.0]
