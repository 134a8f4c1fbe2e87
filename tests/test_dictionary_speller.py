from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import manuscript_review.engine.dictionary_speller as speller_mod
from manuscript_review.engine import DictionarySpeller, OfflineChecker
from manuscript_review.models import FindingSource, IssueType
from manuscript_review.pipeline import PipelineConfig


class DummySpellChecker:
    """Knows a handful of words; everything else is unknown."""

    known = {"the", "results", "were", "clear", "and", "robust", "with", "data"}
    created: list[dict] = []

    def __init__(self, language="en", distance=2):
        DummySpellChecker.created.append({"language": language, "distance": distance})

    def unknown(self, words):
        return {word for word in words if word not in self.known}

    def candidates(self, word):
        if word == "reslts":
            return {"results", "reslts", "resets"}
        return None

    def word_usage_frequency(self, word):
        return {"results": 0.5, "resets": 0.1}.get(word, 0.0)


def _patch(monkeypatch) -> None:
    DummySpellChecker.created = []
    monkeypatch.setattr(speller_mod, "SpellChecker", DummySpellChecker)


def test_unknown_lowercase_words_are_flagged(monkeypatch) -> None:
    _patch(monkeypatch)
    text = "The reslts were clear and robust."

    findings = DictionarySpeller("en-GB").check(text)

    assert len(findings) == 1
    finding = findings[0]
    assert finding.original == "reslts"
    assert finding.span == (4, 10)
    assert finding.suggestions == ["results", "resets"]
    assert finding.source is FindingSource.DICTIONARY
    assert finding.type is IssueType.SPELLING
    assert DummySpellChecker.created == [{"language": "en", "distance": 2}]


def test_names_acronyms_compounds_and_ignored_words_are_skipped(monkeypatch) -> None:
    _patch(monkeypatch)
    text = "Smith used ANOVA with well-known data from an ok covariate set and blorp."

    findings = DictionarySpeller(ignored_words={"Blorp"}).check(text)

    flagged = {finding.original for finding in findings}
    assert "Smith" not in flagged
    assert "ANOVA" not in flagged
    assert "well-known" not in flagged
    assert "ok" not in flagged
    assert "covariate" not in flagged
    assert "blorp" not in flagged
    assert "used" in flagged


def test_offline_checker_runs_speller_only_when_enabled(monkeypatch) -> None:
    _patch(monkeypatch)
    text = "The reslts were clear."

    without = OfflineChecker(PipelineConfig(use_remote=False)).check(text)
    with_dictionary = OfflineChecker(PipelineConfig(use_remote=False, dictionary_spelling=True)).check(text)

    assert all(finding.source is not FindingSource.DICTIONARY for finding in without)
    assert any(finding.original == "reslts" for finding in with_dictionary)


def test_dictionary_language_uses_primary_subtag() -> None:
    assert speller_mod.dictionary_language("en-US") == "en"
    assert speller_mod.dictionary_language("de_DE") == "de"
    assert speller_mod.dictionary_language("") == "en"
