"""Tests for provider registry environment variable handling.

These tests verify that the provider registry correctly reads GRAMMAR_PRIMARY
and GRAMMAR_FALLBACK environment variables, including when they are set in a
.env file that has to be loaded before the registry reads them.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

# Ensure project root is on sys.path for test imports
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.models import Finding
from manuscript_review.remote.provider_registry import (
    _PROVIDER_FACTORIES,
    _split_names,
    available_providers,
    create_provider_chain,
)


class MockProvider:
    """Mock provider for testing."""

    def __init__(self, name: str, timeout: float):
        self.name = name
        self.timeout = timeout

    def check(self, text: str, *, language: str) -> list[Finding]:
        return []


def mock_provider_factory(name: str):
    """Factory that returns a mock provider factory function."""

    def factory(*, dotenv_path: str | Path | None, timeout: float):
        return MockProvider(name, timeout)

    return factory


@pytest.fixture
def mock_registry():
    """Replace the whole registry with two mock providers."""
    original_factories = _PROVIDER_FACTORIES.copy()
    _PROVIDER_FACTORIES.clear()
    _PROVIDER_FACTORIES["mock1"] = mock_provider_factory("mock1")
    _PROVIDER_FACTORIES["mock2"] = mock_provider_factory("mock2")
    try:
        yield _PROVIDER_FACTORIES
    finally:
        _PROVIDER_FACTORIES.clear()
        _PROVIDER_FACTORIES.update(original_factories)


def test_split_names_with_comma_separated_values() -> None:
    assert _split_names("languagetool,sapling") == ["languagetool", "sapling"]
    assert _split_names("LanguageTool, Sapling") == ["languagetool", "sapling"]
    assert _split_names("  textgears  ") == ["textgears"]


def test_split_names_with_empty_values() -> None:
    assert _split_names(None) == []
    assert _split_names("") == []
    assert _split_names("  ") == []
    assert _split_names(",,,") == []


def test_available_providers_lists_builtin_services() -> None:
    names = available_providers()

    assert names[0] == "languagetool"
    assert {"languagetool-community", "languagetool-alt", "languagetoolplus", "languagetool-local", "grammarbot", "textgears", "sapling"} <= set(names)


def test_create_provider_chain_respects_primary_parameter(
    monkeypatch: pytest.MonkeyPatch, mock_registry
) -> None:
    """Explicit primary parameter overrides environment."""
    monkeypatch.setenv("GRAMMAR_PRIMARY", "mock2")
    monkeypatch.delenv("GRAMMAR_FALLBACK", raising=False)

    providers = create_provider_chain(primary="mock1")

    assert [provider.name for provider in providers] == ["mock1"]


def test_create_provider_chain_respects_fallbacks_and_deduplicates(
    monkeypatch: pytest.MonkeyPatch, mock_registry
) -> None:
    monkeypatch.delenv("GRAMMAR_FALLBACK", raising=False)

    providers = create_provider_chain(primary="mock1", fallbacks=["mock1", "MOCK2"], timeout=7.5)

    assert [provider.name for provider in providers] == ["mock1", "mock2"]
    assert all(provider.timeout == 7.5 for provider in providers)


def test_create_provider_chain_reads_env(
    monkeypatch: pytest.MonkeyPatch, mock_registry
) -> None:
    monkeypatch.setenv("GRAMMAR_PRIMARY", "mock2")
    monkeypatch.setenv("GRAMMAR_FALLBACK", "mock1")

    providers = create_provider_chain()

    assert [provider.name for provider in providers] == ["mock2", "mock1"]


def test_create_provider_chain_uses_default_when_no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """The public LanguageTool service comes first, then its anonymous mirrors."""
    monkeypatch.delenv("GRAMMAR_PRIMARY", raising=False)
    monkeypatch.delenv("GRAMMAR_FALLBACK", raising=False)
    for name in ("languagetool", "languagetool-community", "languagetool-alt"):
        monkeypatch.setitem(_PROVIDER_FACTORIES, name, mock_provider_factory(name))

    providers = create_provider_chain()

    assert [provider.name for provider in providers] == [
        "languagetool",
        "languagetool-community",
        "languagetool-alt",
    ]


def test_mirror_factories_point_at_mirror_endpoints(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LANGUAGETOOL_USERNAME", raising=False)
    monkeypatch.delenv("LANGUAGETOOL_API_KEY", raising=False)

    community = _PROVIDER_FACTORIES["languagetool-community"](dotenv_path=None, timeout=4.0)
    alternate = _PROVIDER_FACTORIES["languagetool-alt"](dotenv_path=None, timeout=4.0)

    assert community.name == "languagetool-community"
    assert community.api_url == "https://api.languagetoolplus.com/v2"
    assert not community.requires_credentials
    assert alternate.name == "languagetool-alt"
    assert alternate.api_url == "https://languagetool.org/api/v2"
    assert alternate.timeout == 4.0


def test_create_provider_chain_with_unknown_provider_raises(
    monkeypatch: pytest.MonkeyPatch, mock_registry
) -> None:
    monkeypatch.setenv("GRAMMAR_PRIMARY", "unknown_provider")

    with pytest.raises(ValueError, match="Unknown grammar provider 'unknown_provider'"):
        create_provider_chain()


def test_create_provider_chain_loads_dotenv_before_reading_env(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    mock_registry,
) -> None:
    """GRAMMAR_PRIMARY from the .env file decides provider order."""
    env_file = tmp_path / ".env"
    env_file.write_text("GRAMMAR_PRIMARY=mock2\nGRAMMAR_FALLBACK=mock1\n", encoding="utf-8")
    monkeypatch.setenv("GRAMMAR_PRIMARY", "mock1")
    monkeypatch.setenv("GRAMMAR_FALLBACK", "")

    providers = create_provider_chain(dotenv_path=env_file)

    assert [provider.name for provider in providers] == ["mock2", "mock1"]
    assert os.environ.get("GRAMMAR_PRIMARY") == "mock2"
