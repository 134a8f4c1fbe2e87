"""Remote grammar providers, retry policy and the fallback chain."""

from __future__ import annotations

from .alternatives import (
    GrammarBotProvider,
    SaplingProvider,
    TextgearsProvider,
    parse_sapling_edits,
    parse_textgears_errors,
)
from .fallback import FallbackChain
from .http_provider import HttpGrammarProvider
from .language_tool_manager import LanguageToolManager
from .languagetool import LanguageToolProvider, map_issue_type, map_severity, parse_languagetool_matches
from .local_languagetool import LocalLanguageToolProvider
from .provider import (
    ChainResult,
    GrammarProvider,
    LastProviderOutcome,
    ProviderAttempt,
    ProviderConfigurationError,
    ProviderReporter,
    ProviderStatus,
    RemoteParseError,
    RemoteProviderError,
    TerminalProviderError,
    TransientProviderError,
)
from .provider_registry import available_providers, create_provider_chain
from .retry import call_with_retry

__all__ = [
    "ChainResult",
    "FallbackChain",
    "GrammarBotProvider",
    "GrammarProvider",
    "HttpGrammarProvider",
    "LanguageToolManager",
    "LanguageToolProvider",
    "LastProviderOutcome",
    "LocalLanguageToolProvider",
    "ProviderAttempt",
    "ProviderConfigurationError",
    "ProviderReporter",
    "ProviderStatus",
    "RemoteParseError",
    "RemoteProviderError",
    "SaplingProvider",
    "TerminalProviderError",
    "TextgearsProvider",
    "TransientProviderError",
    "available_providers",
    "call_with_retry",
    "create_provider_chain",
    "map_issue_type",
    "map_severity",
    "parse_languagetool_matches",
    "parse_sapling_edits",
    "parse_textgears_errors",
]
