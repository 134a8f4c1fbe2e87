from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol

from ..models import Finding

ProviderReporter = Callable[[str, "ProviderStatus", Exception | None], None]


class ProviderStatus(str, Enum):
    """Status used when reporting the outcome of a provider call."""

    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FAILURE = "failure"
    UNCONFIGURED = "unconfigured"
    OFFLINE = "offline"


class RemoteProviderError(Exception):
    """Generic failure raised by a remote grammar provider."""


class TransientProviderError(RemoteProviderError):
    """Timeouts, rate limiting (HTTP 429) and server errors (HTTP 5xx).

    These are worth retrying against the same provider.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TerminalProviderError(RemoteProviderError):
    """Failures that retrying the same provider cannot fix (unreachable host, other 4xx)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderConfigurationError(TerminalProviderError):
    """Raised when a provider cannot be configured or authenticated."""


class RemoteParseError(TerminalProviderError):
    """Raised when a provider response cannot be parsed as expected.

    Carries the raw response text to aid debugging.
    """

    def __init__(self, message: str, *, response_text: str | None = None) -> None:
        super().__init__(message)
        self.response_text = response_text

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.response_text is not None:
            text = self.response_text
            if len(text) > 2000:
                text = text[:2000] + "... [truncated]"
            parts.append(f"\n--- Provider Response ---\n{text}")
        return "".join(parts)


class GrammarProvider(Protocol):
    """Shared contract for remote grammar providers."""

    name: str

    def check(self, text: str, *, language: str) -> list[Finding]:
        """Return findings with offsets into ``text``."""
        ...


class ProviderFactory(Protocol):
    def __call__(
        self,
        *,
        dotenv_path: str | Path | None,
        timeout: float,
    ) -> GrammarProvider: ...


@dataclass(frozen=True)
class ProviderAttempt:
    """Final state of one provider inside a fallback chain run."""

    provider: str
    status: ProviderStatus
    error: str | None = None


@dataclass(frozen=True)
class LastProviderOutcome:
    """Which remote path answered the last request.

    ``offline_only`` is the side-channel signal for "remote checking is
    degraded; suggestions came from the local engine only".
    """

    provider: str | None
    status: ProviderStatus
    offline_only: bool = False
    attempts: tuple[ProviderAttempt, ...] = ()

    @classmethod
    def offline(cls, attempts: tuple[ProviderAttempt, ...] = ()) -> "LastProviderOutcome":
        return cls(provider=None, status=ProviderStatus.OFFLINE, offline_only=True, attempts=attempts)

    @property
    def remote_succeeded(self) -> bool:
        return self.status is ProviderStatus.SUCCESS


@dataclass(frozen=True)
class ChainResult:
    findings: list[Finding] = field(default_factory=list)
    outcome: LastProviderOutcome = field(default_factory=LastProviderOutcome.offline)
