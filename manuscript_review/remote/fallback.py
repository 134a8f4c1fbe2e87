"""Priority-ordered fallback across remote grammar providers."""

from __future__ import annotations

import logging
import time
from typing import Callable, Sequence

from .provider import (
    ChainResult,
    GrammarProvider,
    LastProviderOutcome,
    ProviderAttempt,
    ProviderConfigurationError,
    ProviderReporter,
    ProviderStatus,
    RemoteProviderError,
)
from .retry import TRANSIENT_ERRORS, call_with_retry

logger = logging.getLogger(__name__)


class FallbackChain:
    """Try each provider in order until one answers.

    Each provider gets ``attempts`` tries for transient failures. A provider
    that is unconfigured, exhausted or terminally failing hands over to the
    next one; when none is left the result carries an offline outcome and
    no findings.
    """

    def __init__(
        self,
        providers: Sequence[GrammarProvider],
        *,
        attempts: int = 3,
        base_delay: float = 1.0,
        reporter: ProviderReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._providers = list(providers)
        self.attempts = attempts
        self.base_delay = base_delay
        self._reporter = reporter
        self._sleep = sleep

    def provider_order(self) -> list[str]:
        """Return the provider names in configured order."""

        return [provider.name for provider in self._providers]

    def check(self, text: str, *, language: str) -> ChainResult:
        attempts: list[ProviderAttempt] = []
        for provider in self._providers:
            try:
                findings = call_with_retry(
                    lambda: provider.check(text, language=language),
                    attempts=self.attempts,
                    base_delay=self.base_delay,
                    sleep=self._sleep,
                    label=provider.name,
                )
            except ProviderConfigurationError as exc:
                attempts.append(self._record(provider.name, ProviderStatus.UNCONFIGURED, exc))
                continue
            except TRANSIENT_ERRORS as exc:
                attempts.append(self._record(provider.name, ProviderStatus.EXHAUSTED, exc))
                continue
            except RemoteProviderError as exc:
                attempts.append(self._record(provider.name, ProviderStatus.FAILURE, exc))
                continue
            except Exception as exc:
                logger.exception("Provider %s raised an unexpected error", provider.name)
                attempts.append(self._record(provider.name, ProviderStatus.FAILURE, exc))
                continue
            attempts.append(self._record(provider.name, ProviderStatus.SUCCESS))
            return ChainResult(
                findings=findings,
                outcome=LastProviderOutcome(
                    provider=provider.name,
                    status=ProviderStatus.SUCCESS,
                    attempts=tuple(attempts),
                ),
            )

        if self._providers:
            logger.warning(
                "All remote providers failed (%s); using offline checking only",
                ", ".join(f"{attempt.provider}={attempt.status.value}" for attempt in attempts),
            )
        return ChainResult(findings=[], outcome=LastProviderOutcome.offline(tuple(attempts)))

    def _record(
        self,
        name: str,
        status: ProviderStatus,
        err: Exception | None = None,
    ) -> ProviderAttempt:
        if err is not None:
            logger.warning("Provider %s %s: %s", name, status.value, err)
        if self._reporter is not None:
            self._reporter(name, status, err)
        return ProviderAttempt(provider=name, status=status, error=str(err) if err is not None else None)

    def close(self) -> None:
        for provider in self._providers:
            close = getattr(provider, "close", None)
            if callable(close):
                close()
