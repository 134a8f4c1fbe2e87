"""Retry helper for remote provider calls."""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from language_tool_python.utils import LanguageToolError

from .provider import TransientProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# language_tool_python wraps connection-level failures of the local server in
# LanguageToolError; treat those like remote timeouts.
TRANSIENT_ERRORS = (TransientProviderError, LanguageToolError)


def call_with_retry(
    func: Callable[[], T],
    *,
    attempts: int = 3,
    base_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "provider",
) -> T:
    """Call ``func`` until it succeeds or ``attempts`` transient failures occur.

    The delay after the n-th failed attempt is ``n * base_delay`` seconds.
    Any non-transient exception propagates immediately.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    for attempt in range(1, attempts + 1):
        try:
            return func()
        except TRANSIENT_ERRORS as exc:
            if attempt >= attempts:
                logger.error(
                    "%s failed after %d attempt(s): %s",
                    label,
                    attempt,
                    exc,
                )
                raise
            delay = attempt * base_delay
            logger.warning(
                "%s attempt %d failed (transient error: %s); retrying in %.1f second(s)...",
                label,
                attempt,
                type(exc).__name__,
                delay,
            )
            sleep(delay)
    raise AssertionError("unreachable")
