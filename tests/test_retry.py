from __future__ import annotations

import sys
from pathlib import Path

import pytest
from language_tool_python.utils import LanguageToolError

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.remote import TerminalProviderError, TransientProviderError, call_with_retry


class Flaky:
    """Fails ``failures`` times with ``error`` before returning ``value``."""

    def __init__(self, failures: int, error: Exception, value: str = "ok") -> None:
        self.failures = failures
        self.error = error
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.value


def test_linear_backoff_until_success() -> None:
    sleeps: list[float] = []
    func = Flaky(2, TransientProviderError("busy", status_code=429))

    assert call_with_retry(func, attempts=3, base_delay=1.0, sleep=sleeps.append) == "ok"
    assert func.calls == 3
    assert sleeps == [1.0, 2.0]


def test_exhausted_retries_reraise_last_error() -> None:
    sleeps: list[float] = []
    func = Flaky(5, TransientProviderError("timeout"))

    with pytest.raises(TransientProviderError):
        call_with_retry(func, attempts=3, base_delay=0.5, sleep=sleeps.append)
    assert func.calls == 3
    assert sleeps == [0.5, 1.0]


def test_languagetool_errors_are_transient() -> None:
    sleeps: list[float] = []
    func = Flaky(1, LanguageToolError("server restarting"))

    assert call_with_retry(func, attempts=2, sleep=sleeps.append) == "ok"
    assert sleeps == [1.0]


def test_terminal_errors_are_not_retried() -> None:
    sleeps: list[float] = []
    func = Flaky(1, TerminalProviderError("bad request", status_code=400))

    with pytest.raises(TerminalProviderError):
        call_with_retry(func, attempts=3, sleep=sleeps.append)
    assert func.calls == 1
    assert sleeps == []


def test_single_attempt_never_sleeps() -> None:
    sleeps: list[float] = []

    with pytest.raises(TransientProviderError):
        call_with_retry(Flaky(1, TransientProviderError("x")), attempts=1, sleep=sleeps.append)
    assert sleeps == []


def test_attempts_must_be_positive() -> None:
    with pytest.raises(ValueError):
        call_with_retry(lambda: "ok", attempts=0)
