from __future__ import annotations

import sys
import threading
import time
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import manuscript_review.pipeline.pipeline as pipeline_mod
from manuscript_review.models import Finding, FindingSource, IssueType, Severity
from manuscript_review.pipeline import AnalysisPipeline, PipelineConfig
from manuscript_review.remote import ProviderStatus, TransientProviderError
from manuscript_review.validators import NamedValidator

TEXT = "Their are many mistake in this sentance."


class FakeProvider:
    def __init__(self, name: str = "fake", error: Exception | None = None) -> None:
        self.name = name
        self.error = error
        self.calls = 0
        self.closed = False

    def check(self, text: str, *, language: str) -> list[Finding]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [
            Finding(
                rule_id="REMOTE_THEIR",
                source=FindingSource.REMOTE,
                start_offset=0,
                end_offset=9,
                original=text[0:9],
                message="Remote says: use 'There are'.",
                suggestions=["There are"],
                type=IssueType.GRAMMAR,
                severity=Severity.ERROR,
                category="grammar",
            )
        ]

    def close(self) -> None:
        self.closed = True


def _config(**kwargs) -> PipelineConfig:
    kwargs.setdefault("remote_attempts", 2)
    kwargs.setdefault("retry_base_delay", 0)
    kwargs.setdefault("enabled_severities", ["error"])
    return PipelineConfig(**kwargs)


def test_offline_only_when_no_providers() -> None:
    with AnalysisPipeline(_config(), providers=[], validators=[]) as pipeline:
        assert not pipeline.remote_enabled
        result = pipeline.analyze(TEXT)

    assert result.offline_only
    assert [(s.start_offset, s.end_offset) for s in result.suggestions] == [(0, 9), (10, 22), (31, 39)]
    assert all(s.source is FindingSource.OFFLINE for s in result.suggestions)


def test_remote_success_is_primary_and_offline_supplements() -> None:
    provider = FakeProvider()

    with AnalysisPipeline(_config(), providers=[provider], validators=[]) as pipeline:
        result = pipeline.analyze(TEXT)

    assert provider.calls == 1
    assert provider.closed
    assert not result.offline_only
    assert result.outcome.provider == "fake"
    assert result.suggestions[0].rule_id == "REMOTE_THEIR"
    assert result.suggestions[0].id == "0001-REMOTE_THEIR"
    assert result.statistics["by_source"]["remote"] == 1
    assert result.statistics["by_source"]["offline"] >= 2


def test_remote_failure_falls_back_to_offline() -> None:
    reports = []
    provider = FakeProvider(error=TransientProviderError("busy", status_code=503))
    sleeps: list[float] = []

    pipeline = AnalysisPipeline(
        _config(retry_base_delay=0.5),
        providers=[provider],
        validators=[],
        reporter=lambda name, status, err: reports.append((name, status)),
        sleep=sleeps.append,
    )
    try:
        result = pipeline.analyze(TEXT)
    finally:
        pipeline.close()

    assert provider.calls == 2
    assert sleeps == [0.5]
    assert reports == [("fake", ProviderStatus.EXHAUSTED)]
    assert result.offline_only
    assert len(result.suggestions) == 3


def test_use_remote_false_skips_providers() -> None:
    provider = FakeProvider()

    with AnalysisPipeline(_config(use_remote=False), providers=[provider], validators=[]) as pipeline:
        result = pipeline.analyze(TEXT)

    assert provider.calls == 0
    assert result.offline_only


def test_validator_failures_do_not_break_analysis() -> None:
    def broken(text: str) -> list[Finding]:
        raise RuntimeError("boom")

    def echo(text: str) -> list[Finding]:
        return [
            Finding(
                rule_id="custom",
                source=FindingSource.STRUCTURE,
                start_offset=31,
                end_offset=39,
                original=text[31:39],
                message="Custom validator.",
                type=IssueType.STYLE,
                severity=Severity.INFO,
                category="structure",
            )
        ]

    validators = [NamedValidator("broken", broken), NamedValidator("echo", echo)]
    with AnalysisPipeline(_config(use_remote=False, enabled_severities=None), validators=validators) as pipeline:
        result = pipeline.analyze(TEXT)

    assert "custom" in [s.rule_id for s in result.suggestions]


def test_blank_document_yields_empty_result() -> None:
    provider = FakeProvider()

    with AnalysisPipeline(_config(), providers=[provider], validators=[]) as pipeline:
        result = pipeline.analyze("   \n")

    assert result.suggestions == []
    assert result.offline_only
    assert provider.calls == 0


def test_default_validators_run() -> None:
    text = "Prior work (Smith, 2020) found p=.05 overall."

    with AnalysisPipeline(_config(use_remote=False, enabled_severities=None)) as pipeline:
        result = pipeline.analyze(text)

    sources = {s.source for s in result.suggestions}
    assert FindingSource.CITATION in sources
    assert FindingSource.STATISTICS in sources


def test_concurrent_first_calls_share_one_executor(monkeypatch) -> None:
    created: list[object] = []

    class SlowExecutor:
        def __init__(self, **kwargs) -> None:
            time.sleep(0.05)
            created.append(self)

        def shutdown(self, wait: bool = True) -> None:
            pass

    monkeypatch.setattr(pipeline_mod, "ThreadPoolExecutor", SlowExecutor)
    pipeline = AnalysisPipeline(_config(use_remote=False), validators=[])
    barrier = threading.Barrier(4)
    pools: list[object] = []

    def grab() -> None:
        barrier.wait()
        pools.append(pipeline._pool())

    threads = [threading.Thread(target=grab) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    pipeline.close()

    assert len(created) == 1
    assert all(pool is created[0] for pool in pools)
