from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from manuscript_review.pipeline import AnalysisPipeline, AnalysisResult, DebouncedAnalysisScheduler, PipelineConfig


class RecordingPipeline(AnalysisPipeline):
    """Offline pipeline that records every analysed text."""

    def __init__(self, *, block: threading.Event | None = None, fail: bool = False) -> None:
        super().__init__(PipelineConfig(use_remote=False, debounce_seconds=0.01), validators=[])
        self.analysed: list[str] = []
        self.block = block
        self.fail = fail
        self.started = threading.Event()

    def analyze(self, text: str) -> AnalysisResult:
        self.analysed.append(text)
        self.started.set()
        if self.block is not None:
            self.block.wait(5)
        if self.fail:
            raise RuntimeError("analysis failed")
        return super().analyze(text)


def test_rapid_edits_collapse_into_one_analysis() -> None:
    pipeline = RecordingPipeline()
    results: list[AnalysisResult] = []

    with DebouncedAnalysisScheduler(pipeline, results.append, delay=0.2) as scheduler:
        for text in ("Their", "Their are", "Their are many mistake."):
            generation = scheduler.submit(text)
        assert scheduler.wait_idle(timeout=5)

        assert generation == 3
        assert pipeline.analysed == ["Their are many mistake."]
        assert len(results) == 1
        assert scheduler.latest_result is results[0]
    pipeline.close()


def test_delay_defaults_to_config() -> None:
    pipeline = RecordingPipeline()

    with DebouncedAnalysisScheduler(pipeline, lambda result: None) as scheduler:
        assert scheduler.delay == 0.01
    pipeline.close()


def test_stale_result_is_discarded() -> None:
    gate = threading.Event()
    pipeline = RecordingPipeline(block=gate)
    results: list[AnalysisResult] = []

    with DebouncedAnalysisScheduler(pipeline, results.append, delay=0.01) as scheduler:
        scheduler.submit("first draft")
        assert pipeline.started.wait(5)
        scheduler.submit("second draft")
        gate.set()
        assert scheduler.wait_idle(timeout=5)

        assert pipeline.analysed == ["first draft", "second draft"]
        assert len(results) == 1
        assert scheduler.generation == 2
    pipeline.close()


def test_cancel_drops_pending_analysis() -> None:
    pipeline = RecordingPipeline()
    results: list[AnalysisResult] = []

    with DebouncedAnalysisScheduler(pipeline, results.append, delay=0.2) as scheduler:
        scheduler.submit("draft")
        scheduler.cancel()
        assert scheduler.wait_idle(timeout=5)

    assert pipeline.analysed == []
    assert results == []
    pipeline.close()


def test_errors_go_to_on_error() -> None:
    pipeline = RecordingPipeline(fail=True)
    errors: list[Exception] = []

    with DebouncedAnalysisScheduler(pipeline, lambda result: None, delay=0.01, on_error=errors.append) as scheduler:
        scheduler.submit("draft")
        assert scheduler.wait_idle(timeout=5)

    assert [str(error) for error in errors] == ["analysis failed"]
    assert scheduler.latest_result is None
    pipeline.close()


def test_submit_after_close_raises() -> None:
    pipeline = RecordingPipeline()
    scheduler = DebouncedAnalysisScheduler(pipeline, lambda result: None, delay=0.01)
    scheduler.close()

    with pytest.raises(RuntimeError):
        scheduler.submit("late edit")
    pipeline.close()
