"""Debounced re-analysis for interactive editing.

Every ``submit`` restarts a single timer. When the timer expires one analysis
task is queued; a newer edit bumps the generation counter so results of an
older task are discarded (last writer wins).
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

from .aggregator import AnalysisResult
from .pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)


class DebouncedAnalysisScheduler:
    def __init__(
        self,
        pipeline: AnalysisPipeline,
        on_result: Callable[[AnalysisResult], None],
        *,
        delay: float | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.on_result = on_result
        self.on_error = on_error
        self.delay = pipeline.config.debounce_seconds if delay is None else max(0.0, delay)
        self._lock = threading.Lock()
        self._generation = 0
        self._timer: threading.Timer | None = None
        self._future: Future[None] | None = None
        self._latest: AnalysisResult | None = None
        self._closed = False
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="manuscript-debounce")

    @property
    def latest_result(self) -> AnalysisResult | None:
        with self._lock:
            return self._latest

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def submit(self, text: str) -> int:
        """Schedule analysis of ``text`` after the debounce delay; returns its generation."""

        with self._lock:
            if self._closed:
                raise RuntimeError("scheduler is closed")
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire, args=(generation, text))
            self._timer.daemon = True
            self._timer.start()
        return generation

    def _fire(self, generation: int, text: str) -> None:
        with self._lock:
            if generation != self._generation or self._closed:
                return
            if self._future is not None and not self._future.done():
                # Only a queued task can be cancelled; a running one is discarded on completion.
                self._future.cancel()
            self._future = self._executor.submit(self._run, generation, text)

    def _run(self, generation: int, text: str) -> None:
        with self._lock:
            if generation != self._generation:
                return
        try:
            result = self.pipeline.analyze(text)
        except Exception as exc:
            logger.exception("Debounced analysis failed")
            if self.on_error is not None:
                self.on_error(exc)
            return

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarding stale analysis result (generation %d)", generation)
                return
            self._latest = result
        self.on_result(result)

    def cancel(self) -> None:
        """Drop the pending timer and any queued analysis; a running one is discarded."""

        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._future is not None:
                self._future.cancel()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no timer is pending and no analysis is running."""

        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            with self._lock:
                timer, future = self._timer, self._future
            if timer is not None and timer.is_alive():
                timer.join(remaining)
            elif future is not None and not future.done():
                wait([future], timeout=remaining)
            else:
                return True
            if deadline is not None and time.monotonic() >= deadline:
                with self._lock:
                    timer, future = self._timer, self._future
                timer_busy = timer is not None and timer.is_alive()
                return not timer_busy and (future is None or future.done())

    def close(self) -> None:
        self.cancel()
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "DebouncedAnalysisScheduler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
