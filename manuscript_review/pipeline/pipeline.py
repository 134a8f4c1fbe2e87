"""End-to-end analysis of one document.

The offline checker, every validator and the remote fallback chain run
concurrently on a thread pool; each stage reads the same immutable text and
returns its own findings, so nothing is shared between them except the
config's compiled rule cache.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Sequence

from ..engine import OfflineChecker
from ..models import Finding
from ..remote import (
    ChainResult,
    FallbackChain,
    GrammarProvider,
    LastProviderOutcome,
    ProviderReporter,
    create_provider_chain,
)
from ..validators import NamedValidator, build_validators, run_validator
from .aggregator import AnalysisResult, aggregate
from .config import PipelineConfig

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """Run every detector over a document and aggregate the results."""

    def __init__(
        self,
        config: PipelineConfig | None = None,
        *,
        providers: Sequence[GrammarProvider] | None = None,
        validators: Sequence[NamedValidator] | None = None,
        max_workers: int | None = None,
        reporter: ProviderReporter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config or PipelineConfig()
        if not self.config.use_remote:
            providers = []
        elif providers is None:
            providers = create_provider_chain(timeout=self.config.remote_timeout)
        self.chain = FallbackChain(
            providers,
            attempts=self.config.remote_attempts,
            base_delay=self.config.retry_base_delay,
            reporter=reporter,
            sleep=sleep,
        )
        self.validators = list(validators) if validators is not None else build_validators(self.config)
        self.offline = OfflineChecker(self.config)
        self.max_workers = max_workers or len(self.validators) + 2
        self._executor: ThreadPoolExecutor | None = None
        self._pool_lock = threading.Lock()

    @property
    def remote_enabled(self) -> bool:
        return bool(self.chain.provider_order())

    def _pool(self) -> ThreadPoolExecutor:
        with self._pool_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers, thread_name_prefix="manuscript-review"
                )
            return self._executor

    def _check_remote(self, text: str) -> ChainResult:
        try:
            return self.chain.check(text, language=self.config.language)
        except Exception:
            logger.exception("Remote checking failed unexpectedly; using offline checking only")
            return ChainResult(findings=[], outcome=LastProviderOutcome.offline())

    def analyze(self, text: str) -> AnalysisResult:
        if not text.strip():
            return aggregate(
                text, primary=[], outcome=LastProviderOutcome.offline(), config=self.config
            )

        started = time.perf_counter()
        executor = self._pool()
        offline_future = executor.submit(self.offline.check, text)
        remote_future: Future[ChainResult] | None = None
        if self.remote_enabled:
            remote_future = executor.submit(self._check_remote, text)
        validator_futures = [
            executor.submit(run_validator, validator, text) for validator in self.validators
        ]

        offline_findings = offline_future.result()
        validator_findings: list[Finding] = []
        for future in validator_futures:
            validator_findings.extend(future.result())

        if remote_future is not None:
            chain_result = remote_future.result()
        else:
            chain_result = ChainResult(findings=[], outcome=LastProviderOutcome.offline())

        if chain_result.outcome.remote_succeeded:
            primary, supplementary = chain_result.findings, offline_findings
        else:
            primary, supplementary = offline_findings, []

        result = aggregate(
            text,
            primary=primary,
            supplementary=supplementary,
            validator_findings=validator_findings,
            outcome=chain_result.outcome,
            config=self.config,
        )
        logger.info(
            "Analysed %d characters in %.2fs: %d suggestion(s) via %s",
            len(text),
            time.perf_counter() - started,
            len(result.suggestions),
            chain_result.outcome.provider or "offline engine",
        )
        return result

    def close(self) -> None:
        with self._pool_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        self.chain.close()

    def __enter__(self) -> "AnalysisPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
