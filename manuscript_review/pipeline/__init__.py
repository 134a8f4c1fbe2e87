"""Configuration, aggregation and orchestration of an analysis run."""

from __future__ import annotations

from .aggregator import AnalysisResult, aggregate, merge_findings, to_suggestions
from .config import PipelineConfig
from .pipeline import AnalysisPipeline
from .scheduler import DebouncedAnalysisScheduler

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "DebouncedAnalysisScheduler",
    "PipelineConfig",
    "aggregate",
    "merge_findings",
    "to_suggestions",
]
