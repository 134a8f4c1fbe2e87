"""Academic manuscript review: offline rules, validators and remote grammar checks.

The most common entrypoints are re-exported lazily so that
``import manuscript_review`` stays cheap:

    from manuscript_review import AnalysisPipeline, PipelineConfig
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .models import Finding, Suggestion
    from .pipeline import AnalysisPipeline, AnalysisResult, DebouncedAnalysisScheduler, PipelineConfig

_LAZY_EXPORTS = {
    "AnalysisPipeline": ".pipeline",
    "AnalysisResult": ".pipeline",
    "DebouncedAnalysisScheduler": ".pipeline",
    "PipelineConfig": ".pipeline",
    "Finding": ".models",
    "Suggestion": ".models",
}

__all__ = [
    "AnalysisPipeline",
    "AnalysisResult",
    "DebouncedAnalysisScheduler",
    "Finding",
    "PipelineConfig",
    "Suggestion",
]


def __getattr__(name: str) -> Any:
    module_name = _LAZY_EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(module_name, __name__), name)
