"""Collapse overlapping findings produced by the offline engine."""

from __future__ import annotations

from typing import Iterable

from ..models import Finding


def spans_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and b_start < a_end


def resolve_overlaps(findings: Iterable[Finding]) -> list[Finding]:
    """Keep one finding per overlapping cluster.

    Findings are visited in ``(start, end)`` order (stable, so equal spans
    stay in discovery order). A finding that overlaps the last kept one
    replaces it only when its severity is strictly higher.
    """

    ordered = sorted(findings, key=lambda finding: (finding.start_offset, finding.end_offset))
    kept: list[Finding] = []
    for finding in ordered:
        if kept and kept[-1].overlaps(finding):
            if finding.severity.rank > kept[-1].severity.rank:
                kept[-1] = finding
            continue
        kept.append(finding)
    return kept
