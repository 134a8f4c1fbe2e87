from __future__ import annotations

import csv
import io
import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import manuscript_review.cli as cli_mod
from manuscript_review.cli import OFFLINE_NOTICE, main
from manuscript_review.models import Finding, FindingSource, IssueType, Severity
from manuscript_review.pipeline import AnalysisResult, PipelineConfig, aggregate
from manuscript_review.remote import LastProviderOutcome, ProviderAttempt, ProviderStatus, TransientProviderError
from manuscript_review.report_utils import (
    _format_suggestions,
    build_report_csv,
    build_report_json,
    build_report_markdown,
)

DOCUMENT = "Their are many mistake in this sentance.\n"


def _result(outcome: LastProviderOutcome | None = None) -> AnalysisResult:
    finding = Finding(
        rule_id="gram-001",
        source=FindingSource.OFFLINE,
        start_offset=0,
        end_offset=9,
        original="Their are",
        message="Use there | not their.",
        suggestions=["There are", "They are", "Their is", "There is"],
        type=IssueType.GRAMMAR,
        severity=Severity.ERROR,
        category="grammar",
    )
    return aggregate(
        DOCUMENT,
        primary=[finding],
        outcome=outcome or LastProviderOutcome.offline(),
        config=PipelineConfig(use_remote=False),
    )


@pytest.fixture
def paper(tmp_path: Path) -> Path:
    path = tmp_path / "paper.txt"
    path.write_text(DOCUMENT, encoding="utf-8")
    return path


def test_format_suggestions() -> None:
    assert _format_suggestions([]) == "—"
    assert _format_suggestions(["a", "b"]) == "a, b"
    assert _format_suggestions(["a", "b", "c", "d", "e"]) == "a, b, c (+2 more)"


def test_markdown_report() -> None:
    markdown = build_report_markdown(_result(), title="Report")

    assert markdown.startswith("# Report")
    assert "- Total suggestions: 1" in markdown
    assert "- Remote checking unavailable: offline rules only" in markdown
    assert "- Grammar: 1" in markdown
    assert "- error: 1" in markdown
    assert "| 1 | 1 | `gram-001` | Grammar | error | Their are | Use there \\| not their. " in markdown
    assert "There are, They are, Their is (+1 more)" in markdown


def test_markdown_report_without_suggestions() -> None:
    empty = AnalysisResult(outcome=LastProviderOutcome(provider="languagetool", status=ProviderStatus.SUCCESS))

    markdown = build_report_markdown(empty)

    assert "- Grammar provider: languagetool" in markdown
    assert markdown.endswith("_No issues found._")


def test_csv_report() -> None:
    rows = build_report_csv(_result())

    assert rows[0][:3] == ["ID", "Line", "Column"]
    assert rows[1][0] == "0001-gram-001"
    assert rows[1][1:5] == ["1", "1", "0", "9"]
    assert rows[1][6:10] == ["offline", "grammar", "error", "grammar"]


def test_json_report_includes_outcome() -> None:
    outcome = LastProviderOutcome.offline(
        (ProviderAttempt(provider="languagetool", status=ProviderStatus.EXHAUSTED, error="HTTP 503"),)
    )

    payload = json.loads(build_report_json(_result(outcome)))

    assert payload["outcome"]["offline_only"] is True
    assert payload["outcome"]["attempts"] == [
        {"provider": "languagetool", "status": "exhausted", "error": "HTTP 503"}
    ]
    assert payload["statistics"]["total"] == 1
    suggestion = payload["suggestions"][0]
    assert suggestion["id"] == "0001-gram-001"
    assert suggestion["type"] == "grammar"
    assert suggestion["start_line"] == 1


def test_cli_markdown_to_stdout(paper: Path, capsys) -> None:
    assert main([str(paper), "--offline"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("# Manuscript Review Report: paper.txt")
    assert "`gram-001`" in out


def test_cli_csv_and_json(paper: Path, capsys) -> None:
    assert main([str(paper), "--offline", "--format", "csv", "--severities", "error"]) == 0
    rows = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert rows[0][0] == "ID"
    assert [row[5] for row in rows[1:]][0] == "gram-001"
    assert all(row[8] == "error" for row in rows[1:])

    assert main([str(paper), "--offline", "--format", "json", "--max-suggestions", "1"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["suggestions"]) == 1


def test_cli_writes_output_file(paper: Path, tmp_path: Path, capsys) -> None:
    target = tmp_path / "reports" / "paper.md"

    assert main([str(paper), "--offline", "-o", str(target)]) == 0

    assert target.read_text(encoding="utf-8").startswith("# Manuscript Review Report")
    assert "Wrote" in capsys.readouterr().err


def test_cli_missing_file_returns_error(tmp_path: Path, capsys) -> None:
    assert main([str(tmp_path / "absent.txt"), "--offline"]) == 1
    assert "Could not read" in capsys.readouterr().err


@pytest.mark.parametrize(
    "extra",
    [["--categories", "poetry"], ["--citation-style", "vancouver"], ["--primary", "nope"]],
)
def test_cli_invalid_configuration_returns_error(paper: Path, capsys, extra) -> None:
    assert main([str(paper), *extra]) == 1
    assert "Invalid configuration" in capsys.readouterr().err


class FailingProvider:
    name = "failing"

    def check(self, text: str, *, language: str) -> list[Finding]:
        raise TransientProviderError("HTTP 503", status_code=503)


def test_cli_reports_offline_fallback(paper: Path, monkeypatch, capsys) -> None:
    monkeypatch.setattr(cli_mod, "create_provider_chain", lambda **kwargs: [FailingProvider()])
    monkeypatch.setenv("MANUSCRIPT_REMOTE_ATTEMPTS", "1")

    assert main([str(paper)]) == 0

    captured = capsys.readouterr()
    assert OFFLINE_NOTICE in captured.err
    assert "- Remote checking unavailable: offline rules only" in captured.out
