"""Command-line entrypoint: analyse one manuscript and write a report."""

from __future__ import annotations

import argparse
import csv
import io
import logging
import sys
from pathlib import Path
from typing import Any, Iterable, Optional

from .models import AcademicField, CitationStyle, DocumentType, IssueType, RuleCategory, Severity
from .pipeline import AnalysisPipeline, AnalysisResult, PipelineConfig
from .remote import available_providers, create_provider_chain
from .report_utils import build_report_csv, build_report_json, build_report_markdown

logger = logging.getLogger(__name__)

OFFLINE_NOTICE = "Remote grammar checking unavailable; suggestions come from the offline rules only."


def _csv_names(value: str) -> list[str]:
    return [chunk.strip().lower() for chunk in value.split(",") if chunk.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="manuscript-review",
        description="Check an academic manuscript for grammar, style, citation, statistics and structure issues.",
    )
    parser.add_argument(
        "document",
        help="Plain-text or Markdown file to analyse ('-' reads standard input).",
    )
    parser.add_argument(
        "--format",
        choices=["markdown", "csv", "json"],
        default="markdown",
        help="Report format (default: markdown).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the report to this path instead of standard output.",
    )
    parser.add_argument("--language", default=None, help="Language tag such as en-US or en-GB.")
    parser.add_argument(
        "--document-type",
        choices=DocumentType.all_values(),
        default=None,
        help="Document type used by the structure validator (auto-detected when omitted).",
    )
    parser.add_argument(
        "--citation-style",
        default=None,
        help=f"Citation style ({', '.join(CitationStyle.all_values())}); auto-detected when omitted.",
    )
    parser.add_argument(
        "--field",
        default=None,
        help=f"Academic field ({', '.join(AcademicField.all_values())}); auto-detected when omitted.",
    )
    parser.add_argument(
        "--categories",
        type=_csv_names,
        default=None,
        help=f"Comma separated categories to report ({', '.join(RuleCategory.all_values())}).",
    )
    parser.add_argument(
        "--types",
        type=_csv_names,
        default=None,
        help=f"Comma separated issue types to report ({', '.join(IssueType.all_values())}).",
    )
    parser.add_argument(
        "--severities",
        type=_csv_names,
        default=None,
        help=f"Comma separated severities to report ({', '.join(Severity.all_values())}).",
    )
    parser.add_argument("--max-suggestions", type=int, default=None, help="Maximum number of suggestions.")
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Skip remote grammar providers and use the offline rules only.",
    )
    parser.add_argument(
        "--primary",
        default=None,
        help=f"Primary grammar provider ({', '.join(available_providers())}); overrides GRAMMAR_PRIMARY.",
    )
    parser.add_argument(
        "--fallback",
        type=_csv_names,
        default=None,
        help="Comma separated fallback providers; overrides GRAMMAR_FALLBACK.",
    )
    parser.add_argument(
        "--dictionary",
        action="store_true",
        help="Also flag words unknown to the spelling dictionary.",
    )
    parser.add_argument(
        "--ignore-word",
        action="append",
        dest="ignored_words",
        help="Add a word to the dictionary ignore list (can be specified multiple times).",
    )
    parser.add_argument("--dotenv", type=Path, default=None, help="Path to a .env file with settings and API keys.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING).",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Shortcut for --log-level INFO.")
    return parser


def _config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.language:
        overrides["language"] = args.language
    if args.document_type:
        overrides["document_type"] = args.document_type
    if args.citation_style:
        overrides["citation_style"] = CitationStyle.parse(args.citation_style)
    if args.field:
        overrides["academic_field"] = AcademicField.parse(args.field)
    if args.categories:
        overrides["enabled_categories"] = args.categories
    if args.types:
        overrides["enabled_types"] = args.types
    if args.severities:
        overrides["enabled_severities"] = args.severities
    if args.max_suggestions is not None:
        overrides["max_suggestions"] = args.max_suggestions
    if args.offline:
        overrides["use_remote"] = False
    if args.dictionary:
        overrides["dictionary_spelling"] = True
    if args.ignored_words:
        overrides["ignored_words"] = set(args.ignored_words)
    return overrides


def _read_document(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def render_report(result: AnalysisResult, report_format: str, *, title: str) -> str:
    if report_format == "json":
        return build_report_json(result)
    if report_format == "csv":
        buffer = io.StringIO()
        csv.writer(buffer).writerows(build_report_csv(result))
        return buffer.getvalue()
    return build_report_markdown(result, title=title)


def run_cli(args: argparse.Namespace) -> int:
    try:
        text = _read_document(args.document)
    except OSError as exc:
        print(f"Could not read {args.document}: {exc}", file=sys.stderr)
        return 1

    try:
        config = PipelineConfig.from_env(args.dotenv, **_config_overrides(args))
        providers = None
        if config.use_remote:
            providers = create_provider_chain(
                primary=args.primary,
                fallbacks=args.fallback,
                dotenv_path=args.dotenv,
                timeout=config.remote_timeout,
            )
    except ValueError as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    with AnalysisPipeline(config, providers=providers) as pipeline:
        result = pipeline.analyze(text)

    if config.use_remote and result.offline_only:
        print(OFFLINE_NOTICE, file=sys.stderr)

    title = "Manuscript Review Report"
    if args.document != "-":
        title = f"{title}: {Path(args.document).name}"
    report = render_report(result, args.format, title=title)

    if args.output is None:
        sys.stdout.write(report)
        if not report.endswith("\n"):
            sys.stdout.write("\n")
    else:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(report, encoding="utf-8")
        print(f"Wrote {len(result.suggestions)} suggestion(s) to {args.output}", file=sys.stderr)
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    level = "INFO" if args.verbose and args.log_level == "WARNING" else args.log_level
    logging.basicConfig(level=getattr(logging, level))
    return run_cli(args)


if __name__ == "__main__":
    raise SystemExit(main())
