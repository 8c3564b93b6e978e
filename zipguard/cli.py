"""Command-line entry point for validating HTML email archives."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Sequence

import requests

from .config import ValidationConfig
from .fetch import download_archive
from .pipeline import PipelineOutcome, ValidationPipeline
from .report import render_report_html
from .storage import DirectoryReportStore

logger = logging.getLogger("zipguard.cli")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_FATAL = 2


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("check", *argv)


def _add_check_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("archives", nargs="+", help="ZIP archives (or URLs with --url) to validate")
    parser.add_argument(
        "--url",
        action="store_true",
        help="Treat the arguments as URLs and download each archive first",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON instead of a text summary",
    )
    parser.add_argument(
        "--html-report",
        type=Path,
        default=None,
        help="Write the HTML report table to this path",
    )
    parser.add_argument(
        "--apply-fixes",
        action="store_true",
        help="Adopt the repaired HTML suggested by the layout check and re-validate",
    )
    parser.add_argument(
        "--advisory-warnings",
        action="store_true",
        help="Do not fail the run on suspicious-pattern warnings",
    )
    parser.add_argument(
        "--link-hygiene",
        action="store_true",
        help="Also run the link hygiene check",
    )
    parser.add_argument(
        "--budget-kb",
        type=int,
        default=None,
        help="Archive size budget in KB (default: 300)",
    )
    parser.add_argument(
        "--audit-dir",
        type=Path,
        default=None,
        help="Directory where a JSON audit record is written per archive",
    )
    parser.add_argument(
        "--publish-dir",
        type=Path,
        default=None,
        help="Directory where the HTML of passing archives is published",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Validate ZIP packages of HTML email templates before publishing.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Validate one or more ZIP archives")
    _add_check_arguments(check_parser)

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ValidationConfig:
    config = ValidationConfig.from_env()
    if args.budget_kb is not None:
        config.size_budget = args.budget_kb * 1024
    if args.audit_dir is not None:
        config.audit_dir = args.audit_dir.expanduser().resolve()
    config.apply_fixes = args.apply_fixes
    config.advisory_warnings = args.advisory_warnings
    config.link_hygiene = args.link_hygiene
    return config


def _html_report_path(base: Path, index: int, total: int) -> Path:
    if total == 1:
        return base
    return base.with_name(f"{base.stem}_{index}{base.suffix}")


def _print_summary(source: str, outcome: PipelineOutcome) -> None:
    print(f"== {source}")
    if outcome.error is not None:
        print(f"  [ERROR] {outcome.error}")
        return
    for result in outcome.report.results:
        if result.success:
            status = "PASS"
        elif result.advisory:
            status = "WARN"
        else:
            status = "FAIL"
        print(f"  [{status}] {result.name}")
        for message in result.messages:
            print(f"      {message}")
    print(f"  Overall: {'PASSED' if outcome.success else 'FAILED'}")


def _run_check(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    config = build_config(args)
    store = DirectoryReportStore(args.publish_dir) if args.publish_dir is not None else None
    pipeline = ValidationPipeline(config, store=store)
    overall_start = time.perf_counter()
    exit_code = EXIT_OK
    payloads: List[dict] = []

    for index, source in enumerate(args.archives, start=1):
        try:
            if args.url:
                data = download_archive(source, timeout=config.fetch_timeout)
            else:
                data = Path(source).expanduser().read_bytes()
        except (OSError, ValueError, requests.RequestException) as exc:
            logger.error("Could not read %s: %s", source, exc)
            if args.json:
                payloads.append({"source": source, "success": False, "error": str(exc)})
            else:
                print(f"== {source}\n  [ERROR] {exc}")
            exit_code = EXIT_FATAL
            continue

        outcome = pipeline.process(data)
        if outcome.error is not None:
            exit_code = EXIT_FATAL
        elif not outcome.success and exit_code == EXIT_OK:
            exit_code = EXIT_FAILED

        if args.html_report is not None and outcome.report is not None:
            path = _html_report_path(args.html_report, index, len(args.archives))
            path.parent.mkdir(parents=True, exist_ok=True)
            rendered = render_report_html(outcome.report, title=f"ZIP Validation Report: {source}")
            path.write_text(rendered, encoding="utf-8")
            logger.info("HTML report written to %s", path)

        if args.json:
            payloads.append({"source": source, **outcome.to_dict()})
        else:
            _print_summary(source, outcome)

    if args.json:
        output = payloads[0] if len(payloads) == 1 else payloads
        sys.stdout.write(json.dumps(output, indent=2) + "\n")
        sys.stdout.flush()

    logger.info(
        "Finished %d archive(s) in %.2fs",
        len(args.archives),
        time.perf_counter() - overall_start,
    )
    return exit_code


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    return _run_check(args)


if __name__ == "__main__":
    sys.exit(main())
