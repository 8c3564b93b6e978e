"""Renderings of a validation report: dict, HTML table, plain text, audit JSON."""

from __future__ import annotations

import html
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .models import CheckResult, ResizeOutcome, ValidationReport

logger = logging.getLogger("zipguard")


def result_to_dict(result: CheckResult) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "check": result.name,
        "success": result.success,
        "messages": result.messages,
        "details": list(result.details),
        "diagnostics": [
            {
                "message": diag.message,
                "path": diag.path,
                "line": diag.line,
                "severity": diag.severity,
            }
            for diag in result.diagnostics
        ],
    }
    if result.advisory:
        data["advisory"] = True
    if result.suggested_fix is not None:
        data["has_suggested_fix"] = True
    return data


def resize_to_dict(resize: ResizeOutcome) -> Dict[str, Any]:
    return {
        "size": resize.size,
        "attempts": resize.attempts,
        "quality": resize.quality,
        "width_factor": resize.width_factor,
        "images": {
            path: {
                "resized": info.resized,
                "original": {
                    "width": info.original.width,
                    "height": info.original.height,
                    "size": info.original_size,
                    "format": info.original.format,
                    "density": info.original.density,
                },
                "new": {
                    "width": info.new.width,
                    "height": info.new.height,
                    "size": info.new_size,
                    "format": info.new.format,
                    "density": info.new.density,
                },
            }
            for path, info in resize.images.items()
        },
    }


def report_to_dict(report: ValidationReport, resize: Optional[ResizeOutcome] = None) -> Dict[str, Any]:
    """Serialise a report into the API response shape."""
    data: Dict[str, Any] = {
        "overall_success": report.overall_success,
        "results": [result_to_dict(result) for result in report.results],
    }
    if report.fixed_paths:
        data["fixed_paths"] = list(report.fixed_paths)
    if resize is not None:
        data["resize"] = resize_to_dict(resize)
    return data


def _list_cell(items: Iterable[str]) -> str:
    escaped = [html.escape(item) for item in items]
    if not escaped:
        return ""
    return "<ul>" + "".join(f"<li>{item}</li>" for item in escaped) + "</ul>"


def render_report_html(report: ValidationReport, title: str = "ZIP Validation Report") -> str:
    """Render the report as an HTML table suitable for an email body."""
    rows: List[str] = []
    for result in report.results:
        if result.success:
            status = "PASS"
        elif result.advisory:
            status = "WARN"
        else:
            status = "FAIL"
        rows.append(
            "<tr>"
            f"<td>{html.escape(result.name)}</td>"
            f"<td>{status}</td>"
            f"<td>{_list_cell(result.messages)}</td>"
            f"<td>{_list_cell(result.details)}</td>"
            "</tr>"
        )
    overall = "PASSED" if report.overall_success else "FAILED"
    return (
        f"<h2>{html.escape(title)}</h2>\n"
        f"<p>Overall result: <strong>{overall}</strong></p>\n"
        '<table border="1" cellpadding="4" cellspacing="0">\n'
        "<tr><th>Check</th><th>Status</th><th>Messages</th><th>Details</th></tr>\n"
        + "\n".join(rows)
        + "\n</table>"
    )


def render_error_log(
    report: ValidationReport,
    recipient: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> str:
    """Plain-text listing of every failing check, one numbered issue each."""
    timestamp = timestamp or datetime.now()
    lines = ["--- ZIP VALIDATION REPORT ---", ""]
    if recipient:
        lines.append(f"User Email: {recipient}")
    lines.append(f"Timestamp: {timestamp:%Y-%m-%d %H:%M:%S}")
    lines.extend(["", "--- ERRORS ---", ""])

    failing = [result for result in report.results if not result.success]
    if not failing:
        lines.append("No issues found.")
    for index, result in enumerate(failing, start=1):
        lines.append(f"Issue {index}: {result.name}")
        lines.extend(f"  - {message}" for message in result.messages)
        lines.extend(["", "---"])
    return "\n".join(lines) + "\n"


def write_audit_log(record: Dict[str, Any], directory: Path) -> Path:
    """Write one JSON audit record into ``directory`` and return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    now = datetime.now(timezone.utc)
    path = directory / f"zipguard_{now:%Y%m%dT%H%M%S%fZ}.json"
    payload = {"timestamp": now.isoformat(), **record}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Audit log written to %s", path)
    return path
