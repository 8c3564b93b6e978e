from __future__ import annotations

import json
from datetime import datetime

from zipguard.models import CheckResult, Diagnostic, ValidationReport
from zipguard.report import render_error_log, render_report_html, report_to_dict, write_audit_log


def _report() -> ValidationReport:
    return ValidationReport(
        results=(
            CheckResult.from_findings("Scripts and Plugins Check", [], "No scripts or plugins found"),
            CheckResult.from_findings(
                "Embedded Video Check",
                [Diagnostic("<video> tag detected.", path="index.html", line=7)],
                "No embedded videos found",
                details=("checked 1 file",),
            ),
        )
    )


def test_report_to_dict_preserves_order_and_messages() -> None:
    data = report_to_dict(_report())
    assert data["overall_success"] is False
    assert [item["check"] for item in data["results"]] == [
        "Scripts and Plugins Check",
        "Embedded Video Check",
    ]
    video = data["results"][1]
    assert video["messages"] == ["<video> tag detected. in index.html (line 7)"]
    assert video["diagnostics"][0]["line"] == 7
    assert video["details"] == ["checked 1 file"]
    json.dumps(data)


def test_render_report_html_escapes_messages() -> None:
    rendered = render_report_html(_report())
    assert "<th>Check</th><th>Status</th><th>Messages</th><th>Details</th>" in rendered
    assert "&lt;video&gt; tag detected." in rendered
    assert "<td>FAIL</td>" in rendered
    assert "<td>PASS</td>" in rendered
    assert "Overall result: <strong>FAILED</strong>" in rendered


def test_render_error_log_lists_failing_checks_only() -> None:
    log = render_error_log(_report(), recipient="user@example.com", timestamp=datetime(2024, 1, 2, 3, 4, 5))
    assert log.startswith("--- ZIP VALIDATION REPORT ---\n")
    assert "User Email: user@example.com" in log
    assert "Timestamp: 2024-01-02 03:04:05" in log
    assert "Issue 1: Embedded Video Check" in log
    assert "Scripts and Plugins Check" not in log


def test_write_audit_log_creates_directory(tmp_path) -> None:
    path = write_audit_log({"success": True}, tmp_path / "audit")
    assert path.exists()
    record = json.loads(path.read_text(encoding="utf-8"))
    assert record["success"] is True
    assert "timestamp" in record
