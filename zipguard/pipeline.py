"""Staged validation pipeline: intake, resize, inline, checks, report."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .checks.layout import NAME as LAYOUT_NAME
from .config import ValidationConfig
from .errors import ArchiveError
from .images import validate_images
from .inliner import InlineResult, inline_external_css
from .intake import read_archive
from .models import Archive, CheckResult, ResizeOutcome, ValidationReport
from .protocols import Notifier, ReportStore, StylesheetFetcher
from .report import render_report_html, report_to_dict, write_audit_log
from .resize import resize_images
from .rules import run_checks

logger = logging.getLogger("zipguard")

FAILURE_SUBJECT = "ZIP Extraction Failed"
PUBLISH_PREFIX = "extracted"


@dataclass
class PipelineResult:
    """Everything produced by one successful pass through the stages."""

    report: ValidationReport
    archive: Archive
    inline: InlineResult
    resize: Optional[ResizeOutcome] = None


@dataclass
class PipelineOutcome:
    """Caller-facing outcome of :meth:`ValidationPipeline.process`."""

    success: bool
    report: Optional[ValidationReport] = None
    error: Optional[str] = None
    published: List[str] = field(default_factory=list)
    resize: Optional[ResizeOutcome] = None
    audit_path: Optional[str] = None

    def to_dict(self) -> dict:
        data: dict = {"success": self.success}
        if self.error is not None:
            data["error"] = self.error
        if self.report is not None:
            data.update(report_to_dict(self.report, self.resize))
        if self.published:
            data["published"] = list(self.published)
        return data


def _email_body(content: str) -> str:
    return (
        "<p>Dear Customer,</p>\n"
        "<p>Unfortunately, your ZIP extraction request has failed due to validation errors.</p>\n"
        f"{content}\n"
        "<p>Please try again or contact support for further assistance.</p>"
    )


class ValidationPipeline:
    """Runs an archive through every stage with injected collaborators."""

    def __init__(
        self,
        config: Optional[ValidationConfig] = None,
        fetcher: Optional[StylesheetFetcher] = None,
        notifier: Optional[Notifier] = None,
        store: Optional[ReportStore] = None,
    ) -> None:
        self.config = config or ValidationConfig()
        self.fetcher = fetcher
        self.notifier = notifier
        self.store = store

    def _validate(self, archive: Archive, inline_result: CheckResult) -> List[CheckResult]:
        results = [inline_result]
        results.extend(run_checks(archive, self.config))
        results.extend(validate_images(archive, self.config))
        return results

    def run(self, data: bytes) -> PipelineResult:
        """Run all stages; fatal ``ArchiveError`` subclasses propagate."""
        archive = read_archive(data)

        resize: Optional[ResizeOutcome] = None
        if len(data) > self.config.size_budget:
            logger.info(
                "ZIP size %.2f KB exceeds %d KB, resizing images.",
                len(data) / 1024,
                self.config.size_budget // 1024,
            )
            resize = resize_images(archive, self.config)
            archive = resize.archive

        inline = inline_external_css(archive, self.fetcher, self.config)
        archive = inline.archive
        results = self._validate(archive, inline.result)
        report = ValidationReport(results=tuple(results))

        layout = report.get(LAYOUT_NAME)
        if self.config.apply_fixes and layout is not None and layout.suggested_fix is not None:
            html_entry = archive.html_entry()
            logger.info("Applying suggested fix to %s and re-validating.", html_entry.path)
            archive = archive.replace_entry(html_entry.path, layout.suggested_fix.encode("utf-8"))
            results = self._validate(archive, inline.result)
            report = ValidationReport(results=tuple(results), fixed_paths=(html_entry.path,))

        logger.info("Validation %s.", "passed" if report.overall_success else "failed")
        return PipelineResult(report=report, archive=archive, inline=inline, resize=resize)

    def _notify(self, recipient: Optional[str], body: str) -> None:
        if self.notifier is None or not recipient:
            return
        try:
            self.notifier.send(recipient, FAILURE_SUBJECT, _email_body(body))
            logger.info("Error notification email sent to %s", recipient)
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Failed to send error notification email: %s", exc)

    def _publish(self, archive: Archive) -> List[str]:
        if self.store is None:
            return []
        entry = archive.html_entry()
        try:
            url = self.store.upload(f"{PUBLISH_PREFIX}/{entry.name}", entry.content, "text/html")
        except Exception as exc:  # pylint: disable=broad-except
            logger.error("Failed to upload %s: %s", entry.name, exc)
            return []
        logger.info("Published %s", entry.path)
        return [url]

    def _audit(self, outcome: PipelineOutcome, recipient: Optional[str]) -> None:
        if self.config.audit_dir is None:
            return
        record = outcome.to_dict()
        record["recipient"] = recipient
        try:
            outcome.audit_path = str(write_audit_log(record, self.config.audit_dir))
        except OSError as exc:
            logger.error("Failed to write audit log: %s", exc)

    def process(self, data: bytes, recipient: Optional[str] = None) -> PipelineOutcome:
        """Run the pipeline and deliver its result to the collaborators."""
        try:
            result = self.run(data)
        except ArchiveError as exc:
            logger.error("Error extracting ZIP: %s", exc)
            outcome = PipelineOutcome(success=False, error=str(exc))
            self._notify(recipient, f"<p><strong>Error Details:</strong><br/>{html.escape(str(exc))}</p>")
            self._audit(outcome, recipient)
            return outcome

        report = result.report
        outcome = PipelineOutcome(success=report.overall_success, report=report, resize=result.resize)
        if report.overall_success:
            outcome.published = self._publish(result.archive)
        else:
            self._notify(recipient, render_report_html(report))
        self._audit(outcome, recipient)
        return outcome
