"""Background image and background colour restrictions."""

from __future__ import annotations

import re
from typing import List

from ..config import ValidationConfig
from ..models import Archive, ArchiveEntry, CheckResult, Diagnostic
from .common import iter_lines, parse_failure, parse_html

NAME = "Background Styles Check"

BACKGROUND_IMAGE = re.compile(r"background-image\s*:", re.IGNORECASE)
BACKGROUND_COLOR = re.compile(r"background-color\s*:", re.IGNORECASE)


def _scan_css(text: str, path: str, first_line: int = 1) -> List[Diagnostic]:
    findings: List[Diagnostic] = []
    for line_no, line in iter_lines(text):
        line_no += first_line - 1
        if BACKGROUND_IMAGE.search(line):
            findings.append(Diagnostic("Background image found", path=path, line=line_no))
        if BACKGROUND_COLOR.search(line):
            findings.append(Diagnostic("Background color used", path=path, line=line_no))
    return findings


def _check_css(entry: ArchiveEntry) -> List[Diagnostic]:
    return _scan_css(entry.text(), entry.path)


def _inside_table(element) -> bool:
    return element.find_parent("table") is not None


def _ancestor_has_background_color(element) -> bool:
    for parent in element.find_parents():
        style = parent.get("style") if hasattr(parent, "get") else None
        if style and BACKGROUND_COLOR.search(style):
            return True
    return False


def _check_html(entry: ArchiveEntry) -> List[Diagnostic]:
    try:
        soup = parse_html(entry.text())
    except Exception as exc:  # pylint: disable=broad-except
        return [parse_failure(entry, exc)]

    findings: List[Diagnostic] = []
    # Inlined stylesheets no longer exist as CSS entries.
    for block in soup.find_all("style"):
        findings.extend(_scan_css(block.get_text(), entry.path, block.sourceline or 1))
    for element in soup.find_all(style=True):
        style = element.get("style") or ""
        line = element.sourceline
        if BACKGROUND_IMAGE.search(style):
            findings.append(Diagnostic("Inline background image", path=entry.path, line=line))
        if not BACKGROUND_COLOR.search(style):
            continue
        if _ancestor_has_background_color(element):
            findings.append(
                Diagnostic(f"Nested background-color on <{element.name}>", path=entry.path, line=line)
            )
        if not _inside_table(element):
            findings.append(
                Diagnostic(
                    f"Background-color outside <table> on <{element.name}>",
                    path=entry.path,
                    line=line,
                )
            )
    return findings


def check_background_styles(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    for entry in archive.css_entries():
        findings.extend(_check_css(entry))
    for entry in archive.html_entries():
        findings.extend(_check_html(entry))
    return CheckResult.from_findings(NAME, findings, "No background styling violations found")
