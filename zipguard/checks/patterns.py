"""Catch-all scan for structurally risky markup and CSS."""

from __future__ import annotations

import re
from dataclasses import replace
from typing import List

from ..config import ValidationConfig
from ..models import WARNING, Archive, CheckResult, Diagnostic
from .common import iter_lines

NAME = "Catch-all Suspicious Patterns Check"

SUSPICIOUS_PATTERNS = [
    (
        re.compile(r"""style\s*=\s*["'][^"']*z-index\s*:""", re.IGNORECASE),
        "Use of z-index (complex positioning)",
    ),
    (
        re.compile(r"""\son[a-z]+\s*=""", re.IGNORECASE),
        "Inline event handler detected (e.g. onclick, onload)",
    ),
    (
        re.compile(r"base64,", re.IGNORECASE),
        "Base64-encoded resource detected (large inline images or files)",
    ),
    (
        re.compile(r"<\s*iframe[^>]*>", re.IGNORECASE),
        "Iframe detected (may be used for embeds or tracking)",
    ),
    (
        re.compile(r"visibility\s*:", re.IGNORECASE),
        "Use of CSS visibility property (may hide content)",
    ),
    (
        re.compile(r"text-indent\s*:\s*-\d+", re.IGNORECASE),
        "Negative text indent (may be used for hiding text)",
    ),
    (
        re.compile(r"display\s*:\s*none", re.IGNORECASE),
        "Display:none used (may hide content)",
    ),
    (
        re.compile(r"font-size\s*:\s*0(?![.\d])", re.IGNORECASE),
        "Font-size:0 used (invisible text)",
    ),
    (
        re.compile(r"""<\s*link[^>]+rel\s*=\s*["']?import["']?""", re.IGNORECASE),
        "HTML Imports (deprecated)",
    ),
    (
        re.compile(r"<\s*object[^>]*>", re.IGNORECASE),
        "Object tag detected (legacy plugin)",
    ),
    (
        re.compile(r"(?<![\w-])filter\s*:", re.IGNORECASE),
        "CSS filter used (may create visual tricks)",
    ),
]


def check_suspicious_patterns(archive: Archive, config: ValidationConfig) -> CheckResult:
    warnings: List[Diagnostic] = []
    for entry in archive.html_entries():
        for line_no, line in iter_lines(entry.text()):
            for pattern, reason in SUSPICIOUS_PATTERNS:
                if pattern.search(line):
                    warnings.append(
                        Diagnostic(reason, path=entry.path, line=line_no, severity=WARNING)
                    )
    result = CheckResult.from_findings(NAME, warnings, "No suspicious patterns found")
    if config.advisory_warnings:
        result = replace(result, advisory=True)
    return result
