"""Disallow scripts, plugins and executable references."""

from __future__ import annotations

import re
from typing import List

from ..config import ValidationConfig
from ..models import Archive, CheckResult, Diagnostic
from .common import iter_lines

NAME = "Scripts and Plugins Check"

DISALLOWED_TAGS = ("script", "embed", "object", "iframe", "applet")
DISALLOWED_FILE_EXTENSIONS = (".js", ".swf", ".jar", ".exe", ".dll", ".vbs")
DISALLOWED_KEYWORDS = (
    "javascript:",
    "vbscript:",
    "data:text/html",
    "shockwave-flash",
    "flashvars",
)

TAG_PATTERNS = [(tag, re.compile(rf"<\s*{tag}\b", re.IGNORECASE)) for tag in DISALLOWED_TAGS]
FILE_REFERENCE = re.compile(
    r"""(?:href|src)\s*=\s*["'][^"']*("""
    + "|".join(re.escape(ext) for ext in DISALLOWED_FILE_EXTENSIONS)
    + r""")(?:[?#][^"']*)?["']""",
    re.IGNORECASE,
)


def check_scripts_and_plugins(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []

    for entry in archive.files():
        if f".{entry.extension}" in DISALLOWED_FILE_EXTENSIONS:
            location = entry.directory + "/" if entry.directory else "the archive root"
            findings.append(Diagnostic(f"Disallowed file {entry.name} found in {location}"))

    for entry in archive.html_entries():
        for line_number, line in iter_lines(entry.text()):
            for tag, pattern in TAG_PATTERNS:
                if pattern.search(line):
                    findings.append(
                        Diagnostic(f'Disallowed tag "<{tag}>" found', path=entry.path, line=line_number)
                    )
            lowered = line.lower()
            for keyword in DISALLOWED_KEYWORDS:
                if keyword in lowered:
                    findings.append(
                        Diagnostic(f'Disallowed keyword "{keyword}" found', path=entry.path, line=line_number)
                    )
            match = FILE_REFERENCE.search(line)
            if match:
                findings.append(
                    Diagnostic(
                        f'Suspicious file reference ({match.group(1).lower()}) found',
                        path=entry.path,
                        line=line_number,
                    )
                )

    return CheckResult.from_findings(NAME, findings, "No scripts or plugins found")
