"""Link hygiene: stylesheet references, hardcoded URLs, URL length, widths."""

from __future__ import annotations

import re
from typing import List

from ..config import ValidationConfig
from ..models import Archive, CheckResult, Diagnostic
from ..utils import is_remote_url
from .common import iter_lines, parse_failure, parse_html

NAME = "Link Hygiene Check"

MAX_URL_LENGTH = 1024
ALLOWED_HREF_PREFIXES = ("http://", "https://", "mailto:", "tel:", "#")
LOCAL_CSS_PATH = re.compile(r"^[a-zA-Z0-9_\-./]+\.css$")
HREF = re.compile(r"""href\s*=\s*["']([^"']+)["']""", re.IGNORECASE)
LONG_URL = re.compile(r"""https?://[^\s"'<>]+""", re.IGNORECASE)
WIDTH_ATTR = re.compile(r"""width\s*=\s*["']?(\d+)(?:px)?["']?""", re.IGNORECASE)


def check_link_hygiene(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    for entry in archive.html_entries():
        html = entry.text()
        try:
            soup = parse_html(html)
        except Exception as exc:  # pylint: disable=broad-except
            findings.append(parse_failure(entry, exc))
            continue

        for link in soup.find_all("link", rel="stylesheet"):
            href = (link.get("href") or "").strip()
            if not href:
                continue
            if is_remote_url(href):
                findings.append(
                    Diagnostic(f"External CSS: {href}", path=entry.path, line=link.sourceline)
                )
            elif not LOCAL_CSS_PATH.match(href):
                findings.append(
                    Diagnostic(f'Invalid CSS path: "{href}"', path=entry.path, line=link.sourceline)
                )

        for line_no, line in iter_lines(html):
            for match in HREF.finditer(line):
                url = match.group(1).strip()
                if not url.lower().startswith(ALLOWED_HREF_PREFIXES):
                    findings.append(
                        Diagnostic(f'Hardcoded/relative URL: "{url}"', path=entry.path, line=line_no)
                    )
            for match in LONG_URL.finditer(line):
                url = match.group(0)
                if len(url) > MAX_URL_LENGTH:
                    findings.append(
                        Diagnostic(
                            f"Long URL ({len(url)} chars): {url[:100]}...",
                            path=entry.path,
                            line=line_no,
                        )
                    )
            for match in WIDTH_ATTR.finditer(line):
                value = int(match.group(1))
                if value > config.max_image_width:
                    findings.append(
                        Diagnostic(
                            f"Width >{config.max_image_width}px: {match.group(0)}",
                            path=entry.path,
                            line=line_no,
                        )
                    )
    return CheckResult.from_findings(NAME, findings, "All links and widths look publishable")
