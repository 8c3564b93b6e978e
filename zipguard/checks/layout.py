"""Map tags, float/position rules, standalone CSS and tag balance."""

from __future__ import annotations

import re
from typing import List, Optional, Set, Tuple

from bs4 import Tag

from ..config import ValidationConfig
from ..models import Archive, ArchiveEntry, CheckResult, Diagnostic
from ..utils import line_number, line_offsets
from .common import blank_comments, iter_lines, parse_failure, parse_html

NAME = "Map Tag and CSS Rules Check"

VOID_ELEMENTS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}
# Elements that are routinely written empty in email markup.
EMPTY_ALLOWED = {"td", "th", "script", "style", "title", "textarea", "iframe", "video", "canvas"}
RAW_TEXT_ELEMENTS = ("script", "style")

MAP_TAG = re.compile(r"<\s*map\b[^>]*>", re.IGNORECASE)
FLOAT_RULE = re.compile(r"(?<![\w-])float\s*:\s*(left|right)\b", re.IGNORECASE)
POSITION_RULE = re.compile(
    r"(?<![\w-])position\s*:\s*(absolute|relative|fixed|sticky)\b", re.IGNORECASE
)
TAG = re.compile(r"""<(/?)([a-zA-Z][a-zA-Z0-9-]*)((?:[^>"']|"[^"]*"|'[^']*')*?)(/?)>""")


def _blank_raw_text(text: str) -> str:
    """Blank out script/style bodies so their contents are not read as tags."""
    for element in RAW_TEXT_ELEMENTS:
        pattern = re.compile(
            rf"(<{element}\b[^>]*>)(.*?)(</{element}\s*>)", re.IGNORECASE | re.DOTALL
        )
        text = pattern.sub(
            lambda m: m.group(1) + re.sub(r"[^\n]", " ", m.group(2)) + m.group(3),
            text,
        )
    return text


def _css_rule_findings(path: str, text: str) -> List[Diagnostic]:
    findings: List[Diagnostic] = []
    for line_no, line in iter_lines(text):
        match = FLOAT_RULE.search(line)
        if match:
            findings.append(
                Diagnostic(f"CSS float: {match.group(1).lower()} used", path=path, line=line_no)
            )
        match = POSITION_RULE.search(line)
        if match:
            findings.append(
                Diagnostic(f"CSS position: {match.group(1).lower()} used", path=path, line=line_no)
            )
    return findings


def find_unbalanced_tags(
    path: str,
    html: str,
    unclosed: Optional[Set[Tuple[str, Optional[int]]]] = None,
) -> List[Diagnostic]:
    """Track open tags on a stack and report unmatched or unclosed ones.

    Unclosed tags are also recorded as ``(tag, line)`` pairs in ``unclosed``.
    """
    if unclosed is None:
        unclosed = set()
    text = _blank_raw_text(blank_comments(html))
    offsets = line_offsets(text)
    stack: List[Tuple[str, int]] = []
    findings: List[Diagnostic] = []

    for match in TAG.finditer(text):
        closing, name, _, self_closing = match.groups()
        tag = name.lower()
        if tag in VOID_ELEMENTS or self_closing:
            continue
        line = line_number(offsets, match.start())
        if not closing:
            stack.append((tag, line))
            continue
        if not any(open_tag == tag for open_tag, _ in stack):
            findings.append(Diagnostic(f"Unmatched closing tag </{tag}>", path=path, line=line))
            continue
        while stack:
            open_tag, open_line = stack.pop()
            if open_tag == tag:
                break
            unclosed.add((open_tag, open_line))
            findings.append(Diagnostic(f"Unclosed tag <{open_tag}>", path=path, line=open_line))

    for open_tag, open_line in stack:
        unclosed.add((open_tag, open_line))
        findings.append(Diagnostic(f"Unclosed tag <{open_tag}>", path=path, line=open_line))
    return findings


def find_empty_elements(path: str, soup, seen: Set[Tuple[str, Optional[int]]]) -> List[Diagnostic]:
    """Walk the parsed tree for non-void elements that ended up with no children."""
    findings: List[Diagnostic] = []
    for element in soup.find_all(True):
        if not isinstance(element, Tag):
            continue
        name = element.name.lower()
        if name in VOID_ELEMENTS or name in EMPTY_ALLOWED:
            continue
        if element.contents:
            continue
        key = (name, element.sourceline)
        if key in seen:
            continue
        seen.add(key)
        findings.append(
            Diagnostic(
                f"Empty <{name}> element (possible unclosed tag)",
                path=path,
                line=element.sourceline,
            )
        )
    return findings


def _check_html(entry: ArchiveEntry, config: ValidationConfig) -> Tuple[List[Diagnostic], Optional[str]]:
    html = entry.text()
    findings: List[Diagnostic] = []

    for line_no, line in iter_lines(html):
        if MAP_TAG.search(line):
            findings.append(Diagnostic("Found <map> tag", path=entry.path, line=line_no))
    findings.extend(_css_rule_findings(entry.path, html))

    seen: Set[Tuple[str, Optional[int]]] = set()
    structural = find_unbalanced_tags(entry.path, html, seen)
    try:
        soup = parse_html(html)
    except Exception as exc:  # pylint: disable=broad-except
        findings.extend(structural)
        findings.append(parse_failure(entry, exc))
        return findings, None

    structural.extend(find_empty_elements(entry.path, soup, seen))
    findings.extend(structural)

    suggested_fix = None
    if structural and config.auto_fix:
        suggested_fix = soup.decode()
    return findings, suggested_fix


def check_map_tag_and_css_rules(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    details: List[str] = []
    suggested_fix: Optional[str] = None

    for entry in archive.css_entries():
        findings.append(
            Diagnostic("External CSS file is not allowed; styles must be inline", path=entry.path)
        )
        findings.extend(_css_rule_findings(entry.path, entry.text()))

    for entry in archive.html_entries():
        html_findings, fix = _check_html(entry, config)
        findings.extend(html_findings)
        if fix is not None and suggested_fix is None:
            suggested_fix = fix
            details.append(f"A repaired version of {entry.path} is available as a suggested fix.")

    return CheckResult.from_findings(
        NAME,
        findings,
        "No map tags, disallowed CSS rules or unbalanced tags found",
        details=details,
        suggested_fix=suggested_fix,
    )
