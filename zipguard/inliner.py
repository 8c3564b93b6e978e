"""Replacing ``<link rel="stylesheet">`` references with inline style blocks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from .config import ValidationConfig
from .fetch import HttpStylesheetFetcher, StylesheetFetchError
from .models import Archive, ArchiveEntry, CheckResult, Diagnostic
from .protocols import StylesheetFetcher
from .utils import clean_reference, is_remote_url, join_archive_path, line_offsets, normalize_name

logger = logging.getLogger("zipguard")

CHECK_NAME = "Inline External CSS Check"
CSS_SHAPE = re.compile(r"[{}:;]\s*[\w\-]+\s*[{}:;]")
LINK_TAG = re.compile(r"""<link\b(?:[^>"']|"[^"]*"|'[^']*')*>""", re.IGNORECASE)


@dataclass
class InlineResult:
    """New archive plus the bookkeeping of one inlining pass."""

    archive: Archive
    result: CheckResult
    replaced: int = 0
    errors: List[str] = field(default_factory=list)
    inlined_sources: List[str] = field(default_factory=list)


def is_valid_css(content: str) -> bool:
    """Cheap structural test that text looks like CSS declarations."""
    return bool(CSS_SHAPE.search(content))


def _is_stylesheet_source(entry: ArchiveEntry) -> bool:
    return entry.kind == "css" or (entry.kind == "other" and "." not in entry.name)


def collect_stylesheets(archive: Archive) -> Dict[str, str]:
    """Map archive path to CSS text for every CSS-shaped stylesheet entry."""
    sources: Dict[str, str] = {}
    for entry in archive.files():
        if not _is_stylesheet_source(entry):
            continue
        content = entry.text()
        if is_valid_css(content):
            sources[entry.path] = content
            logger.debug("Found valid CSS file: %s", entry.path)
        elif entry.kind == "css":
            logger.warning("Ignoring %s: content does not look like CSS", entry.path)
    return sources


def resolve_local_stylesheet(
    href: str,
    html_directory: str,
    sources: Dict[str, str],
) -> Optional[str]:
    """Find the archive path a local stylesheet href refers to."""
    cleaned = clean_reference(href)
    if not cleaned:
        return None
    if cleaned in sources:
        return cleaned
    relative = join_archive_path(html_directory, cleaned)
    if relative in sources:
        return relative

    target = normalize_name(cleaned)
    if not target:
        return None
    for path in sources:
        if normalize_name(path).endswith(target):
            return path
    for path in sources:
        if target in normalize_name(path):
            return path
    return None


def _style_block(css: str) -> str:
    return f"<style>\n{css}\n</style>"


def _splice(html: str, replacements: List[Tuple[object, str]]) -> Optional[str]:
    """Swap link tags for style blocks in the source text, keeping all else intact."""
    offsets = line_offsets(html)
    spans: List[Tuple[int, int, str]] = []
    for tag, css in replacements:
        line = getattr(tag, "sourceline", None)
        column = getattr(tag, "sourcepos", None)
        if line is None or column is None or line - 1 >= len(offsets):
            return None
        start = offsets[line - 1] + column
        match = LINK_TAG.match(html, start)
        if not match:
            return None
        spans.append((match.start(), match.end(), css))

    updated = html
    for start, end, css in sorted(spans, reverse=True):
        updated = updated[:start] + _style_block(css) + updated[end:]
    return updated


def _rewrite_tree(soup: BeautifulSoup, replacements: List[Tuple[object, str]]) -> str:
    for tag, css in replacements:
        style = soup.new_tag("style")
        style.string = f"\n{css}\n"
        tag.replace_with(style)
    return soup.decode()


def inline_external_css(
    archive: Archive,
    fetcher: Optional[StylesheetFetcher] = None,
    config: Optional[ValidationConfig] = None,
) -> InlineResult:
    """Return a new Archive whose HTML embeds every resolvable stylesheet."""
    config = config or ValidationConfig()
    if fetcher is None:
        fetcher = HttpStylesheetFetcher(timeout=config.fetch_timeout)

    html_entry = archive.html_entry()
    sources = collect_stylesheets(archive)
    html = html_entry.text()
    soup = BeautifulSoup(html, "html.parser")
    links = soup.find_all("link", rel="stylesheet")

    errors: List[Diagnostic] = []
    replacements: List[Tuple[object, str]] = []
    consumed: List[str] = []
    details: List[str] = []

    for link in links:
        href = (link.get("href") or "").strip()
        if not href:
            continue
        if is_remote_url(href):
            try:
                css = fetcher.fetch(href)
            except StylesheetFetchError as exc:
                logger.warning("Failed to fetch stylesheet %s: %s", href, exc)
                errors.append(
                    Diagnostic(f"CSS loading failed for {href}: {exc}", path=html_entry.path, line=link.sourceline)
                )
                continue
            if not is_valid_css(css):
                errors.append(
                    Diagnostic(
                        f"CSS loading failed for {href}: Invalid CSS content",
                        path=html_entry.path,
                        line=link.sourceline,
                    )
                )
                continue
            details.append(f"Inlined remote stylesheet {href}")
        else:
            resolved = resolve_local_stylesheet(href, html_entry.directory, sources)
            if resolved is None:
                errors.append(
                    Diagnostic(
                        f"CSS loading failed for {href}: Local CSS not found",
                        path=html_entry.path,
                        line=link.sourceline,
                    )
                )
                continue
            css = sources[resolved]
            consumed.append(resolved)
            details.append(f"Inlined {resolved} for {href}")
        replacements.append((link, css))

    updated = archive
    if replacements:
        new_html = _splice(html, replacements)
        if new_html is None:
            logger.debug("Falling back to tree serialization for %s", html_entry.path)
            new_html = _rewrite_tree(soup, replacements)
        updated = archive.replace_entry(html_entry.path, new_html.encode("utf-8"))
        updated = updated.without(set(consumed))
        logger.info("Inlined %d stylesheet(s) into %s", len(replacements), html_entry.path)

    if not sources and not links:
        pass_message = "No CSS found or referenced. Nothing to inline."
    else:
        pass_message = "All CSS (local and remote) successfully inlined."
    result = CheckResult.from_findings(CHECK_NAME, errors, pass_message, details=details)
    return InlineResult(
        archive=updated,
        result=result,
        replaced=len(replacements),
        errors=[str(diag) for diag in errors],
        inlined_sources=sorted(set(consumed)),
    )
