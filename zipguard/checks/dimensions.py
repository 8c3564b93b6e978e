"""Declared ``<img>`` dimensions against the decoded image files."""

from __future__ import annotations

import logging
import posixpath
import re
from typing import List, Optional, Tuple

from ..config import ValidationConfig
from ..images import DECODE_ERRORS, read_image_metadata
from ..models import Archive, ArchiveEntry, CheckResult, Diagnostic
from ..utils import clean_reference, join_archive_path, parse_leading_int
from .common import parse_failure, parse_html

logger = logging.getLogger("zipguard")

NAME = "Image Dimensions Check"


def extract_css_dimension(style: str, prop: str) -> Optional[int]:
    match = re.search(rf"(?<![\w-]){prop}\s*:\s*(\d+)px", style, re.IGNORECASE)
    return int(match.group(1)) if match else None


def first_srcset_url(srcset: str) -> Optional[str]:
    first = srcset.split(",")[0].strip()
    if not first:
        return None
    return first.split()[0]


def resolve_image(archive: Archive, src: str, html_directory: str) -> Optional[ArchiveEntry]:
    """Locate an archive entry by exact/relative path, then by basename."""
    cleaned = clean_reference(src)
    if not cleaned:
        return None
    relative = join_archive_path(html_directory, cleaned)
    files = archive.files()
    for entry in files:
        if entry.path in (cleaned, relative) or entry.path.endswith("/" + cleaned):
            return entry
    basename = posixpath.basename(cleaned)
    for entry in files:
        if entry.name == basename:
            logger.warning("Fallback match for %s using basename (%s) -> %s", src, basename, entry.path)
            return entry
    return None


def declared_dimensions(img) -> Tuple[Optional[int], Optional[int]]:
    """Width/height from attributes, falling back to inline ``style`` pixels."""
    width = parse_leading_int(img.get("width"))
    height = parse_leading_int(img.get("height"))
    style = img.get("style") or ""
    if (width is None or height is None) and style:
        if width is None:
            width = extract_css_dimension(style, "width")
        if height is None:
            height = extract_css_dimension(style, "height")
    return width, height


def _fmt(value: Optional[int]) -> str:
    return "?" if value is None else str(value)


def _check_html(archive: Archive, entry: ArchiveEntry) -> List[Diagnostic]:
    try:
        soup = parse_html(entry.text())
    except Exception as exc:  # pylint: disable=broad-except
        return [parse_failure(entry, exc)]

    findings: List[Diagnostic] = []
    images = soup.find_all("img")
    logger.debug("Found %d <img> tags in %s", len(images), entry.path)
    for img in images:
        line = img.sourceline
        src = (img.get("src") or "").strip()
        if not src and img.get("srcset"):
            src = first_srcset_url(img["srcset"]) or ""
        if not src:
            findings.append(Diagnostic("Missing 'src' in an <img> tag", path=entry.path, line=line))
            continue

        target = resolve_image(archive, src, entry.directory)
        if target is None:
            findings.append(Diagnostic(f'Image file "{src}" not found in ZIP', path=entry.path, line=line))
            continue

        try:
            actual = read_image_metadata(target.content)
        except DECODE_ERRORS as exc:
            findings.append(
                Diagnostic(f'Failed to read dimensions for "{src}": {exc}', path=entry.path, line=line)
            )
            continue

        width, height = declared_dimensions(img)
        if (width is not None and width != actual.width) or (
            height is not None and height != actual.height
        ):
            findings.append(
                Diagnostic(
                    f'Dimension mismatch for "{src}" ({target.path}): '
                    f"HTML ({_fmt(width)}x{_fmt(height)}) vs Actual ({actual.width}x{actual.height})",
                    path=entry.path,
                    line=line,
                )
            )
    return findings


def check_image_dimensions(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    for entry in archive.html_entries():
        findings.extend(_check_html(archive, entry))
    return CheckResult.from_findings(NAME, findings, "All image dimensions match the HTML")
