"""Helpers shared by the individual rule checks."""

from __future__ import annotations

import logging
import re
from typing import Iterator, Tuple

from bs4 import BeautifulSoup

from ..models import ArchiveEntry, Diagnostic
from ..utils import split_lines

logger = logging.getLogger("zipguard")

COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "html.parser")


def iter_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_number, line)`` pairs, numbering from 1."""
    for index, line in enumerate(split_lines(text)):
        yield index + 1, line


def blank_comments(text: str) -> str:
    """Replace HTML comments with spaces, preserving newlines and offsets."""
    return COMMENT.sub(lambda match: re.sub(r"[^\n]", " ", match.group(0)), text)


def parse_failure(entry: ArchiveEntry, exc: Exception) -> Diagnostic:
    logger.warning("Failed to parse %s: %s", entry.path, exc)
    return Diagnostic(f"HTML parsing error: {exc}", path=entry.path)
