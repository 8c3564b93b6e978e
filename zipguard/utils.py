"""Utility helpers for string normalization, line lookup and path handling."""

from __future__ import annotations

import posixpath
import re
from bisect import bisect_right
from typing import List, Optional
from urllib.parse import unquote, urlsplit

NAME_PATTERN = re.compile(r"[^a-z0-9]+")
LEADING_INT = re.compile(r"^\s*(\d+)")


def normalize_name(value: str) -> str:
    """Casefold and strip everything but ASCII letters and digits."""
    return NAME_PATTERN.sub("", value.casefold())


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only so line numbers agree with the HTML parser."""
    return text.split("\n")


def line_offsets(text: str) -> List[int]:
    """Return the character offset at which every line starts."""
    offsets = [0]
    for index, char in enumerate(text):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


def is_remote_url(href: str) -> bool:
    lowered = href.strip().lower()
    return lowered.startswith(("http://", "https://", "//"))


def clean_reference(src: str) -> str:
    """Turn an HTML src/href into an archive-relative path candidate."""
    path = urlsplit(src.strip()).path if "://" not in src else src.strip()
    path = unquote(path)
    while path.startswith("./"):
        path = path[2:]
    return path.lstrip("/")


def join_archive_path(directory: str, reference: str) -> str:
    """Resolve ``reference`` against an archive directory."""
    if not directory:
        return posixpath.normpath(reference)
    return posixpath.normpath(posixpath.join(directory, reference))


def parse_leading_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of an attribute value; ``"50%"`` yields None."""
    if value is None:
        return None
    text = str(value).strip()
    if text.endswith("%"):
        return None
    match = LEADING_INT.match(text)
    if not match:
        return None
    return int(match.group(1))


def line_number(offsets: List[int], index: int) -> int:
    """1-based line of a character offset, given :func:`line_offsets` output."""
    return bisect_right(offsets, index)
