"""Embedded video detection."""

from __future__ import annotations

from typing import List
from urllib.parse import urlsplit

from ..config import ValidationConfig
from ..models import Archive, ArchiveEntry, CheckResult, Diagnostic
from .common import parse_failure, parse_html

NAME = "Embedded Video Check"

KNOWN_VIDEO_HOSTS = (
    "youtube.com",
    "youtu.be",
    "vimeo.com",
    "dailymotion.com",
    "tiktok.com",
    "facebook.com",
    "streamable.com",
    "wistia.com",
    "loom.com",
)


def is_video_link(url: str) -> bool:
    """Return True when the URL points at a known video hosting domain."""
    url = (url or "").strip()
    if not url:
        return False
    if "://" not in url and not url.startswith("//"):
        url = "//" + url
    host = (urlsplit(url).hostname or "").lower()
    return any(host == known or host.endswith("." + known) for known in KNOWN_VIDEO_HOSTS)


def _check_html(entry: ArchiveEntry) -> List[Diagnostic]:
    try:
        soup = parse_html(entry.text())
    except Exception as exc:  # pylint: disable=broad-except
        return [parse_failure(entry, exc)]

    findings: List[Diagnostic] = []
    for video in soup.find_all("video"):
        findings.append(
            Diagnostic(
                "<video> tag detected. Use a static image linking to a video instead.",
                path=entry.path,
                line=video.sourceline,
            )
        )
    for embed in soup.find_all("embed"):
        findings.append(
            Diagnostic(
                "<embed> tag detected. Embedding videos is not allowed.",
                path=entry.path,
                line=embed.sourceline,
            )
        )
    for iframe in soup.find_all("iframe"):
        src = (iframe.get("src") or "").strip()
        if is_video_link(src):
            message = f'<iframe> embed from "{src}" is not allowed. Use a preview image linking to this video.'
        else:
            message = "<iframe> detected. Embedding content is not allowed."
        findings.append(Diagnostic(message, path=entry.path, line=iframe.sourceline))
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if is_video_link(href) and anchor.find("img") is None:
            findings.append(
                Diagnostic(
                    f"Link to video ({href}) must be shown using a preview image, not plain link.",
                    path=entry.path,
                    line=anchor.sourceline,
                )
            )
    return findings


def check_embedded_videos(archive: Archive, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    for entry in archive.html_entries():
        findings.extend(_check_html(entry))
    return CheckResult.from_findings(NAME, findings, "No embedded videos found")
