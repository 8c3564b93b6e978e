"""HTTP adapters: remote stylesheet fetching and archive download."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .config import DEFAULT_FETCH_TIMEOUT

logger = logging.getLogger("zipguard")

MAX_STYLESHEET_BYTES = 2 * 1024 * 1024
MAX_ARCHIVE_DOWNLOAD_BYTES = 20 * 1024 * 1024


class StylesheetFetchError(Exception):
    """Transport or status failure while retrieving a remote stylesheet."""


class HttpStylesheetFetcher:
    """Fetch remote stylesheets with a shared ``requests`` session."""

    def __init__(
        self,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch(self, url: str) -> str:
        if url.startswith("//"):
            url = "https:" + url
        logger.info("Fetching remote CSS %s", url)
        try:
            resp = self._session.get(url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise StylesheetFetchError(str(exc)) from exc
        if len(resp.content) > MAX_STYLESHEET_BYTES:
            raise StylesheetFetchError(
                f"stylesheet larger than {MAX_STYLESHEET_BYTES} bytes"
            )
        return resp.text


def download_archive(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> bytes:
    """Download an archive from a URL for validation."""
    logger.info("Received request to download: %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    data = resp.content
    if len(data) > MAX_ARCHIVE_DOWNLOAD_BYTES:
        raise ValueError(
            f"Downloaded file is larger than {MAX_ARCHIVE_DOWNLOAD_BYTES} bytes"
        )
    logger.info(
        "Downloaded file size: %.2f KB (Content-Type=%s)",
        len(data) / 1024,
        resp.headers.get("Content-Type", ""),
    )
    return data
