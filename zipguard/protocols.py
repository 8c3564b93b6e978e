"""Protocol interfaces for the collaborators injected into the pipeline."""

from __future__ import annotations

from typing import Protocol


class StylesheetFetcher(Protocol):
    """Retrieves remote stylesheet text for the CSS inliner."""

    def fetch(self, url: str) -> str:
        """
        Download a stylesheet.

        Args:
            url: Absolute http(s) URL of the stylesheet

        Returns:
            The response body as text

        Raises:
            StylesheetFetchError: on transport failure or a non-success status
        """
        ...


class Notifier(Protocol):
    """Delivers a rendered validation report to a person."""

    def send(self, recipient: str, subject: str, html_body: str) -> None:
        ...


class ReportStore(Protocol):
    """Persists accepted output and returns a retrievable location."""

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        ...
