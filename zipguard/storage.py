"""Filesystem-backed report store for publishing accepted output locally."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path

logger = logging.getLogger("zipguard")


class DirectoryReportStore:
    """Write uploads beneath a root directory and return ``file://`` URIs."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()

    def _destination(self, path: str) -> Path:
        relative = posixpath.normpath(path.replace("\\", "/")).lstrip("/")
        if not relative or relative == "." or relative.startswith(".."):
            raise ValueError(f"Refusing to write outside the store: {path}")
        return self.root / relative

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        destination = self._destination(path)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(content)
        logger.info("Stored %s (%s, %d bytes)", destination, content_type, len(content))
        return destination.as_uri()
