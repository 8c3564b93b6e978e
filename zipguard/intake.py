"""Decoding uploaded ZIP bytes into an :class:`Archive` and back."""

from __future__ import annotations

import base64
import binascii
import io
import logging
import zipfile
import zlib
from typing import List

from .errors import EmptyArchive, MalformedArchive
from .models import Archive, ArchiveEntry

logger = logging.getLogger("zipguard")

ZIP_SIGNATURES = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
RESOURCE_FORK_PREFIX = "__MACOSX/"


def has_zip_signature(data: bytes) -> bool:
    """Check the container magic header before attempting a full decode."""
    return any(data.startswith(signature) for signature in ZIP_SIGNATURES)


def _normalize_entry_path(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")


def read_archive(data: bytes) -> Archive:
    """Decode ZIP bytes into an Archive and enforce the single-HTML invariant."""
    if not data:
        raise EmptyArchive()
    logger.info("Received archive of %.2f KB", len(data) / 1024)
    if not has_zip_signature(data):
        raise MalformedArchive("The file is not a valid ZIP file.")

    entries: List[ArchiveEntry] = []
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as container:
            for info in container.infolist():
                path = _normalize_entry_path(info.filename)
                if not path or path.startswith(RESOURCE_FORK_PREFIX):
                    logger.debug("Skipping resource entry %s", info.filename)
                    continue
                if info.is_dir():
                    entries.append(ArchiveEntry(path=path, is_directory=True))
                    continue
                entries.append(ArchiveEntry(path=path, content=container.read(info)))
    except (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError, OSError, ValueError) as exc:
        raise MalformedArchive(f"ZIP extraction failed: {exc}") from exc

    archive = Archive(tuple(entries))
    logger.info("Extracted %d files from ZIP.", len(archive.files()))
    archive.html_entry()
    return archive


def read_base64_archive(payload: str) -> Archive:
    """Decode a base64 transport payload and read the archive inside it."""
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedArchive("Invalid base64 ZIP file.") from exc
    return read_archive(data)


def encode_archive(archive: Archive) -> bytes:
    """Serialize an Archive back into DEFLATE-compressed ZIP bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as container:
        for entry in archive.entries:
            if entry.is_directory:
                container.writestr(entry.path.rstrip("/") + "/", b"")
            else:
                container.writestr(entry.path, entry.content)
    return buffer.getvalue()


def encoded_size(archive: Archive) -> int:
    return len(encode_archive(archive))
