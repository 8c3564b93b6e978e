"""Image decoding and metadata validation utilities."""

from __future__ import annotations

import io
import logging
from typing import List, Optional

from filetype import guess
from PIL import Image, UnidentifiedImageError

from .config import ValidationConfig
from .models import Archive, ArchiveEntry, CheckResult, Diagnostic, ImageMetadata

logger = logging.getLogger("zipguard")

MODE_BIT_DEPTH = {
    "1": 1,
    "I;16": 16,
    "I;16B": 16,
    "I;16L": 16,
    "I": 32,
    "F": 32,
}

DECODE_ERRORS = (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError)


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def _density(image: Image.Image) -> Optional[int]:
    dpi = image.info.get("dpi")
    if not dpi:
        return None
    try:
        value = round(float(dpi[0]))
    except (TypeError, ValueError, IndexError):
        return None
    return value or None


def read_image_metadata(data: bytes) -> ImageMetadata:
    """Decode image headers and return geometry, colour and density details.

    Raises ``UnidentifiedImageError``/``OSError`` when the bytes are not a
    decodable image.
    """
    with Image.open(io.BytesIO(data)) as image:
        width, height = image.size
        pil_format = (image.format or "").lower() or None
        if pil_format == "jpeg":
            pil_format = "jpg"
        return ImageMetadata(
            width=width,
            height=height,
            format=detect_image_format(data) or pil_format,
            channels=len(image.getbands()),
            depth=MODE_BIT_DEPTH.get(image.mode, 8),
            density=_density(image),
        )


def _validate_entry(entry: ArchiveEntry, config: ValidationConfig) -> CheckResult:
    findings: List[Diagnostic] = []
    try:
        metadata = read_image_metadata(entry.content)
    except DECODE_ERRORS as exc:
        logger.warning("Failed to decode image %s: %s", entry.path, exc)
        findings.append(Diagnostic(f"Unable to read image metadata: {exc}", path=entry.path))
        return CheckResult.from_findings(entry.path, findings, "")

    if metadata.width > config.max_image_width:
        findings.append(
            Diagnostic(
                f"Image width exceeds {config.max_image_width} pixels (found {metadata.width}px)",
                path=entry.path,
            )
        )
    if metadata.density is not None and metadata.density != config.target_dpi:
        findings.append(
            Diagnostic(
                f"Image DPI is not {config.target_dpi} (found {metadata.density})",
                path=entry.path,
            )
        )

    if findings:
        logger.warning(
            "Image validation failed for %s: %s",
            entry.path,
            " | ".join(diag.message for diag in findings),
        )
    else:
        logger.info(
            "Image validated: %s, Width: %dpx, DPI: %s",
            entry.path,
            metadata.width,
            metadata.density,
        )
    return CheckResult.from_findings(
        entry.path,
        findings,
        "Image passed all validations",
        details=(
            f"{metadata.width}x{metadata.height} {metadata.format or 'unknown'}, "
            f"{metadata.channels} channel(s), {metadata.depth}-bit, DPI {metadata.density or '-'}",
        ),
    )


def validate_images(archive: Archive, config: ValidationConfig) -> List[CheckResult]:
    """Check every image entry for width and DPI constraints."""
    images = archive.images()
    if not images:
        return [
            CheckResult.from_findings(
                "ZIP Content",
                [Diagnostic("No images found in the ZIP file")],
                "",
            )
        ]
    return [_validate_entry(entry, config) for entry in images]
