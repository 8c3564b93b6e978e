"""Budget-driven image re-encoding to bring an archive under the size limit."""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from PIL import Image

from .config import (
    RESIZE_MIN_QUALITY,
    RESIZE_MIN_WIDTH_FACTOR,
    RESIZE_QUALITY_STEP,
    RESIZE_START_QUALITY,
    RESIZE_START_WIDTH_FACTOR,
    RESIZE_WIDTH_STEP,
    ValidationConfig,
)
from .errors import BudgetUnattainable
from .images import DECODE_ERRORS, detect_image_format, read_image_metadata
from .intake import encoded_size
from .models import Archive, ArchiveEntry, ResizeInfo, ResizeOutcome

logger = logging.getLogger("zipguard")

MAX_ATTEMPTS = (
    (RESIZE_START_QUALITY - RESIZE_MIN_QUALITY) // RESIZE_QUALITY_STEP
    + round((RESIZE_START_WIDTH_FACTOR - RESIZE_MIN_WIDTH_FACTOR) / RESIZE_WIDTH_STEP)
    + 1
)


@dataclass
class ResizeState:
    """Current position in the (quality, width factor) search space."""

    quality: int = RESIZE_START_QUALITY
    width_factor: float = RESIZE_START_WIDTH_FACTOR

    def step(self) -> bool:
        """Degrade quality first, then width; return False once both floors are hit."""
        if self.quality > RESIZE_MIN_QUALITY:
            self.quality = max(RESIZE_MIN_QUALITY, self.quality - RESIZE_QUALITY_STEP)
            logger.info("Reducing quality to %d.", self.quality)
            return True
        if round(self.width_factor, 2) > RESIZE_MIN_WIDTH_FACTOR:
            self.width_factor = max(
                RESIZE_MIN_WIDTH_FACTOR, round(self.width_factor - RESIZE_WIDTH_STEP, 2)
            )
            logger.info("Reducing width factor to %.2f.", self.width_factor)
            return True
        return False


def _palette_size(quality: int) -> int:
    return max(2, min(256, round(256 * quality / 100)))


def _quantize(image: Image.Image, quality: int) -> Image.Image:
    colors = _palette_size(quality)
    if image.mode == "P":
        image = image.convert("RGBA" if "transparency" in image.info else "RGB")
    if image.mode in ("RGBA", "LA"):
        return image.convert("RGBA").quantize(colors=colors, method=Image.Quantize.FASTOCTREE)
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image.quantize(colors=colors)


def _image_format(entry: ArchiveEntry, data: bytes) -> str:
    detected = detect_image_format(data)
    if detected:
        return detected
    return "jpg" if entry.extension == "jpeg" else entry.extension


def reencode_image(
    entry: ArchiveEntry,
    data: bytes,
    state: ResizeState,
    config: ValidationConfig,
) -> bytes:
    """Re-encode original image bytes at the state's quality and width factor."""
    fmt = _image_format(entry, data)
    with Image.open(io.BytesIO(data)) as source:
        source.load()
        source_format = source.format
        width, height = source.size
        image = source
        new_width = max(1, min(int(width * state.width_factor), config.max_image_width))
        resized = new_width != width
        if resized:
            new_height = max(1, round(height * new_width / width))
            logger.debug("Resizing %s from %d to %d width.", entry.path, width, new_width)
            image = image.resize((new_width, new_height), Image.Resampling.LANCZOS)

        dpi = (config.target_dpi, config.target_dpi)
        buffer = io.BytesIO()
        if fmt == "jpg":
            if image.mode not in ("RGB", "L", "CMYK"):
                image = image.convert("RGB")
            image.save(buffer, format="JPEG", quality=state.quality, optimize=True, dpi=dpi)
        elif fmt == "png":
            image = _quantize(image, state.quality)
            image.save(buffer, format="PNG", optimize=True, dpi=dpi)
        elif fmt == "webp":
            image.save(buffer, format="WEBP", quality=state.quality)
        elif not resized:
            return data
        else:
            image.save(buffer, format=source_format)
    return buffer.getvalue()


def _reencode_all(
    archive: Archive,
    originals: Dict[str, ArchiveEntry],
    state: ResizeState,
    config: ValidationConfig,
) -> Archive:
    contents: Dict[str, bytes] = {}
    for path, entry in originals.items():
        try:
            contents[path] = reencode_image(entry, entry.content, state, config)
        except DECODE_ERRORS as exc:
            logger.warning("Leaving %s unchanged, re-encode failed: %s", path, exc)
            contents[path] = entry.content
    return archive.replace_entries(contents)


def describe_resize(original: Archive, final: Archive) -> Dict[str, ResizeInfo]:
    """Build before/after records for every decodable image."""
    infos: Dict[str, ResizeInfo] = {}
    for entry in original.images():
        current = final.get(entry.path)
        if current is None:
            continue
        try:
            before = read_image_metadata(entry.content)
            after = read_image_metadata(current.content)
        except DECODE_ERRORS as exc:
            logger.warning("Cannot describe resize of %s: %s", entry.path, exc)
            continue
        resized = (
            current.content != entry.content
            or before.width != after.width
            or before.height != after.height
        )
        infos[entry.path] = ResizeInfo(
            path=entry.path,
            resized=resized,
            original=before,
            original_size=entry.size,
            new=after,
            new_size=current.size,
        )
        logger.info(
            "Image %s: %dx%d %.2fKB -> %dx%d %.2fKB (resized=%s)",
            entry.path,
            before.width,
            before.height,
            entry.size / 1024,
            after.width,
            after.height,
            current.size / 1024,
            resized,
        )
    return infos


def resize_images(archive: Archive, config: Optional[ValidationConfig] = None) -> ResizeOutcome:
    """Shrink images until the encoded archive fits the size budget.

    Every attempt re-encodes from the original image bytes. Quality drops by
    10 down to 40 first, then the width factor by 0.1 down to 0.5; once both
    floors are reached ``BudgetUnattainable`` is raised.
    """
    config = config or ValidationConfig()
    archive.html_entry()
    originals = {entry.path: entry for entry in archive.images()}
    state = ResizeState()
    current = archive
    attempts = 0

    while True:
        attempts += 1
        size = encoded_size(current)
        logger.debug(
            "Attempt %d: ZIP size %.2f KB (quality=%d, width_factor=%.2f)",
            attempts,
            size / 1024,
            state.quality,
            state.width_factor,
        )
        if size <= config.size_budget:
            logger.info("ZIP is %.2f KB, within the %d KB budget.", size / 1024, config.size_budget // 1024)
            return ResizeOutcome(
                archive=current,
                size=size,
                attempts=attempts,
                quality=state.quality,
                width_factor=state.width_factor,
                images=describe_resize(archive, current),
            )
        if not originals or not state.step():
            logger.error("Cannot reduce ZIP size below budget after %d attempts.", attempts)
            raise BudgetUnattainable(config.size_budget, size, attempts)
        current = _reencode_all(archive, originals, state, config)
