from __future__ import annotations

from conftest import build_archive, make_image
from zipguard.config import ValidationConfig
from zipguard.images import detect_image_format, read_image_metadata, validate_images


def test_read_image_metadata_reports_geometry_and_density() -> None:
    metadata = read_image_metadata(make_image("PNG", (120, 40), dpi=(72, 72)))
    assert (metadata.width, metadata.height) == (120, 40)
    assert metadata.format == "png"
    assert metadata.channels == 3
    assert metadata.depth == 8
    assert metadata.density == 72


def test_detect_image_format_normalises_jpeg() -> None:
    assert detect_image_format(make_image("JPEG")) == "jpg"
    assert detect_image_format(b"plain text") is None


def test_valid_image_passes(clean_html) -> None:
    archive = build_archive({"index.html": clean_html, "logo.png": make_image("PNG", (600, 20))})
    results = validate_images(archive, ValidationConfig())
    assert len(results) == 1
    assert results[0].name == "logo.png"
    assert results[0].success
    assert results[0].messages == ["Image passed all validations"]


def test_wide_image_and_wrong_dpi_are_violations(clean_html) -> None:
    archive = build_archive(
        {"index.html": clean_html, "hero.jpg": make_image("JPEG", (800, 100), dpi=(300, 300))}
    )
    (result,) = validate_images(archive, ValidationConfig())
    assert not result.success
    messages = [diag.message for diag in result.violations]
    assert "Image width exceeds 600 pixels (found 800px)" in messages
    assert "Image DPI is not 72 (found 300)" in messages


def test_image_without_density_is_not_flagged(clean_html) -> None:
    archive = build_archive({"index.html": clean_html, "plain.gif": make_image("GIF", dpi=None)})
    (result,) = validate_images(archive, ValidationConfig())
    assert result.success


def test_corrupt_image_does_not_stop_siblings(clean_html) -> None:
    archive = build_archive(
        {
            "index.html": clean_html,
            "broken.png": b"\x89PNG\r\n\x1a\n garbage",
            "ok.png": make_image("PNG"),
        }
    )
    broken, ok = validate_images(archive, ValidationConfig())
    assert not broken.success
    assert broken.violations[0].message.startswith("Unable to read image metadata")
    assert ok.success


def test_archive_without_images_fails(clean_html) -> None:
    (result,) = validate_images(build_archive({"index.html": clean_html}), ValidationConfig())
    assert not result.success
    assert result.messages == ["No images found in the ZIP file"]
