from __future__ import annotations

import pytest

from zipguard.errors import MissingHtml
from zipguard.models import (
    Archive,
    ArchiveEntry,
    CheckResult,
    Diagnostic,
    ValidationReport,
    WARNING,
    classify_path,
)


@pytest.mark.parametrize(
    "path, kind",
    [
        ("index.HTML", "html"),
        ("a/b.htm", "html"),
        ("styles/site.css", "css"),
        ("img/photo.JPEG", "image"),
        ("img/anim.gif", "image"),
        ("README", "other"),
        ("font.woff", "other"),
    ],
)
def test_classify_path(path, kind) -> None:
    assert classify_path(path) == kind


def test_transforms_return_new_archives() -> None:
    archive = Archive(
        (
            ArchiveEntry("images/", is_directory=True),
            ArchiveEntry("index.html", b"<p>a</p>"),
            ArchiveEntry("site.css", b"p { color: red; }"),
        )
    )
    updated = archive.replace_entry("index.html", b"<p>b</p>").without(["site.css"])
    assert archive.get("index.html").content == b"<p>a</p>"
    assert updated.get("index.html").content == b"<p>b</p>"
    assert updated.get("site.css") is None
    assert len(updated) == 2
    assert [entry.path for entry in updated.files()] == ["index.html"]


def test_html_entry_requires_one_html_file() -> None:
    with pytest.raises(MissingHtml):
        Archive((ArchiveEntry("a.png", b""),)).html_entry()


def test_diagnostic_rendering() -> None:
    assert str(Diagnostic("Found <map> tag", path="index.html", line=3)) == "Found <map> tag in index.html (line 3)"
    assert str(Diagnostic("No images found in the ZIP file")) == "No images found in the ZIP file"


def test_overall_success_ignores_advisory_results() -> None:
    warning = CheckResult(
        name="patterns",
        success=False,
        diagnostics=(Diagnostic("Display:none used", severity=WARNING),),
        advisory=True,
    )
    passing = CheckResult.from_findings("scripts", [], "ok")
    assert ValidationReport((passing, warning)).overall_success
    assert not ValidationReport((passing, CheckResult.from_findings("x", [Diagnostic("bad")], "ok"))).overall_success
