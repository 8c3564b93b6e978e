from __future__ import annotations

import base64

import pytest

from conftest import make_zip
from zipguard.errors import EmptyArchive, MalformedArchive, MissingHtml, MultipleHtml
from zipguard.intake import encode_archive, has_zip_signature, read_archive, read_base64_archive


def test_read_archive_keeps_every_file_entry_in_order(clean_files) -> None:
    data = make_zip({**clean_files, "notes.txt": "hello"}, directories=["images"])
    archive = read_archive(data)
    assert [entry.path for entry in archive.files()] == ["index.html", "images/logo.png", "notes.txt"]
    assert len(archive.files()) == 3
    assert any(entry.is_directory for entry in archive)


def test_read_archive_classifies_entries(clean_files) -> None:
    archive = read_archive(make_zip({**clean_files, "style.css": "p { color: red; }"}))
    kinds = {entry.path: entry.kind for entry in archive.files()}
    assert kinds == {"index.html": "html", "images/logo.png": "image", "style.css": "css"}


def test_empty_bytes_are_rejected() -> None:
    with pytest.raises(EmptyArchive) as excinfo:
        read_archive(b"")
    assert "empty" in str(excinfo.value)


def test_wrong_magic_header_fails_before_decode() -> None:
    assert not has_zip_signature(b"GIF89a....")
    with pytest.raises(MalformedArchive):
        read_archive(b"GIF89a not a zip")


def test_truncated_zip_is_malformed(clean_zip) -> None:
    with pytest.raises(MalformedArchive):
        read_archive(clean_zip[: len(clean_zip) // 2])


def test_missing_html_is_fatal(logo_png) -> None:
    with pytest.raises(MissingHtml):
        read_archive(make_zip({"images/logo.png": logo_png}))


def test_multiple_html_is_fatal(clean_html) -> None:
    with pytest.raises(MultipleHtml) as excinfo:
        read_archive(make_zip({"a.html": clean_html, "b/c.htm": clean_html}))
    assert excinfo.value.paths == ["a.html", "b/c.htm"]


def test_resource_fork_entries_are_skipped(clean_files) -> None:
    data = make_zip({**clean_files, "__MACOSX/._index.html": b"\x00\x05\x16\x07"})
    archive = read_archive(data)
    assert archive.get("__MACOSX/._index.html") is None
    assert archive.html_entry().path == "index.html"


def test_base64_intake_round_trips(clean_zip) -> None:
    archive = read_base64_archive(base64.b64encode(clean_zip).decode("ascii"))
    assert archive.html_entry().path == "index.html"


def test_base64_intake_rejects_invalid_payload() -> None:
    with pytest.raises(MalformedArchive):
        read_base64_archive("not base64 at all!!")


def test_encode_archive_produces_readable_zip(clean_zip) -> None:
    archive = read_archive(clean_zip)
    again = read_archive(encode_archive(archive))
    assert [(e.path, e.content) for e in again.files()] == [(e.path, e.content) for e in archive.files()]
