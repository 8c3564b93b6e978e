from __future__ import annotations

import pytest

from zipguard import cli
from zipguard.storage import DirectoryReportStore


def test_upload_writes_beneath_root(tmp_path) -> None:
    store = DirectoryReportStore(tmp_path)
    uri = store.upload("extracted/index.html", b"<p>hi</p>", "text/html")
    assert (tmp_path / "extracted" / "index.html").read_bytes() == b"<p>hi</p>"
    assert uri.startswith("file://")


def test_upload_refuses_path_traversal(tmp_path) -> None:
    store = DirectoryReportStore(tmp_path / "store")
    with pytest.raises(ValueError):
        store.upload("../escape.html", b"x", "text/html")


def test_cli_publishes_passing_archive(tmp_path, clean_zip, clean_html, capsys) -> None:
    archive = tmp_path / "clean.zip"
    archive.write_bytes(clean_zip)
    publish = tmp_path / "published"

    assert cli.main(["check", str(archive), "--publish-dir", str(publish)]) == cli.EXIT_OK
    assert (publish / "extracted" / "index.html").read_text(encoding="utf-8") == clean_html
