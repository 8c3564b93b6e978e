from __future__ import annotations

import json

import pytest

from zipguard import mcp_server


def test_validate_archive_returns_json_report(tmp_path, clean_zip) -> None:
    archive = tmp_path / "clean.zip"
    archive.write_bytes(clean_zip)

    payload = json.loads(mcp_server.validate_archive(str(archive)))

    assert payload["success"] is True
    assert payload["results"][0]["check"] == "Inline External CSS Check"


def test_validate_archive_rejects_missing_path(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        mcp_server.validate_archive(str(tmp_path / "nope.zip"))
