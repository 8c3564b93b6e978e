from __future__ import annotations

import json

from conftest import make_zip
from zipguard import cli


def test_parse_args_defaults_to_check_command() -> None:
    args = cli.parse_args(["template.zip", "--json"])
    assert args.command == "check"
    assert args.archives == ["template.zip"]
    assert args.json


def test_build_config_maps_flags(tmp_path, monkeypatch) -> None:
    monkeypatch.delenv("ZIPGUARD_BUDGET_KB", raising=False)
    args = cli.parse_args(
        [
            "check",
            "a.zip",
            "--budget-kb",
            "100",
            "--apply-fixes",
            "--advisory-warnings",
            "--link-hygiene",
            "--audit-dir",
            str(tmp_path),
        ]
    )
    config = cli.build_config(args)
    assert config.size_budget == 100 * 1024
    assert config.apply_fixes and config.advisory_warnings and config.link_hygiene
    assert config.audit_dir == tmp_path.resolve()


def test_clean_archive_exits_zero_and_prints_json(tmp_path, clean_zip, capsys) -> None:
    archive = tmp_path / "clean.zip"
    archive.write_bytes(clean_zip)
    report_path = tmp_path / "report.html"

    code = cli.main(["check", str(archive), "--json", "--html-report", str(report_path)])

    assert code == cli.EXIT_OK
    payload = json.loads(capsys.readouterr().out)
    assert payload["success"] is True
    assert payload["source"] == str(archive)
    assert "<table" in report_path.read_text(encoding="utf-8")


def test_failing_archive_exits_one(tmp_path, clean_files, capsys) -> None:
    archive = tmp_path / "bad.zip"
    html = clean_files["index.html"].replace("<body>", "<body>\n<video src=\"a.mp4\"></video>")
    archive.write_bytes(make_zip({**clean_files, "index.html": html}))

    assert cli.main([str(archive)]) == cli.EXIT_FAILED
    out = capsys.readouterr().out
    assert "[FAIL] Embedded Video Check" in out
    assert "Overall: FAILED" in out


def test_fatal_errors_exit_two(tmp_path, capsys) -> None:
    not_zip = tmp_path / "plain.zip"
    not_zip.write_bytes(b"hello")

    assert cli.main([str(not_zip), str(tmp_path / "missing.zip")]) == cli.EXIT_FATAL
    assert "[ERROR] The file is not a valid ZIP file." in capsys.readouterr().out
