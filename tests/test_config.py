from __future__ import annotations

from pathlib import Path

from zipguard.config import DEFAULT_FETCH_TIMEOUT, SIZE_BUDGET_BYTES, ValidationConfig


def test_defaults() -> None:
    config = ValidationConfig()
    assert config.size_budget == 300 * 1024 == SIZE_BUDGET_BYTES
    assert config.max_image_width == 600
    assert config.target_dpi == 72
    assert config.auto_fix and not config.apply_fixes


def test_from_env_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("ZIPGUARD_BUDGET_KB", "120")
    monkeypatch.setenv("ZIPGUARD_FETCH_TIMEOUT", "2.5")
    monkeypatch.setenv("ZIPGUARD_AUDIT_DIR", str(tmp_path))
    config = ValidationConfig.from_env()
    assert config.size_budget == 120 * 1024
    assert config.fetch_timeout == 2.5
    assert config.audit_dir == Path(tmp_path)


def test_from_env_ignores_bad_values(monkeypatch, caplog) -> None:
    monkeypatch.setenv("ZIPGUARD_BUDGET_KB", "lots")
    monkeypatch.setenv("ZIPGUARD_FETCH_TIMEOUT", "soon")
    monkeypatch.delenv("ZIPGUARD_AUDIT_DIR", raising=False)
    config = ValidationConfig.from_env()
    assert config.size_budget == SIZE_BUDGET_BYTES
    assert config.fetch_timeout == DEFAULT_FETCH_TIMEOUT
    assert config.audit_dir is None
    assert "ZIPGUARD_BUDGET_KB" in caplog.text
