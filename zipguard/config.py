"""Configuration objects and constants for archive validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger("zipguard")

SIZE_BUDGET_BYTES = 300 * 1024
MAX_IMAGE_WIDTH = 600
TARGET_DPI = 72
DEFAULT_FETCH_TIMEOUT = 10.0

RESIZE_START_QUALITY = 80
RESIZE_MIN_QUALITY = 40
RESIZE_QUALITY_STEP = 10
RESIZE_START_WIDTH_FACTOR = 1.0
RESIZE_MIN_WIDTH_FACTOR = 0.5
RESIZE_WIDTH_STEP = 0.1


@dataclass
class ValidationConfig:
    """Settings that control intake, resizing, inlining and the rule checks."""

    size_budget: int = SIZE_BUDGET_BYTES
    max_image_width: int = MAX_IMAGE_WIDTH
    target_dpi: int = TARGET_DPI
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    auto_fix: bool = True
    apply_fixes: bool = False
    advisory_warnings: bool = False
    link_hygiene: bool = False
    max_workers: Optional[int] = None
    audit_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ValidationConfig":
        """Build a config, honouring ``ZIPGUARD_*`` environment overrides."""
        config = cls()
        budget_kb = os.getenv("ZIPGUARD_BUDGET_KB")
        if budget_kb:
            try:
                config.size_budget = int(budget_kb) * 1024
            except ValueError:
                logger.warning(
                    "ZIPGUARD_BUDGET_KB is set to %r which is not an integer; using %d bytes",
                    budget_kb,
                    config.size_budget,
                )
        timeout = os.getenv("ZIPGUARD_FETCH_TIMEOUT")
        if timeout:
            try:
                config.fetch_timeout = float(timeout)
            except ValueError:
                logger.warning(
                    "ZIPGUARD_FETCH_TIMEOUT is set to %r which is not a number; using %.1fs",
                    timeout,
                    config.fetch_timeout,
                )
        audit_dir = os.getenv("ZIPGUARD_AUDIT_DIR")
        if audit_dir:
            config.audit_dir = Path(audit_dir).expanduser()
        return config
