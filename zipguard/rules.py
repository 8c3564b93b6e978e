"""Registry and concurrent runner for the independent rule checks."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .checks.background import NAME as BACKGROUND_NAME, check_background_styles
from .checks.dimensions import NAME as DIMENSIONS_NAME, check_image_dimensions
from .checks.layout import NAME as LAYOUT_NAME, check_map_tag_and_css_rules
from .checks.links import NAME as LINKS_NAME, check_link_hygiene
from .checks.patterns import NAME as PATTERNS_NAME, check_suspicious_patterns
from .checks.scripts import NAME as SCRIPTS_NAME, check_scripts_and_plugins
from .checks.video import NAME as VIDEO_NAME, check_embedded_videos
from .config import ValidationConfig
from .models import Archive, CheckResult, Diagnostic

logger = logging.getLogger("zipguard")

CheckFunc = Callable[[Archive, ValidationConfig], CheckResult]


@dataclass(frozen=True)
class RuleCheck:
    """A named check with its position in the report."""

    key: str
    name: str
    func: CheckFunc


DEFAULT_CHECKS = (
    RuleCheck("scripts", SCRIPTS_NAME, check_scripts_and_plugins),
    RuleCheck("layout", LAYOUT_NAME, check_map_tag_and_css_rules),
    RuleCheck("background", BACKGROUND_NAME, check_background_styles),
    RuleCheck("video", VIDEO_NAME, check_embedded_videos),
    RuleCheck("dimensions", DIMENSIONS_NAME, check_image_dimensions),
    RuleCheck("patterns", PATTERNS_NAME, check_suspicious_patterns),
)
LINK_HYGIENE_CHECK = RuleCheck("links", LINKS_NAME, check_link_hygiene)


def checks_for(config: ValidationConfig) -> List[RuleCheck]:
    """Return the ordered battery of checks enabled by ``config``."""
    checks = list(DEFAULT_CHECKS)
    if config.link_hygiene:
        checks.append(LINK_HYGIENE_CHECK)
    return checks


def _run_guarded(check: RuleCheck, archive: Archive, config: ValidationConfig) -> CheckResult:
    try:
        return check.func(archive, config)
    except Exception as exc:  # pylint: disable=broad-except
        logger.exception("Unexpected error while running %s", check.name)
        return CheckResult(
            name=check.name,
            success=False,
            diagnostics=(Diagnostic(f"Internal error while running {check.name}: {exc}"),),
        )


def run_checks(
    archive: Archive,
    config: Optional[ValidationConfig] = None,
    checks: Optional[Sequence[RuleCheck]] = None,
) -> List[CheckResult]:
    """Run every check against the same snapshot; results keep registry order."""
    config = config or ValidationConfig()
    battery = list(checks) if checks is not None else checks_for(config)
    if not battery:
        return []
    workers = config.max_workers or len(battery)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="zipguard-check") as pool:
        results = list(pool.map(lambda check: _run_guarded(check, archive, config), battery))
    for result in results:
        logger.info("%s: %s", result.name, "passed" if result.success else "failed")
    return results
