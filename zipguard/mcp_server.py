"""MCP server exposing zipguard archive validation."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import ValidationConfig
from .pipeline import ValidationPipeline

logger = logging.getLogger("zipguard.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="zipguard")


@mcp.tool()
def validate_archive(
    path: str,
) -> str:
    """Validate a ZIP of an HTML email template and return the JSON report."""

    source = Path(path).expanduser()
    if not source.exists():
        raise FileNotFoundError(f"Archive path does not exist: {source}")

    pipeline = ValidationPipeline(ValidationConfig.from_env())
    outcome = pipeline.process(source.read_bytes())
    return json.dumps({"source": str(source), **outcome.to_dict()}, indent=2)


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
