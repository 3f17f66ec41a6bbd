"""Configuration loaded from environment variables."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from diveweb.index.flatten import SortOrder

load_dotenv()

# Paths
ANALYSIS_PATH: Path = Path(os.getenv("ANALYSIS_PATH", "./analysis.json"))
DIST_DIR: Path = Path(
    os.getenv("DIST_DIR", str(Path(__file__).resolve().parent.parent.parent / "frontend" / "dist"))
)

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# Indexing
SORT_ORDER: str = os.getenv("SORT_ORDER", SortOrder.BY_NAME.value)


def get_sort_order() -> SortOrder:
    """Parse SORT_ORDER. Raises RuntimeError if it names no known order."""
    try:
        return SortOrder.parse(SORT_ORDER)
    except ValueError as e:
        raise RuntimeError(f"Invalid SORT_ORDER: {e}") from e
