from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_data_dir

APP_NAME = "gcal-mcp"
APP_AUTHOR = "gcal-mcp"
DATA_DIR = Path(os.getenv("GCAL_MCP_DATA_DIR") or user_data_dir(APP_NAME, APP_AUTHOR))
LOG_FILE = DATA_DIR / "gcal_mcp.log"


def ensure_data_dir() -> None:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
