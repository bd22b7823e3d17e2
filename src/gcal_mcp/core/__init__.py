"""Process-wide constants and filesystem helpers."""

from .config import APP_NAME, DATA_DIR, LOG_FILE, ensure_data_dir

__all__ = ["APP_NAME", "DATA_DIR", "LOG_FILE", "ensure_data_dir"]
