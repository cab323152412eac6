from __future__ import annotations

import os
from pathlib import Path


_APP_DIRECTORY = "NatalOrders"


def _get_storage_directory() -> Path:
    base = Path(os.getenv("LOCALAPPDATA", Path.home()))
    target = base / _APP_DIRECTORY
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_storage_root() -> Path:
    """Return the application data directory used for generated reports."""
    return _get_storage_directory()


def get_reports_directory() -> Path:
    target = get_storage_root() / "reports"
    target.mkdir(parents=True, exist_ok=True)
    return target
