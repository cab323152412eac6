from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict

from ..models.order_models import ReportSettings
from .database import get_reports_directory

logger = logging.getLogger(__name__)

_ENV_PREFIX = "NATALORDERS_"

_DEFAULTS: Dict[str, str] = {
    "output_dir": "",
    "log_level": "INFO",
    "qt_platform": "offscreen",
    "pdf_resolution": "144",
}


def get_setting(key: str) -> str:
    key = key.strip()
    value = os.getenv(f"{_ENV_PREFIX}{key.upper()}")
    if value is None or not value.strip():
        return _DEFAULTS.get(key, "")
    return value.strip()


def get_report_settings() -> ReportSettings:
    log_level = (get_setting("log_level") or _DEFAULTS["log_level"]).upper()
    if log_level not in logging.getLevelNamesMapping():
        logger.warning("Unknown log level %r, falling back to %s", log_level, _DEFAULTS["log_level"])
        log_level = _DEFAULTS["log_level"]

    try:
        resolution = int(get_setting("pdf_resolution") or _DEFAULTS["pdf_resolution"])
    except ValueError:
        resolution = int(_DEFAULTS["pdf_resolution"])

    return ReportSettings(
        output_dir=get_setting("output_dir"),
        log_level=log_level,
        qt_platform=get_setting("qt_platform"),
        pdf_resolution=max(72, resolution),
    )


def get_output_directory() -> Path:
    configured = get_report_settings().output_dir
    if not configured:
        return get_reports_directory()
    target = Path(configured).expanduser()
    target.mkdir(parents=True, exist_ok=True)
    return target
