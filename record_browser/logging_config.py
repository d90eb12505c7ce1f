from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

LOG_FORMAT_ENV = "RECORD_BROWSER_LOG_FORMAT"
LOG_LEVEL_ENV = "RECORD_BROWSER_LOG_LEVEL"

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

# Per-request access lines from the dev server drown out the app's own events
NOISY_LOGGERS = ("werkzeug",)


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
        level: Union[int, str, None] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Configure the root logger for the record browser.

    Output is one line per event. JSON is the default so fields passed via
    ``extra={...}`` (token, page, total, trigger, ...) stay machine-readable;
    ``plain`` is for local development.

    Format selection:
        1) force_format ("json" or "plain")
        2) env var RECORD_BROWSER_LOG_FORMAT
        3) "json"

    Level: the argument, else RECORD_BROWSER_LOG_LEVEL, else INFO.
    """
    format_mode = (force_format or os.getenv(LOG_FORMAT_ENV, "json")).lower()

    if format_mode == "plain":
        formatter: logging.Formatter = logging.Formatter(PLAIN_FORMAT)
    else:
        formatter = jsonlogger.JsonFormatter(
            JSON_FORMAT,
            rename_fields={"levelname": "level", "name": "logger"},
            static_fields={"app": "record_browser"},
        )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
