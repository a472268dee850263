"""
Centralized logging configuration.

Plain text output for development, JSON lines when ``log_json`` is enabled so
the cron container and the API can ship logs to the same aggregator.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from backend.app.core.settings import get_settings

ROOT_LOGGER_NAME = "launchpad"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def setup_logging(level: str | None = None, json_output: bool | None = None) -> logging.Logger:
    settings = get_settings()
    level = (level or settings.log_level).upper()
    json_output = settings.log_json if json_output is None else json_output

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))

    root.handlers.clear()
    root.addHandler(handler)
    root.propagate = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of the application logger, e.g. ``launchpad.backend.app.services.email``."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


logger = logging.getLogger(ROOT_LOGGER_NAME)
