# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Structured JSON logging for the lab assignment service.

All ``labassign.*`` loggers propagate to one package-level handler, so a
record looks the same whether it comes from a controller or a repair run.
Pass lab / user / report identifiers through ``extra=`` and they are
emitted as top-level JSON keys.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from labassign.core.config import settings

PACKAGE_LOGGER = "labassign"

# Keys copied from ``extra=`` into the JSON line when present
CONTEXT_FIELDS = ("request_id", "operation", "lab_id", "user_id", "member_id", "report_id")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "service": settings.SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info and record.exc_info[1]:
            entry["error"] = str(record.exc_info[1])
            entry["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(entry, default=str)


def _configure_package_logger() -> logging.Logger:
    root = logging.getLogger(PACKAGE_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the ``labassign`` hierarchy, e.g. ``labassign.services.x``."""
    root = _configure_package_logger()
    if not name or name == PACKAGE_LOGGER:
        return root
    if not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
