# anonymization/logging_config.py

"""JSON logging for the service and the Streamlit entry point."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}

QUIET_LOGGERS = ("presidio-analyzer", "transformers", "huggingface_hub", "urllib3")


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Returns the attributes attached to a record through ``extra=``."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class StructuredFormatter(logging.Formatter):
    """Renders each record as one JSON object per line.

    Fields passed via ``extra=`` are merged into the top level of the
    entry; they never overwrite the standard fields. Values that are not
    JSON-serializable are rendered with ``str()``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in extra_fields(record).items():
            entry.setdefault(key, value)

        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "INFO", stream: Optional[TextIO] = None, force: bool = True
) -> None:
    """Routes all logging through a single JSON handler.

    Earlier root handlers are replaced. With ``force=False`` the call is a
    no-op once a JSON handler is installed, like ``logging.basicConfig``.

    Args:
        level: Level name such as DEBUG or WARNING; unknown names mean INFO
        stream: Destination stream, stdout by default
        force: Reconfigure even if a JSON handler is already installed
    """
    root = logging.getLogger()
    if not force and any(
        isinstance(h.formatter, StructuredFormatter) for h in root.handlers
    ):
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(StructuredFormatter())

    root.handlers[:] = [handler]
    root.setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured", extra={"log_level": logging.getLevelName(log_level)}
    )
