"""Structured logging configuration for the GovRate pricing engine."""
import logging
import json
import sys
from datetime import datetime, timezone

from govrate.config import LOG_JSON, LOG_LEVEL

# Pricing context that engines attach through ``extra=``
_CONTEXT_FIELDS = ("category_title", "settings_version", "field", "severity", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON structured log formatter for production."""
    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        return json.dumps(log_entry, default=str)


def setup_logging(level: str = LOG_LEVEL, json_output: bool = LOG_JSON, stream=None):
    """Configure application logging. Records go to stdout unless ``stream`` is given."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler(stream or sys.stdout)
    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
        ))

    root.handlers = [handler]

    # Per-calculation detail stays quiet unless explicitly asked for
    if root.level > logging.DEBUG:
        logging.getLogger("govrate.perf").setLevel(logging.WARNING)
