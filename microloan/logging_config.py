"""Logging configuration for the microloan engine."""
import json
import logging
import sys
from datetime import datetime, timezone

from microloan.config import get_log_level


def setup_logging(level=None, format_type="standard"):
    """Configure the root logger.

    The engine itself never calls this; the hosting application does.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the configured MICROLOAN_LOG_LEVEL.
        format_type: "standard" or "json".
    """
    if level is None:
        level = get_log_level()
    log_level = getattr(logging, level.upper(), logging.INFO)

    if format_type == "json":
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("microloan").setLevel(log_level)


class JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra"):
            log_data.update(record.extra)

        return json.dumps(log_data)


def get_logger(name):
    """Get a logger with the given name (usually __name__)."""
    return logging.getLogger(name)
