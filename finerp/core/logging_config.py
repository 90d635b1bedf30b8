"""
Logging setup for the API process.

LOG_FORMAT selects the output:
- console: human-readable lines for local development
- json: one JSON object per line for log aggregation
"""
import json
import logging
import logging.config
from datetime import datetime, timezone

# Attributes every LogRecord has; anything else was passed via `extra=`.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logging_config(level: str = "INFO", fmt: str = "console") -> dict:
    formatters = {
        "json": {"()": JsonFormatter},
        "console": {
            "format": "[{asctime}] {levelname} {name} {message}",
            "style": "{",
        },
    }
    formatter = "json" if fmt == "json" else "console"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "finerp": {"handlers": ["console"], "level": level.upper(), "propagate": False},
            "uvicorn.access": {"handlers": ["console"], "level": "WARNING", "propagate": False},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    }


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    logging.config.dictConfig(get_logging_config(level, fmt))
