"""
Logging configuration for the session service.

Application and uvicorn loggers share one stdout handler; uvicorn's
access log gets its own message-only handler with health probes
filtered out.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_CHECK_PATHS = ("/health", "/healthz")

# logger name -> handler
LOGGER_HANDLERS = {
    "uvicorn": "default",
    "uvicorn.error": "default",
    "uvicorn.access": "access",
    "session_service": "default",
}


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET requests on the health endpoints."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not ("GET" in message and any(f"{path} " in message for path in HEALTH_CHECK_PATHS))


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """
    Build a dictConfig schema.

    Args:
        level: Level name applied to every configured logger and the root
    """
    level = level.upper()
    loggers = {
        name: {"handlers": [handler], "level": level, "propagate": False}
        for name, handler in LOGGER_HANDLERS.items()
    }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["health_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the logging configuration process-wide."""
    logging.config.dictConfig(get_logging_config(level))
