# src/notes_api/core/logging/builder.py
"""
Logging builder: assemble a dictConfig mapping from Settings and apply it.

    setup_logging(settings)

is the only call the rest of the app needs (main.py does it in the lifespan).

Handler wiring:
| LOG_TO_STDOUT | LOG_DIR set | Active handlers                               |
| ------------- | ----------- | --------------------------------------------- |
| true          | any         | console + error_console                       |
| false         | no          | console + error_console                       |
| false         | yes         | console + file + error_file (+ audit_file)    |

The `notes_api.audit` logger always reaches the root handlers; when file logging
is on it also writes to its own `audit.log`.
"""

import logging
import logging.config
from pathlib import Path

from notes_api.config.settings import Settings
from notes_api.security.audit import AUDIT_LOGGER_NAME

from .formatters import JsonFormatter, ColorFormatter
from .filters import RequestIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_audit_file_handler,
    get_error_console_handler,
)

SERVICE_NAME = "notes-api"


def _file_logging_enabled(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping using the provided settings.

    The returned mapping includes:
      - formatters: "standard" (color/dev or plain) and "json"
      - filters: "request_id", "redact"
      - handlers: console, then file/error_file/audit_file OR error_console
      - loggers: root, notes_api.audit, uvicorn.error, uvicorn.access, sqlalchemy.engine
    """
    log_format = getattr(settings, "LOG_FORMAT", "json")

    formatters = {
        "standard": {
            # color only in text development mode
            "()": ColorFormatter if log_format == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(request_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": getattr(settings, "ENV", None),
            "service": SERVICE_NAME,
        },
    }

    filters = {
        "request_id": {"()": RequestIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}
    audit_handlers: list[str] = []

    if _file_logging_enabled(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
        handlers["audit_file"] = get_audit_file_handler(settings)
        audit_handlers.append("audit_file")
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    root_handlers = [name for name in handlers if name != "audit_file"]

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": root_handlers,
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            AUDIT_LOGGER_NAME: {
                "handlers": audit_handlers,
                "level": "INFO",
                "propagate": True,
            },
            "uvicorn.error": {
                "level": settings.LOG_LEVEL,
                "handlers": root_handlers,
                "propagate": False,
            },
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            # SQL logging may contain user data
            "sqlalchemy.engine": {
                "level": "DEBUG" if getattr(settings, "ENABLE_SQL_LOGGING", False) else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    return config


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration.

      1. Create LOG_DIR when writing files.
      2. dictConfig(make_dict_config(settings)).
      3. Add a RequestIdFilter on the root logger so %(request_id)s never breaks
         records emitted before the middleware runs.
    """
    if _file_logging_enabled(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(RequestIdFilter())
