# src/notes_api/core/logging/filters.py
"""
Logging filters.

- RequestIdFilter guarantees every LogRecord has a `request_id` attribute,
  taken from the record's `extra`, else from the current context (set by
  RequestIDMiddleware), else the sentinel "-".
- RedactFilter masks sensitive attributes passed through `extra`.

The request id lives in a ContextVar, so it follows a request across awaits
and does not leak between concurrent requests.
"""

import logging
import contextvars
from logging import LogRecord

_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)


def set_request_id(request_id: str | None):
    """
    Set the request id in the current context.

    Returns:
        token: pass it to reset_request_id(token) to restore the previous value.
    """
    return _request_id_ctx.set(request_id)


def reset_request_id(token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Replace the value of sensitive `extra` keys before any handler formats the record."""

    SENSITIVE = {
        "password",
        "hashed_password",
        "new_password",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "credentials",
    }
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
