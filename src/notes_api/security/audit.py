"""
Audit event sink.

Authentication outcomes and unhandled exceptions are reported through an
`AuditSink`. The default implementation writes to the `notes_api.audit`
logger; where those records end up (console, audit.log) is decided by the
logging configuration, not here.
"""

import logging
from typing import Protocol, runtime_checkable

AUDIT_LOGGER_NAME = "notes_api.audit"


@runtime_checkable
class AuditSink(Protocol):
    def record_auth_success(self, username: str) -> None: ...

    def record_auth_failure(self, username: str | None, reason: str) -> None: ...

    def record_unhandled_exception(self, exc: BaseException) -> None: ...


class LoggingAuditSink:
    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(AUDIT_LOGGER_NAME)

    def record_auth_success(self, username: str) -> None:
        self.logger.info("audit.auth.success", extra={"username": username})

    def record_auth_failure(self, username: str | None, reason: str) -> None:
        self.logger.warning("audit.auth.failure", extra={"username": username, "reason": reason})

    def record_unhandled_exception(self, exc: BaseException) -> None:
        self.logger.error(
            "audit.unhandled_exception",
            extra={"exc_type": type(exc).__name__},
            exc_info=(type(exc), exc, exc.__traceback__),
        )


class NullAuditSink:
    def record_auth_success(self, username: str) -> None:
        pass

    def record_auth_failure(self, username: str | None, reason: str) -> None:
        pass

    def record_unhandled_exception(self, exc: BaseException) -> None:
        pass
