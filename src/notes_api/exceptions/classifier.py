"""
Exception classification for the service layer.

`ExceptionClassifier.classify()` turns any failure raised while serving a
request into a `ServiceError` (status + client-safe message). Rules are tried
in a fixed order and the first match wins:

    1. pydantic / request validation failure  -> 400, first error message
    2. ServiceError (already classified)      -> unchanged
    3. missing page request (TypeError)       -> 400, generic message
    4. unknown sort property                  -> 400, text before "for type"
    5. unique violation (user family only)    -> 409, username/email message
    6. anything else                          -> 500, generic message, logged

classify() itself never raises; a failure inside it degrades to rule 6.
"""

import logging
from typing import Sequence

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from notes_api.models.user import EMAIL_UNIQUE_NAME, USERNAME_UNIQUE_NAME
from notes_api.security.audit import NullAuditSink
from .base import DuplicateError, UnknownSortPropertyError
from .errors import (
    PAGE_REQUEST_MISSING_MARKER,
    TESTING_MARKER,
    EntityFamily,
    ErrorKind,
    ServiceError,
    make_error,
)
from .mapper import extract_columns_from_integrity, extract_constraint_from_message
from .integrity_classifier import classify_integrity_error, UniqueConstraintError

logger = logging.getLogger(__name__)

SORT_MESSAGE_MARKER = "for type"
_PYDANTIC_VALUE_ERROR_PREFIX = "Value error, "


def _contains(haystack: str | None, needle: str) -> bool:
    """Case-insensitive substring test on trimmed text."""
    if not haystack:
        return False
    return needle.lower().strip() in haystack.lower().strip()


def first_validation_message(errors: Sequence[dict]) -> str | None:
    """Message of the first validation error, without pydantic's 'Value error, ' prefix."""
    if not errors:
        return None
    msg = str(errors[0].get("msg") or "")
    if msg.startswith(_PYDANTIC_VALUE_ERROR_PREFIX):
        msg = msg[len(_PYDANTIC_VALUE_ERROR_PREFIX):]
    return msg or None


class ExceptionClassifier:
    """
    Maps failures to ServiceErrors.

    Args:
        audit_sink: receives unexpected (rule 6) exceptions. Defaults to a
            NullAuditSink, so unexpected errors are only logged.
    """

    def __init__(self, audit_sink=None):
        self.audit_sink = audit_sink if audit_sink is not None else NullAuditSink()

    def classify(self, exc: BaseException, family: EntityFamily) -> ServiceError:
        try:
            return self._classify(exc, family)
        except Exception:
            logger.exception(
                "classifier.failed",
                extra={"family": family.value, "exc_type": type(exc).__name__},
            )
            return make_error(family, ErrorKind.UNEXPECTED)

    # =================================================================================================================
    # Rules
    # =================================================================================================================

    def _classify(self, exc: BaseException, family: EntityFamily) -> ServiceError:
        # 1) validation
        if isinstance(exc, (ValidationError, RequestValidationError)):
            return make_error(family, ErrorKind.VALIDATION, first_validation_message(exc.errors()))

        # 2) already classified by the service layer
        if isinstance(exc, ServiceError):
            return exc

        # 3) paged call without a page request
        if isinstance(exc, TypeError) and _contains(str(exc), PAGE_REQUEST_MISSING_MARKER):
            return make_error(family, ErrorKind.PAGE_REQUEST_MISSING)

        # 4) sort by a property the entity does not have
        if isinstance(exc, UnknownSortPropertyError):
            message = exc.message.split(SORT_MESSAGE_MARKER)[0].strip()
            return make_error(family, ErrorKind.UNKNOWN_SORT_PROPERTY, message)

        # 5) unique violations on username / email
        if family is EntityFamily.USER:
            kind = self._duplicate_kind(exc)
            if kind is not None:
                return make_error(family, kind)

        # 6) unexpected
        return self._unexpected(exc, family)

    def _duplicate_kind(self, exc: BaseException) -> ErrorKind | None:
        if isinstance(exc, DuplicateError):
            constraint, fields = exc.constraint, exc.fields or []
        elif isinstance(exc, IntegrityError):
            exc_cls, constraint = classify_integrity_error(exc)
            if exc_cls is not UniqueConstraintError:
                return None
            constraint = constraint or extract_constraint_from_message(exc)
            fields = extract_columns_from_integrity(exc) or []
        else:
            return None

        if _contains(constraint, USERNAME_UNIQUE_NAME) or "username" in fields:
            return ErrorKind.USERNAME_TAKEN
        if _contains(constraint, EMAIL_UNIQUE_NAME) or "email" in fields:
            return ErrorKind.EMAIL_TAKEN

        logger.info("classifier.unmatched_duplicate", extra={"constraint": constraint, "fields": fields})
        return None

    def _unexpected(self, exc: BaseException, family: EntityFamily) -> ServiceError:
        if _contains(str(exc), TESTING_MARKER):
            logger.debug(
                "classifier.unexpected_error.expected_in_tests",
                extra={"family": family.value, "exc_type": type(exc).__name__},
            )
        else:
            logger.error(
                "classifier.unexpected_error",
                extra={"family": family.value, "exc_type": type(exc).__name__},
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        self.audit_sink.record_unhandled_exception(exc)
        return make_error(family, ErrorKind.UNEXPECTED)

