"""
Domain errors raised by the service layer.

Services raise `ServiceError(ErrorKind.X)`; `describe()` is the single place
that decides the HTTP status and client message for each kind.
"""

from enum import Enum
from http import HTTPStatus

GENERIC_ERROR_MESSAGE = "An error occurred, please try again later or contact the us for support"

# Substring that marks exceptions raised on purpose by tests; such failures are
# logged at DEBUG instead of ERROR.
TESTING_MARKER = "[expected-in-tests]"

# Text of the TypeError raised when a paged query is called without a page request.
PAGE_REQUEST_MISSING_MARKER = '"page_request" is none'


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    INVALID_ID = "invalid_id"
    USER_NOT_FOUND = "user_not_found"
    NOTE_NOT_FOUND = "note_not_found"
    USER_DTO_NULL = "user_dto_null"
    NOTE_DTO_NULL = "note_dto_null"
    PASSWORD_TOO_SHORT = "password_too_short"
    TITLE_TOO_LONG = "title_too_long"
    PAGE_REQUEST_MISSING = "page_request_missing"
    UNKNOWN_SORT_PROPERTY = "unknown_sort_property"
    USERNAME_TAKEN = "username_taken"
    EMAIL_TAKEN = "email_taken"
    UNAUTHORIZED = "unauthorized"
    ACCESS_DENIED = "access_denied"
    UNEXPECTED = "unexpected"


_DESCRIPTIONS: dict[ErrorKind, tuple[int, str]] = {
    ErrorKind.VALIDATION: (400, "Invalid request"),
    ErrorKind.INVALID_ID: (400, "Invalid id"),
    ErrorKind.USER_NOT_FOUND: (404, "User not found"),
    ErrorKind.NOTE_NOT_FOUND: (404, "Note not found"),
    ErrorKind.USER_DTO_NULL: (400, "User to update/create cannot be null"),
    ErrorKind.NOTE_DTO_NULL: (400, "Note to update/create cannot be null"),
    ErrorKind.PASSWORD_TOO_SHORT: (400, "Password must be at least 8 characters"),
    ErrorKind.TITLE_TOO_LONG: (400, "Title must be less than 255 characters"),
    ErrorKind.PAGE_REQUEST_MISSING: (400, GENERIC_ERROR_MESSAGE),
    ErrorKind.UNKNOWN_SORT_PROPERTY: (400, "Invalid sort property"),
    ErrorKind.USERNAME_TAKEN: (409, "Username already exists"),
    ErrorKind.EMAIL_TAKEN: (409, "Email already exists"),
    ErrorKind.UNAUTHORIZED: (401, "Unauthorized"),
    ErrorKind.ACCESS_DENIED: (403, "Access denied"),
    ErrorKind.UNEXPECTED: (500, GENERIC_ERROR_MESSAGE),
}


def describe(kind: ErrorKind) -> tuple[int, str]:
    """Return the (status, default message) pair for an error kind."""
    return _DESCRIPTIONS[kind]


def status_text(status: int) -> str:
    """'409 CONFLICT' style status string used in error bodies."""
    try:
        phrase = HTTPStatus(status).phrase
    except ValueError:
        return str(status)
    return f"{status} {phrase.upper()}"


class ServiceError(Exception):
    """
    A classified, client-safe failure.

    `message` overrides the kind's default text (used for validation messages
    and sort errors, whose text comes from the failing input).
    """

    def __init__(self, kind: ErrorKind, message: str | None = None, *, status: int | None = None):
        default_status, default_message = describe(kind)
        self.kind = kind
        self.status = status if status is not None else default_status
        # blank messages fall back to the kind's text so bodies are never empty
        self.message = message if message and message.strip() else default_message
        super().__init__(self.message)

    def http_status(self) -> int:
        return self.status

    def to_payload(self, instant: str) -> dict:
        """Error body: {"message", "status", "instant"}."""
        return {
            "message": self.message,
            "status": status_text(self.status),
            "instant": instant,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, status={self.status}, message={self.message!r})"


class UserServiceError(ServiceError):
    pass


class NoteServiceError(ServiceError):
    pass


class EntityFamily(str, Enum):
    USER = "user"
    NOTE = "note"


def make_error(family: EntityFamily, kind: ErrorKind, message: str | None = None) -> ServiceError:
    """Build the family-specific ServiceError for `kind`."""
    error_cls = UserServiceError if family is EntityFamily.USER else NoteServiceError
    return error_cls(kind, message)


class PageRequestMissingError(TypeError):
    """Raised by paged service calls that receive no page request."""

    def __init__(self, operation: str):
        super().__init__(f'Cannot invoke "{operation}" because "page_request" is None')


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "TESTING_MARKER",
    "PAGE_REQUEST_MISSING_MARKER",
    "ErrorKind",
    "describe",
    "status_text",
    "ServiceError",
    "UserServiceError",
    "NoteServiceError",
    "EntityFamily",
    "make_error",
    "PageRequestMissingError",
]
