from .base import (
    RepositoryError,
    NotFoundError,
    DuplicateError,
    InvalidFieldError,
    UnknownSortPropertyError,
)
from .errors import (
    GENERIC_ERROR_MESSAGE,
    EntityFamily,
    make_error,
    TESTING_MARKER,
    ErrorKind,
    ServiceError,
    UserServiceError,
    NoteServiceError,
    PageRequestMissingError,
    describe,
    status_text,
)
from .classifier import ExceptionClassifier

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "InvalidFieldError",
    "UnknownSortPropertyError",
    "GENERIC_ERROR_MESSAGE",
    "TESTING_MARKER",
    "ErrorKind",
    "ServiceError",
    "UserServiceError",
    "NoteServiceError",
    "PageRequestMissingError",
    "describe",
    "status_text",
    "EntityFamily",
    "make_error",
    "ExceptionClassifier",
]
