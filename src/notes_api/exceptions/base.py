"""
Repository-level exceptions.

These are raised by `notes_api.repositories` and carry enough structure
(fields, constraint name, short code) for the service layer to turn them into
client-facing errors without looking at raw database text.
"""

from typing import Iterable


class RepositoryError(Exception):
    """
    Base exception for repository errors.

    - message: human-friendly message
    - fields: optional list of column names related to the error (e.g. ['email'])
    - constraint: optional DB constraint name (e.g. 'email_unique')
    - error_code: canonical short code ('duplicate', 'not_found', ...)
    """

    # canonical error_code -> default HTTP status
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "invalid_field": 400,
        "invalid_sort": 400,
        "not_found": 404,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{self.message} ({'; '.join(parts)})"
        return self.message

    def http_status(self) -> int:
        """Status implied by error_code; 500 when the error is not classified."""
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 500)
        return 500


class NotFoundError(RepositoryError):
    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="not_found")


class DuplicateError(RepositoryError):
    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class InvalidFieldError(RepositoryError):
    """Raised when the caller passes unknown fields to repository methods."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_field")


class UnknownSortPropertyError(RepositoryError):
    """
    Raised when a page request sorts by a column the model does not have.

    The message always follows the shape "No property 'x' found for type 'Model'";
    the classifier keeps only the part before "for type".
    """

    def __init__(self, prop: str, model_name: str):
        super().__init__(
            f"No property '{prop}' found for type '{model_name}'",
            fields=[prop],
            error_code="invalid_sort",
        )
        self.prop = prop
        self.model_name = model_name


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "InvalidFieldError",
    "UnknownSortPropertyError",
]
