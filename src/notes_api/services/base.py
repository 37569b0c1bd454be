"""
Transaction boundary shared by the services.

    async with service_boundary(self.db, self.classifier, EntityFamily.NOTE, "note.create"):
        ...repository calls...

On success the session is committed. On any failure it is rolled back and a
classified ServiceError is raised in place of the original exception, which
stays available as `__cause__`.
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.exceptions.classifier import ExceptionClassifier
from notes_api.exceptions.errors import EntityFamily, ErrorKind, ServiceError, make_error

logger = logging.getLogger(__name__)


def ensure_valid_id(value, family: EntityFamily) -> int:
    """
    Ids must be positive integers. Checked before any database access.

    Raises:
        ServiceError(INVALID_ID)
    """
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise make_error(family, ErrorKind.INVALID_ID)
    return value


@asynccontextmanager
async def service_boundary(
    db: AsyncSession,
    classifier: ExceptionClassifier,
    family: EntityFamily,
    operation: str,
):
    try:
        yield
        await db.commit()
    except Exception as exc:
        try:
            await db.rollback()
        except Exception:
            logger.exception("service.rollback_failed", extra={"operation": operation})

        error = classifier.classify(exc, family)
        logger.info(
            "service.operation_failed",
            extra={
                "operation": operation,
                "status": error.http_status(),
                "kind": error.kind.value,
                "exc_type": type(exc).__name__,
            },
        )
        if error is exc:
            raise
        raise error from exc


__all__ = ["service_boundary", "ensure_valid_id", "ServiceError"]
