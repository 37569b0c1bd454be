"""
FastAPI dependencies: session, services, authentication and route guards.

Guards run before the route body, so a rejected caller never reaches a
service method.
"""

import logging

from fastapi import Depends, Path, Query
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from notes_api.config import Settings, get_settings
from notes_api.database.session import get_async_session
from notes_api.exceptions.classifier import ExceptionClassifier
from notes_api.exceptions.errors import EntityFamily, ErrorKind, make_error
from notes_api.models.role import RoleName
from notes_api.schemas.page import PageRequest, SortOrder
from notes_api.security.audit import AuditSink, LoggingAuditSink
from notes_api.security.authorization import has_role, is_admin_or_owner
from notes_api.security.principal import Principal
from notes_api.services.note_service import NoteService
from notes_api.services.user_service import UserService

logger = logging.getLogger(__name__)

http_basic = HTTPBasic(auto_error=False, realm="notes-api")

_audit_sink = LoggingAuditSink()


# =================================================================================================================
# Infrastructure
# =================================================================================================================

def get_audit_sink() -> AuditSink:
    return _audit_sink


def get_classifier(audit_sink: AuditSink = Depends(get_audit_sink)) -> ExceptionClassifier:
    return ExceptionClassifier(audit_sink)


def get_user_service(
    db: AsyncSession = Depends(get_async_session),
    classifier: ExceptionClassifier = Depends(get_classifier),
) -> UserService:
    return UserService(db, classifier)


def get_note_service(
    db: AsyncSession = Depends(get_async_session),
    classifier: ExceptionClassifier = Depends(get_classifier),
) -> NoteService:
    return NoteService(db, classifier)


def get_page_request(
    page: int = Query(0, ge=0, description="0-based page index"),
    size: int | None = Query(None, ge=1, description="page size"),
    sort: list[str] = Query([], description="field,direction (repeatable)"),
    settings: Settings = Depends(get_settings),
) -> PageRequest:
    size = min(size or settings.PAGE_DEFAULT_SIZE, settings.PAGE_MAX_SIZE)
    orders = [SortOrder.parse(expr) for expr in sort if expr and expr.strip()]
    return PageRequest(page=page, size=size, sort=orders)


# =================================================================================================================
# Authentication
# =================================================================================================================

async def get_current_principal(
    credentials: HTTPBasicCredentials | None = Depends(http_basic),
    service: UserService = Depends(get_user_service),
    audit_sink: AuditSink = Depends(get_audit_sink),
) -> Principal:
    """
    Resolve HTTP Basic credentials to a Principal.

    Raises:
        ServiceError(UNAUTHORIZED): missing or wrong credentials (401).
    """
    if credentials is None:
        audit_sink.record_auth_failure(None, "missing_credentials")
        raise make_error(EntityFamily.USER, ErrorKind.UNAUTHORIZED)

    principal = await service.authenticate(credentials.username, credentials.password)
    if principal is None:
        audit_sink.record_auth_failure(credentials.username, "bad_credentials")
        raise make_error(EntityFamily.USER, ErrorKind.UNAUTHORIZED)

    audit_sink.record_auth_success(principal.username)
    return principal


# =================================================================================================================
# Guards
# =================================================================================================================

def owner_or_admin(
    user_id: str = Path(..., description="target user id"),
    principal: Principal = Depends(get_current_principal),
) -> int:
    """
    Allow the user itself or an admin; return the parsed target id.

    The id is taken as a raw string so a non-numeric id is denied (403)
    instead of failing request validation.
    """
    if not (user_id.isascii() and user_id.isdigit()) or not is_admin_or_owner(principal, user_id):
        logger.info(
            "authz.denied",
            extra={"principal_id": principal.id, "target_id": user_id},
        )
        raise make_error(EntityFamily.USER, ErrorKind.ACCESS_DENIED)
    return int(user_id)


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not has_role(principal, RoleName.ADMIN):
        logger.info("authz.admin_required", extra={"principal_id": principal.id})
        raise make_error(EntityFamily.USER, ErrorKind.ACCESS_DENIED)
    return principal
