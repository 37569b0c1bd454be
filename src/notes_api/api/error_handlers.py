"""
FastAPI exception handlers.

Every error response has the same body:

    {"message": "Email already exists", "status": "409 CONFLICT", "instant": "2024-07-18T01:30:59Z"}

Services already raise classified ServiceErrors; request validation errors and
anything unexpected are classified here with the same ExceptionClassifier.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_api.exceptions.classifier import ExceptionClassifier
from notes_api.exceptions.errors import EntityFamily, ServiceError, status_text

logger = logging.getLogger(__name__)


def utc_instant() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def family_for(request: Request) -> EntityFamily:
    return EntityFamily.NOTE if request.url.path.startswith("/notes") else EntityFamily.USER


def _classifier(request: Request) -> ExceptionClassifier:
    return getattr(request.app.state, "classifier", None) or ExceptionClassifier()


def error_response(error: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Basic"} if error.http_status() == 401 else None
    return JSONResponse(
        status_code=error.http_status(),
        content=error.to_payload(utc_instant()),
        headers=headers,
    )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    logger.info(
        "api.service_error",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status": exc.http_status(),
            "kind": exc.kind.value,
        },
    )
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path/query/body -> 400 with the first validation message."""
    error = _classifier(request).classify(exc, family_for(request))
    logger.info(
        "api.validation_error",
        extra={"method": request.method, "path": request.url.path, "client_message": error.message},
    )
    return error_response(error)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, wrong method) in the common error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "message": str(exc.detail) if exc.detail else "",
            "status": status_text(exc.status_code),
            "instant": utc_instant(),
        },
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: never leak internals, always answer with a well-formed 500."""
    error = _classifier(request).classify(exc, family_for(request))
    return error_response(error)


# Helper to register all handlers on an app (call this from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
