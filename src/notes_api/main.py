"""
Application factory and uvicorn entry point.

    uvicorn notes_api.main:app
    notes-api            # console script, same thing
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from notes_api.api import deps
from notes_api.api.error_handlers import register_exception_handlers
from notes_api.api.routes import notes_router, users_router
from notes_api.config import Settings, get_settings
from notes_api.core.logging import RequestIDMiddleware, setup_logging
from notes_api.database.base import Base
from notes_api.database.session import engine
from notes_api.exceptions.classifier import ExceptionClassifier

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(settings)
        if settings.AUTO_CREATE_TABLES:
            import notes_api.models  # noqa: F401  register mappers on Base.metadata

            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("app.startup", extra={"env": settings.ENV})
        yield
        # Shutdown
        await engine.dispose()
        logger.info("app.shutdown")

    app = FastAPI(
        title="Notes API",
        description="Users and their personal notes",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.classifier = ExceptionClassifier(deps.get_audit_sink())

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(notes_router)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "notes_api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENV == "development",
        proxy_headers=True,
    )


if __name__ == "__main__":
    run()
