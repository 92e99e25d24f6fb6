"""
CivicWatch - FastAPI Application Entry Point

Citizen infrastructure reporting with duplicate merging, SLA tracking,
escalation and predictive analytics.

DESIGN PRINCIPLES:
- AI classification is advisory; rule-based fallback keeps ingestion working
- Duplicates are merged one hop deep into a primary report
- Escalation is a flag alongside the workflow status, never a status
- Services are wired once in a container and injected into routes
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from civicwatch.core.exceptions import (
    CivicWatchError,
    IngestionError,
    InvalidStatusError,
    PhotoStorageError,
    ReportNotFoundError,
    StoreError,
)
from civicwatch.core.logging_config import configure_logging
from civicwatch.core.settings import Settings, settings
from civicwatch.routes import analytics, escalations, health, reports
from civicwatch.services.container import ServiceContainer, build_container

logger = logging.getLogger(__name__)


ERROR_STATUS_CODES = {
    ReportNotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidStatusError: status.HTTP_400_BAD_REQUEST,
    PhotoStorageError: status.HTTP_400_BAD_REQUEST,
    IngestionError: status.HTTP_400_BAD_REQUEST,
    StoreError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _status_code_for(exc: CivicWatchError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def create_app(
    app_settings: Settings = settings,
    container: Optional[ServiceContainer] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        app_settings: Settings to configure services from
        container: Prebuilt services (tests); built at startup when omitted
    """
    configure_logging(app_settings.LOG_LEVEL)

    app = FastAPI(
        title=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
        description="Citizen infrastructure reports with duplicate merging, SLA escalation and analytics",
        debug=app_settings.DEBUG
    )
    app.state.settings = app_settings
    app.state.container = container

    @app.exception_handler(CivicWatchError)
    async def civicwatch_exception_handler(request: Request, exc: CivicWatchError):
        status_code = _status_code_for(exc)
        if status_code >= 500:
            logger.error(f"❌ {request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={"detail": exc.message, "error": type(exc).__name__, "details": jsonable_encoder(exc.details)}
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"🔥 Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": jsonable_encoder(exc.errors())}
        )

    # Global exception handler to catch ALL exceptions
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}",
            exc_info=exc
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": f"Internal server error: {str(exc)}"}
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def startup_event():
        """
        Build services and start the escalation scheduler.
        """
        logger.info(f"Starting {app_settings.APP_NAME} v{app_settings.APP_VERSION}")

        if app.state.container is None:
            app.state.container = build_container(app_settings)

        if app_settings.ESCALATION_SCHEDULER_ENABLED:
            app.state.container.scheduler.start()
        else:
            logger.info("Escalation scheduler disabled (ESCALATION_SCHEDULER_ENABLED=false)")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"Shutting down {app_settings.APP_NAME}")
        if app.state.container is not None:
            app.state.container.shutdown()

    app.include_router(health.router)
    app.include_router(reports.router)
    app.include_router(analytics.router)
    app.include_router(escalations.router)

    app.mount(
        "/uploads",
        StaticFiles(directory=app_settings.UPLOADS_DIR, check_dir=False),
        name="uploads"
    )

    @app.get("/")
    async def root():
        """
        Root endpoint - API information.
        """
        return {
            "service": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "analytics": "/analytics/predictive"
        }

    return app


app = create_app()
