"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException

from civicwatch.core.exceptions import StoreError
from civicwatch.core.settings import Settings
from civicwatch.routes.dependencies import get_container, get_settings
from civicwatch.services.container import ServiceContainer
from civicwatch.utils.time_utils import utc_now


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check(settings: Settings = Depends(get_settings)):
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": utc_now().isoformat()
    }


@router.get("/db")
def database_health(container: ServiceContainer = Depends(get_container)):
    """
    Store connectivity check.
    Reads one report id to verify the store answers.
    """
    try:
        container.store.get_report_by_id("health-check")
    except StoreError as e:
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {e.message}"
        )

    return {
        "status": "healthy",
        "database": type(container.store).__name__,
        "connected": True,
        "timestamp": utc_now().isoformat()
    }
