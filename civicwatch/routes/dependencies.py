"""
Route dependencies.
"""

from fastapi import Request

from civicwatch.core.settings import Settings
from civicwatch.services.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    """Services built at startup and kept on app.state."""
    return request.app.state.container


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings
