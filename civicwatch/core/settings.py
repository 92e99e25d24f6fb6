"""
Core settings and environment variables for CivicWatch.
Uses pydantic-settings for type-safe environment variable loading.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Create a .env file in the root directory to configure these.
    """

    # Application
    APP_NAME: str = "CivicWatch"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS - Frontend URLs allowed to access this API
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Firebase/Firestore
    FIREBASE_PROJECT_ID: Optional[str] = None
    FIREBASE_CREDENTIALS_PATH: Optional[str] = None  # Path to service account JSON
    REPORTS_COLLECTION: str = "reports"
    ALERTS_COLLECTION: str = "escalation_alerts"

    # In-process store for local development without Firebase credentials
    USE_MOCK_DB: bool = False

    # Photo uploads
    UPLOADS_DIR: str = "./uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # AI providers (vision classifier + similarity oracle)
    AI_ENABLED: bool = True
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    AI_TIMEOUT_SECONDS: float = 15.0
    SIMILARITY_TIMEOUT_SECONDS: float = 10.0

    # Duplicate resolution
    DUPLICATE_RADIUS_METERS: float = 50.0
    SIMILARITY_THRESHOLD: float = 80.0

    # Escalation
    ESCALATION_SCHEDULER_ENABLED: bool = True
    ESCALATION_INTERVAL_MINUTES: float = 30.0
    NOTIFICATION_SINK: str = "log"  # "log" or "firestore"

    # Analytics
    HOTSPOT_RADIUS_METERS: float = 100.0
    HOTSPOT_WINDOW_DAYS: int = 14
    HOTSPOT_MIN_REPORTS: int = 3
    GROWTH_RECENT_DAYS: int = 7
    FORECAST_PERIODS_AHEAD: int = 4

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "allow"

    @property
    def cors_origin_list(self) -> list:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()
