"""
CivicWatch exceptions.

Domain errors raised by services and mapped to HTTP responses in main.py.
"""

from typing import Optional


class CivicWatchError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class StoreError(CivicWatchError):
    """Read or write against the report store failed."""


class ReportNotFoundError(CivicWatchError):
    """Requested report does not exist."""

    def __init__(self, report_id: str):
        self.report_id = report_id
        super().__init__(f"Report {report_id} not found", {"report_id": report_id})


class InvalidStatusError(CivicWatchError):
    """Target status is not one of the workflow statuses."""

    def __init__(self, status: str, allowed: list):
        self.status = status
        self.allowed = allowed
        super().__init__(
            f"Invalid status '{status}'. Must be one of: {', '.join(allowed)}",
            {"status": status, "allowed": allowed}
        )


class IngestionError(CivicWatchError):
    """Report ingestion could not be completed."""


class PhotoStorageError(CivicWatchError):
    """Photo could not be stored or read."""


class ExternalServiceError(CivicWatchError):
    """Base exception for external provider failures."""

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        super().__init__(f"{service_name}: {message}", details)


class ClassifierError(ExternalServiceError):
    """Vision classifier call failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Vision Classifier", message, details)


class SimilarityOracleError(ExternalServiceError):
    """Similarity oracle call failed or timed out."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__("Similarity Oracle", message, details)
