"""
Report storage backends.

Firestore in deployment, in-process store for USE_MOCK_DB and tests.
"""

from civicwatch.services.store.base import ReportStore
from civicwatch.services.store.firestore_store import FirestoreReportStore
from civicwatch.services.store.memory_store import InMemoryReportStore

__all__ = [
    "ReportStore",
    "FirestoreReportStore",
    "InMemoryReportStore",
]
