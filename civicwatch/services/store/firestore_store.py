"""
Firestore-backed report store.

Reports live in a single collection keyed by Firestore auto-IDs.
Counter updates use server-side Increment/ArrayUnion transforms and
conditional updates run inside a transaction, so concurrent sweeps and
ingestions touching the same report do not lose writes.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from firebase_admin import firestore

from civicwatch.core.exceptions import ReportNotFoundError, StoreError
from civicwatch.models.report import Report
from civicwatch.services.store.base import ReportPredicate, ReportStore
from civicwatch.utils.firestore_helpers import where_filter
from civicwatch.utils.geo import latitude_span_degrees

logger = logging.getLogger(__name__)


class FirestoreReportStore(ReportStore):

    def __init__(self, db, collection_name: str = "reports"):
        self.db = db
        self.collection_name = collection_name

    def _collection(self):
        return self.db.collection(self.collection_name)

    def insert_report(self, report: Report) -> Report:
        doc_ref = self._collection().document(report.id) if report.id else self._collection().document()
        try:
            doc_ref.set(report.to_document())
        except Exception as e:
            logger.error(f"Failed to save report to Firestore: {e}", exc_info=True)
            raise StoreError(f"Failed to save report: {e}") from e

        logger.info(f"Report saved to Firestore: {doc_ref.id}")
        return report.model_copy(update={"id": doc_ref.id})

    def get_report_by_id(self, report_id: str) -> Optional[Report]:
        try:
            doc = self._collection().document(report_id).get()
        except Exception as e:
            raise StoreError(f"Failed to read report {report_id}: {e}") from e

        if not doc.exists:
            return None
        return Report.from_document(doc.id, doc.to_dict())

    def update_report_fields(self, report_id: str, fields: Dict[str, Any]) -> Report:
        doc_ref = self._collection().document(report_id)
        try:
            if not doc_ref.get().exists:
                raise ReportNotFoundError(report_id)
            doc_ref.update(fields)
            updated = doc_ref.get()
        except ReportNotFoundError:
            raise
        except Exception as e:
            logger.error(f"Failed to update report {report_id}: {e}", exc_info=True)
            raise StoreError(f"Failed to update report {report_id}: {e}") from e

        return Report.from_document(updated.id, updated.to_dict())

    def update_report_if(
        self,
        report_id: str,
        predicate: ReportPredicate,
        fields: Dict[str, Any]
    ) -> Optional[Report]:
        doc_ref = self._collection().document(report_id)

        @firestore.transactional
        def _apply(transaction) -> Optional[Report]:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                return None
            data = snapshot.to_dict()
            if not predicate(Report.from_document(snapshot.id, data)):
                return None
            transaction.update(doc_ref, fields)
            data.update(fields)
            return Report.from_document(snapshot.id, data)

        try:
            return _apply(self.db.transaction())
        except Exception as e:
            logger.error(f"Conditional update failed for report {report_id}: {e}", exc_info=True)
            raise StoreError(f"Conditional update failed for report {report_id}: {e}") from e

    def register_duplicate(self, primary_id: str, duplicate_id: str) -> None:
        doc_ref = self._collection().document(primary_id)

        @firestore.transactional
        def _apply(transaction) -> None:
            snapshot = doc_ref.get(transaction=transaction)
            if not snapshot.exists:
                raise ReportNotFoundError(primary_id)
            if duplicate_id in (snapshot.to_dict().get("merged_reports") or []):
                return
            transaction.update(doc_ref, {
                "duplicate_count": firestore.Increment(1),
                "merged_reports": firestore.ArrayUnion([duplicate_id]),
            })

        try:
            _apply(self.db.transaction())
        except ReportNotFoundError:
            raise
        except Exception as e:
            raise StoreError(f"Failed to register duplicate {duplicate_id} on {primary_id}: {e}") from e

    def query_by_status_and_escalation(
        self,
        statuses: Sequence[str],
        escalated: bool
    ) -> List[Report]:
        query = where_filter(self._collection(), "status", "in", list(statuses))
        query = where_filter(query, "escalated", "==", escalated)
        reports = self._stream(query)
        reports.sort(key=lambda report: report.created_at)
        return reports

    def query_created_after(self, timestamp: datetime, primary_only: bool = False) -> List[Report]:
        query = where_filter(self._collection(), "created_at", ">=", timestamp)
        reports = [report for report in self._stream(query) if report.is_primary or not primary_only]
        reports.sort(key=lambda report: report.created_at, reverse=True)
        return reports

    def list_reports(self) -> List[Report]:
        query = self._collection().order_by("created_at", direction=firestore.Query.DESCENDING)
        return self._stream(query)

    def _reports_near(self, latitude: float, longitude: float, meters: float) -> Iterable[Report]:
        # Latitude band only; longitude and exact distance are filtered by the caller
        span = latitude_span_degrees(meters)
        query = where_filter(self._collection(), "latitude", ">=", latitude - span)
        query = where_filter(query, "latitude", "<=", latitude + span)
        return self._stream(query)

    def _stream(self, query) -> List[Report]:
        try:
            return [Report.from_document(doc.id, doc.to_dict()) for doc in query.stream()]
        except Exception as e:
            logger.error(f"Firestore query failed on {self.collection_name}: {e}", exc_info=True)
            raise StoreError(f"Firestore query failed: {e}") from e
