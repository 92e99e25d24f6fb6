"""
In-process report store.

Used when USE_MOCK_DB is set and by the test suite. Documents are kept as
dicts and copied on every read and write; a single lock makes the
conditional and counter updates atomic.
"""

import copy
import logging
import threading
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from civicwatch.core.exceptions import ReportNotFoundError
from civicwatch.models.report import Report
from civicwatch.services.store.base import ReportPredicate, ReportStore

logger = logging.getLogger(__name__)


class InMemoryReportStore(ReportStore):

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def insert_report(self, report: Report) -> Report:
        report_id = report.id or uuid.uuid4().hex
        with self._lock:
            self._documents[report_id] = copy.deepcopy(report.to_document())
        return report.model_copy(update={"id": report_id})

    def get_report_by_id(self, report_id: str) -> Optional[Report]:
        with self._lock:
            data = self._documents.get(report_id)
            if data is None:
                return None
            return Report.from_document(report_id, copy.deepcopy(data))

    def update_report_fields(self, report_id: str, fields: Dict[str, Any]) -> Report:
        with self._lock:
            data = self._documents.get(report_id)
            if data is None:
                raise ReportNotFoundError(report_id)
            data.update(copy.deepcopy(fields))
            return Report.from_document(report_id, copy.deepcopy(data))

    def update_report_if(
        self,
        report_id: str,
        predicate: ReportPredicate,
        fields: Dict[str, Any]
    ) -> Optional[Report]:
        with self._lock:
            current = self.get_report_by_id(report_id)
            if current is None or not predicate(current):
                return None
            return self.update_report_fields(report_id, fields)

    def register_duplicate(self, primary_id: str, duplicate_id: str) -> None:
        with self._lock:
            data = self._documents.get(primary_id)
            if data is None:
                raise ReportNotFoundError(primary_id)
            merged = data.setdefault("merged_reports", [])
            if duplicate_id in merged:
                return
            merged.append(duplicate_id)
            data["duplicate_count"] = data.get("duplicate_count", 1) + 1

    def query_by_status_and_escalation(
        self,
        statuses: Sequence[str],
        escalated: bool
    ) -> List[Report]:
        wanted = set(statuses)
        reports = [
            report for report in self._snapshot()
            if report.status in wanted and report.escalated == escalated
        ]
        reports.sort(key=lambda report: report.created_at)
        return reports

    def query_created_after(self, timestamp: datetime, primary_only: bool = False) -> List[Report]:
        reports = [
            report for report in self._snapshot()
            if report.created_at >= timestamp and (report.is_primary or not primary_only)
        ]
        reports.sort(key=lambda report: report.created_at, reverse=True)
        return reports

    def list_reports(self) -> List[Report]:
        reports = self._snapshot()
        reports.sort(key=lambda report: report.created_at, reverse=True)
        return reports

    def _reports_near(self, latitude: float, longitude: float, meters: float) -> Iterable[Report]:
        # Small data sets only: every report is a candidate
        return self._snapshot()

    def _snapshot(self) -> List[Report]:
        with self._lock:
            return [
                Report.from_document(report_id, copy.deepcopy(data))
                for report_id, data in self._documents.items()
            ]
