"""
Report Store Interface.

Defines the queries the lifecycle and analytics services need from
durable storage. Implementations decide how the data is kept.
"""

from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from civicwatch.models.analytics import PeriodCount
from civicwatch.models.report import Report
from civicwatch.utils.geo import haversine_meters
from civicwatch.utils.time_utils import bucket_key


ReportPredicate = Callable[[Report], bool]


class ReportStore(ABC):
    """
    Abstract base class for report storage.

    Writes that must not interleave with concurrent sweeps or ingestions
    (duplicate counters, escalation flags) go through register_duplicate
    and update_report_if, which implementations make atomic.
    """

    @abstractmethod
    def insert_report(self, report: Report) -> Report:
        """Persist a new report, assigning its id. Returns the stored report."""
        pass

    @abstractmethod
    def get_report_by_id(self, report_id: str) -> Optional[Report]:
        pass

    @abstractmethod
    def update_report_fields(self, report_id: str, fields: Dict[str, Any]) -> Report:
        """
        Overwrite the given fields.

        Raises:
            ReportNotFoundError: If the report does not exist
        """
        pass

    @abstractmethod
    def update_report_if(
        self,
        report_id: str,
        predicate: ReportPredicate,
        fields: Dict[str, Any]
    ) -> Optional[Report]:
        """
        Atomically apply fields only if predicate holds for the current state.

        Returns:
            Updated report, or None if the report is missing or predicate failed
        """
        pass

    @abstractmethod
    def register_duplicate(self, primary_id: str, duplicate_id: str) -> None:
        """Atomically increment duplicate_count and append to merged_reports."""
        pass

    @abstractmethod
    def query_by_status_and_escalation(
        self,
        statuses: Sequence[str],
        escalated: bool
    ) -> List[Report]:
        """Reports in any of statuses with the given escalated flag, oldest first."""
        pass

    @abstractmethod
    def query_created_after(
        self,
        timestamp: datetime,
        primary_only: bool = False
    ) -> List[Report]:
        """Reports created at or after timestamp, newest first."""
        pass

    @abstractmethod
    def list_reports(self) -> List[Report]:
        """All reports, newest first."""
        pass

    @abstractmethod
    def _reports_near(self, latitude: float, longitude: float, meters: float) -> Iterable[Report]:
        """Coarse candidate set that contains every report within meters."""
        pass

    def query_missing_sla_deadline(self) -> List[Report]:
        return [report for report in self.list_reports() if report.sla_deadline is None]

    def query_within_radius(
        self,
        latitude: float,
        longitude: float,
        meters: float,
        primary_only: bool = False
    ) -> List[Tuple[Report, float]]:
        """
        Reports within meters of a point, nearest first.

        Returns:
            List of (report, distance_meters) pairs
        """
        matches = []
        for report in self._reports_near(latitude, longitude, meters):
            if primary_only and not report.is_primary:
                continue
            distance = haversine_meters(latitude, longitude, report.latitude, report.longitude)
            if distance <= meters:
                matches.append((report, distance))

        matches.sort(key=lambda pair: pair[1])
        return matches

    def aggregate_counts_by_period_and_category(
        self,
        bucket_unit: str,
        since: Optional[datetime] = None
    ) -> List[PeriodCount]:
        """
        Count reports per (calendar bucket, category).

        Rows are ordered newest period first, then by category.
        """
        reports = self.query_created_after(since) if since is not None else self.list_reports()

        counts: Dict[Tuple[str, str], int] = defaultdict(int)
        for report in reports:
            counts[(bucket_key(report.created_at, bucket_unit), report.category)] += 1

        rows = [
            PeriodCount(period=period, category=category, count=count)
            for (period, category), count in counts.items()
        ]
        rows.sort(key=lambda row: row.category)
        rows.sort(key=lambda row: row.period, reverse=True)
        return rows
