"""
Ingestion Coordinator - turns a classified submission into a stored report.

Flow:
1. Query primary reports within the duplicate radius (nearest first)
2. Ask the similarity resolver whether the submission repeats one of them
3. Compute the SLA deadline from category/severity and the creation time
4. Write the new report (primary, or duplicate linked one hop to the match)
5. For a duplicate, atomically bump the primary's duplicate_count/merged_reports

A failed write in step 4 aborts ingestion. A failed counter update in
step 5 leaves the duplicate stored; it is logged and reported back as a
consistency warning, never retried here.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from civicwatch.core.exceptions import CivicWatchError
from civicwatch.models.report import Classification, DuplicateMatch, Report, ReportStatus
from civicwatch.services.duplicate_detection import SimilarityResolver
from civicwatch.services.sla_table import sla_deadline
from civicwatch.services.status_workflow import StatusWorkflowEngine
from civicwatch.services.store.base import ReportStore
from civicwatch.utils.time_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class IngestionResult(BaseModel):
    report: Report
    duplicate: Optional[DuplicateMatch] = None
    consistency_warning: Optional[str] = None

    @property
    def is_duplicate(self) -> bool:
        return self.duplicate is not None


class IngestionCoordinator:

    DEFAULT_RADIUS_METERS = 50.0

    def __init__(
        self,
        store: ReportStore,
        resolver: SimilarityResolver,
        clock: Clock = utc_now,
        radius_meters: float = DEFAULT_RADIUS_METERS
    ):
        self.store = store
        self.resolver = resolver
        self.clock = clock
        self.radius_meters = radius_meters

    def ingest(
        self,
        classification: Classification,
        latitude: float,
        longitude: float,
        photo: bytes,
        description: str = "",
        photo_path: Optional[str] = None,
        photo_url: Optional[str] = None
    ) -> IngestionResult:
        """
        Store a new report, merging it into an existing primary when duplicated.

        Raises:
            StoreError: If the candidate query or the report write fails
        """
        created_at = self.clock()

        candidates = self.store.query_within_radius(
            latitude, longitude, self.radius_meters, primary_only=True
        )
        logger.info(f"Found {len(candidates)} candidate(s) within {self.radius_meters:.0f}m")

        match = self.resolver.resolve(photo, candidates)

        report = Report(
            description=description or "",
            photo_url=photo_url,
            photo_path=photo_path,
            latitude=latitude,
            longitude=longitude,
            category=classification.category,
            severity=classification.severity,
            priority=classification.severity,
            status=ReportStatus.PENDING,
            department=classification.department_responsible,
            urgent=classification.is_urgent,
            classification=classification,
            is_primary=match is None,
            duplicate_of=match.primary_id if match else None,
            duplicate_count=1,
            merged_reports=[],
            duplicate_match=match,
            sla_deadline=sla_deadline(created_at, classification.category, classification.severity),
            created_at=created_at,
            status_history=[StatusWorkflowEngine.create_status_history_entry(
                from_status="",
                to_status=ReportStatus.PENDING.value,
                changed_by="system",
                timestamp=created_at,
                note="Report created"
            )],
        )

        stored = self.store.insert_report(report)

        if match is None:
            logger.info(f"✅ Report {stored.id} stored as new primary (SLA deadline {stored.sla_deadline.isoformat()})")
            return IngestionResult(report=stored)

        warning = None
        try:
            self.store.register_duplicate(match.primary_id, stored.id)
            logger.info(f"✅ Report {stored.id} stored as duplicate of {match.primary_id}")
        except CivicWatchError as e:
            warning = (
                f"Duplicate {stored.id} stored but primary {match.primary_id} "
                f"was not updated: {e.message}"
            )
            logger.error(f"❌ Inconsistent duplicate state: {warning}", exc_info=True)

        return IngestionResult(report=stored, duplicate=match, consistency_warning=warning)
