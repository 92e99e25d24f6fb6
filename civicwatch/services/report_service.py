"""
Report service - Business logic for citizen report handling.

DESIGN NOTE:
- Submissions are stored even when AI is unavailable (rule-based fallback)
- Duplicate merging and SLA deadlines are handled by the ingestion coordinator
- Status changes never touch escalation flags except on resolve
"""

from typing import List, Optional
import logging

from civicwatch.core.exceptions import IngestionError, ReportNotFoundError, StoreError
from civicwatch.services.ai_plugin.registry import ClassifierRegistry
from civicwatch.services.ingestion import IngestionCoordinator, IngestionResult
from civicwatch.services.photo_store import LocalPhotoStore
from civicwatch.services.status_workflow import StatusWorkflowEngine
from civicwatch.services.store.base import ReportStore
from civicwatch.models.report import Report
from civicwatch.utils.time_utils import Clock, utc_now

logger = logging.getLogger(__name__)


class ReportService:

    # Attempts before a status update gives up on concurrent writers
    MAX_STATUS_ATTEMPTS = 3

    def __init__(
        self,
        store: ReportStore,
        photo_store: LocalPhotoStore,
        classifiers: ClassifierRegistry,
        ingestion: IngestionCoordinator,
        clock: Clock = utc_now
    ):
        self.store = store
        self.photo_store = photo_store
        self.classifiers = classifiers
        self.ingestion = ingestion
        self.clock = clock

    def submit_report(
        self,
        content: bytes,
        filename: str,
        latitude: float,
        longitude: float,
        description: str = ""
    ) -> IngestionResult:
        """
        Store a citizen submission.

        Flow:
        1. Validate coordinates
        2. Save the photo
        3. Classify (AI provider, or rule-based fallback)
        4. Ingest: duplicate resolution, SLA deadline, write

        Raises:
            IngestionError: Coordinates out of range
            PhotoStorageError: Photo rejected or unwritable
            StoreError: Store write failed
        """
        if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
            raise IngestionError(
                "Invalid coordinates",
                {"latitude": latitude, "longitude": longitude}
            )

        photo_path, photo_url = self.photo_store.save(content, filename)

        classification = self.classifiers.classify_with_fallback(
            content,
            description or "",
            self.photo_store.mime_type(photo_path)
        )

        try:
            return self.ingestion.ingest(
                classification=classification,
                latitude=latitude,
                longitude=longitude,
                photo=content,
                description=description or "",
                photo_path=photo_path,
                photo_url=photo_url,
            )
        except StoreError:
            # No report points at the photo
            self.photo_store.delete(photo_path)
            raise

    def get_report(self, report_id: str) -> Report:
        report = self.store.get_report_by_id(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)
        return report

    def list_reports(self) -> List[Report]:
        return self.store.list_reports()

    def update_status(
        self,
        report_id: str,
        status: str,
        changed_by: str = "operator",
        note: Optional[str] = None
    ) -> Report:
        """
        Move a report to a new status.

        The write only lands if status and history are unchanged since
        the read; otherwise it is recomputed from the fresh state.

        Raises:
            InvalidStatusError: status is not pending, verified or resolved
            ReportNotFoundError: report does not exist
            StoreError: concurrent writers kept winning
        """
        new_status = StatusWorkflowEngine.validate_status(status)

        for _ in range(self.MAX_STATUS_ATTEMPTS):
            current = self.get_report(report_id)
            fields = StatusWorkflowEngine.transition_fields(
                current, new_status, changed_by, self.clock(), note
            )
            updated = self.store.update_report_if(
                report_id,
                lambda fresh: (
                    fresh.status == current.status
                    and len(fresh.status_history) == len(current.status_history)
                ),
                fields,
            )
            if updated is not None:
                logger.info(f"Report {report_id} status: {current.status} -> {new_status} by {changed_by}")
                return updated

        raise StoreError(
            f"Report {report_id} was modified concurrently, status update abandoned",
            {"report_id": report_id}
        )
