"""
Status Workflow Engine - report status transitions.

DESIGN PRINCIPLES:
- Only pending / verified / resolved are valid statuses
- Resolving always clears both escalation flags
- Resetting to pending leaves escalation flags untouched
- All transitions logged in status_history
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from civicwatch.core.exceptions import InvalidStatusError
from civicwatch.models.report import Report, ReportStatus

logger = logging.getLogger(__name__)


class StatusWorkflowEngine:
    """
    Validates target statuses and derives the field updates for a transition.
    """

    VALID_STATUSES: List[str] = [status.value for status in ReportStatus]

    @classmethod
    def validate_status(cls, status: Optional[str]) -> str:
        """
        Normalize and validate a requested status.

        Raises:
            InvalidStatusError: If status is not pending, verified or resolved
        """
        normalized = (status or "").strip().lower()
        if normalized not in cls.VALID_STATUSES:
            raise InvalidStatusError(status or "", cls.VALID_STATUSES)
        return normalized

    @classmethod
    def create_status_history_entry(
        cls,
        from_status: str,
        to_status: str,
        changed_by: str,
        timestamp: datetime,
        note: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a status history entry for audit trail.
        """
        return {
            "from": from_status,
            "to": to_status,
            "changed_by": changed_by,
            "timestamp": timestamp,
            "note": note or ""
        }

    @classmethod
    def transition_fields(
        cls,
        report: Report,
        new_status: str,
        changed_by: str,
        timestamp: datetime,
        note: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Field updates that move report to new_status.

        Args:
            report: Current state of the report
            new_status: Target status (validated)
            changed_by: Operator or system identifier
            timestamp: When the change happens
            note: Optional note

        Returns:
            Dict of fields to write
        """
        new_status = cls.validate_status(new_status)
        entry = cls.create_status_history_entry(report.status, new_status, changed_by, timestamp, note)

        fields: Dict[str, Any] = {
            "status": new_status,
            "status_history": list(report.status_history) + [entry],
        }

        if new_status == ReportStatus.RESOLVED.value:
            fields["escalated"] = False
            fields["escalation_notified"] = False

        return fields
