"""
Notification Sinks - consumers of escalation events.

Alerts are SIMULATED: the log sink writes to the application log and the
Firestore sink records an alert document for operators to pick up.
"""

from abc import ABC, abstractmethod
import logging

from civicwatch.models.analytics import EscalationEvent

logger = logging.getLogger(__name__)


class NotificationSink(ABC):

    @abstractmethod
    def notify(self, event: EscalationEvent) -> None:
        """Deliver one escalation event. Raise on failure."""
        pass


class LoggingNotificationSink(NotificationSink):
    """Writes a supervisor notification to the log."""

    def notify(self, event: EscalationEvent) -> None:
        logger.warning(
            f"🔔 NOTIFICATION: Report #{event.report_id} has been escalated! "
            f"category={event.category} severity={event.severity} "
            f"sla_deadline={event.sla_deadline.isoformat()} overdue_by={event.hours_overdue}h "
            f"description={event.description[:50]!r}"
        )


class FirestoreAlertSink(NotificationSink):
    """Records each escalation as a document in the alerts collection."""

    def __init__(self, db, collection_name: str = "escalation_alerts"):
        self.db = db
        self.collection_name = collection_name

    def notify(self, event: EscalationEvent) -> None:
        doc_ref = self.db.collection(self.collection_name).document()
        doc_ref.set({**event.model_dump(), "delivery": "SIMULATED"})
        logger.info(f"Escalation alert {doc_ref.id} recorded for report {event.report_id}")
