"""
Escalation Engine - SLA-based escalation of overdue reports.

DESIGN PRINCIPLES:
- Escalation is a flag PARALLEL to the status workflow, never a status
- A report escalates at most once until it is resolved
- Escalation bumps priority to HIGH and notifies supervisors
- Overlapping sweeps are skipped, not queued
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from civicwatch.core.exceptions import CivicWatchError
from civicwatch.models.analytics import EscalationEvent, EscalationStats
from civicwatch.models.report import OPEN_STATUSES, Priority, Report, ReportStatus
from civicwatch.services.notification_sink import NotificationSink
from civicwatch.services.sla_table import sla_deadline
from civicwatch.services.store.base import ReportStore
from civicwatch.utils.time_utils import Clock, utc_now

logger = logging.getLogger(__name__)


def hours_overdue(report: Report, now: datetime) -> int:
    """Whole hours past the SLA deadline (0 if not overdue)."""
    if report.sla_deadline is None or now <= report.sla_deadline:
        return 0
    return int((now - report.sla_deadline).total_seconds() // 3600)


def _is_open_and_unescalated(report: Report) -> bool:
    return report.status in OPEN_STATUSES and not report.escalated


class EscalationMonitor:
    """
    Sweeps open reports and escalates the ones past their SLA deadline.

    Escalation triggers:
    1. status is pending or verified
    2. not already escalated
    3. now > sla_deadline
    """

    def __init__(self, store: ReportStore, sink: NotificationSink, clock: Clock = utc_now):
        self.store = store
        self.sink = sink
        self.clock = clock
        self._sweep_lock = threading.Lock()

    def sweep(self) -> Optional[int]:
        """
        Escalate every overdue open report.

        Returns:
            Number of reports escalated, or None if another sweep was running

        Raises:
            StoreError: If the candidate query fails
        """
        if not self._sweep_lock.acquire(blocking=False):
            logger.info("Escalation check already running, skipping...")
            return None

        try:
            now = self.clock()
            logger.info("🔍 Checking for reports that need escalation...")
            candidates = self.store.query_by_status_and_escalation(OPEN_STATUSES, escalated=False)

            escalated_count = 0
            for report in candidates:
                if report.sla_deadline is None or not now > report.sla_deadline:
                    continue
                try:
                    if self._escalate(report, now):
                        escalated_count += 1
                except CivicWatchError as e:
                    logger.error(f"Error escalating report #{report.id}: {e}")

            logger.info(f"✅ Escalation check complete. {escalated_count} reports escalated.")
            return escalated_count
        finally:
            self._sweep_lock.release()

    def _escalate(self, report: Report, now: datetime) -> bool:
        updated = self.store.update_report_if(
            report.id,
            _is_open_and_unescalated,
            {"escalated": True, "priority": Priority.HIGH.value, "escalated_at": now},
        )
        if updated is None:
            # Resolved or escalated by someone else since the query
            return False

        logger.info(f"Report #{updated.id} has been escalated to HIGH priority")

        event = EscalationEvent(
            report_id=updated.id,
            category=updated.category,
            severity=updated.severity,
            description=updated.description,
            sla_deadline=updated.sla_deadline,
            hours_overdue=hours_overdue(updated, now),
        )
        try:
            self.sink.notify(event)
        except Exception as e:
            logger.error(f"Escalation notification failed for report #{updated.id}: {e}", exc_info=True)
            return True

        self.store.update_report_if(
            updated.id,
            lambda current: current.escalated,
            {"escalation_notified": True},
        )
        return True

    def initialize_sla_deadlines(self) -> int:
        """
        Assign SLA deadlines to reports stored without one.

        Returns:
            Number of reports updated
        """
        logger.info("🔄 Initializing SLA deadlines for existing reports...")
        updated_count = 0

        for report in self.store.query_missing_sla_deadline():
            deadline = sla_deadline(report.created_at, report.category, report.severity)
            updated = self.store.update_report_if(
                report.id,
                lambda current: current.sla_deadline is None,
                {"sla_deadline": deadline},
            )
            if updated is not None:
                updated_count += 1

        logger.info(f"✅ SLA initialization complete. {updated_count} reports updated.")
        return updated_count

    def get_escalation_stats(self) -> EscalationStats:
        escalated = [report for report in self.store.list_reports() if report.escalated]
        return EscalationStats(
            total_escalated=len(escalated),
            pending_escalated=sum(1 for r in escalated if r.status == ReportStatus.PENDING.value),
            resolved_escalated=sum(1 for r in escalated if r.status == ReportStatus.RESOLVED.value),
        )


class EscalationScheduler:
    """
    Background ticker around an EscalationMonitor.

    On start: SLA back-fill and one sweep, then one sweep per interval
    until stop() is called.
    """

    def __init__(self, monitor: EscalationMonitor, interval_minutes: float = 30.0):
        self.monitor = monitor
        self.interval_seconds = interval_minutes * 60
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        logger.info(f"🚀 Starting escalation scheduler (checking every {self.interval_seconds / 60:g} minutes)")
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name="escalation-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Escalation scheduler stopped")

    def _run(self) -> None:
        self._tick(initialize=True)
        while not self._stop_event.wait(self.interval_seconds):
            self._tick()

    def _tick(self, initialize: bool = False) -> None:
        # The loop must survive store outages; errors are logged and retried next tick
        try:
            if initialize:
                self.monitor.initialize_sla_deadlines()
            self.monitor.sweep()
        except Exception as e:
            logger.error(f"Escalation sweep failed: {e}", exc_info=True)
