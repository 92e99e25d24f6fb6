"""Unit tests for civicwatch.services.escalation_engine.

Covers:
- sweep escalates overdue open reports exactly once
- resolve clears escalation; pending reset keeps it
- notification flag only set after the sink accepts the event
- overlapping sweeps are skipped, never double-notify
- SLA back-fill, statistics and the background scheduler
"""

from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from civicwatch.services.escalation_engine import EscalationMonitor, EscalationScheduler, hours_overdue
from civicwatch.services.sla_table import sla_deadline


@pytest.fixture
def monitor(store, sink, clock):
    return EscalationMonitor(store, sink, clock=clock)


@pytest.fixture
def insert(store, clock, make_report):
    """Insert a report created now with its normal SLA deadline."""
    def _insert(category: str = "POTHOLE", severity: str = "MEDIUM", **overrides):
        created = overrides.pop("created_at", clock())
        overrides.setdefault("sla_deadline", sla_deadline(created, category, severity))
        return store.insert_report(
            make_report(category=category, severity=severity, created_at=created, **overrides)
        )
    return _insert


class TestSweep:
    def test_overdue_report_is_escalated(self, monitor, insert, store, sink, clock):
        report = insert("POTHOLE", "LOW")  # 24h override
        clock.advance(hours=25, minutes=30)

        assert monitor.sweep() == 1

        updated = store.get_report_by_id(report.id)
        assert updated.escalated is True
        assert updated.escalation_notified is True
        assert updated.priority == "HIGH"
        assert updated.escalated_at == clock()
        assert updated.status == "pending"

        assert len(sink.events) == 1
        event = sink.events[0]
        assert event.report_id == report.id
        assert event.category == "POTHOLE"
        assert event.hours_overdue == 1

    def test_report_escalates_only_once(self, monitor, insert, sink, clock):
        insert()
        clock.advance(hours=30)

        assert monitor.sweep() == 1
        clock.advance(hours=30)
        assert monitor.sweep() == 0
        assert len(sink.events) == 1

    def test_not_escalated_at_exact_deadline(self, monitor, insert, store, clock):
        report = insert("GARBAGE_OVERFLOW")
        clock.advance(hours=6)

        assert monitor.sweep() == 0
        assert store.get_report_by_id(report.id).escalated is False

    def test_verified_reports_escalate(self, monitor, insert, clock):
        insert(status="verified")
        clock.advance(days=2)
        assert monitor.sweep() == 1

    def test_resolved_reports_never_escalate(self, monitor, insert, sink, clock):
        insert(status="resolved")
        clock.advance(days=10)

        assert monitor.sweep() == 0
        assert sink.events == []

    def test_reports_without_deadline_are_ignored(self, monitor, insert, clock):
        insert(sla_deadline=None)
        clock.advance(days=10)
        assert monitor.sweep() == 0

    def test_resolved_between_query_and_update(self, monitor, insert, store, sink, clock, monkeypatch):
        report = insert()
        clock.advance(days=2)
        stale = store.query_by_status_and_escalation(["pending", "verified"], escalated=False)
        store.update_report_fields(report.id, {"status": "resolved"})
        monkeypatch.setattr(store, "query_by_status_and_escalation", lambda statuses, escalated: stale)

        assert monitor.sweep() == 0
        assert sink.events == []
        assert store.get_report_by_id(report.id).escalated is False

    def test_naive_timestamps_do_not_break_sweep(self, monitor, store, sink, clock, make_report):
        naive = clock().replace(tzinfo=None)
        store.insert_report(make_report(id="naive", created_at=naive, sla_deadline=naive + timedelta(days=30)))
        overdue = store.insert_report(make_report(id="overdue", sla_deadline=clock() - timedelta(hours=1)))

        assert monitor.sweep() == 1
        assert store.get_report_by_id(overdue.id).escalated is True
        assert store.get_report_by_id("naive").escalated is False

    def test_sink_failure_leaves_notification_unset(self, monitor, insert, store, sink, clock):
        report = insert()
        clock.advance(days=2)
        sink.fail = True

        assert monitor.sweep() == 1

        updated = store.get_report_by_id(report.id)
        assert updated.escalated is True
        assert updated.escalation_notified is False


class TestEscalationAndStatus:
    def test_resolve_clears_escalation(self, container, insert, store, clock):
        report = insert()
        clock.advance(days=2)
        container.escalation.sweep()

        resolved = container.reports.update_status(report.id, "resolved")

        assert resolved.escalated is False
        assert resolved.escalation_notified is False

    def test_pending_reset_keeps_escalation(self, container, insert, clock):
        report = insert(status="verified")
        clock.advance(days=2)
        container.escalation.sweep()

        reset = container.reports.update_status(report.id, "pending")

        assert reset.escalated is True
        assert reset.escalation_notified is True

    def test_resolved_then_reopened_can_escalate_again(self, container, insert, sink, clock):
        report = insert()
        clock.advance(days=2)
        container.escalation.sweep()
        container.reports.update_status(report.id, "resolved")
        container.reports.update_status(report.id, "pending")

        assert container.escalation.sweep() == 1
        assert len(sink.events) == 2


class _BlockingSink:
    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()
        self.events = []

    def notify(self, event):
        self.entered.set()
        self.release.wait(5)
        self.events.append(event)


class TestConcurrentSweeps:
    def test_overlapping_sweep_is_skipped(self, store, insert, clock):
        sink = _BlockingSink()
        monitor = EscalationMonitor(store, sink, clock=clock)
        insert()
        clock.advance(days=2)

        results = []
        worker = threading.Thread(target=lambda: results.append(monitor.sweep()))
        worker.start()
        assert sink.entered.wait(5)

        assert monitor.sweep() is None

        sink.release.set()
        worker.join(5)
        assert results == [1]
        assert len(sink.events) == 1

    def test_lock_released_after_store_error(self, monitor, store, monkeypatch):
        def _broken(statuses, escalated):
            raise RuntimeError("store down")

        monkeypatch.setattr(store, "query_by_status_and_escalation", _broken)
        with pytest.raises(RuntimeError):
            monitor.sweep()

        monkeypatch.undo()
        assert monitor.sweep() == 0


class TestSlaInitialization:
    def test_missing_deadlines_are_filled(self, monitor, insert, store, clock):
        missing = insert("DRAIN_BLOCKAGE", sla_deadline=None)
        present = insert("POTHOLE")

        assert monitor.initialize_sla_deadlines() == 1

        assert store.get_report_by_id(missing.id).sla_deadline == missing.created_at + timedelta(hours=12)
        assert store.get_report_by_id(present.id).sla_deadline == present.sla_deadline

    def test_second_run_is_a_no_op(self, monitor, insert):
        insert(sla_deadline=None)
        monitor.initialize_sla_deadlines()
        assert monitor.initialize_sla_deadlines() == 0


class TestStats:
    def test_stats_count_escalated_reports(self, monitor, insert, store, clock):
        insert()
        insert(status="verified")
        insert(status="resolved")
        clock.advance(days=2)
        monitor.sweep()

        stats = monitor.get_escalation_stats()

        assert stats.total_escalated == 2
        assert stats.pending_escalated == 1
        # resolving clears the flag, so nothing resolved is counted
        assert stats.resolved_escalated == 0


class TestHoursOverdue:
    def test_whole_hours_rounded_down(self, make_report, clock):
        report = make_report(sla_deadline=clock())
        assert hours_overdue(report, clock() + timedelta(hours=3, minutes=59)) == 3

    def test_not_overdue_is_zero(self, make_report, clock):
        report = make_report(sla_deadline=clock())
        assert hours_overdue(report, clock() - timedelta(hours=1)) == 0
        assert hours_overdue(make_report(), clock()) == 0


class _CountingMonitor:
    def __init__(self, target: int):
        self.initialized = 0
        self.sweeps = 0
        self.target = target
        self.done = threading.Event()

    def initialize_sla_deadlines(self):
        self.initialized += 1

    def sweep(self):
        self.sweeps += 1
        if self.sweeps >= self.target:
            self.done.set()
        if self.sweeps == 2:
            raise RuntimeError("transient failure")
        return 0


class TestScheduler:
    def test_runs_init_then_sweeps_until_stopped(self):
        monitor = _CountingMonitor(target=3)
        scheduler = EscalationScheduler(monitor, interval_minutes=0.001)

        scheduler.start()
        try:
            assert monitor.done.wait(5)
        finally:
            scheduler.stop()

        assert monitor.initialized == 1
        # survived the failing second sweep
        assert monitor.sweeps >= 3
        assert scheduler.running is False

    def test_start_twice_keeps_one_thread(self):
        monitor = _CountingMonitor(target=1)
        scheduler = EscalationScheduler(monitor, interval_minutes=60)

        scheduler.start()
        thread = scheduler._thread
        scheduler.start()
        try:
            assert scheduler._thread is thread
        finally:
            scheduler.stop()
