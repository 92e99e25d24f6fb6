"""Unit tests for civicwatch.services.store.memory_store and the shared ReportStore queries."""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import pytest

from civicwatch.core.exceptions import ReportNotFoundError
from civicwatch.utils.geo import latitude_span_degrees

BASE_LAT = 12.9716
BASE_LON = 77.5946


class TestCrud:
    def test_insert_assigns_id(self, store, make_report):
        stored = store.insert_report(make_report())
        assert stored.id
        assert store.get_report_by_id(stored.id) == stored

    def test_missing_report_is_none(self, store):
        assert store.get_report_by_id("nope") is None

    def test_reads_are_copies(self, store, make_report):
        stored = store.insert_report(make_report())
        fetched = store.get_report_by_id(stored.id)
        fetched.merged_reports.append("tampered")

        assert store.get_report_by_id(stored.id).merged_reports == []

    def test_update_fields(self, store, make_report):
        stored = store.insert_report(make_report())
        updated = store.update_report_fields(stored.id, {"status": "verified"})
        assert updated.status == "verified"

    def test_update_missing_raises(self, store):
        with pytest.raises(ReportNotFoundError):
            store.update_report_fields("nope", {"status": "verified"})


class TestConditionalUpdate:
    def test_applies_when_predicate_holds(self, store, make_report):
        stored = store.insert_report(make_report())
        updated = store.update_report_if(stored.id, lambda r: not r.escalated, {"escalated": True})
        assert updated.escalated is True

    def test_skips_when_predicate_fails(self, store, make_report):
        stored = store.insert_report(make_report(escalated=True))
        assert store.update_report_if(stored.id, lambda r: not r.escalated, {"priority": "LOW"}) is None
        assert store.get_report_by_id(stored.id).priority == "MEDIUM"

    def test_missing_report_returns_none(self, store):
        assert store.update_report_if("nope", lambda r: True, {"escalated": True}) is None


class TestRegisterDuplicate:
    def test_concurrent_registrations_are_not_lost(self, store, make_report):
        primary = store.insert_report(make_report())
        threads = [
            threading.Thread(target=store.register_duplicate, args=(primary.id, f"dup-{i}"))
            for i in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        updated = store.get_report_by_id(primary.id)
        assert updated.duplicate_count == 21
        assert len(updated.merged_reports) == 20

    def test_repeated_registration_counts_once(self, store, make_report):
        primary = store.insert_report(make_report())

        store.register_duplicate(primary.id, "dup")
        store.register_duplicate(primary.id, "dup")

        updated = store.get_report_by_id(primary.id)
        assert updated.merged_reports == ["dup"]
        assert updated.duplicate_count == 1 + len(updated.merged_reports)

    def test_missing_primary_raises(self, store):
        with pytest.raises(ReportNotFoundError):
            store.register_duplicate("nope", "dup")


class TestQueries:
    def test_within_radius_nearest_first(self, store, make_report):
        far = store.insert_report(make_report(latitude=BASE_LAT + latitude_span_degrees(40)))
        near = store.insert_report(make_report(latitude=BASE_LAT + latitude_span_degrees(5)))
        store.insert_report(make_report(latitude=BASE_LAT + latitude_span_degrees(80)))

        matches = store.query_within_radius(BASE_LAT, BASE_LON, 50)

        assert [report.id for report, _ in matches] == [near.id, far.id]
        assert matches[0][1] == pytest.approx(5.0, abs=0.1)

    def test_within_radius_primary_only(self, store, make_report):
        store.insert_report(make_report(is_primary=False, duplicate_of="x"))
        primary = store.insert_report(make_report())

        matches = store.query_within_radius(BASE_LAT, BASE_LON, 50, primary_only=True)

        assert [report.id for report, _ in matches] == [primary.id]

    def test_status_and_escalation_oldest_first(self, store, make_report, clock):
        newer = store.insert_report(make_report(created_at=clock() + timedelta(hours=1)))
        older = store.insert_report(make_report(status="verified"))
        store.insert_report(make_report(status="resolved"))
        store.insert_report(make_report(escalated=True))

        found = store.query_by_status_and_escalation(["pending", "verified"], escalated=False)

        assert [r.id for r in found] == [older.id, newer.id]

    def test_created_after_newest_first(self, store, make_report, clock):
        old = store.insert_report(make_report(created_at=clock() - timedelta(days=20)))
        a = store.insert_report(make_report(created_at=clock() - timedelta(days=2)))
        b = store.insert_report(make_report(created_at=clock() - timedelta(days=1)))
        store.insert_report(make_report(created_at=clock() - timedelta(days=1), is_primary=False))

        found = store.query_created_after(clock() - timedelta(days=14), primary_only=True)

        assert [r.id for r in found] == [b.id, a.id]
        assert old.id not in [r.id for r in store.query_created_after(clock() - timedelta(days=14))]

    def test_missing_sla_deadline(self, store, make_report, clock):
        missing = store.insert_report(make_report())
        store.insert_report(make_report(sla_deadline=clock()))
        assert [r.id for r in store.query_missing_sla_deadline()] == [missing.id]


class TestAggregation:
    def test_counts_by_week_newest_first(self, store, make_report):
        monday = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
        for created, category in [
            (monday, "POTHOLE"),
            (monday + timedelta(days=2), "POTHOLE"),
            (monday + timedelta(days=3), "OTHER"),
            (monday + timedelta(days=7), "POTHOLE"),
        ]:
            store.insert_report(make_report(created_at=created, category=category))

        rows = store.aggregate_counts_by_period_and_category("week")

        assert [(r.period, r.category, r.count) for r in rows] == [
            ("2026-10", "POTHOLE", 1),
            ("2026-09", "OTHER", 1),
            ("2026-09", "POTHOLE", 2),
        ]

    def test_since_limits_rows(self, store, make_report, clock):
        store.insert_report(make_report(created_at=clock() - timedelta(days=400)))
        store.insert_report(make_report(created_at=clock()))

        rows = store.aggregate_counts_by_period_and_category("month", since=clock() - timedelta(days=365))

        assert [(r.period, r.count) for r in rows] == [("2026-03", 1)]

    def test_unknown_bucket_unit(self, store, make_report):
        store.insert_report(make_report())
        with pytest.raises(ValueError):
            store.aggregate_counts_by_period_and_category("fortnight")
