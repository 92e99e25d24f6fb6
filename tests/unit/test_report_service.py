"""Unit tests for civicwatch.services.report_service."""

from __future__ import annotations

import os

import pytest

from civicwatch.core.exceptions import (
    IngestionError,
    InvalidStatusError,
    PhotoStorageError,
    ReportNotFoundError,
    StoreError,
)


class TestSubmitReport:
    def test_submission_is_classified_and_stored(self, container, store):
        result = container.reports.submit_report(b"jpeg-bytes", "pothole.jpg", 12.97, 77.59, "Deep pothole on road")

        stored = store.get_report_by_id(result.report.id)
        assert stored.category == "POTHOLE"
        assert stored.classification.fallback_used is True
        assert stored.photo_url.startswith("/uploads/")
        assert stored.sla_deadline is not None

    def test_duplicate_submission_merges(self, container, oracle, store):
        first = container.reports.submit_report(b"first", "a.jpg", 12.97, 77.59, "garbage")
        oracle.scores = {b"first": 92.0}

        second = container.reports.submit_report(b"second", "b.jpg", 12.97001, 77.59, "garbage")

        assert second.is_duplicate
        assert second.report.duplicate_of == first.report.id
        assert store.get_report_by_id(first.report.id).duplicate_count == 2

    @pytest.mark.parametrize("lat,lon", [(91, 0), (0, -181)])
    def test_invalid_coordinates(self, container, lat, lon):
        with pytest.raises(IngestionError):
            container.reports.submit_report(b"x", "a.jpg", lat, lon)

    def test_empty_photo_rejected(self, container):
        with pytest.raises(PhotoStorageError):
            container.reports.submit_report(b"", "a.jpg", 12.97, 77.59)

    def test_non_image_rejected(self, container):
        with pytest.raises(PhotoStorageError):
            container.reports.submit_report(b"%PDF", "a.pdf", 12.97, 77.59)

    def test_store_failure_removes_saved_photo(self, container, store, photo_store, monkeypatch):
        def _down(report):
            raise StoreError("write failed")

        monkeypatch.setattr(store, "insert_report", _down)

        with pytest.raises(StoreError):
            container.reports.submit_report(b"jpeg-bytes", "pothole.jpg", 12.97, 77.59)

        assert not os.path.exists(photo_store.uploads_dir) or os.listdir(photo_store.uploads_dir) == []


class TestUpdateStatus:
    def test_status_change_recorded(self, container):
        report = container.reports.submit_report(b"x", "a.jpg", 12.97, 77.59).report

        updated = container.reports.update_status(report.id, "Verified", changed_by="op-2")

        assert updated.status == "verified"
        assert updated.status_history[-1]["changed_by"] == "op-2"
        assert len(updated.status_history) == 2

    def test_invalid_status(self, container):
        report = container.reports.submit_report(b"x", "a.jpg", 12.97, 77.59).report
        with pytest.raises(InvalidStatusError):
            container.reports.update_status(report.id, "escalated")

    def test_unknown_report(self, container):
        with pytest.raises(ReportNotFoundError):
            container.reports.update_status("missing", "verified")

    def test_invalid_status_checked_before_lookup(self, container):
        with pytest.raises(InvalidStatusError):
            container.reports.update_status("missing", "bogus")

    def test_gives_up_when_always_raced(self, container, store, monkeypatch):
        report = container.reports.submit_report(b"x", "a.jpg", 12.97, 77.59).report
        monkeypatch.setattr(store, "update_report_if", lambda report_id, predicate, fields: None)

        with pytest.raises(StoreError):
            container.reports.update_status(report.id, "verified")
