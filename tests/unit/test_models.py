"""Unit tests for civicwatch.models.report."""

from __future__ import annotations

from datetime import datetime, timezone

from civicwatch.models.report import Classification, Report


class TestClassification:
    def test_normalizes_provider_output(self):
        classification = Classification.model_validate({
            "category": "pothole",
            "severity": "extreme",
            "confidence": 130.4,
            "estimatedUrgency": "whenever",
            "departmentResponsible": "Road Maintenance",
        })

        assert classification.category == "POTHOLE"
        assert classification.severity == "MEDIUM"
        assert classification.confidence == 100
        assert classification.estimated_urgency == "MODERATE"
        assert classification.department_responsible == "Road Maintenance"
        assert classification.schema_version == 1

    def test_unknown_keys_preserved(self):
        classification = Classification.model_validate({"category": "OTHER", "issueDetected": True})
        assert classification.model_dump()["issueDetected"] is True

    def test_urgency(self):
        assert Classification(estimated_urgency="IMMEDIATE").is_urgent
        assert not Classification(estimated_urgency="LOW").is_urgent


class TestReportDocument:
    def test_round_trip_keeps_id_out_of_document(self, make_report):
        report = make_report(id="r1", merged_reports=["d1"], duplicate_count=2)

        document = report.to_document()

        assert "id" not in document
        assert Report.from_document("r1", document) == report


class TestReportTimestamps:
    def test_naive_timestamps_become_utc(self, make_report):
        report = make_report(created_at="2026-10-10T08:30:00", sla_deadline=datetime(2026, 10, 11, 8, 30))

        assert report.created_at == datetime(2026, 10, 10, 8, 30, tzinfo=timezone.utc)
        assert report.sla_deadline == datetime(2026, 10, 11, 8, 30, tzinfo=timezone.utc)

    def test_offset_and_z_suffix_parsed(self, make_report):
        report = make_report(created_at="2026-10-10T08:30:00Z", escalated_at="2026-10-10T14:00:00+05:30")

        assert report.created_at == datetime(2026, 10, 10, 8, 30, tzinfo=timezone.utc)
        assert report.escalated_at == datetime(2026, 10, 10, 8, 30, tzinfo=timezone.utc)

    def test_missing_deadline_stays_none(self, make_report):
        assert make_report(sla_deadline=None).sla_deadline is None
