"""Shared pytest fixtures for CivicWatch tests.

- store is an InMemoryReportStore; no test touches Firestore or the network
- clock is a FixedClock tests can advance explicitly
- oracle is a ScriptedOracle answering per photo content
- sink is a RecordingSink that keeps every escalation event
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from civicwatch.core.exceptions import SimilarityOracleError
from civicwatch.core.settings import Settings
from civicwatch.models.analytics import EscalationEvent
from civicwatch.models.report import Classification, Report
from civicwatch.services.ai_plugin.base import SimilarityOracle, SimilarityResult
from civicwatch.services.ai_plugin.registry import ClassifierRegistry
from civicwatch.services.container import build_container
from civicwatch.services.notification_sink import NotificationSink
from civicwatch.services.photo_store import LocalPhotoStore
from civicwatch.services.store.memory_store import InMemoryReportStore

T0 = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)  # a Monday

# Bengaluru, roughly; 0.0001 deg of latitude is ~11 m
BASE_LAT = 12.9716
BASE_LON = 77.5946


# ── Test doubles ─────────────────────────────────────────────────────────────────

class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class ScriptedOracle(SimilarityOracle):
    """Scores a pair by looking up the candidate photo bytes.

    scores maps candidate photo content -> score; unknown photos score 0.
    failures holds candidate contents whose comparison raises.
    """

    def __init__(self, scores: Optional[Dict[bytes, float]] = None):
        self.scores = dict(scores or {})
        self.failures: set = set()
        self.calls: List[bytes] = []

    def is_enabled(self) -> bool:
        return True

    def compare(self, image_a: bytes, image_b: bytes, timeout: float) -> SimilarityResult:
        self.calls.append(image_b)
        if image_b in self.failures:
            raise SimilarityOracleError("scripted failure")
        return SimilarityResult(self.scores.get(image_b, 0.0), "scripted", "scripted-oracle")


class RecordingSink(NotificationSink):
    def __init__(self):
        self.events: List[EscalationEvent] = []
        self.fail = False

    def notify(self, event: EscalationEvent) -> None:
        if self.fail:
            raise ConnectionError("sink offline")
        self.events.append(event)


def make_report(
    latitude: float = BASE_LAT,
    longitude: float = BASE_LON,
    created_at: datetime = T0,
    **overrides: Any,
) -> Report:
    """Report with sensible defaults for direct store inserts."""
    fields: Dict[str, Any] = {
        "description": "test report",
        "latitude": latitude,
        "longitude": longitude,
        "category": "POTHOLE",
        "severity": "MEDIUM",
        "created_at": created_at,
    }
    fields.update(overrides)
    return Report(**fields)


def make_classification(category: str = "POTHOLE", severity: str = "MEDIUM", **overrides: Any) -> Classification:
    return Classification(category=category, severity=severity, confidence=90, **overrides)


# ── Fixtures ─────────────────────────────────────────────────────────────────────

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def store() -> InMemoryReportStore:
    return InMemoryReportStore()


@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def photo_store(tmp_path) -> LocalPhotoStore:
    return LocalPhotoStore(str(tmp_path / "uploads"))


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        USE_MOCK_DB=True,
        AI_ENABLED=False,
        GEMINI_API_KEY=None,
        ESCALATION_SCHEDULER_ENABLED=False,
        NOTIFICATION_SINK="log",
        UPLOADS_DIR=str(tmp_path / "uploads"),
    )


@pytest.fixture
def container(test_settings, store, clock, oracle, sink, photo_store):
    services = build_container(
        test_settings,
        store=store,
        clock=clock,
        classifiers=ClassifierRegistry(),
        oracle=oracle,
        sink=sink,
        photo_store=photo_store,
    )
    yield services
    services.shutdown()


@pytest.fixture(name="make_report")
def make_report_fixture():
    return make_report


@pytest.fixture(name="make_classification")
def make_classification_fixture():
    return make_classification
