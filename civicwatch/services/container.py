"""
Service Container - wires every service with its store, clock and providers.

Built once at application startup and kept on app.state; tests build
their own with in-memory doubles.
"""

from dataclasses import dataclass
from typing import Optional
import logging

from civicwatch.core.settings import Settings
from civicwatch.services.ai_plugin.base import SimilarityOracle
from civicwatch.services.ai_plugin.registry import (
    ClassifierRegistry,
    build_classifier_registry,
    build_similarity_oracle,
)
from civicwatch.services.analytics_service import PredictiveAnalyticsService
from civicwatch.services.duplicate_detection import SimilarityResolver
from civicwatch.services.escalation_engine import EscalationMonitor, EscalationScheduler
from civicwatch.services.forecasting import TrendForecaster
from civicwatch.services.hotspots import HotspotClusterer
from civicwatch.services.ingestion import IngestionCoordinator
from civicwatch.services.notification_sink import (
    FirestoreAlertSink,
    LoggingNotificationSink,
    NotificationSink,
)
from civicwatch.services.photo_store import LocalPhotoStore
from civicwatch.services.report_service import ReportService
from civicwatch.services.store import FirestoreReportStore, InMemoryReportStore, ReportStore
from civicwatch.utils.time_utils import Clock, utc_now

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    store: ReportStore
    photo_store: LocalPhotoStore
    resolver: SimilarityResolver
    reports: ReportService
    escalation: EscalationMonitor
    scheduler: EscalationScheduler
    analytics: PredictiveAnalyticsService

    def shutdown(self) -> None:
        self.scheduler.stop()


def build_store(settings: Settings) -> ReportStore:
    if settings.USE_MOCK_DB:
        logger.warning("⚠️ USE_MOCK_DB is set, reports are kept in memory only")
        return InMemoryReportStore()

    from civicwatch.config.firebase import get_db
    return FirestoreReportStore(get_db(settings), settings.REPORTS_COLLECTION)


def build_notification_sink(settings: Settings, store: ReportStore) -> NotificationSink:
    if settings.NOTIFICATION_SINK == "firestore":
        if isinstance(store, FirestoreReportStore):
            return FirestoreAlertSink(store.db, settings.ALERTS_COLLECTION)
        logger.warning("NOTIFICATION_SINK=firestore needs the Firestore store, logging alerts instead")
    return LoggingNotificationSink()


def build_container(
    settings: Settings,
    store: Optional[ReportStore] = None,
    clock: Clock = utc_now,
    classifiers: Optional[ClassifierRegistry] = None,
    oracle: Optional[SimilarityOracle] = None,
    sink: Optional[NotificationSink] = None,
    photo_store: Optional[LocalPhotoStore] = None
) -> ServiceContainer:
    """
    Construct all services. Any collaborator passed in replaces the
    one that would be built from settings.
    """
    store = store or build_store(settings)
    photo_store = photo_store or LocalPhotoStore(settings.UPLOADS_DIR, max_bytes=settings.MAX_UPLOAD_BYTES)
    classifiers = classifiers or build_classifier_registry(settings)
    oracle = oracle or build_similarity_oracle(settings)
    sink = sink or build_notification_sink(settings, store)

    resolver = SimilarityResolver(
        oracle,
        photo_store,
        threshold=settings.SIMILARITY_THRESHOLD,
        timeout_seconds=settings.SIMILARITY_TIMEOUT_SECONDS,
    )
    ingestion = IngestionCoordinator(
        store, resolver, clock=clock, radius_meters=settings.DUPLICATE_RADIUS_METERS
    )
    escalation = EscalationMonitor(store, sink, clock=clock)

    return ServiceContainer(
        store=store,
        photo_store=photo_store,
        resolver=resolver,
        reports=ReportService(store, photo_store, classifiers, ingestion, clock=clock),
        escalation=escalation,
        scheduler=EscalationScheduler(escalation, settings.ESCALATION_INTERVAL_MINUTES),
        analytics=PredictiveAnalyticsService(
            store,
            HotspotClusterer(
                radius_meters=settings.HOTSPOT_RADIUS_METERS,
                recent_days=settings.GROWTH_RECENT_DAYS,
                min_reports=settings.HOTSPOT_MIN_REPORTS,
            ),
            TrendForecaster(periods_ahead=settings.FORECAST_PERIODS_AHEAD),
            clock=clock,
            hotspot_window_days=settings.HOTSPOT_WINDOW_DAYS,
        ),
    )
