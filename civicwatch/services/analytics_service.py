"""
Analytics Service - predictive analytics and issue insights for operators.

All analytics are pull-based reads over a store snapshot. Nothing here
holds locks or writes back to the store.
"""

from collections import defaultdict
from datetime import timedelta
from typing import Dict, List, Optional
import logging

from civicwatch.models.analytics import (
    Cluster,
    ForecastSeries,
    IssueInsights,
    PeriodCount,
    PredictiveAnalytics,
)
from civicwatch.models.report import Severity
from civicwatch.services.forecasting import TrendForecaster
from civicwatch.services.hotspots import HotspotClusterer
from civicwatch.services.store.base import ReportStore
from civicwatch.utils.time_utils import BUCKET_FORMATS, Clock, utc_now

logger = logging.getLogger(__name__)


# How far back each bucket unit looks when building trends
TREND_WINDOWS = {
    "day": timedelta(days=30),
    "week": timedelta(weeks=12),
    "month": timedelta(days=365),
}

MOST_COMMON_LIMIT = 5


class PredictiveAnalyticsService:
    """Assembles trends, hotspots and forecasts from the report store."""

    DEFAULT_HOTSPOT_WINDOW_DAYS = 14

    def __init__(
        self,
        store: ReportStore,
        clusterer: HotspotClusterer,
        forecaster: TrendForecaster,
        clock: Clock = utc_now,
        hotspot_window_days: int = DEFAULT_HOTSPOT_WINDOW_DAYS
    ):
        self.store = store
        self.clusterer = clusterer
        self.forecaster = forecaster
        self.clock = clock
        self.hotspot_window_days = hotspot_window_days

    def get_reports_by_time_period(self, time_unit: str = "week") -> List[PeriodCount]:
        """
        Report counts per (period, category) over the unit's default window.

        Raises:
            ValueError: If time_unit is not day, week or month
        """
        if time_unit not in BUCKET_FORMATS:
            raise ValueError(
                f"Invalid time_unit '{time_unit}'. Must be one of: {', '.join(BUCKET_FORMATS)}"
            )
        since = self.clock() - TREND_WINDOWS[time_unit]
        return self.store.aggregate_counts_by_period_and_category(time_unit, since=since)

    def get_seasonal_trends(self) -> Dict[int, Dict[str, int]]:
        """Month of year (1-12) -> category -> count, over all reports."""
        seasonal: Dict[int, Dict[str, int]] = defaultdict(dict)
        for row in self.store.aggregate_counts_by_period_and_category("month"):
            month = int(row.period[5:7])
            seasonal[month][row.category] = seasonal[month].get(row.category, 0) + row.count
        return dict(sorted(seasonal.items()))

    def get_emerging_hotspots(self) -> List[Cluster]:
        now = self.clock()
        since = now - timedelta(days=self.hotspot_window_days)
        recent_primaries = self.store.query_created_after(since, primary_only=True)
        hotspots = self.clusterer.emerging_hotspots(recent_primaries, now)
        logger.info(f"Found {len(hotspots)} emerging hotspots among {len(recent_primaries)} recent reports")
        return hotspots

    def get_forecast(
        self,
        time_unit: str = "week",
        periods_ahead: Optional[int] = None
    ) -> Dict[str, ForecastSeries]:
        return self.forecaster.forecast(self.get_reports_by_time_period(time_unit), periods_ahead)

    def get_predictive_analytics(self) -> PredictiveAnalytics:
        """
        Full analytics payload.

        Raises:
            StoreError: If any store read fails
        """
        weekly = self.get_reports_by_time_period("week")
        return PredictiveAnalytics(
            weekly_trends=weekly,
            seasonal_trends=self.get_seasonal_trends(),
            emerging_hotspots=self.get_emerging_hotspots(),
            predictions=self.forecaster.forecast(weekly),
            generated_at=self.clock(),
        )

    def get_issue_insights(self) -> IssueInsights:
        """Distribution summary of every stored report's classification."""
        reports = self.store.list_reports()

        category_distribution: Dict[str, int] = defaultdict(int)
        severity_distribution: Dict[str, int] = {level.value: 0 for level in Severity}
        department_workload: Dict[str, int] = defaultdict(int)
        urgent_issues = 0

        for report in reports:
            classification = report.classification
            category_distribution[classification.category] += 1
            severity_distribution[classification.severity] = severity_distribution.get(classification.severity, 0) + 1
            department_workload[classification.department_responsible] += 1
            if classification.is_urgent:
                urgent_issues += 1

        most_common = sorted(category_distribution.items(), key=lambda item: (-item[1], item[0]))
        return IssueInsights(
            total_reports=len(reports),
            category_distribution=dict(category_distribution),
            severity_distribution=severity_distribution,
            department_workload=dict(department_workload),
            most_common_issues=[
                {"category": category, "count": count}
                for category, count in most_common[:MOST_COMMON_LIMIT]
            ],
            urgent_issues=urgent_issues,
        )
