"""
Pydantic models for analytics output and escalation events.
These are computed on demand and never persisted (except alert records).
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Dict, List, Optional

from civicwatch.models.report import Report


class GeoPoint(BaseModel):
    lat: float
    lng: float


class Cluster(BaseModel):
    """A proximity cluster of reports around a seed report."""
    center: GeoPoint
    reports: List[Report] = Field(default_factory=list)
    count: int = 0
    categories: Dict[str, int] = Field(default_factory=dict)
    severity: Dict[str, int] = Field(default_factory=dict)
    top_category: Optional[str] = None
    top_severity: Optional[str] = None
    growth_rate: float = 0.0


class PeriodCount(BaseModel):
    """One (period, category, count) row from the store aggregation."""
    period: str
    category: str
    count: int


class ForecastPoint(BaseModel):
    period_index: int
    predicted_count: int


class ForecastSeries(BaseModel):
    category: str
    historical: List[PeriodCount]
    predicted: List[ForecastPoint]
    slope: float
    intercept: float
    trend: str  # increasing | decreasing | stable


class PredictiveAnalytics(BaseModel):
    weekly_trends: List[PeriodCount]
    seasonal_trends: Dict[int, Dict[str, int]]
    emerging_hotspots: List[Cluster]
    predictions: Dict[str, ForecastSeries]
    generated_at: datetime


class IssueInsights(BaseModel):
    total_reports: int
    category_distribution: Dict[str, int]
    severity_distribution: Dict[str, int]
    department_workload: Dict[str, int]
    most_common_issues: List[Dict]
    urgent_issues: int


class EscalationEvent(BaseModel):
    """Emitted once per report when its SLA deadline passes."""
    report_id: str
    category: str
    severity: str
    description: str
    sla_deadline: datetime
    hours_overdue: int


class EscalationStats(BaseModel):
    total_escalated: int
    pending_escalated: int
    resolved_escalated: int
