"""
Analytics endpoints - trends, hotspots and forecasts for operators.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from civicwatch.models.analytics import Cluster, ForecastSeries, IssueInsights, PredictiveAnalytics
from civicwatch.routes.dependencies import get_container
from civicwatch.services.container import ServiceContainer

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/predictive", response_model=PredictiveAnalytics)
def get_predictive_analytics(container: ServiceContainer = Depends(get_container)):
    """
    Weekly trends, seasonal trends, emerging hotspots and per-category
    forecasts in one payload.
    """
    return container.analytics.get_predictive_analytics()


@router.get("/insights", response_model=IssueInsights)
def get_issue_insights(container: ServiceContainer = Depends(get_container)):
    return container.analytics.get_issue_insights()


@router.get("/hotspots", response_model=List[Cluster])
def get_emerging_hotspots(container: ServiceContainer = Depends(get_container)):
    return container.analytics.get_emerging_hotspots()


@router.get("/forecast", response_model=Dict[str, ForecastSeries])
def get_forecast(
    time_unit: str = Query("week", description="day, week or month"),
    periods_ahead: Optional[int] = Query(None, ge=1, le=52),
    container: ServiceContainer = Depends(get_container)
):
    try:
        return container.analytics.get_forecast(time_unit, periods_ahead)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
