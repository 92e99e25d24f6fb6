"""
Escalation endpoints - statistics and on-demand sweeps.
"""

from fastapi import APIRouter, Depends

from civicwatch.models.analytics import EscalationStats
from civicwatch.routes.dependencies import get_container
from civicwatch.services.container import ServiceContainer

router = APIRouter(prefix="/escalations", tags=["Escalations"])


@router.get("/stats", response_model=EscalationStats)
def get_escalation_stats(container: ServiceContainer = Depends(get_container)):
    return container.escalation.get_escalation_stats()


@router.post("/sweep")
def run_escalation_sweep(container: ServiceContainer = Depends(get_container)):
    """
    Run one escalation sweep now.

    skipped is true when a scheduled sweep was already in progress.
    """
    escalated = container.escalation.sweep()
    return {
        "skipped": escalated is None,
        "escalated": escalated or 0,
    }
