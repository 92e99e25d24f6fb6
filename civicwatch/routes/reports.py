"""
Report endpoints - API routes for citizen report submission and retrieval.
"""

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from civicwatch.models.report import Report, ReportSubmissionResponse, StatusUpdateRequest
from civicwatch.routes.dependencies import get_container
from civicwatch.services.container import ServiceContainer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ReportSubmissionResponse)
def submit_report(
    photo: UploadFile = File(...),
    latitude: float = Form(...),
    longitude: float = Form(...),
    description: Optional[str] = Form(None),
    container: ServiceContainer = Depends(get_container)
):
    """
    Submit a new citizen report.

    This endpoint:
    1. Stores the photo
    2. Classifies it (rule-based fallback when AI is unavailable)
    3. Merges it into a nearby report if it is a duplicate
    4. Assigns the SLA deadline

    Returns the new report ID with duplicate and classification info.
    """
    logger.info(f"📝 POST /reports - lat={latitude}, lon={longitude}, file={photo.filename}")

    content = photo.file.read()
    result = container.reports.submit_report(
        content, photo.filename or "", latitude, longitude, description or ""
    )
    report = result.report
    classification = report.classification

    return ReportSubmissionResponse(
        id=report.id,
        message="Duplicate report merged" if result.is_duplicate else "Report submitted successfully",
        is_duplicate=result.is_duplicate,
        duplicate_of=report.duplicate_of,
        similarity_score=result.duplicate.similarity_score if result.duplicate else None,
        sla_deadline=report.sla_deadline,
        urgent=report.urgent,
        consistency_warning=result.consistency_warning,
        classification={
            "category": classification.category,
            "severity": classification.severity,
            "confidence": classification.confidence,
            "department_responsible": classification.department_responsible,
            "estimated_urgency": classification.estimated_urgency,
            "fallback_used": classification.fallback_used,
        },
    )


@router.get("", response_model=List[Report])
def get_reports(container: ServiceContainer = Depends(get_container)):
    """All reports, newest first."""
    return container.reports.list_reports()


@router.get("/{report_id}", response_model=Report)
def get_report(report_id: str, container: ServiceContainer = Depends(get_container)):
    return container.reports.get_report(report_id)


@router.patch("/{report_id}/status", response_model=Report)
def update_report_status(
    report_id: str,
    request: StatusUpdateRequest,
    container: ServiceContainer = Depends(get_container)
):
    """
    Change a report's workflow status.

    Resolving clears escalation. Returns 400 for an unknown status and
    404 for an unknown report.
    """
    return container.reports.update_status(
        report_id, request.status, changed_by=request.changed_by, note=request.note
    )
