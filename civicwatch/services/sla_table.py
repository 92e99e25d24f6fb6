"""
SLA Table - response deadlines per category and severity.

A category override, when one exists, always decides the deadline; the
severity table is only consulted for categories without an override. The
two values are never compared, so an override may be longer than the
severity-based deadline (e.g. VEGETATION_OVERGROWTH at HIGH severity).
"""

from datetime import datetime, timedelta
from typing import Dict, Optional


SEVERITY_SLA_HOURS: Dict[str, int] = {
    "HIGH": 6,
    "MEDIUM": 24,
    "LOW": 72,
}

CATEGORY_SLA_HOURS: Dict[str, int] = {
    "GARBAGE_OVERFLOW": 6,
    "WATER_LEAK": 6,
    "DRAIN_BLOCKAGE": 12,
    "POTHOLE": 24,
    "STREET_LIGHT": 24,
    "BROKEN_SIDEWALK": 48,
    "ILLEGAL_DUMPING": 12,
    "DAMAGED_SIGN": 48,
    "VEGETATION_OVERGROWTH": 72,
    "OTHER": 24,
}

DEFAULT_SEVERITY = "MEDIUM"


def deadline_hours(category: Optional[str], severity: Optional[str]) -> int:
    """
    Hours allowed before a report is overdue.

    Args:
        category: Issue category (e.g. "POTHOLE")
        severity: LOW / MEDIUM / HIGH; missing or unknown means MEDIUM

    Returns:
        Deadline in hours
    """
    if category in CATEGORY_SLA_HOURS:
        return CATEGORY_SLA_HOURS[category]

    return SEVERITY_SLA_HOURS.get(severity or DEFAULT_SEVERITY, SEVERITY_SLA_HOURS[DEFAULT_SEVERITY])


def sla_deadline(created_at: datetime, category: Optional[str], severity: Optional[str]) -> datetime:
    """Deadline timestamp for a report created at created_at."""
    return created_at + timedelta(hours=deadline_hours(category, severity))
