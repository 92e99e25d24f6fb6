"""
Timestamp helpers shared by the store, the escalation monitor and analytics.
"""

from datetime import datetime, timezone
from typing import Callable, Optional


# A Clock returns the current time as a timezone-aware UTC datetime.
Clock = Callable[[], datetime]

BUCKET_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%Y-%W",
    "month": "%Y-%m",
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> Optional[datetime]:
    """Parse various timestamp formats to timezone-aware datetime (UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt
    # Firestore DatetimeWithNanoseconds is a datetime; protobuf Timestamps expose ToDatetime
    if hasattr(value, "ToDatetime"):
        return value.ToDatetime().replace(tzinfo=timezone.utc)
    return None


def bucket_key(moment: datetime, bucket_unit: str) -> str:
    """
    Calendar bucket label for a timestamp.

    day -> YYYY-MM-DD, week -> YYYY-WW (Monday-based), month -> YYYY-MM.
    Labels sort chronologically as plain strings.
    """
    try:
        fmt = BUCKET_FORMATS[bucket_unit]
    except KeyError:
        raise ValueError(
            f"Unknown bucket unit '{bucket_unit}'. Must be one of: {', '.join(BUCKET_FORMATS)}"
        )
    return moment.strftime(fmt)
