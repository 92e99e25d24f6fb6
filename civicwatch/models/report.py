"""
Pydantic models for citizen reports.
These models carry reports between the store, the services and the API.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List, Dict, Any
from enum import Enum

from civicwatch.utils.time_utils import parse_timestamp


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Urgency(str, Enum):
    IMMEDIATE = "IMMEDIATE"
    URGENT = "URGENT"
    MODERATE = "MODERATE"
    LOW = "LOW"


class ReportStatus(str, Enum):
    """
    Workflow status of a report.

    pending → verified → resolved, with pending reachable from any status
    as a manual reset. Escalation is a separate flag, not a status.
    """
    PENDING = "pending"
    VERIFIED = "verified"
    RESOLVED = "resolved"


OPEN_STATUSES = [ReportStatus.PENDING.value, ReportStatus.VERIFIED.value]
URGENT_LEVELS = {Urgency.IMMEDIATE.value, Urgency.URGENT.value}

CLASSIFICATION_SCHEMA_VERSION = 1


class Classification(BaseModel):
    """
    Structured vision-classifier result stored on every report.

    Versioned so that stored documents written by older producers can be
    told apart. Unknown keys from newer producers are preserved.
    """
    schema_version: int = Field(default=CLASSIFICATION_SCHEMA_VERSION)
    category: str = Field(default="OTHER")
    severity: Severity = Field(default=Severity.MEDIUM)
    confidence: int = Field(default=0, ge=0, le=100)
    estimated_urgency: Urgency = Field(default=Urgency.MODERATE, alias="estimatedUrgency")
    department_responsible: str = Field(default="General Administration", alias="departmentResponsible")
    estimated_repair_time: str = Field(default="Unknown", alias="estimatedRepairTime")
    estimated_cost: str = Field(default="Unknown", alias="estimatedCost")
    technical_assessment: str = Field(default="", alias="technicalAssessment")
    safety_concerns: List[str] = Field(default_factory=list, alias="safetyConcerns")
    recommended_actions: List[str] = Field(default_factory=list, alias="recommendedActions")
    ai_processed: bool = Field(default=False, alias="aiProcessed")
    fallback_used: bool = Field(default=False, alias="fallbackUsed")
    processed_at: Optional[datetime] = Field(default=None, alias="processedAt")

    class Config:
        populate_by_name = True
        use_enum_values = True
        validate_default = True
        extra = "allow"

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        if not value:
            return "OTHER"
        return str(value).strip().upper()

    @field_validator("severity", mode="before")
    @classmethod
    def _normalize_severity(cls, value):
        value = str(value or "").strip().upper()
        return value if value in Severity.__members__ else Severity.MEDIUM.value

    @field_validator("estimated_urgency", mode="before")
    @classmethod
    def _normalize_urgency(cls, value):
        value = str(value or "").strip().upper()
        return value if value in Urgency.__members__ else Urgency.MODERATE.value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        try:
            return max(0, min(100, int(round(float(value)))))
        except (TypeError, ValueError):
            return 0

    @property
    def is_urgent(self) -> bool:
        return self.estimated_urgency in URGENT_LEVELS


class DuplicateMatch(BaseModel):
    """Evidence recorded when a report is linked to an earlier one."""
    primary_id: str
    similarity_score: float
    distance_meters: float
    reasoning: str = ""


class Report(BaseModel):
    """
    A citizen report as stored.

    Primary reports carry duplicate_count / merged_reports; duplicates carry
    duplicate_of and the duplicate_match evidence.
    """
    id: str = Field(default="", description="Store document ID")
    description: str = ""
    photo_url: Optional[str] = None
    photo_path: Optional[str] = None
    latitude: float
    longitude: float
    category: str = "OTHER"
    severity: Severity = Severity.MEDIUM
    priority: Priority = Priority.MEDIUM
    status: ReportStatus = ReportStatus.PENDING
    department: str = "General Administration"
    urgent: bool = False
    classification: Classification = Field(default_factory=Classification)
    # Duplicate linkage
    is_primary: bool = True
    duplicate_of: Optional[str] = None
    duplicate_count: int = Field(default=1, ge=1)
    merged_reports: List[str] = Field(default_factory=list)
    duplicate_match: Optional[DuplicateMatch] = None
    # SLA / escalation
    sla_deadline: Optional[datetime] = None
    escalated: bool = False
    escalation_notified: bool = False
    escalated_at: Optional[datetime] = None
    status_history: List[Dict[str, Any]] = Field(default_factory=list)
    created_at: datetime

    class Config:
        use_enum_values = True
        validate_default = True

    @field_validator("created_at", "sla_deadline", "escalated_at", mode="before")
    @classmethod
    def _normalize_timestamp(cls, value):
        """Naive timestamps are taken as UTC."""
        parsed = parse_timestamp(value)
        return value if parsed is None else parsed

    def to_document(self) -> Dict[str, Any]:
        """Serialize for storage (the id lives in the document key)."""
        return self.model_dump(exclude={"id"})

    @classmethod
    def from_document(cls, report_id: str, data: Dict[str, Any]) -> "Report":
        data = dict(data)
        data["id"] = report_id
        return cls.model_validate(data)


class ReportSubmissionResponse(BaseModel):
    """Returned by POST /reports."""
    id: str
    message: str
    is_duplicate: bool
    duplicate_of: Optional[str] = None
    similarity_score: Optional[float] = None
    sla_deadline: datetime
    urgent: bool
    consistency_warning: Optional[str] = None
    classification: Dict[str, Any]


class StatusUpdateRequest(BaseModel):
    status: str = Field(..., description="pending, verified or resolved")
    changed_by: str = Field(default="operator", max_length=100)
    note: Optional[str] = Field(None, max_length=500)
