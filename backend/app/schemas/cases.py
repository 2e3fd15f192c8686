from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from app.schemas.ai import CaseDetails, ChatMessage, DifficultyLevel
from app.schemas.base import CamelModel


class CaseCreate(CamelModel):
    """Start a case for a user, creating the user on first use."""

    email: Optional[str] = None
    country: Optional[str] = None
    department_name: Optional[str] = None
    difficulty: DifficultyLevel = "standard"
    case_details: Optional[CaseDetails] = None


class MessagesAppend(CamelModel):
    messages: list[ChatMessage] = Field(default_factory=list)


class CaseCompleteRequest(CamelModel):
    final_diagnosis: Optional[str] = None
    management_plan: Optional[str] = None
    preliminary_diagnosis: Optional[str] = None
    examination_plan: Optional[str] = None
    investigation_plan: Optional[str] = None
    examination_results: list[dict[str, Any]] = Field(default_factory=list)
    investigation_results: list[dict[str, Any]] = Field(default_factory=list)
    messages: list[ChatMessage] = Field(default_factory=list)
    make_visible: bool = False


class CaseStateUpdate(CamelModel):
    """Work in progress saved before the case is completed."""

    preliminary_diagnosis: Optional[str] = None
    examination_plan: Optional[str] = None
    investigation_plan: Optional[str] = None
    final_diagnosis: Optional[str] = None
    management_plan: Optional[str] = None
    examination_results: Optional[list[dict[str, Any]]] = None
    investigation_results: Optional[list[dict[str, Any]]] = None


class VisibilityUpdate(CamelModel):
    is_visible: Optional[bool] = None


class MessageResponse(CamelModel):
    id: int
    sender: str
    text: str
    speaker_label: Optional[str] = None
    timestamp: datetime


class FeedbackResponse(CamelModel):
    diagnosis: str
    key_learning_point: Optional[str] = None
    what_you_did_well: list[str] = Field(default_factory=list)
    what_could_be_improved: list[str] = Field(default_factory=list)
    clinical_tip: Optional[str] = None
    clinical_reasoning: Optional[str] = None
    missed_opportunities: list[dict[str, Any]] = Field(default_factory=list)
    clinical_pearls: list[str] = Field(default_factory=list)


class CaseReportResponse(CamelModel):
    clinical_summary: str
    key_findings: list[dict[str, Any]] = Field(default_factory=list)
    investigations: list[dict[str, Any]] = Field(default_factory=list)
    management_plan: list[dict[str, Any]] = Field(default_factory=list)
    clinical_opportunities: list[dict[str, Any]] = Field(default_factory=list)
    clinical_pearls: Optional[str] = None
    generated_fields: list[str] = Field(default_factory=list)


class CaseSummaryResponse(CamelModel):
    """Row in a user's case list."""

    id: int
    department: Optional[str] = None
    diagnosis: str
    difficulty_level: str
    mode: str = "clerking"
    is_pediatric: bool
    is_completed: bool
    is_visible: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    @field_validator("department", mode="before")
    @classmethod
    def department_name(cls, value: Any) -> Any:
        return getattr(value, "name", value)


class CaseResponse(CaseSummaryResponse):
    primary_info: str
    opening_line: str
    case_profile: Optional[dict[str, Any]] = None
    preliminary_diagnosis: Optional[str] = None
    examination_plan: Optional[str] = None
    investigation_plan: Optional[str] = None
    final_diagnosis: Optional[str] = None
    management_plan: Optional[str] = None
    examination_results: list[dict[str, Any]] = Field(default_factory=list)
    investigation_results: list[dict[str, Any]] = Field(default_factory=list)
    messages: list[MessageResponse] = Field(default_factory=list)
    feedback: Optional[FeedbackResponse] = None
    report: Optional[CaseReportResponse] = None
    time_spent_minutes: int = 0
    clinical_summary: Optional[str] = None


class CaseCompleteResponse(CamelModel):
    case_id: int
    message: str = "Case completed successfully"
    feedback: dict[str, Any]
    case_report: CaseReportResponse


class DepartmentCount(CamelModel):
    department: Optional[str] = None
    count: int


class UserStatsResponse(CamelModel):
    user_id: int
    total_cases: int
    completed_cases: int
    completion_rate: float
    department_breakdown: list[DepartmentCount] = Field(default_factory=list)
