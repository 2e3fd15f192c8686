"""Pydantic schemas for API request/response validation."""

from app.schemas.ai import (
    CaseDetails,
    CaseState,
    ChatMessage,
    FeedbackRequest,
    GenerateCaseRequest,
    PatientProfile,
    PatientProfileRequest,
    PatientReply,
    PatientResponseRequest,
    PatientResponseResponse,
    PediatricProfile,
    PracticeCaseRequest,
    ResultsRequest,
)
from app.schemas.base import CamelModel
from app.schemas.cases import (
    CaseCompleteRequest,
    CaseCompleteResponse,
    CaseCreate,
    CaseReportResponse,
    CaseResponse,
    CaseStateUpdate,
    CaseSummaryResponse,
    DepartmentCount,
    FeedbackResponse,
    MessageResponse,
    MessagesAppend,
    UserStatsResponse,
    VisibilityUpdate,
)
from app.schemas.departments import (
    DepartmentListResponse,
    DepartmentResponse,
    SubspecialtyResponse,
)
from app.schemas.osce import (
    OsceCaseRequest,
    OsceCaseResponse,
    OsceEvaluationRequest,
    OsceSession,
    OsceSessionCreate,
    PerformanceRequest,
)
from app.schemas.users import UserResponse, UserUpdate, UserUpsert

__all__ = [
    # Base
    "CamelModel",
    # AI
    "CaseDetails",
    "CaseState",
    "ChatMessage",
    "FeedbackRequest",
    "GenerateCaseRequest",
    "PatientProfile",
    "PatientProfileRequest",
    "PatientReply",
    "PatientResponseRequest",
    "PatientResponseResponse",
    "PediatricProfile",
    "PracticeCaseRequest",
    "ResultsRequest",
    # Cases
    "CaseCompleteRequest",
    "CaseCompleteResponse",
    "CaseCreate",
    "CaseReportResponse",
    "CaseResponse",
    "CaseStateUpdate",
    "CaseSummaryResponse",
    "DepartmentCount",
    "FeedbackResponse",
    "MessageResponse",
    "MessagesAppend",
    "UserStatsResponse",
    "VisibilityUpdate",
    # Departments
    "DepartmentListResponse",
    "DepartmentResponse",
    "SubspecialtyResponse",
    # OSCE
    "OsceCaseRequest",
    "OsceCaseResponse",
    "OsceEvaluationRequest",
    "OsceSession",
    "OsceSessionCreate",
    "PerformanceRequest",
    # Users
    "UserResponse",
    "UserUpdate",
    "UserUpsert",
]
