from typing import Any, Literal, Optional

from pydantic import ConfigDict, Field

from app.schemas.base import CamelModel

DifficultyLevel = Literal["standard", "intermediate", "difficult"]


class PatientProfile(CamelModel):
    age: Optional[Any] = None
    gender: Optional[str] = None
    presenting_complaint: Optional[str] = None
    education_level: Optional[str] = None
    health_literacy: Optional[str] = None
    occupation: Optional[str] = None
    record_keeping: Optional[str] = None


class PediatricProfile(CamelModel):
    patient_age: Optional[float] = None
    age_group: Optional[str] = None
    responding_parent: Optional[str] = None
    parent_profile: PatientProfile = Field(default_factory=PatientProfile)
    developmental_stage: Optional[str] = None
    communication_level: Optional[str] = None


class CaseDetails(CamelModel):
    model_config = ConfigDict(extra="allow")

    diagnosis: Optional[str] = None
    primary_info: Optional[str] = None
    opening_line: Optional[str] = None
    is_pediatric: bool = False
    patient_profile: Optional[PatientProfile] = None
    pediatric_profile: Optional[PediatricProfile] = None


class ChatMessage(CamelModel):
    sender: str
    text: str
    speaker_label: Optional[str] = None


class CaseState(CamelModel):
    department: Optional[str] = None
    case_details: Optional[CaseDetails] = None
    messages: list[ChatMessage] = Field(default_factory=list)
    preliminary_diagnosis: Optional[str] = None
    examination_plan: Optional[str] = None
    investigation_plan: Optional[str] = None
    final_diagnosis: Optional[str] = None
    management_plan: Optional[str] = None
    examination_results: list[dict[str, Any]] = Field(default_factory=list)
    investigation_results: list[dict[str, Any]] = Field(default_factory=list)


class GenerateCaseRequest(CamelModel):
    department_name: Optional[str] = None
    difficulty: DifficultyLevel = "standard"
    user_country: Optional[str] = None
    specific_diagnosis: Optional[str] = None
    specific_patient_profile: Optional[str] = None


class PracticeCaseRequest(CamelModel):
    department_name: Optional[str] = None
    condition: Optional[str] = None
    difficulty: DifficultyLevel = "standard"
    user_country: Optional[str] = None


class PatientProfileRequest(CamelModel):
    diagnosis: Optional[str] = None
    department_name: Optional[str] = None
    user_country: Optional[str] = None
    random_seed: Optional[int] = None


class ResultsRequest(CamelModel):
    plan: Optional[str] = None
    case_details: Optional[CaseDetails] = None


class PatientResponseRequest(CamelModel):
    history: Optional[list[ChatMessage]] = None
    case_details: Optional[CaseDetails] = None
    user_country: Optional[str] = None


class FeedbackRequest(CamelModel):
    case_state: Optional[CaseState] = None


class PatientReply(CamelModel):
    response: str
    sender: str = "patient"
    speaker_label: str = ""


class PatientResponseResponse(CamelModel):
    messages: list[PatientReply]
