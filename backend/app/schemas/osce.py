from typing import Any, Literal, Optional

from pydantic import Field

from app.schemas.ai import CaseState, DifficultyLevel
from app.schemas.base import CamelModel
from app.schemas.cases import CaseResponse

OsceMode = Literal["simulation", "practice"]


class OsceCaseRequest(CamelModel):
    email: Optional[str] = None
    department: Optional[str] = None
    difficulty: DifficultyLevel = "standard"
    user_country: Optional[str] = None
    osce_mode: OsceMode = "simulation"
    practice_condition: Optional[str] = None


class OsceCaseResponse(CamelModel):
    case: CaseResponse
    selected_subspecialty: Optional[str] = None
    osce_mode: OsceMode
    is_first_time: bool
    station_minutes: int


class FollowupQuestionsRequest(CamelModel):
    case_id: Optional[int] = None


class OsceQuestion(CamelModel):
    """A follow-up question as shown to the student; the answer stays server-side."""

    id: str
    domain: str
    question: str


class FollowupQuestionsResponse(CamelModel):
    questions: list[OsceQuestion]


class StudentResponse(CamelModel):
    question_id: str
    student_answer: str = ""


class OsceEvaluationRequest(CamelModel):
    case_id: Optional[int] = None
    student_responses: Optional[list[StudentResponse]] = None
    case_state: Optional[CaseState] = None


class OsceQuestionsRequest(CamelModel):
    case_history: Optional[str] = None
    diagnosis: Optional[str] = None
    department: Optional[str] = None


class CategorisedQuestion(CamelModel):
    question: str
    category: str


class OsceQuestionsResponse(CamelModel):
    questions: list[CategorisedQuestion]


class OriginalCase(CamelModel):
    department: str
    target_diagnosis: str
    patient_profile: Optional[dict[str, Any]] = None
    key_history_points: list[str] = Field(default_factory=list)


class FollowupAnswer(CamelModel):
    question: str
    answer: str = ""
    category: str = ""


class PerformanceRequest(CamelModel):
    original_case: Optional[OriginalCase] = None
    history_questions: Optional[list[str]] = None
    follow_up_answers: Optional[list[FollowupAnswer]] = None
    student_diagnosis: Optional[str] = None


class OsceSessionCreate(CamelModel):
    mode: Optional[OsceMode] = None
    department: Optional[str] = None
    case_id: Optional[int] = None
    case_type: Optional[Literal["single-diagnosis", "custom"]] = None
    custom_condition: Optional[str] = None


class OsceSession(CamelModel):
    session_id: str
    mode: OsceMode
    department: str
    case_id: int
    case_type: Optional[str] = None
    custom_condition: Optional[str] = None
    start_time: str
    duration: int


class HistoryQuestions(CamelModel):
    questions: list[str] = Field(default_factory=list)


class SessionFollowupQuestion(CamelModel):
    id: str
    question: str
    category: Optional[str] = None
    student_answer: Optional[str] = None
    is_answered: bool = False


class SessionFollowupQuestions(CamelModel):
    questions: list[SessionFollowupQuestion] = Field(default_factory=list)


class FollowupAnswerUpdate(CamelModel):
    answer: Optional[str] = None


class SessionEvaluation(CamelModel):
    evaluation: Optional[dict[str, Any]] = None
