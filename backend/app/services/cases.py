"""Case repository implementations and helpers for saved cases."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Protocol

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models import Case, CaseReport, Department, Feedback, Message
from app.schemas.ai import CaseDetails, ChatMessage


@dataclass
class CaseCompletion:
    """Everything written to a case when the student finishes it."""

    final_diagnosis: str
    management_plan: str
    preliminary_diagnosis: Optional[str]
    examination_plan: Optional[str]
    investigation_plan: Optional[str]
    examination_results: list[dict[str, Any]]
    investigation_results: list[dict[str, Any]]
    is_visible: bool
    completed_at: datetime
    feedback: dict[str, Any]
    report: dict[str, Any]


CASE_STATE_FIELDS = (
    "preliminary_diagnosis",
    "examination_plan",
    "investigation_plan",
    "final_diagnosis",
    "management_plan",
    "examination_results",
    "investigation_results",
)


@dataclass
class UserStats:
    total_cases: int
    completed_cases: int
    department_breakdown: list[tuple[Optional[str], int]]

    @property
    def completion_rate(self) -> float:
        if not self.total_cases:
            return 0.0
        return self.completed_cases / self.total_cases * 100


def sort_breakdown(counts: dict[Optional[str], int]) -> list[tuple[Optional[str], int]]:
    """Per-department case counts, most common first."""
    return sorted(counts.items(), key=lambda item: (-item[1], item[0] or ""))


def opening_message_text(opening_line: str) -> str:
    return f'The patient is here today with the following complaint:\n\n"{opening_line}"'


def case_details_from_case(case) -> dict[str, Any]:
    """Rebuild the camelCase case details the prompts expect."""
    details: dict[str, Any] = {
        "diagnosis": case.diagnosis,
        "primaryInfo": case.primary_info,
        "openingLine": case.opening_line,
        "isPediatric": case.is_pediatric,
    }
    if case.case_profile:
        key = "pediatricProfile" if case.is_pediatric else "patientProfile"
        details[key] = case.case_profile
    return details


def case_state_from_case(case, department_name: Optional[str]) -> dict[str, Any]:
    return {
        "department": department_name,
        "caseDetails": case_details_from_case(case),
        "messages": [
            {"sender": message.sender, "text": message.text} for message in case.messages
        ],
        "preliminaryDiagnosis": case.preliminary_diagnosis,
        "examinationPlan": case.examination_plan,
        "investigationPlan": case.investigation_plan,
        "finalDiagnosis": case.final_diagnosis,
        "managementPlan": case.management_plan,
        "examinationResults": case.examination_results or [],
        "investigationResults": case.investigation_results or [],
    }


def _describe_results(results: list[dict[str, Any]]) -> str:
    parts = []
    for result in results:
        if result.get("type") == "quantitative" and result.get("value") and result.get("unit"):
            parts.append(f"{result.get('name')} {result['value']} {result['unit']}")
        else:
            parts.append(str(result.get("name")))
    return ", ".join(parts)


def derive_clinical_summary(case) -> str:
    """Narrative summary assembled from stored data, without a model call."""
    profile = case.case_profile or {}
    parent = profile.get("parentProfile") or {}
    age = profile.get("age") or profile.get("patientAge") or "unknown age"
    occupation = profile.get("occupation") or "patient"
    education = profile.get("educationLevel") or parent.get("educationLevel") or "basic"

    first_reply = next(
        (message.text for message in case.messages if message.sender in ("patient", "parent")),
        "symptoms",
    )
    summary = f"A {age}-year-old {occupation} with {education} education level presented with {first_reply}. "

    examination = case.examination_results or []
    vitals = [r for r in examination if r.get("category") == "vital_signs"]
    if vitals:
        summary += f"On examination, vital signs showed {_describe_results(vitals)}. "
    findings = ". ".join(
        r["findings"]
        for r in examination
        if r.get("category") == "system_examination" and r.get("findings")
    )
    if findings:
        summary += f"{findings}. "

    investigations = [
        r
        for r in case.investigation_results or []
        if r.get("category") in ("laboratory", "imaging")
    ]
    if investigations:
        summary += f"Investigations revealed {_describe_results(investigations)}. "

    feedback = case.feedback
    if feedback is not None and feedback.diagnosis:
        summary += f"A diagnosis of {feedback.diagnosis} was made. "
    if feedback is not None and feedback.clinical_reasoning:
        summary += f"Management included {feedback.clinical_reasoning}."
    return summary.strip()


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, str) else str(item) for item in value]


def feedback_record_fields(payload: dict[str, Any], fallback_diagnosis: str) -> dict[str, Any]:
    """Map comprehensive (or basic) feedback JSON onto ``Feedback`` columns."""
    opportunities = payload.get("clinicalOpportunities")
    if not isinstance(opportunities, dict):
        opportunities = {}
    pearls = _string_list(payload.get("clinicalPearls"))
    improvements = opportunities.get("areasForImprovement") or payload.get("whatCouldBeImproved")
    return {
        "diagnosis": (_text(payload.get("diagnosis")) or fallback_diagnosis)[:255],
        "key_learning_point": _text(payload.get("keyLearningPoint")),
        "what_you_did_well": _string_list(payload.get("whatYouDidWell")),
        "what_could_be_improved": _string_list(improvements),
        "clinical_tip": _text(payload.get("clinicalTip")) or (pearls[0] if pearls else None),
        "clinical_reasoning": _text(payload.get("clinicalReasoning")),
        "missed_opportunities": [
            item
            for item in opportunities.get("missedOpportunities") or []
            if isinstance(item, dict)
        ],
        "clinical_pearls": pearls,
    }


class CaseRepository(Protocol):
    async def create_case(
        self,
        user_id: int,
        department,
        details: CaseDetails,
        difficulty: str,
        mode: str = "clerking",
    ):
        ...

    async def list_cases(
        self, user_id: int, completed: Optional[bool], skip: int, limit: int
    ) -> list:
        ...

    async def get_case(self, case_id: int):
        ...

    async def add_messages(self, case, messages: list[ChatMessage]) -> list:
        ...

    async def complete_case(self, case, completion: CaseCompletion):
        ...

    async def set_visibility(self, case, is_visible: bool):
        ...

    async def update_case_state(self, case, updates: dict[str, Any]):
        ...

    async def get_user_stats(self, user_id: int) -> UserStats:
        ...


def _profile_for(details: CaseDetails) -> Optional[dict[str, Any]]:
    profile = details.pediatric_profile if details.is_pediatric else details.patient_profile
    if profile is None:
        profile = details.pediatric_profile or details.patient_profile
    return profile.model_dump(by_alias=True, exclude_none=True) if profile else None


class SQLCaseRepository:
    """Case repository backed by SQLAlchemy."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_case(
        self,
        user_id: int,
        department,
        details: CaseDetails,
        difficulty: str,
        mode: str = "clerking",
    ) -> Case:
        new_case = Case(
            user_id=user_id,
            department_id=department.id if department else None,
            diagnosis=details.diagnosis or "",
            primary_info=details.primary_info or "",
            opening_line=details.opening_line or "",
            is_pediatric=bool(details.is_pediatric or details.pediatric_profile),
            difficulty_level=difficulty,
            mode=mode,
            case_profile=_profile_for(details),
        )
        new_case.messages.append(
            Message(sender="system", text=opening_message_text(new_case.opening_line))
        )
        self.db.add(new_case)
        await self.db.flush()
        return await self.get_case(new_case.id)

    async def list_cases(
        self, user_id: int, completed: Optional[bool], skip: int, limit: int
    ) -> list[Case]:
        query = (
            select(Case)
            .options(selectinload(Case.department))
            .where(Case.user_id == user_id)
        )
        if completed is not None:
            query = query.where(Case.is_completed == completed)
        query = query.order_by(Case.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_case(self, case_id: int) -> Optional[Case]:
        result = await self.db.execute(
            select(Case)
            .options(
                selectinload(Case.department),
                selectinload(Case.messages),
                selectinload(Case.feedback),
                selectinload(Case.report),
            )
            .where(Case.id == case_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_messages(self, case: Case, messages: list[ChatMessage]) -> list[Message]:
        added = [
            Message(case_id=case.id, sender=m.sender, text=m.text, speaker_label=m.speaker_label)
            for m in messages
        ]
        case.messages.extend(added)
        await self.db.flush()
        return added

    async def complete_case(self, case: Case, completion: CaseCompletion) -> Case:
        case.final_diagnosis = completion.final_diagnosis
        case.management_plan = completion.management_plan
        case.preliminary_diagnosis = completion.preliminary_diagnosis
        case.examination_plan = completion.examination_plan
        case.investigation_plan = completion.investigation_plan
        case.examination_results = completion.examination_results
        case.investigation_results = completion.investigation_results
        case.is_visible = completion.is_visible
        case.is_completed = True
        case.completed_at = completion.completed_at
        case.feedback = Feedback(**completion.feedback)
        case.report = CaseReport(**completion.report)
        await self.db.flush()
        return await self.get_case(case.id)

    async def set_visibility(self, case: Case, is_visible: bool) -> Case:
        case.is_visible = is_visible
        await self.db.flush()
        return case

    async def update_case_state(self, case: Case, updates: dict[str, Any]) -> Case:
        for name in CASE_STATE_FIELDS:
            if name in updates:
                setattr(case, name, updates[name])
        await self.db.flush()
        return await self.get_case(case.id)

    async def get_user_stats(self, user_id: int) -> UserStats:
        result = await self.db.execute(
            select(Department.name, func.count(Case.id))
            .select_from(Case)
            .outerjoin(Department, Case.department_id == Department.id)
            .where(Case.user_id == user_id)
            .group_by(Department.name)
        )
        counts = {name: count for name, count in result.all()}
        completed = await self.db.scalar(
            select(func.count(Case.id)).where(
                Case.user_id == user_id, Case.is_completed.is_(True)
            )
        )
        return UserStats(
            total_cases=sum(counts.values()),
            completed_cases=completed or 0,
            department_breakdown=sort_breakdown(counts),
        )


@dataclass
class InMemoryMessage:
    id: int
    case_id: int
    sender: str
    text: str
    speaker_label: Optional[str]
    timestamp: datetime


@dataclass
class InMemoryCase:
    id: int
    user_id: int
    department: Any
    diagnosis: str
    primary_info: str
    opening_line: str
    is_pediatric: bool
    difficulty_level: str
    case_profile: Optional[dict[str, Any]]
    created_at: datetime
    updated_at: datetime
    preliminary_diagnosis: Optional[str] = None
    examination_plan: Optional[str] = None
    investigation_plan: Optional[str] = None
    final_diagnosis: Optional[str] = None
    management_plan: Optional[str] = None
    examination_results: list[dict[str, Any]] = field(default_factory=list)
    investigation_results: list[dict[str, Any]] = field(default_factory=list)
    is_completed: bool = False
    is_visible: bool = False
    completed_at: Optional[datetime] = None
    messages: list[InMemoryMessage] = field(default_factory=list)
    feedback: Optional[Feedback] = None
    report: Optional[CaseReport] = None
    mode: str = "clerking"

    @property
    def department_id(self) -> Optional[int]:
        return self.department.id if self.department else None

    @property
    def time_spent_minutes(self) -> int:
        if not self.completed_at:
            return 0
        delta = self.completed_at - self.created_at
        return max(0, round(delta.total_seconds() / 60))


class InMemoryCaseRepository:
    """In-memory repository for tests and local demos.

    Feedback and reports are kept as transient ORM instances; they are
    never attached to a session.
    """

    def __init__(self):
        self._cases: list[InMemoryCase] = []
        self._next_id = 1
        self._next_message_id = 1

    def _message(self, case_id: int, sender: str, text: str, speaker_label: Optional[str] = None) -> InMemoryMessage:
        message = InMemoryMessage(
            id=self._next_message_id,
            case_id=case_id,
            sender=sender,
            text=text,
            speaker_label=speaker_label,
            timestamp=datetime.now(timezone.utc),
        )
        self._next_message_id += 1
        return message

    async def create_case(
        self,
        user_id: int,
        department,
        details: CaseDetails,
        difficulty: str,
        mode: str = "clerking",
    ) -> InMemoryCase:
        now = datetime.now(timezone.utc)
        new_case = InMemoryCase(
            id=self._next_id,
            user_id=user_id,
            department=department,
            diagnosis=details.diagnosis or "",
            primary_info=details.primary_info or "",
            opening_line=details.opening_line or "",
            is_pediatric=bool(details.is_pediatric or details.pediatric_profile),
            difficulty_level=difficulty,
            mode=mode,
            case_profile=_profile_for(details),
            created_at=now,
            updated_at=now,
        )
        new_case.messages.append(
            self._message(new_case.id, "system", opening_message_text(new_case.opening_line))
        )
        self._cases.append(new_case)
        self._next_id += 1
        return new_case

    async def list_cases(
        self, user_id: int, completed: Optional[bool], skip: int, limit: int
    ) -> list[InMemoryCase]:
        cases = [c for c in self._cases if c.user_id == user_id]
        if completed is not None:
            cases = [c for c in cases if c.is_completed == completed]
        cases.sort(key=lambda c: c.created_at, reverse=True)
        return cases[skip : skip + limit]

    async def get_case(self, case_id: int) -> Optional[InMemoryCase]:
        for case in self._cases:
            if case.id == case_id:
                return case
        return None

    async def add_messages(self, case: InMemoryCase, messages: list[ChatMessage]) -> list[InMemoryMessage]:
        added = [self._message(case.id, m.sender, m.text, m.speaker_label) for m in messages]
        case.messages.extend(added)
        return added

    async def complete_case(self, case: InMemoryCase, completion: CaseCompletion) -> InMemoryCase:
        case.final_diagnosis = completion.final_diagnosis
        case.management_plan = completion.management_plan
        case.preliminary_diagnosis = completion.preliminary_diagnosis
        case.examination_plan = completion.examination_plan
        case.investigation_plan = completion.investigation_plan
        case.examination_results = completion.examination_results
        case.investigation_results = completion.investigation_results
        case.is_visible = completion.is_visible
        case.is_completed = True
        case.completed_at = completion.completed_at
        case.feedback = Feedback(case_id=case.id, **completion.feedback)
        case.report = CaseReport(case_id=case.id, **completion.report)
        case.updated_at = datetime.now(timezone.utc)
        return case

    async def set_visibility(self, case: InMemoryCase, is_visible: bool) -> InMemoryCase:
        case.is_visible = is_visible
        case.updated_at = datetime.now(timezone.utc)
        return case

    async def update_case_state(self, case: InMemoryCase, updates: dict[str, Any]) -> InMemoryCase:
        for name in CASE_STATE_FIELDS:
            if name in updates:
                setattr(case, name, updates[name])
        case.updated_at = datetime.now(timezone.utc)
        return case

    async def get_user_stats(self, user_id: int) -> UserStats:
        cases = [c for c in self._cases if c.user_id == user_id]
        counts = Counter(c.department.name if c.department else None for c in cases)
        return UserStats(
            total_cases=len(cases),
            completed_cases=sum(1 for c in cases if c.is_completed),
            department_breakdown=sort_breakdown(counts),
        )
