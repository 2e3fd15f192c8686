"""OSCE stations: generation, follow-up questions, scoring and session state."""

import logging
import random
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from app.api.cases import (
    case_response,
    get_case_or_404,
    get_case_repo,
    get_department_repo,
    get_user_repo,
)
from app.api.deps import get_model_client, get_now, require_fields
from app.schemas.ai import CaseDetails
from app.schemas.osce import (
    FollowupAnswerUpdate,
    FollowupQuestionsRequest,
    FollowupQuestionsResponse,
    HistoryQuestions,
    OsceCaseRequest,
    OsceCaseResponse,
    OsceEvaluationRequest,
    OsceQuestionsRequest,
    OsceQuestionsResponse,
    OsceSession,
    OsceSessionCreate,
    PerformanceRequest,
    SessionEvaluation,
    SessionFollowupQuestion,
    SessionFollowupQuestions,
)
from app.services import osce as sessions
from app.services.ai import InvalidShape, ModelClient
from app.services.ai import osce as osce_ai
from app.services.ai.prompts import MEDICAL_BUCKETS, OSCE_STATION_MINUTES
from app.services.cases import CaseRepository, case_details_from_case
from app.services.departments import DepartmentRepository
from app.services.users import UserRepository
from app.utils.cache import CacheKeys, clear_cache

logger = logging.getLogger("clerksmart.api.osce")

router = APIRouter(prefix="/osce", tags=["OSCE"])


@router.post("/cases", response_model=OsceCaseResponse, status_code=201)
async def generate_osce_case(
    payload: OsceCaseRequest,
    client: ModelClient = Depends(get_model_client),
    now: datetime = Depends(get_now),
    repo: CaseRepository = Depends(get_case_repo),
    users: UserRepository = Depends(get_user_repo),
    departments: DepartmentRepository = Depends(get_department_repo),
):
    """Generate and save a timed station case for a department.

    Departments with subspecialties get one picked at random to focus the
    case. ``practice`` mode with a condition reuses the practice-case flow.
    """
    require_fields("Department is required", payload.department)
    require_fields("Email is required", payload.email)

    department = await departments.find_department(payload.department)
    if department is None:
        raise HTTPException(status_code=404, detail="Department not found")

    user = await users.get_by_email(payload.email)
    if user is None:
        user = await users.create_user(payload.email, None, payload.user_country)
    stats = await repo.get_user_stats(user.id)

    subspecialty = None
    if department.subspecialties:
        subspecialty = random.choice([sub.name for sub in department.subspecialties])

    practice_condition = payload.practice_condition if payload.osce_mode == "practice" else None
    generated = await osce_ai.generate_osce_case(
        client,
        department_name=department.name,
        bucket=random.choice(MEDICAL_BUCKETS),
        now=now,
        subspecialty=subspecialty,
        user_country=payload.user_country,
        difficulty=payload.difficulty,
        practice_condition=practice_condition,
    )

    try:
        details = CaseDetails.model_validate(generated)
    except ValidationError as exc:
        raise InvalidShape(
            "The AI returned an invalid format for OSCE case. Please try again.",
            context="OSCE case",
            raw_text=str(generated),
            attempted="",
        ) from exc

    case = await repo.create_case(
        user.id,
        department,
        details,
        payload.difficulty,
        mode="osce",
    )
    await clear_cache(CacheKeys.cases_prefix(user.id))
    logger.info("Created OSCE case %s (%s, %s)", case.id, department.name, subspecialty or "-")
    return OsceCaseResponse(
        case=case_response(case),
        selected_subspecialty=subspecialty,
        osce_mode=payload.osce_mode,
        is_first_time=stats.completed_cases == 0,
        station_minutes=OSCE_STATION_MINUTES,
    )


@router.post("/followup-questions", response_model=FollowupQuestionsResponse)
async def followup_questions(
    payload: FollowupQuestionsRequest,
    client: ModelClient = Depends(get_model_client),
    repo: CaseRepository = Depends(get_case_repo),
):
    """Generate the follow-up questions for a station; answers are held back."""
    require_fields("Case ID is required", payload.case_id)
    case = await get_case_or_404(repo, payload.case_id)

    questions = await osce_ai.generate_followup_questions(
        client,
        case_details=case_details_from_case(case),
        department_name=case.department.name if case.department else "",
    )
    await sessions.cache_followup_answers(case.id, questions)
    return FollowupQuestionsResponse(questions=questions)


@router.post("/evaluation")
async def evaluate_osce(
    payload: OsceEvaluationRequest,
    client: ModelClient = Depends(get_model_client),
    repo: CaseRepository = Depends(get_case_repo),
):
    """Score the station against the answers cached with its questions."""
    require_fields("Student responses are required", payload.student_responses)
    require_fields("Case state is required", payload.case_state)
    require_fields("Case ID is required", payload.case_id)
    case = await get_case_or_404(repo, payload.case_id)

    questions = await sessions.get_followup_answers(case.id)
    if questions is None:
        raise HTTPException(status_code=404, detail="OSCE answers not found in cache")

    case_state = payload.case_state.model_dump(by_alias=True, exclude_none=True)
    case_state["caseDetails"] = case_details_from_case(case)
    case_state.setdefault("department", case.department.name if case.department else None)
    return await osce_ai.evaluate_osce(
        client,
        case_state=case_state,
        responses=[r.model_dump(by_alias=True) for r in payload.student_responses],
        questions=questions,
    )


@router.post("/questions", response_model=OsceQuestionsResponse)
async def generate_questions(
    payload: OsceQuestionsRequest,
    client: ModelClient = Depends(get_model_client),
):
    """Generate categorised follow-up questions from a free-text history."""
    require_fields(
        "Missing required fields: caseHistory, diagnosis, department",
        payload.case_history,
        payload.diagnosis,
        payload.department,
    )
    questions = await osce_ai.generate_osce_questions(
        client,
        case_history=payload.case_history,
        diagnosis=payload.diagnosis,
        department_name=payload.department,
    )
    return OsceQuestionsResponse(questions=questions)


@router.post("/performance")
async def evaluate_performance(
    payload: PerformanceRequest,
    client: ModelClient = Depends(get_model_client),
):
    """Score history taking and follow-up answers on the 4 x 25 rubric."""
    require_fields(
        "Missing required fields: originalCase, historyQuestions, followUpAnswers, studentDiagnosis",
        payload.original_case,
        payload.history_questions,
        payload.follow_up_answers,
        payload.student_diagnosis,
    )
    return await osce_ai.evaluate_osce_performance(
        client,
        original_case=payload.original_case.model_dump(by_alias=True),
        history_questions=payload.history_questions,
        followup_answers=[a.model_dump(by_alias=True) for a in payload.follow_up_answers],
        student_diagnosis=payload.student_diagnosis,
    )


async def _get_session_or_404(session_id: str) -> dict:
    session = await sessions.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="OSCE session not found")
    return session


@router.post("/sessions", response_model=OsceSession, status_code=201)
async def create_session(
    payload: OsceSessionCreate,
    now: datetime = Depends(get_now),
    repo: CaseRepository = Depends(get_case_repo),
):
    require_fields(
        "Missing required fields: mode, department, caseId",
        payload.mode,
        payload.department,
        payload.case_id,
    )
    if payload.mode == "practice" and not payload.case_type:
        raise HTTPException(status_code=400, detail="caseType is required for practice mode")
    if payload.case_type == "custom" and not payload.custom_condition:
        raise HTTPException(
            status_code=400, detail="customCondition is required for custom case type"
        )
    await get_case_or_404(repo, payload.case_id)

    return await sessions.create_session(
        mode=payload.mode,
        department=payload.department,
        case_id=payload.case_id,
        now=now,
        case_type=payload.case_type,
        custom_condition=payload.custom_condition,
    )


@router.get("/sessions/{session_id}", response_model=OsceSession)
async def get_session(session_id: str):
    return await _get_session_or_404(session_id)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(session_id: str):
    await sessions.delete_session(session_id)


@router.post("/sessions/{session_id}/history", response_model=HistoryQuestions)
async def save_history(session_id: str, payload: HistoryQuestions):
    """Record the history questions the student asked during the station."""
    await _get_session_or_404(session_id)
    questions = [q for q in payload.questions if q.strip()]
    if not questions:
        raise HTTPException(status_code=400, detail="Questions must be a non-empty array")
    await sessions.save_history_questions(session_id, questions)
    return HistoryQuestions(questions=questions)


@router.get("/sessions/{session_id}/history", response_model=HistoryQuestions)
async def get_history(session_id: str):
    questions = await sessions.get_history_questions(session_id)
    if questions is None:
        raise HTTPException(status_code=404, detail="History questions not found for this session")
    return HistoryQuestions(questions=questions)


@router.post("/sessions/{session_id}/followup", response_model=SessionFollowupQuestions)
async def save_followup(session_id: str, payload: SessionFollowupQuestions):
    await _get_session_or_404(session_id)
    if not payload.questions:
        raise HTTPException(status_code=400, detail="Questions must be a non-empty array")
    if "diagnosis" not in payload.questions[0].question.lower():
        logger.warning("First follow-up question for %s is not about the diagnosis", session_id)
    await sessions.save_followup_questions(
        session_id, [q.model_dump(by_alias=True) for q in payload.questions]
    )
    return payload


@router.get("/sessions/{session_id}/followup", response_model=SessionFollowupQuestions)
async def get_followup(session_id: str):
    questions = await sessions.get_followup_questions(session_id)
    if questions is None:
        raise HTTPException(status_code=404, detail="Follow-up questions not found for this session")
    return SessionFollowupQuestions(questions=questions)


@router.put(
    "/sessions/{session_id}/followup/{question_id}", response_model=SessionFollowupQuestion
)
async def answer_followup(session_id: str, question_id: str, payload: FollowupAnswerUpdate):
    """Save the student's answer to one follow-up question."""
    require_fields("Answer is required", payload.answer)
    try:
        question = await sessions.record_followup_answer(session_id, question_id, payload.answer)
    except LookupError:
        raise HTTPException(
            status_code=404, detail="Follow-up questions not found for this session"
        ) from None
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found in this session")
    return question


@router.post("/sessions/{session_id}/evaluation", response_model=SessionEvaluation)
async def save_evaluation(session_id: str, payload: SessionEvaluation):
    require_fields("Evaluation is required", payload.evaluation)
    evaluation = payload.evaluation
    if not all(evaluation.get(key) for key in ("sessionId", "scores", "feedback")):
        raise HTTPException(status_code=400, detail="Invalid evaluation structure")
    if evaluation["sessionId"] != session_id:
        raise HTTPException(status_code=400, detail="Session ID mismatch")
    await _get_session_or_404(session_id)
    await sessions.save_evaluation(session_id, evaluation)
    return payload


@router.get("/sessions/{session_id}/evaluation", response_model=SessionEvaluation)
async def get_evaluation(session_id: str):
    evaluation = await sessions.get_evaluation(session_id)
    if evaluation is None:
        raise HTTPException(status_code=404, detail="Evaluation not found for this session")
    return SessionEvaluation(evaluation=evaluation)
