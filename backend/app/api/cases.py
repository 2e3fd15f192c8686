import asyncio
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_model_client, get_now, require_fields
from app.config import settings
from app.database import get_db
from app.schemas.cases import (
    CaseCompleteRequest,
    CaseCompleteResponse,
    CaseCreate,
    CaseReportResponse,
    CaseResponse,
    CaseStateUpdate,
    CaseSummaryResponse,
    MessageResponse,
    MessagesAppend,
    VisibilityUpdate,
)
from app.services.ai import ModelClient, ProviderError, ResponseParseError, generate_case_summary
from app.services.ai.generation import fallback_feedback, generate_comprehensive_feedback
from app.services.cases import (
    CaseCompletion,
    CaseRepository,
    SQLCaseRepository,
    case_details_from_case,
    case_state_from_case,
    derive_clinical_summary,
    feedback_record_fields,
)
from app.services.departments import DepartmentRepository, SQLDepartmentRepository
from app.services.users import SQLUserRepository, UserRepository
from app.utils.cache import CacheKeys, clear_cache, get_cached, set_cached

logger = logging.getLogger("clerksmart.api.cases")

router = APIRouter(prefix="/cases", tags=["Cases"])


def get_case_repo(db: AsyncSession = Depends(get_db)) -> CaseRepository:
    return SQLCaseRepository(db)


def get_user_repo(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return SQLUserRepository(db)


def get_department_repo(db: AsyncSession = Depends(get_db)) -> DepartmentRepository:
    return SQLDepartmentRepository(db)


def case_response(case) -> CaseResponse:
    response = CaseResponse.model_validate(case)
    return response.model_copy(update={"clinical_summary": derive_clinical_summary(case)})


async def get_case_or_404(repo: CaseRepository, case_id: int):
    case = await repo.get_case(case_id)
    if not case:
        raise HTTPException(status_code=404, detail="Case not found")
    return case


@router.post("", response_model=CaseResponse, status_code=201)
async def create_case(
    payload: CaseCreate,
    repo: CaseRepository = Depends(get_case_repo),
    users: UserRepository = Depends(get_user_repo),
    departments: DepartmentRepository = Depends(get_department_repo),
):
    """Save a generated case for a student, creating the student if needed."""
    require_fields("Email and case details are required", payload.email, payload.case_details)
    details = payload.case_details
    require_fields(
        "Case details must include diagnosis, primary info and opening line",
        details.diagnosis,
        details.primary_info,
        details.opening_line,
    )

    user = await users.get_by_email(payload.email)
    if user is None:
        user = await users.create_user(payload.email, None, payload.country)

    department = None
    if payload.department_name:
        department = await departments.find_department(payload.department_name)
        if department is None:
            raise HTTPException(status_code=404, detail="Department not found")

    case = await repo.create_case(user.id, department, details, payload.difficulty)
    await clear_cache(CacheKeys.cases_prefix(user.id))
    logger.info("Created case %s for user %s", case.id, user.id)
    return case_response(case)


@router.get("", response_model=list[CaseSummaryResponse])
async def list_cases(
    email: Optional[str] = Query(None, description="Owner e-mail"),
    completed: Optional[bool] = Query(None, description="Filter by completion"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    repo: CaseRepository = Depends(get_case_repo),
    users: UserRepository = Depends(get_user_repo),
):
    """List a student's cases, newest first."""
    require_fields("Email is required", email)
    user = await users.get_by_email(email)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    cache_key = CacheKeys.cases(user.id, completed, skip, limit)
    cached = await get_cached(cache_key)
    if cached is not None:
        return cached
    cases = await repo.list_cases(user.id, completed=completed, skip=skip, limit=limit)
    response = [CaseSummaryResponse.model_validate(c) for c in cases]
    await set_cached(cache_key, response, ttl_seconds=settings.response_cache_ttl_seconds)
    return response


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(case_id: int, repo: CaseRepository = Depends(get_case_repo)):
    """Get a case with its transcript, feedback and derived summary."""
    case = await get_case_or_404(repo, case_id)
    return case_response(case)


@router.post("/{case_id}/messages", response_model=list[MessageResponse], status_code=201)
async def append_messages(
    case_id: int,
    payload: MessagesAppend,
    repo: CaseRepository = Depends(get_case_repo),
):
    require_fields("Messages are required", payload.messages or None)
    case = await get_case_or_404(repo, case_id)
    if case.is_completed:
        raise HTTPException(status_code=409, detail="Case is already completed")
    added = await repo.add_messages(case, payload.messages)
    return [MessageResponse.model_validate(m) for m in added]


async def _feedback_for_completion(client: ModelClient, case_state: dict, diagnosis: str) -> dict:
    try:
        return await asyncio.wait_for(
            generate_comprehensive_feedback(client, case_state),
            settings.ai_call_timeout_seconds,
        )
    except (ProviderError, ResponseParseError, asyncio.TimeoutError) as exc:
        logger.warning("Feedback generation failed (%s); using fallback", exc.__class__.__name__)
        return fallback_feedback(diagnosis)


@router.post("/{case_id}/complete", response_model=CaseCompleteResponse)
async def complete_case(
    case_id: int,
    payload: CaseCompleteRequest,
    repo: CaseRepository = Depends(get_case_repo),
    client: ModelClient = Depends(get_model_client),
    now: datetime = Depends(get_now),
):
    """Finish a case: generate feedback and the saved-case report, then persist."""
    require_fields(
        "Final diagnosis and management plan are required",
        payload.final_diagnosis,
        payload.management_plan,
    )
    case = await get_case_or_404(repo, case_id)
    if case.is_completed:
        raise HTTPException(status_code=409, detail="Case is already completed")

    if payload.messages:
        await repo.add_messages(case, payload.messages)

    department_name = case.department.name if case.department else None
    case_state = case_state_from_case(case, department_name)
    case_state.update(
        {
            "preliminaryDiagnosis": payload.preliminary_diagnosis,
            "examinationPlan": payload.examination_plan,
            "investigationPlan": payload.investigation_plan,
            "finalDiagnosis": payload.final_diagnosis,
            "managementPlan": payload.management_plan,
            "examinationResults": payload.examination_results,
            "investigationResults": payload.investigation_results,
        }
    )

    feedback = await _feedback_for_completion(client, case_state, case.diagnosis)
    summary = await generate_case_summary(
        client,
        case_details=case_details_from_case(case),
        examination_results=payload.examination_results,
        investigation_results=payload.investigation_results,
        feedback=feedback,
        timeout_seconds=settings.ai_call_timeout_seconds,
    )

    completion = CaseCompletion(
        final_diagnosis=payload.final_diagnosis,
        management_plan=payload.management_plan,
        preliminary_diagnosis=payload.preliminary_diagnosis,
        examination_plan=payload.examination_plan,
        investigation_plan=payload.investigation_plan,
        examination_results=payload.examination_results,
        investigation_results=payload.investigation_results,
        is_visible=payload.make_visible,
        completed_at=now,
        feedback=feedback_record_fields(feedback, case.diagnosis),
        report=summary.to_dict(),
    )
    case = await repo.complete_case(case, completion)
    await clear_cache(CacheKeys.cases_prefix(case.user_id))
    logger.info(
        "Completed case %s; generated sections: %s",
        case.id,
        ", ".join(summary.generated_fields) or "none",
    )
    return CaseCompleteResponse(
        case_id=case.id,
        feedback=feedback,
        case_report=CaseReportResponse.model_validate(case.report),
    )


@router.patch("/{case_id}/state", response_model=CaseResponse)
async def save_case_state(
    case_id: int,
    payload: CaseStateUpdate,
    repo: CaseRepository = Depends(get_case_repo),
):
    """Save plans, diagnoses and results while the case is still in progress."""
    updates = payload.model_dump(exclude_none=True)
    require_fields("No case state provided", updates or None)
    case = await get_case_or_404(repo, case_id)
    if case.is_completed:
        raise HTTPException(status_code=409, detail="Case is already completed")
    case = await repo.update_case_state(case, updates)
    return case_response(case)


@router.patch("/{case_id}/visibility", response_model=CaseSummaryResponse)
async def update_visibility(
    case_id: int,
    payload: VisibilityUpdate,
    repo: CaseRepository = Depends(get_case_repo),
):
    """Show or hide a completed case."""
    require_fields("isVisible is required", payload.is_visible)
    case = await repo.get_case(case_id)
    if not case or not case.is_completed:
        raise HTTPException(status_code=404, detail="Case not found or not completed")
    case = await repo.set_visibility(case, payload.is_visible)
    await clear_cache(CacheKeys.cases_prefix(case.user_id))
    return CaseSummaryResponse.model_validate(case)
