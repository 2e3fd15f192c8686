"""Model-backed endpoints used while a student works through a case."""

import random
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from app.api.deps import get_model_client, get_now, require_fields
from app.schemas.ai import (
    CaseState,
    FeedbackRequest,
    GenerateCaseRequest,
    PatientProfileRequest,
    PatientResponseRequest,
    PatientResponseResponse,
    PracticeCaseRequest,
    ResultsRequest,
)
from app.services.ai import ModelClient
from app.services.ai import generation
from app.services.ai.errors import InvalidShape
from app.services.ai.prompts import MEDICAL_BUCKETS

router = APIRouter(prefix="/ai", tags=["AI"])


def _dump(model) -> dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


def _case_state(request: FeedbackRequest) -> dict[str, Any]:
    require_fields("Case state is required", request.case_state)
    return _dump(request.case_state)


def _require_case_data(case_state: CaseState, purpose: str) -> None:
    require_fields(
        f"Missing required case data for {purpose}",
        case_state.department,
        case_state.case_details,
    )


@router.post("/generate-case")
async def generate_case(
    request: GenerateCaseRequest,
    client: ModelClient = Depends(get_model_client),
    now: datetime = Depends(get_now),
):
    """Generate a new clinical case for a department."""
    require_fields("Department name is required", request.department_name)
    return await generation.generate_case(
        client,
        department_name=request.department_name,
        bucket=random.choice(MEDICAL_BUCKETS),
        now=now,
        user_country=request.user_country,
        difficulty=request.difficulty,
        specific_diagnosis=request.specific_diagnosis,
        specific_patient_profile=request.specific_patient_profile,
    )


@router.post("/practice-case")
async def practice_case(
    request: PracticeCaseRequest,
    client: ModelClient = Depends(get_model_client),
):
    """Generate a case around a chosen condition or a free-text description."""
    require_fields(
        "Department name and condition are required",
        request.department_name,
        request.condition,
    )
    return await generation.generate_practice_case(
        client,
        department_name=request.department_name,
        condition=request.condition,
        user_country=request.user_country,
        difficulty=request.difficulty,
    )


@router.post("/patient-profile")
async def patient_profile(
    request: PatientProfileRequest,
    client: ModelClient = Depends(get_model_client),
    now: datetime = Depends(get_now),
):
    require_fields(
        "Diagnosis and department name are required",
        request.diagnosis,
        request.department_name,
    )
    seed = request.random_seed if request.random_seed is not None else random.randint(0, 9999)
    return await generation.generate_patient_profile(
        client,
        diagnosis=request.diagnosis,
        department_name=request.department_name,
        random_seed=seed,
        now=now,
        user_country=request.user_country,
    )


@router.post("/investigation-results")
async def investigation_results(
    request: ResultsRequest,
    client: ModelClient = Depends(get_model_client),
):
    require_fields("Plan and case details are required", request.plan, request.case_details)
    return await generation.generate_investigation_results(
        client, plan=request.plan, case_details=_dump(request.case_details)
    )


@router.post("/examination-results")
async def examination_results(
    request: ResultsRequest,
    client: ModelClient = Depends(get_model_client),
):
    require_fields("Plan and case details are required", request.plan, request.case_details)
    return await generation.generate_examination_results(
        client, plan=request.plan, case_details=_dump(request.case_details)
    )


@router.post("/patient-response", response_model=PatientResponseResponse)
async def patient_response(
    request: PatientResponseRequest,
    client: ModelClient = Depends(get_model_client),
    now: datetime = Depends(get_now),
):
    """Answer the student's latest question as the patient or parent."""
    require_fields(
        "History and case details are required", request.history, request.case_details
    )
    reply = await generation.generate_patient_response(
        client,
        history=[_dump(message) for message in request.history],
        case_details=_dump(request.case_details),
        now=now,
        user_country=request.user_country,
    )
    try:
        return PatientResponseResponse.model_validate(reply)
    except ValidationError as exc:
        raise InvalidShape(
            "AI response is not a list of patient messages",
            context="patient response",
            raw_text=str(reply),
            attempted="",
        ) from exc


@router.post("/feedback")
async def feedback(
    request: FeedbackRequest,
    client: ModelClient = Depends(get_model_client),
):
    return await generation.generate_feedback(client, _case_state(request))


@router.post("/detailed-feedback")
async def detailed_feedback(
    request: FeedbackRequest,
    client: ModelClient = Depends(get_model_client),
):
    """Teaching notes including missed opportunities."""
    case_state = _case_state(request)
    _require_case_data(request.case_state, "detailed feedback")
    return await generation.generate_detailed_feedback(client, case_state)


@router.post("/comprehensive-feedback")
async def comprehensive_feedback(
    request: FeedbackRequest,
    client: ModelClient = Depends(get_model_client),
):
    case_state = _case_state(request)
    _require_case_data(request.case_state, "comprehensive feedback")
    return await generation.generate_comprehensive_feedback(client, case_state)
