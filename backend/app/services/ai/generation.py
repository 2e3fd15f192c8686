"""Model-backed operations used by the AI endpoints.

Each function composes a prompt, makes exactly one model call (the practice
case may regenerate once when its content checks fail) and parses the
result. Errors propagate to the request handler unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from app.services.ai.client import ModelClient, call_model
from app.services.ai.errors import (
    CaseContentError,
    MissingFieldsError,
    ProviderError,
    ResponseParseError,
)
from app.services.ai.parsing import parse_json_response
from app.services.ai.prompts import (
    COMPREHENSIVE_FEEDBACK_FIELDS,
    DETAILED_FEEDBACK_FIELDS,
    adult_system_instruction,
    build_patient_context,
    comprehensive_feedback_prompt,
    detailed_feedback_prompt,
    detect_input_type,
    examination_results_prompt,
    feedback_prompt,
    current_question,
    format_transcript,
    generate_case_prompt,
    investigation_results_prompt,
    patient_profile_prompt,
    patient_response_prompt,
    pediatric_age,
    pediatric_system_instruction,
    practice_case_prompt,
    practice_retry_prompt,
    validate_custom_case_input,
    validate_generated_case,
)
from app.services.ai.time_context import get_time_context

logger = logging.getLogger("clerksmart.ai.generation")


async def generate_json(client: ModelClient, prompt: str, context: str) -> dict[str, Any]:
    text = await call_model(client, prompt)
    if not text or not text.strip():
        raise ProviderError("AI response was empty")
    return parse_json_response(text, context)


def require_fields(payload: Mapping[str, Any], fields: Iterable[str], context: str) -> None:
    missing = [name for name in fields if name not in payload]
    if missing:
        raise MissingFieldsError(
            f"AI response missing required fields: {', '.join(missing)}",
            context=context,
            raw_text="",
            attempted="",
        )


def _results_list(payload: Mapping[str, Any]) -> list[Any]:
    results = payload.get("results")
    return results if isinstance(results, list) else []


async def generate_case(
    client: ModelClient,
    *,
    department_name: str,
    bucket: str,
    now: datetime,
    user_country: Optional[str] = None,
    difficulty: str = "standard",
    specific_diagnosis: Optional[str] = None,
    specific_patient_profile: Optional[str] = None,
) -> dict[str, Any]:
    time_context = get_time_context(user_country, now)
    prompt = generate_case_prompt(
        department_name,
        bucket,
        time_context.formatted_context,
        user_country=user_country,
        difficulty=difficulty,
        specific_diagnosis=specific_diagnosis,
        specific_patient_profile=specific_patient_profile,
    )
    logger.info("Generating %s case for %s (%s)", difficulty, department_name, bucket)
    return await generate_json(client, prompt, "case generation")


async def generate_practice_case(
    client: ModelClient,
    *,
    department_name: str,
    condition: str,
    user_country: Optional[str] = None,
    difficulty: str = "standard",
) -> dict[str, Any]:
    """Build a case around a named condition or a free-text description.

    Free-text input is screened before any model call. A generated case
    that fails the content checks is regenerated once with a stricter
    prompt; if that also fails, ``CaseContentError`` is raised.
    """
    input_type = detect_input_type(condition)
    if input_type == "custom":
        check = validate_custom_case_input(condition)
        if not check.is_valid:
            raise CaseContentError(check.error, suggestion=check.suggestion, status_code=400)

    prompt = practice_case_prompt(department_name, condition, input_type, user_country, difficulty)
    case = await generate_json(client, prompt, "practice case")
    check = validate_generated_case(case)
    if check.is_valid:
        return case

    logger.warning("Generated practice case rejected: %s", check.error)
    try:
        retry_case = await generate_json(client, practice_retry_prompt(prompt), "practice case")
    except (ProviderError, ResponseParseError) as exc:
        logger.warning("Practice case regeneration failed: %s", exc)
    else:
        if validate_generated_case(retry_case).is_valid:
            return retry_case
    raise CaseContentError(
        check.error,
        suggestion=check.suggestion or "Please try again with a different input.",
    )


async def generate_patient_profile(
    client: ModelClient,
    *,
    diagnosis: str,
    department_name: str,
    random_seed: int,
    now: datetime,
    user_country: Optional[str] = None,
) -> dict[str, Any]:
    time_context = get_time_context(user_country, now)
    prompt = patient_profile_prompt(
        diagnosis, department_name, time_context.formatted_context, random_seed
    )
    return await generate_json(client, prompt, "patient profile")


async def generate_investigation_results(
    client: ModelClient, *, plan: str, case_details: Mapping[str, Any]
) -> list[Any]:
    patient_age, age_group = pediatric_age(case_details)
    prompt = investigation_results_prompt(
        plan, build_patient_context(case_details), patient_age, age_group
    )
    return _results_list(await generate_json(client, prompt, "investigation results"))


async def generate_examination_results(
    client: ModelClient, *, plan: str, case_details: Mapping[str, Any]
) -> list[Any]:
    prompt = examination_results_prompt(plan, build_patient_context(case_details))
    return _results_list(await generate_json(client, prompt, "examination results"))


async def generate_patient_response(
    client: ModelClient,
    *,
    history: list[Mapping[str, Any]],
    case_details: Mapping[str, Any],
    now: datetime,
    user_country: Optional[str] = None,
) -> dict[str, Any]:
    """Answer the student's latest question in character.

    Adult patients reply in plain text, which is wrapped in the same
    ``messages`` envelope pediatric cases return as JSON.
    """
    time_context = get_time_context(user_country, now).formatted_context
    pediatric_profile = case_details.get("pediatricProfile")
    primary_info = case_details.get("primaryInfo", "")

    if pediatric_profile:
        instruction = pediatric_system_instruction(time_context, pediatric_profile, primary_info)
    else:
        instruction = adult_system_instruction(
            time_context, case_details.get("diagnosis", ""), primary_info
        )
    prompt = patient_response_prompt(
        instruction, format_transcript(history), current_question(history)
    )

    if pediatric_profile:
        return await generate_json(client, prompt, "patient response")

    text = await call_model(client, prompt)
    return {
        "messages": [
            {"response": (text or "").strip(), "sender": "patient", "speakerLabel": ""}
        ]
    }


async def generate_feedback(client: ModelClient, case_state: Mapping[str, Any]) -> dict[str, Any]:
    return await generate_json(client, feedback_prompt(case_state), "feedback")


async def generate_detailed_feedback(
    client: ModelClient, case_state: Mapping[str, Any]
) -> dict[str, Any]:
    notes = await generate_json(client, detailed_feedback_prompt(case_state), "detailed feedback")
    require_fields(notes, DETAILED_FEEDBACK_FIELDS, "detailed feedback")
    return notes


async def generate_comprehensive_feedback(
    client: ModelClient, case_state: Mapping[str, Any]
) -> dict[str, Any]:
    feedback = await generate_json(
        client, comprehensive_feedback_prompt(case_state), "comprehensive feedback"
    )
    require_fields(feedback, COMPREHENSIVE_FEEDBACK_FIELDS, "comprehensive feedback")
    return feedback


def fallback_feedback(diagnosis: Optional[str]) -> dict[str, Any]:
    """Generic comprehensive feedback used when generation fails at completion."""
    return {
        "diagnosis": diagnosis or "Unknown",
        "keyLearningPoint": "Review the key features of this presentation and how they support the diagnosis.",
        "whatYouDidWell": ["Good history taking", "Appropriate examination", "Logical reasoning"],
        "clinicalReasoning": "Feedback could not be generated for this case.",
        "clinicalOpportunities": {
            "areasForImprovement": [
                "Could have asked more specific questions",
                "Considered differential diagnosis",
            ],
            "missedOpportunities": [],
        },
        "clinicalPearls": ["Always consider the worst-case scenario"],
    }
