"""Model-backed operations for OSCE stations.

A station is a normal case generated under a time limit, followed by ten
short-answer questions whose model answers stay server-side until the
student's responses are scored.
"""

from __future__ import annotations

import logging
from datetime import datetime
from numbers import Real
from typing import Any, Iterable, Mapping, Optional

from app.services.ai.client import ModelClient, call_model
from app.services.ai.errors import InvalidShape, MissingFieldsError, ProviderError
from app.services.ai.generation import generate_json, generate_practice_case, require_fields
from app.services.ai.parsing import parse_json_response
from app.services.ai.prompts import (
    OSCE_EVALUATION_FIELDS,
    OSCE_QUESTION_COUNT,
    OSCE_SCORE_FIELDS,
    PERFORMANCE_FIELDS,
    PERFORMANCE_SECTION_FIELDS,
    QUESTION_CATEGORIES,
    department_flags,
    generate_case_prompt,
    osce_case_prompt,
    osce_evaluation_prompt,
    osce_followup_questions_prompt,
    osce_opening_line_prompt,
    osce_performance_prompt,
    osce_questions_prompt,
)
from app.services.ai.time_context import get_time_context

logger = logging.getLogger("clerksmart.ai.osce")

PARENT_PROFILE_FIELDS = ("educationLevel", "healthLiteracy", "occupation", "recordKeeping")


def _invalid(message: str, context: str, payload: Any = "") -> InvalidShape:
    return InvalidShape(message, context=context, raw_text=str(payload), attempted="")


def _missing(message: str, context: str) -> MissingFieldsError:
    return MissingFieldsError(message, context=context, raw_text="", attempted="")


async def generate_osce_case(
    client: ModelClient,
    *,
    department_name: str,
    bucket: str,
    now: datetime,
    subspecialty: Optional[str] = None,
    user_country: Optional[str] = None,
    difficulty: str = "standard",
    practice_condition: Optional[str] = None,
) -> dict[str, Any]:
    """Generate the case for a station.

    With ``practice_condition`` the practice-case flow is used unchanged
    (including its input screening). Otherwise the department prompt is
    extended with the station constraints. A missing opening line is
    requested separately before giving up.
    """
    if practice_condition:
        case = await generate_practice_case(
            client,
            department_name=department_name,
            condition=practice_condition,
            user_country=user_country,
            difficulty=difficulty,
        )
    else:
        time_context = get_time_context(user_country, now)
        base_prompt = generate_case_prompt(
            department_name,
            bucket,
            time_context.formatted_context,
            user_country=user_country,
            difficulty=difficulty,
        )
        logger.info("Generating OSCE case for %s (%s)", department_name, subspecialty or bucket)
        case = await generate_json(
            client, osce_case_prompt(base_prompt, department_name, subspecialty), "OSCE case"
        )

    require_fields(case, ("diagnosis", "primaryInfo"), "OSCE case")

    if not case.get("openingLine"):
        logger.warning("OSCE case for %s has no opening line; requesting one", case["diagnosis"])
        opening_line = (await call_model(client, osce_opening_line_prompt(case["diagnosis"]))).strip()
        if not opening_line:
            raise ProviderError(
                "AI response missing required openingLine field and fallback generation failed"
            )
        case["openingLine"] = opening_line

    is_pediatric = department_flags(department_name).is_pediatric
    pediatric_profile = case.get("pediatricProfile")
    if is_pediatric and pediatric_profile:
        parent = pediatric_profile.get("parentProfile") if isinstance(pediatric_profile, dict) else None
        if not isinstance(parent, dict) or not all(parent.get(f) for f in PARENT_PROFILE_FIELDS):
            raise _invalid(
                "AI generated incomplete pediatric profile structure", "OSCE case", pediatric_profile
            )
    case["isPediatric"] = bool(is_pediatric or case.get("isPediatric"))
    return case


def _patient_age(case_details: Mapping[str, Any]) -> Any:
    profile = case_details.get("pediatricProfile") or case_details.get("patientProfile") or {}
    return profile.get("patientAge") or profile.get("age")


async def generate_followup_questions(
    client: ModelClient, *, case_details: Mapping[str, Any], department_name: str
) -> list[dict[str, str]]:
    """Return the station's follow-up questions with their model answers."""
    profile = case_details.get("patientProfile") or {}
    prompt = osce_followup_questions_prompt(
        case_details.get("diagnosis", ""),
        case_details.get("primaryInfo", ""),
        department_name,
        patient_age=_patient_age(case_details),
        patient_gender=profile.get("gender"),
    )
    context = "OSCE follow-up questions"
    payload = await generate_json(client, prompt, context)

    questions = payload.get("questions")
    if not isinstance(questions, list) or len(questions) != OSCE_QUESTION_COUNT:
        raise _invalid(
            f"Invalid OSCE questions format - expected exactly {OSCE_QUESTION_COUNT} questions",
            context,
            payload,
        )
    for index, question in enumerate(questions, start=1):
        if not isinstance(question, dict) or not all(
            question.get(key) for key in ("id", "domain", "question", "answer")
        ):
            raise _missing(f"Question {index} is missing required fields", context)
        if not all(isinstance(question[key], str) for key in ("id", "domain", "question", "answer")):
            raise _invalid(f"Question {index} has invalid field types", context, question)
    return [
        {key: question[key] for key in ("id", "domain", "question", "answer")}
        for question in questions
    ]


async def evaluate_osce(
    client: ModelClient,
    *,
    case_state: Mapping[str, Any],
    responses: Iterable[Mapping[str, Any]],
    questions: Iterable[Mapping[str, str]],
) -> dict[str, Any]:
    """Score a station against the cached follow-up answers."""
    questions = list(questions)
    prompt = osce_evaluation_prompt(
        case_state,
        list(responses),
        {q["id"]: q.get("answer", "") for q in questions},
        {q["id"]: q.get("question", "") for q in questions},
    )
    context = "OSCE evaluation"
    evaluation = await generate_json(client, prompt, context)
    require_fields(evaluation, OSCE_EVALUATION_FIELDS, context)

    breakdown = evaluation["scoreBreakdown"]
    if not isinstance(breakdown, dict):
        raise _invalid("Score breakdown must be an object", context, breakdown)
    missing = [name for name in OSCE_SCORE_FIELDS if name not in breakdown]
    if missing:
        raise _missing(f"Score breakdown missing fields: {', '.join(missing)}", context)
    return evaluation


async def generate_osce_questions(
    client: ModelClient, *, case_history: str, diagnosis: str, department_name: str
) -> list[dict[str, str]]:
    """Generate categorised follow-up questions from a free-text history.

    The model may answer with a bare array or wrap it as ``{"questions": [...]}``.
    """
    context = "OSCE questions"
    text = await call_model(client, osce_questions_prompt(case_history, diagnosis, department_name))
    if not text or not text.strip():
        raise ProviderError("AI response was empty")
    parsed = parse_json_response(text, context, shape="any")
    questions = parsed.get("questions") if isinstance(parsed, dict) else parsed

    if not isinstance(questions, list) or len(questions) != OSCE_QUESTION_COUNT:
        count = len(questions) if isinstance(questions, list) else 0
        raise _invalid(
            f"Expected exactly {OSCE_QUESTION_COUNT} questions, got {count}", context, parsed
        )
    for question in questions:
        if not isinstance(question, dict) or not (question.get("question") and question.get("category")):
            raise _missing("Invalid question structure: missing required fields", context)
        if question["category"] not in QUESTION_CATEGORIES:
            raise _invalid(f"Invalid category: {question['category']}", context, question)

    if "diagnosis" not in questions[0]["question"].lower():
        logger.warning("First OSCE question does not ask for the diagnosis")
    return [{"question": q["question"], "category": q["category"]} for q in questions]


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


async def evaluate_osce_performance(
    client: ModelClient,
    *,
    original_case: Mapping[str, Any],
    history_questions: list[str],
    followup_answers: list[Mapping[str, Any]],
    student_diagnosis: str,
) -> dict[str, Any]:
    """Score a station on the 4 x 25 point rubric."""
    context = "OSCE performance"
    prompt = osce_performance_prompt(
        original_case, history_questions, followup_answers, student_diagnosis
    )
    feedback = await generate_json(client, prompt, context)
    require_fields(feedback, PERFORMANCE_FIELDS, context)

    breakdown = feedback["scoreBreakdown"]
    scores = []
    if isinstance(breakdown, dict):
        scores = [breakdown.get(name) for name in (*PERFORMANCE_SECTION_FIELDS, "total")]
    if not scores or not all(_is_number(score) for score in scores):
        raise _invalid("Invalid score breakdown: all scores must be numbers", context, breakdown)
    *sections, total = scores
    if any(not 0 <= score <= 25 for score in sections) or not 0 <= total <= 100:
        raise _invalid(
            "Invalid score ranges: individual scores should be 0-25, total should be 0-100",
            context,
            breakdown,
        )
    return feedback
