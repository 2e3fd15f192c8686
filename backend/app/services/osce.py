"""OSCE session state kept in the response cache.

Sessions are short-lived by nature (one station plus its follow-up), so
they live in the TTL cache rather than the database and simply expire.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Optional

from app.config import settings
from app.services.ai.prompts import OSCE_STATION_MINUTES
from app.utils.cache import CacheKeys, clear_cache, get_cached, set_cached

logger = logging.getLogger("clerksmart.osce")


def new_session_id(now: datetime) -> str:
    return f"osce-{int(now.timestamp() * 1000)}-{uuid.uuid4().hex[:9]}"


async def _store(key: str, value: Any) -> None:
    await set_cached(key, value, ttl_seconds=settings.osce_cache_ttl_seconds)


async def create_session(
    *,
    mode: str,
    department: str,
    case_id: int,
    now: datetime,
    case_type: Optional[str] = None,
    custom_condition: Optional[str] = None,
) -> dict[str, Any]:
    session = {
        "sessionId": new_session_id(now),
        "mode": mode,
        "department": department,
        "caseId": case_id,
        "caseType": case_type,
        "customCondition": custom_condition,
        "startTime": now.isoformat(),
        "duration": OSCE_STATION_MINUTES,
    }
    await _store(CacheKeys.osce_session(session["sessionId"]), session)
    logger.info("Started OSCE session %s for case %s", session["sessionId"], case_id)
    return session


async def get_session(session_id: str) -> Optional[dict[str, Any]]:
    return await get_cached(CacheKeys.osce_session(session_id))


async def delete_session(session_id: str) -> None:
    await clear_cache(CacheKeys.osce_session_prefix(session_id))


async def save_history_questions(session_id: str, questions: list[str]) -> None:
    await _store(CacheKeys.osce_session(session_id, "history"), list(questions))


async def get_history_questions(session_id: str) -> Optional[list[str]]:
    return await get_cached(CacheKeys.osce_session(session_id, "history"))


async def save_followup_questions(session_id: str, questions: list[dict[str, Any]]) -> None:
    await _store(CacheKeys.osce_session(session_id, "followup"), [dict(q) for q in questions])


async def get_followup_questions(session_id: str) -> Optional[list[dict[str, Any]]]:
    return await get_cached(CacheKeys.osce_session(session_id, "followup"))


async def record_followup_answer(
    session_id: str, question_id: str, answer: str
) -> Optional[dict[str, Any]]:
    """Store the student's answer; ``None`` when the question is unknown.

    Raises ``LookupError`` when the session has no follow-up questions.
    """
    questions = await get_followup_questions(session_id)
    if questions is None:
        raise LookupError(session_id)
    for question in questions:
        if question.get("id") == question_id:
            question["studentAnswer"] = answer
            question["isAnswered"] = True
            await save_followup_questions(session_id, questions)
            return question
    return None


async def save_evaluation(session_id: str, evaluation: dict[str, Any]) -> None:
    await _store(CacheKeys.osce_session(session_id, "evaluation"), evaluation)


async def get_evaluation(session_id: str) -> Optional[dict[str, Any]]:
    return await get_cached(CacheKeys.osce_session(session_id, "evaluation"))


async def cache_followup_answers(case_id: int, questions: list[dict[str, str]]) -> None:
    await _store(CacheKeys.osce_answers(case_id), questions)


async def get_followup_answers(case_id: int) -> Optional[list[dict[str, str]]]:
    return await get_cached(CacheKeys.osce_answers(case_id))
