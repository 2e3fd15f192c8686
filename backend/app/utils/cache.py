"""In-memory cache with TTL support."""

from __future__ import annotations

import asyncio
import time
from typing import Any

_cache: dict[str, tuple[float, Any]] = {}
_cache_lock = asyncio.Lock()


class CacheKeys:
    """Centralized cache key builders for consistency across endpoints."""

    @staticmethod
    def cases(
        user_id: int, completed: bool | None = None, skip: int = 0, limit: int = 20
    ) -> str:
        """Cache key for a user's case list."""
        return f"cases:{user_id}:{'all' if completed is None else completed}:{skip}:{limit}"

    @staticmethod
    def cases_prefix(user_id: int) -> str:
        """Prefix for invalidating all case list entries for a user."""
        return f"cases:{user_id}:"

    @staticmethod
    def osce_session(session_id: str, part: str = "session") -> str:
        """Key for one part of an OSCE session (session, history, followup, evaluation)."""
        return f"osce:{session_id}:{part}"

    @staticmethod
    def osce_session_prefix(session_id: str) -> str:
        return f"osce:{session_id}:"

    @staticmethod
    def osce_answers(case_id: int) -> str:
        """Model answers to a case's follow-up questions."""
        return f"osce-answers:{case_id}"


async def get_cached(key: str) -> Any | None:
    now = time.monotonic()
    async with _cache_lock:
        entry = _cache.get(key)
        if not entry:
            return None
        expires_at, value = entry
        if now >= expires_at:
            _cache.pop(key, None)
            return None
        return value


async def set_cached(key: str, value: Any, ttl_seconds: int) -> None:
    expires_at = time.monotonic() + ttl_seconds
    async with _cache_lock:
        _cache[key] = (expires_at, value)


async def clear_cache(prefix: str | None = None) -> None:
    async with _cache_lock:
        if prefix is None:
            _cache.clear()
            return
        for key in list(_cache.keys()):
            if key.startswith(prefix):
                _cache.pop(key, None)
