"""API Routes for ClerkSmart."""

from app.api import ai, cases, departments, health, osce, stats, users

__all__ = [
    "ai",
    "cases",
    "departments",
    "health",
    "osce",
    "stats",
    "users",
]
