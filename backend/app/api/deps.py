"""Shared API dependencies."""

from datetime import datetime, timezone

from fastapi import HTTPException, Request, status

from app.services.ai import ModelClient


def get_model_client(request: Request) -> ModelClient:
    """Return the model client built at startup."""
    client = getattr(request.app.state, "model_client", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Model client is not configured",
        )
    return client


def get_now() -> datetime:
    """Current request time; overridden in tests."""
    return datetime.now(timezone.utc)


def require_fields(message: str, *values) -> None:
    """Raise a 400 with ``message`` unless every value is present."""
    if any(value is None or value == "" for value in values):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)
