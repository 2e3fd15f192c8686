from fastapi import APIRouter, Depends

from app.api.deps import get_model_client
from app.config import settings
from app.services.ai import ModelClient

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {"status": "healthy", "service": "clerksmart-api"}


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {"message": "Welcome to ClerkSmart API", "docs": "/docs", "health": "/health"}


@router.get("/health/model")
async def model_health(client: ModelClient = Depends(get_model_client)):
    """Report which generative model the service is configured to call."""
    return {"ok": True, "model": client.model, "version": settings.app_version}
