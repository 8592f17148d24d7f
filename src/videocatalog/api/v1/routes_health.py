"""Health check endpoint for the video catalog service."""

from fastapi import APIRouter

from videocatalog.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Does not touch the secret or object stores, so it answers quickly
    even when they are slow or misconfigured.

    Returns:
        dict: Health status response with status, service, and version fields
    """
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
    }
