"""
Health Check Endpoints.
System health and readiness checks.
"""

from datetime import datetime
from fastapi import APIRouter, Request

from app.config import get_settings

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": settings.APP_VERSION
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness check - verifies all services are initialized.
    """
    state = request.app.state
    checks = {
        "llm_service": hasattr(state, "llm_service") and state.llm_service.is_available,
        "tts_service": hasattr(state, "tts_service") and state.tts_service.is_available,
        "session_service": hasattr(state, "session_service"),
        "livekit": hasattr(state, "room_service") and state.room_service.is_configured
    }

    # LiveKit is optional for chat conversations
    all_ready = all(v for k, v in checks.items() if k != "livekit")

    return {
        "status": "ready" if all_ready else "not_ready",
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check - just verifies the server is responding.
    """
    return {
        "status": "alive",
        "timestamp": datetime.utcnow().isoformat()
    }
