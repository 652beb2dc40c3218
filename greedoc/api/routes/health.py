"""Liveness and service info."""
from fastapi import APIRouter

from greedoc import __version__
from greedoc.core import firebase
from greedoc.core.config import settings
from greedoc.services.time_utils import utcnow

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health_check():
    return {"status": "ok", "timestamp": utcnow().isoformat()}


@router.get("/status")
async def service_status():
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "version": __version__,
        "firestore": "connected" if firebase.db is not None else "not initialized",
        "aiProviders": {
            "openai": bool(settings.OPENAI_API_KEY),
            "glm": bool(settings.GLM_API_KEY),
        },
        "notificationWorker": settings.NOTIFICATION_AGENT_ENABLED,
        "timestamp": utcnow().isoformat(),
    }
