"""Health check endpoint — no auth, always available."""

from fastapi import APIRouter, Depends

from app.application.interfaces import ChatPlatform
from app.config import get_settings
from app.infrastructure.dependencies import get_chat_platform

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(chat: ChatPlatform = Depends(get_chat_platform)) -> dict:
    """Returns the current application health status."""
    settings = get_settings()
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "discord_ready": chat.is_ready,
    }
