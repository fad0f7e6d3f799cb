"""Launcher password endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.application.interfaces import ChatPlatform
from app.application.services import PasswordService
from app.domain.exceptions import ChatPlatformError
from app.infrastructure.dependencies import (
    get_chat_platform,
    get_password_service,
    require_intake_auth,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Password"], dependencies=[Depends(require_intake_auth)])


@router.get("/password")
async def get_password(
    chat: ChatPlatform = Depends(get_chat_platform),
    service: PasswordService = Depends(get_password_service),
):
    """Return the launcher password as currently posted in the password channel."""
    if not chat.is_ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "error", "code": "bot_not_ready"},
        )
    try:
        password = await service.read_password()
    except ChatPlatformError:
        logger.exception("GET /password error")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="error")
    return {"password": password}
