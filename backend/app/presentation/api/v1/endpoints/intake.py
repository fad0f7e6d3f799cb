"""Launcher intake endpoint — device reports and raw log text."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.application.schemas.intake import IntakeRequest, IntakeResponse
from app.application.services import LogTextService, ReconcilerService
from app.domain.exceptions import ChatPlatformError, StoreWriteError, ValidationError
from app.infrastructure.dependencies import (
    get_log_text_service,
    get_reconciler_service,
    require_intake_auth,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Intake"], dependencies=[Depends(require_intake_auth)])


@router.post("/intake", response_model=IntakeResponse, response_model_exclude_none=True)
async def intake(
    data: IntakeRequest | None = None,
    reconciler: ReconcilerService = Depends(get_reconciler_service),
    log_text: LogTextService = Depends(get_log_text_service),
) -> IntakeResponse:
    """Record a device report as an intake card, or post raw log text (``mode=logtext``)."""
    data = data or IntakeRequest()
    try:
        if data.is_logtext:
            result = await log_text.post(data.text, data.content_type, data.channel_id)
            return IntakeResponse(mode="text", sent_as=result.sent_as, name=result.name)

        card_reference = await reconciler.record_intake(data)
        return IntakeResponse(mode="embed", card_reference=card_reference)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except (ChatPlatformError, StoreWriteError):
        logger.exception("Intake error")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal error"
        )
