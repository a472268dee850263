"""AI summary endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from backend.app.core.exceptions import AIProviderError
from backend.app.core.logging_config import get_logger
from backend.app.dependencies.auth import get_current_user
from backend.app.models.user import User
from backend.app.schemas.ai import AIRequest, AIResponse, Provider
from backend.app.services.ai_service import AIService, get_ai_service

logger = get_logger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("", response_model=AIResponse)
async def summarize(
    payload: AIRequest,
    provider: Optional[Provider] = None,
    service: AIService = Depends(get_ai_service),
    current_user: User = Depends(get_current_user),
):
    if not payload.message.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing or invalid message field")
    try:
        result = await service.summarize(payload.message, provider=payload.provider or provider)
    except AIProviderError as exc:
        logger.error("AI summary failed (%s): %s", exc.provider, exc.message)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message)
    return {"result": result}
