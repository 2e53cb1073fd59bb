"""Chat proxy: forwards a message list to the completion provider."""

import logging

from fastapi import APIRouter, Depends, Request

from flowquest.config import Settings, get_app_settings
from flowquest.errors import ValidationError
from flowquest.middleware.rate_limit import chat_rate_limit, limiter
from flowquest.schemas.chat import ChatReply, ChatRequest
from flowquest.schemas.common import ApiResponse, ok
from flowquest.services import ai_client
from flowquest.services.validation import FieldError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])


@router.post("", response_model=ApiResponse[ChatReply], response_model_exclude_unset=True)
@limiter.limit(chat_rate_limit)
async def chat(
    request: Request,
    req: ChatRequest,
    settings: Settings = Depends(get_app_settings),
):
    """Return the provider's reply to ``messages``.

    A missing credential is reported before the body is inspected.
    """
    ai_client.ensure_configured(settings)
    if not req.messages:
        raise ValidationError(
            [FieldError("messages", "messages must be a non-empty list")],
            error="messages is required",
        )

    reply = await ai_client.complete(
        settings,
        [m.model_dump() for m in req.messages],
        max_tokens=req.max_tokens or settings.CHAT_DEFAULT_MAX_TOKENS,
        temperature=req.temperature if req.temperature is not None else settings.CHAT_DEFAULT_TEMPERATURE,
    )
    logger.info("Chat reply of %d chars for %d messages", len(reply), len(req.messages))
    return ok(ChatReply(message=reply, model=settings.ANTHROPIC_MODEL))
