"""Chat proxy request/response schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class ChatMessage(StrictInput):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(StrictInput):
    messages: Optional[list[ChatMessage]] = None
    max_tokens: Optional[int] = Field(None, gt=0)
    temperature: Optional[float] = Field(None, ge=0.0, le=1.0)


class ChatReply(BaseModel):
    message: str
    model: str
