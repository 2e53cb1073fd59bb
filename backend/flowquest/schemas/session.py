"""Session record request/response schemas."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class ConversationLog(StrictInput):
    role: str
    content: str
    timestamp: datetime
    system_prompt: Optional[str] = None
    memories: Optional[list[dict[str, Any]]] = None


class SessionUnitResult(StrictInput):
    unit_id: str
    status: Optional[Literal["passed", "failed"]] = None
    turn_count: int = Field(0, ge=0)
    important_keywords: list[str] = []
    standard_pass_rules: list[str] = []
    conversation_logs: list[ConversationLog] = []
    evaluation_results: list[dict[str, Any]] = []


class SessionUpsert(StrictInput):
    """Body of PUT /api/sessions, addressed by _id or the natural key."""

    SERVER_MANAGED = frozenset({"generated_at"})

    id: Optional[str] = Field(None, alias="_id")
    activity_id: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    user_name: Optional[str] = None
    summary: Optional[str] = None
    unit_results: Optional[list[SessionUnitResult]] = None


class SessionResponse(BaseModel):
    id: str = Field(alias="_id")
    activity_id: Optional[str]
    user_id: Optional[str]
    session_id: Optional[str]
    user_name: str
    summary: str
    unit_results: list[dict[str, Any]]
    generated_at: str

    class Config:
        populate_by_name = True
