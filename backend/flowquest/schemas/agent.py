"""Agent profile request/response schemas."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class AgentPersona(StrictInput):
    tone: Optional[str] = None
    background: Optional[str] = None
    voice: Optional[str] = None


class AgentMemory(StrictInput):
    id: Optional[str] = Field(None, alias="_id")
    agent_id: Optional[str] = None
    activity_id: Optional[str] = None
    session_id: Optional[str] = None
    type: Optional[str] = None
    content: Optional[str] = None
    tags: list[str] = []
    created_by_user_id: Optional[str] = None
    created_at: Optional[datetime] = None


class AgentProfileCreate(StrictInput):
    SERVER_MANAGED = frozenset({"_id", "created_at", "updated_at"})

    name: Optional[str] = None
    persona: Optional[AgentPersona] = None
    memories: Optional[list[AgentMemory]] = None


class AgentProfileUpdate(AgentProfileCreate):
    pass


class AgentProfileResponse(BaseModel):
    id: str = Field(alias="_id")
    name: str
    persona: dict[str, Any]
    memories: list[dict[str, Any]]
    created_at: str
    updated_at: str

    class Config:
        populate_by_name = True
