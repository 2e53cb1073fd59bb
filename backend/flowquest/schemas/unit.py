"""Unit request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class PassCondition(StrictInput):
    type: str
    value: list[str] = []


class UnitCreate(StrictInput):
    SERVER_MANAGED = frozenset({"_id", "created_at", "updated_at"})

    title: Optional[str] = None
    course_package_id: Optional[str] = None
    agent_role: Optional[str] = None
    user_role: Optional[str] = None
    intro_message: Optional[str] = None
    outro_message: Optional[str] = None
    max_turns: Optional[int] = None
    agent_behavior_prompt: Optional[str] = None
    pass_condition: Optional[PassCondition] = None
    order: Optional[int] = None
    difficulty_level: Optional[int] = None


class UnitUpdate(UnitCreate):
    pass


class UnitResponse(BaseModel):
    id: str = Field(alias="_id")
    course_package_id: str
    title: str
    agent_role: str
    user_role: str
    intro_message: str
    outro_message: str
    max_turns: int
    agent_behavior_prompt: str
    pass_condition: Optional[dict[str, Any]]
    order: int
    difficulty_level: int
    created_at: str
    updated_at: str

    class Config:
        populate_by_name = True
