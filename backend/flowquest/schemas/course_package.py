"""Course package request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput
from flowquest.schemas.unit import PassCondition


class PackageUnit(StrictInput):
    """A unit embedded directly in a course package document."""

    id: Optional[str] = Field(None, alias="_id")
    title: Optional[str] = None
    agent_role: Optional[str] = None
    user_role: Optional[str] = None
    intro_message: Optional[str] = None
    outro_message: Optional[str] = None
    max_turns: Optional[int] = None
    agent_behavior_prompt: Optional[str] = None
    pass_condition: Optional[PassCondition] = None
    order: Optional[int] = None
    difficulty_level: Optional[int] = None


class CoursePackageCreate(StrictInput):
    SERVER_MANAGED = frozenset({"_id", "created_at", "updated_at"})

    title: Optional[str] = None
    description: Optional[str] = None
    units: Optional[list[PackageUnit]] = None


class CoursePackageUpdate(CoursePackageCreate):
    pass


class CoursePackageResponse(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: str
    units: list[dict[str, Any]] = []
    created_at: str
    updated_at: str

    class Config:
        populate_by_name = True
