"""Activity request/response schemas."""

from typing import Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class ActivityCreate(StrictInput):
    # memory_ids always start empty and start_time is stamped by the server
    SERVER_MANAGED = frozenset({"_id", "memory_ids", "start_time", "end_time", "updated_at"})

    name: Optional[str] = None
    course_package_id: Optional[str] = None
    agent_profile_id: Optional[str] = None
    current_unit_id: Optional[str] = None
    status: Optional[str] = None


class ActivityUpdate(StrictInput):
    SERVER_MANAGED = frozenset({"_id", "start_time", "updated_at"})

    name: Optional[str] = None
    course_package_id: Optional[str] = None
    agent_profile_id: Optional[str] = None
    current_unit_id: Optional[str] = None
    status: Optional[str] = None
    memory_ids: Optional[list[str]] = None


class ActivityResponse(BaseModel):
    id: str = Field(alias="_id")
    name: str
    course_package_id: str
    agent_profile_id: str
    current_unit_id: Optional[str]
    memory_ids: list[str]
    status: str
    start_time: str
    end_time: Optional[str]
    updated_at: str

    class Config:
        populate_by_name = True
