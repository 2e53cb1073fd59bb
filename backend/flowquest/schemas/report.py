"""Interaction report request/response schemas."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from flowquest.schemas.common import StrictInput


class UnitResult(StrictInput):
    unit_id: str
    status: Literal["passed", "failed"]
    turn_count: int = Field(0, ge=0)
    important_keywords: list[str] = []


class ReportUpsert(StrictInput):
    """Body of PUT /api/reports, addressed by _id or the natural key."""

    SERVER_MANAGED = frozenset({"generated_at"})

    id: Optional[str] = Field(None, alias="_id")
    activity_id: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    user_name: Optional[str] = None
    summary: Optional[str] = None
    unit_results: Optional[list[UnitResult]] = None


class ReportPatch(StrictInput):
    SERVER_MANAGED = frozenset({"_id", "generated_at"})

    activity_id: Optional[str] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    user_name: Optional[str] = None
    summary: Optional[str] = None
    unit_results: Optional[list[UnitResult]] = None


class ReportResponse(BaseModel):
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
