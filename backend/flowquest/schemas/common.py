"""Shared schema pieces: strict request bodies and the response envelope."""

from datetime import datetime
from typing import Any, ClassVar, Generic, Optional, TypeVar

from pydantic import BaseModel, model_validator

T = TypeVar("T")


class StrictInput(BaseModel):
    """Request body that rejects unknown fields.

    Fields listed in ``SERVER_MANAGED`` are owned by the server (identifiers,
    timestamps) and silently dropped before parsing.
    """

    SERVER_MANAGED: ClassVar[frozenset[str]] = frozenset()

    class Config:
        extra = "forbid"
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def drop_server_managed(cls, data: Any) -> Any:
        if isinstance(data, dict) and cls.SERVER_MANAGED:
            return {k: v for k, v in data.items() if k not in cls.SERVER_MANAGED}
        return data


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every endpoint.

    Routes serialize with ``response_model_exclude_unset`` so only the fields
    that were set appear in the payload.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    body: dict = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
