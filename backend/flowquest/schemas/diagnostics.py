"""Database diagnostics response schema."""

from typing import Optional

from pydantic import BaseModel


class DbStatus(BaseModel):
    connected: bool
    initialized: Optional[bool] = None
    collections: list[str] = []
