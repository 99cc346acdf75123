"""
Pydantic schemas for step records.
"""

from __future__ import annotations

from datetime import date, datetime

from pydantic import Field

from core.schemas import CamelModel, Int4


class StepCreate(CamelModel):
    # Filled with the caller's uid when omitted.
    user_id: str | None = Field(default=None, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    steps: Int4 | None = None
    steps_date: date | None = None


class StepUpdate(StepCreate):
    pass


class StepRead(CamelModel):
    id: int
    user_id: str | None = None
    name: str | None = None
    steps: int | None = None
    steps_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
