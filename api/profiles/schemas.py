"""
Pydantic schemas for fundraiser profiles.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from core.schemas import CamelModel, Int4


class ProfileUpdate(CamelModel):
    name: str | None = Field(default=None, max_length=255)
    charity_name: str | None = Field(default=None, max_length=255)
    total_donations: Int4 | None = None
    fundraising_link: str | None = Field(default=None, max_length=255)
    region: str | None = Field(default=None, max_length=255)


class ProfileCreate(ProfileUpdate):
    # Primary key; filled with the caller's uid when omitted.
    user_id: str | None = Field(default=None, max_length=255)


class ProfileRead(CamelModel):
    user_id: str
    name: str | None = None
    charity_name: str | None = None
    total_donations: int | None = None
    fundraising_link: str | None = None
    region: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
