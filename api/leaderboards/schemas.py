"""
Leaderboard rows. Keys mirror the SQL column aliases.
"""

from __future__ import annotations

from pydantic import BaseModel


class LeaderRow(BaseModel):
    rank: int
    name: str | None = None
    charity_name: str | None = None
    fundraising_link: str | None = None


class StepLeader(LeaderRow):
    steps: int | None = None


class DonationLeader(LeaderRow):
    total_donations: int | None = None
