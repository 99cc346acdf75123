"""
Leaderboard persistence (read-only aggregates).
"""

from __future__ import annotations

from core import db

from . import queries


async def step_leaders() -> list[dict]:
    return await db.fetch_all(queries.STEP_LEADERS)


async def donation_leaders() -> list[dict]:
    return await db.fetch_all(queries.DONATION_LEADERS)
