"""
Public leaderboard endpoints. No bearer token required.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import repository, schemas

router = APIRouter()


@router.get("/stepLeaders", response_model=list[schemas.StepLeader])
async def step_leaders() -> list[dict]:
    """
    Users ranked by total steps, highest first.
    """
    return await repository.step_leaders()


@router.get("/donationLeaders", response_model=list[schemas.DonationLeader])
async def donation_leaders() -> list[dict]:
    """
    Users ranked by recorded donations, highest first.
    """
    return await repository.donation_leaders()
