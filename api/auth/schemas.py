"""
Auth models shared by protected routes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Caller(BaseModel):
    """
    The verified identity behind the current request.
    """

    uid: str = Field(..., min_length=1)
    claims: dict[str, Any] = Field(default_factory=dict)
