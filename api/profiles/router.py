"""
Profile API endpoints: /profiles and /profiles/{userId}.
"""

from __future__ import annotations

from core.resource import build_router

from .resource import profiles_resource

router = build_router(profiles_resource)
