"""
Step API endpoints: /steps and /steps/{id}.
"""

from __future__ import annotations

from core.resource import build_router

from .resource import steps_resource

router = build_router(steps_resource)
