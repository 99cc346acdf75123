"""
Step records: one day's step count submitted by one user.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import Path

from core.resource import Resource
from core.schemas import INT4_MAX, INT4_MIN

from . import schemas

DDL = """
CREATE TABLE IF NOT EXISTS steps (
  id SERIAL PRIMARY KEY,
  user_id VARCHAR(255),
  name VARCHAR(255),
  steps INTEGER,
  steps_date DATE,
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

steps_resource = Resource(
    name="steps",
    table="steps",
    primary_key="id",
    pk_type=Annotated[int, Path(ge=INT4_MIN, le=INT4_MAX)],
    columns=("id", "user_id", "name", "steps", "steps_date", "created_at", "updated_at"),
    read_schema=schemas.StepRead,
    create_schema=schemas.StepCreate,
    update_schema=schemas.StepUpdate,
    filters={
        "user_id": str,
        "name": str,
        "steps_date": date.fromisoformat,
    },
    search_columns=("name",),
)
