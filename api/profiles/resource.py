"""
Fundraiser profiles: one per user, keyed by the user's uid.
"""

from __future__ import annotations

from core.resource import Resource

from . import schemas

DDL = """
CREATE TABLE IF NOT EXISTS profiles (
  user_id VARCHAR(255) PRIMARY KEY,
  name VARCHAR(255),
  charity_name VARCHAR(255),
  total_donations INTEGER,
  fundraising_link VARCHAR(255),
  region VARCHAR(255),
  created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
  updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""

profiles_resource = Resource(
    name="profiles",
    table="profiles",
    primary_key="user_id",
    pk_type=str,
    columns=(
        "user_id",
        "name",
        "charity_name",
        "total_donations",
        "fundraising_link",
        "region",
        "created_at",
        "updated_at",
    ),
    read_schema=schemas.ProfileRead,
    create_schema=schemas.ProfileCreate,
    update_schema=schemas.ProfileUpdate,
    filters={
        "user_id": str,
        "name": str,
        "charity_name": str,
        "region": str,
    },
    search_columns=("name", "charity_name", "region"),
)
