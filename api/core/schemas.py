"""
Base model for record JSON.

Python attributes are the snake_case column names; JSON uses camelCase
(`user_id` <-> `userId`). Both spellings are accepted on input.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# Range of a Postgres INTEGER column.
INT4_MIN = -(2**31)
INT4_MAX = 2**31 - 1

Int4 = Annotated[int, Field(ge=INT4_MIN, le=INT4_MAX)]
