"""
Record ownership rules.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status

from .schemas import Caller

NOT_YOUR_RECORD = "Not your record!"

logger = logging.getLogger(__name__)


def is_owner(caller_uid: str, owner_id: Any) -> bool:
    return owner_id is not None and str(owner_id) == caller_uid


def ensure_owner(caller: Caller, owner_id: Any) -> None:
    """
    Raise 403 unless `owner_id` is the caller's subject identifier.
    """
    if is_owner(caller.uid, owner_id):
        return
    logger.info("ownership_denied caller=%s owner=%s", caller.uid, owner_id)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=NOT_YOUR_RECORD)


def claim_ownership(caller: Caller, values: dict[str, Any], *, owner_column: str) -> dict[str, Any]:
    """
    Resolve the owner of a record about to be created.

    A missing or null owner is filled with the caller; a different owner is
    rejected.
    """
    if values.get(owner_column) is None:
        return {**values, owner_column: caller.uid}
    ensure_owner(caller, values[owner_column])
    return values
