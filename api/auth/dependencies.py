"""
Auth dependencies for protected FastAPI routes.

A route is protected by declaring `get_current_caller`; routes that don't
declare it are public.
"""

from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException, status

from .schemas import Caller
from .verifier import OktaJwtVerifier, TokenVerificationError, verifier_from_env

logger = logging.getLogger(__name__)

_verifier: OktaJwtVerifier | None = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _extract_bearer_token(authorization: str | None) -> str:
    raw = (authorization or "").strip()
    if not raw:
        raise _unauthorized("Missing Authorization header.")

    parts = raw.split(" ", 1)
    if len(parts) != 2:
        raise _unauthorized("Invalid Authorization header format.")

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        raise _unauthorized("Authorization must be: Bearer <token>.")
    return token


async def get_bearer_token(authorization: str | None = Header(default=None)) -> str:
    return _extract_bearer_token(authorization)


def get_verifier() -> OktaJwtVerifier:
    """
    Process-wide verifier; its signing key cache lives as long as the process.
    """
    global _verifier
    if _verifier is None:
        try:
            _verifier = verifier_from_env()
        except TokenVerificationError as exc:
            logger.error("verifier_unconfigured error=%s", exc)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Token verification is not configured.",
            ) from exc
    return _verifier


async def get_current_caller(
    access_token: str = Depends(get_bearer_token),
    verifier: OktaJwtVerifier = Depends(get_verifier),
) -> Caller:
    try:
        claims = await verifier.verify_access_token(access_token)
    except TokenVerificationError as exc:
        logger.warning("token_rejected reason=%s", exc)
        raise _unauthorized(str(exc)) from exc

    uid = str(claims.get("uid") or "").strip()
    if not uid:
        raise _unauthorized("Access token has no uid claim.")
    return Caller(uid=uid, claims=claims)
