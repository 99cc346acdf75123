"""
Access-token verification against an OAuth2/OIDC identity provider (Okta).

The provider publishes its signing keys as a JWKS document at
`{issuer}/v1/keys`. Keys are fetched with httpx, cached in-process, and
refreshed when the cache expires or a token names an unknown key id (at
most once per `min_refresh_interval_s`).
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
import jwt

from core import settings

logger = logging.getLogger(__name__)

ALGORITHMS = ["RS256"]


class TokenVerificationError(RuntimeError):
    pass


class OktaJwtVerifier:
    def __init__(
        self,
        *,
        issuer: str,
        client_id: str = "",
        audience: str = "api://default",
        cache_ttl_s: int = 3600,
        min_refresh_interval_s: int = 30,
        leeway_s: int = 120,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        issuer = (issuer or "").strip().rstrip("/")
        if not issuer:
            raise TokenVerificationError("Identity provider issuer is not configured.")
        self.issuer = issuer
        self.client_id = (client_id or "").strip()
        self.audience = audience
        self.cache_ttl_s = cache_ttl_s
        self.min_refresh_interval_s = min_refresh_interval_s
        self.leeway_s = leeway_s
        self.timeout_s = timeout_s
        self._transport = transport

        self._keys: dict[str, jwt.PyJWK] = {}
        self._fetched_at: float = 0.0
        self._lock = asyncio.Lock()

    @property
    def jwks_uri(self) -> str:
        return f"{self.issuer}/v1/keys"

    def _cache_fresh(self) -> bool:
        return bool(self._keys) and (time.monotonic() - self._fetched_at) < self.cache_ttl_s

    async def _fetch_keys(self) -> dict[str, jwt.PyJWK]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
                resp = await client.get(self.jwks_uri)
        except httpx.HTTPError as exc:
            raise TokenVerificationError(f"Failed to fetch signing keys: {exc}") from exc

        if resp.status_code != 200:
            raise TokenVerificationError(f"Signing key request failed with status {resp.status_code}.")

        try:
            key_set = jwt.PyJWKSet.from_dict(resp.json())
        except (ValueError, jwt.PyJWKError, jwt.PyJWKSetError) as exc:
            raise TokenVerificationError("Identity provider returned an unusable key set.") from exc

        keys = {key.key_id: key for key in key_set.keys if key.key_id}
        logger.info("jwks_refreshed issuer=%s keys=%s", self.issuer, len(keys))
        return keys

    async def _refresh(self, *, force: bool) -> None:
        async with self._lock:
            # Another request may have refreshed while we waited.
            if not force and self._cache_fresh():
                return
            # At most one forced refresh per `min_refresh_interval_s`.
            since_fetch = time.monotonic() - self._fetched_at
            if force and self._keys and since_fetch < self.min_refresh_interval_s:
                logger.info("jwks_refresh_throttled issuer=%s", self.issuer)
                return
            self._keys = await self._fetch_keys()
            self._fetched_at = time.monotonic()

    async def signing_key(self, kid: str) -> jwt.PyJWK:
        if not self._cache_fresh():
            await self._refresh(force=False)

        key = self._keys.get(kid)
        if key is None:
            # Key rotation: refresh once before giving up.
            await self._refresh(force=True)
            key = self._keys.get(kid)
        if key is None:
            raise TokenVerificationError(f"No signing key matches kid {kid}.")
        return key

    async def verify_access_token(self, token: str) -> dict[str, Any]:
        """
        Verify signature, expiry, issuer, audience and (when configured) the
        client id. Returns the token claims.
        """
        raw = (token or "").strip()
        if not raw:
            raise TokenVerificationError("Access token is empty.")

        try:
            header = jwt.get_unverified_header(raw)
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError("Access token is malformed.") from exc

        if header.get("alg") not in ALGORITHMS:
            raise TokenVerificationError("Access token uses an unsupported algorithm.")
        kid = header.get("kid")
        if not isinstance(kid, str) or not kid:
            raise TokenVerificationError("Access token has no key id.")

        key = await self.signing_key(kid)
        try:
            claims = jwt.decode(
                raw,
                key.key,
                algorithms=ALGORITHMS,
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway_s,
                options={"require": ["exp", "iat", "iss"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenVerificationError("Access token is expired.") from exc
        except jwt.InvalidAudienceError as exc:
            raise TokenVerificationError("Access token audience is not accepted.") from exc
        except jwt.InvalidIssuerError as exc:
            raise TokenVerificationError("Access token issuer is not accepted.") from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError(f"Invalid access token: {exc}") from exc

        if self.client_id and claims.get("cid") != self.client_id:
            raise TokenVerificationError("Access token was issued to another client.")
        return claims


def verifier_from_env() -> OktaJwtVerifier:
    return OktaJwtVerifier(
        issuer=settings.okta_issuer(),
        client_id=settings.okta_client_id(),
        audience=settings.okta_audience(),
        cache_ttl_s=settings.jwks_cache_ttl_s(),
        min_refresh_interval_s=settings.jwks_min_refresh_s(),
        leeway_s=settings.jwt_leeway_s(),
    )
