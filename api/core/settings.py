"""
Environment-backed settings.

Every value is read on demand so tests can adjust `os.environ` without
reloading modules.
"""

from __future__ import annotations

import os


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


# Identity provider

def okta_org_url() -> str:
    return _env_str("OKTA_ORG_URL").rstrip("/")


def okta_issuer() -> str:
    issuer = _env_str("OKTA_ISSUER")
    if issuer:
        return issuer.rstrip("/")
    org_url = okta_org_url()
    if not org_url:
        return ""
    return f"{org_url}/oauth2/default"


def okta_client_id() -> str:
    return _env_str("OKTA_CLIENT_ID")


def okta_audience() -> str:
    return _env_str("OKTA_AUDIENCE", "api://default")


def jwks_cache_ttl_s() -> int:
    return _env_int("JWKS_CACHE_TTL_S", 3600)


def jwks_min_refresh_s() -> int:
    return _env_int("JWKS_MIN_REFRESH_S", 30)


def jwt_leeway_s() -> int:
    return _env_int("JWT_LEEWAY_S", 120)


# Database

def database_name() -> str:
    return _env_str("DATABASE_NAME", "steps")


def database_user() -> str:
    return _env_str("DATABASE_USER", "postgres")


def database_password() -> str:
    return os.environ.get("DATABASE_PASSWORD", "")


def database_host() -> str:
    return _env_str("DATABASE_HOST", "localhost")


def database_port() -> int:
    return _env_int("DATABASE_PORT", 5432)


def database_pool_max() -> int:
    return max(1, _env_int("DATABASE_POOL_MAX", 5))


def database_sync() -> bool:
    return _env_bool("DATABASE_SYNC", True)


# HTTP server

def server_host() -> str:
    return _env_str("SERVER_HOST", "0.0.0.0")


def server_port() -> int:
    return _env_int("SERVER_PORT", 3003)


def cors_origins() -> list[str]:
    raw = _env_str("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()
