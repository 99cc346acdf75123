import os
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("OKTA_ORG_URL", "https://idp.example.test")
os.environ.setdefault("DATABASE_SYNC", "0")

from auth import dependencies as auth_dependencies  # noqa: E402
from auth.verifier import TokenVerificationError  # noqa: E402
from core.crud import DuplicateRecordError, ListQuery  # noqa: E402
from profiles.resource import profiles_resource  # noqa: E402
from steps.resource import steps_resource  # noqa: E402

TOKENS = {
    "alice-token": {"uid": "alice", "sub": "alice@example.test"},
    "bob-token": {"uid": "bob", "sub": "bob@example.test"},
}


class FakeVerifier:
    """Accepts the tokens in TOKENS and rejects everything else."""

    def __init__(self) -> None:
        self.calls = 0

    async def verify_access_token(self, token: str) -> dict:
        self.calls += 1
        claims = TOKENS.get(token)
        if claims is None:
            raise TokenVerificationError("Invalid access token: signature verification failed")
        return dict(claims)


class InMemoryTable:
    """Dict-backed stand-in for core.crud.TableRepository."""

    def __init__(self, *, primary_key: str, columns: tuple[str, ...], search_columns: tuple[str, ...] = ()):
        self.primary_key = primary_key
        self.columns = columns
        self.search_columns = search_columns
        self.rows: dict[Any, dict[str, Any]] = {}
        self._next_id = 1

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _project(self, row: dict[str, Any]) -> dict[str, Any]:
        return {column: row.get(column) for column in self.columns}

    async def list_rows(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        rows = [
            row
            for row in self.rows.values()
            if all(row.get(column) == value for column, value in query.filters.items())
        ]
        if query.search:
            needle = query.search.lower()
            rows = [
                row
                for row in rows
                if any(needle in str(row.get(column) or "").lower() for column in self.search_columns)
            ]

        rows.sort(key=lambda row: row[self.primary_key])
        for column, descending in reversed(query.order_by):
            rows.sort(key=lambda row: row.get(column), reverse=descending)

        page = rows[query.offset : query.offset + query.limit]
        return [self._project(row) for row in page], len(rows)

    async def get_row(self, key: Any) -> dict[str, Any] | None:
        row = self.rows.get(key)
        return self._project(row) if row is not None else None

    async def insert_row(self, values: dict[str, Any]) -> dict[str, Any]:
        row = dict(values)
        if self.primary_key == "id":
            row["id"] = self._next_id
            self._next_id += 1
        key = row[self.primary_key]
        if key in self.rows:
            raise DuplicateRecordError("record already exists.")
        row["created_at"] = row["updated_at"] = self._now()
        self.rows[key] = row
        return self._project(row)

    async def update_row(self, key: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        row = self.rows.get(key)
        if row is None:
            return None
        row.update(values)
        row["updated_at"] = self._now()
        return self._project(row)

    async def delete_row(self, key: Any) -> bool:
        return self.rows.pop(key, None) is not None


@pytest.fixture()
def verifier() -> FakeVerifier:
    return FakeVerifier()


@pytest.fixture()
def steps_table() -> InMemoryTable:
    return InMemoryTable(
        primary_key=steps_resource.primary_key,
        columns=steps_resource.columns,
        search_columns=steps_resource.search_columns,
    )


@pytest.fixture()
def profiles_table() -> InMemoryTable:
    return InMemoryTable(
        primary_key=profiles_resource.primary_key,
        columns=profiles_resource.columns,
        search_columns=profiles_resource.search_columns,
    )


@pytest.fixture()
def client(verifier, steps_table, profiles_table) -> TestClient:
    # lazy import after env configured
    from main import create_app

    app = create_app()
    app.dependency_overrides[auth_dependencies.get_verifier] = lambda: verifier
    app.dependency_overrides[steps_resource.repository_factory] = lambda: steps_table
    app.dependency_overrides[profiles_resource.repository_factory] = lambda: profiles_table
    # Not entered as a context manager, so the lifespan (DB pool) never runs.
    return TestClient(app)


@pytest.fixture()
def alice() -> dict[str, str]:
    return {"Authorization": "Bearer alice-token"}


@pytest.fixture()
def bob() -> dict[str, str]:
    return {"Authorization": "Bearer bob-token"}
