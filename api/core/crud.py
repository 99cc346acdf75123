"""
Generic row persistence for a single table (raw SQL).

Identifiers (table and column names) always come from code-level `Resource`
declarations, never from request input. Values are always passed as asyncpg
positional parameters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import asyncpg

from . import db


class DuplicateRecordError(RuntimeError):
    pass


@dataclass(frozen=True)
class ListQuery:
    filters: dict[str, Any] = field(default_factory=dict)
    search: str = ""
    order_by: tuple[tuple[str, bool], ...] = ()
    limit: int = 100
    offset: int = 0


def escape_like(value: str) -> str:
    """Make `%`, `_` and `\\` match themselves inside a LIKE pattern."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_where(
    filters: dict[str, Any],
    *,
    search: str = "",
    search_columns: tuple[str, ...] = (),
    start: int = 1,
) -> tuple[str, list[Any]]:
    """
    Build a WHERE clause for equality filters plus an optional ILIKE search.

    Returns the clause (empty string when there is nothing to filter) and the
    positional arguments, numbered from `start`.
    """
    conditions: list[str] = []
    args: list[Any] = []
    for column, value in filters.items():
        args.append(value)
        conditions.append(f"{column} = ${start + len(args) - 1}")

    search = (search or "").strip()
    if search and search_columns:
        args.append(escape_like(search))
        placeholder = f"${start + len(args) - 1}"
        matches = " OR ".join(
            f"{column} ILIKE ('%' || {placeholder} || '%') ESCAPE '\\'" for column in search_columns
        )
        conditions.append(f"({matches})")

    if not conditions:
        return "", args
    return "WHERE " + " AND ".join(conditions), args


def build_order_by(order_by: tuple[tuple[str, bool], ...], *, default: str) -> str:
    if not order_by:
        return f"ORDER BY {default} ASC"
    parts = [f"{column} {'DESC' if descending else 'ASC'}" for column, descending in order_by]
    # Keep paging deterministic when the requested sort has ties.
    if default not in {column for column, _ in order_by}:
        parts.append(f"{default} ASC")
    return "ORDER BY " + ", ".join(parts)


class TableRepository:
    def __init__(
        self,
        *,
        table: str,
        primary_key: str,
        columns: tuple[str, ...],
        search_columns: tuple[str, ...] = (),
    ) -> None:
        self.table = table
        self.primary_key = primary_key
        self.columns = columns
        self.search_columns = search_columns

    @property
    def _select_list(self) -> str:
        return ", ".join(self.columns)

    async def list_rows(self, query: ListQuery) -> tuple[list[dict[str, Any]], int]:
        """
        Return one page of rows plus the total number of matching rows.
        """
        where, args = build_where(
            query.filters,
            search=query.search,
            search_columns=self.search_columns,
        )
        total = await db.fetch_value(f"SELECT count(*) FROM {self.table} {where}", *args)

        order = build_order_by(query.order_by, default=self.primary_key)
        limit_at = len(args) + 1
        rows = await db.fetch_all(
            f"""
            SELECT {self._select_list}
            FROM {self.table}
            {where}
            {order}
            LIMIT ${limit_at} OFFSET ${limit_at + 1}
            """,
            *args,
            query.limit,
            query.offset,
        )
        return rows, int(total or 0)

    async def get_row(self, key: Any) -> dict[str, Any] | None:
        return await db.fetch_one(
            f"""
            SELECT {self._select_list}
            FROM {self.table}
            WHERE {self.primary_key} = $1
            """,
            key,
        )

    async def insert_row(self, values: dict[str, Any]) -> dict[str, Any]:
        names = list(values)
        placeholders = ", ".join(f"${i}" for i in range(1, len(names) + 1))
        if names:
            statement = f"""
                INSERT INTO {self.table} ({", ".join(names)})
                VALUES ({placeholders})
                RETURNING {self._select_list}
                """
        else:
            statement = f"INSERT INTO {self.table} DEFAULT VALUES RETURNING {self._select_list}"

        try:
            row = await db.fetch_one(statement, *(values[name] for name in names))
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateRecordError(f"{self.table} record already exists.") from exc
        if row is None:
            raise RuntimeError(f"Failed to insert into {self.table}.")
        return row

    async def update_row(self, key: Any, values: dict[str, Any]) -> dict[str, Any] | None:
        if not values:
            return await self.get_row(key)

        names = list(values)
        assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(names, start=1))
        key_at = len(names) + 1
        try:
            return await db.fetch_one(
                f"""
                UPDATE {self.table}
                SET {assignments},
                    updated_at = now()
                WHERE {self.primary_key} = ${key_at}
                RETURNING {self._select_list}
                """,
                *(values[name] for name in names),
                key,
            )
        except asyncpg.UniqueViolationError as exc:
            raise DuplicateRecordError(f"{self.table} record already exists.") from exc

    async def delete_row(self, key: Any) -> bool:
        status_tag = await db.execute(
            f"DELETE FROM {self.table} WHERE {self.primary_key} = $1",
            key,
        )
        return db.affected_rows(status_tag) > 0
