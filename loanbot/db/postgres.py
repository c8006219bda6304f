"""Postgres-backed row store.

The table's header is its ordered list of user columns. A hidden serial key (`_row`) keeps rows
in insertion order; positions are offsets into that order, so deleting a row shifts the positions
of all later rows exactly like deleting a spreadsheet row.

Table and column names always go through `psycopg.sql.Identifier`; cell values are bound
parameters.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import psycopg
from psycopg import sql
from psycopg_pool import AsyncConnectionPool

from loanbot.db.pool import get_conn
from loanbot.db.rowstore import RowStoreError

ROW_KEY = "_row"

LOAN_COLUMN_TYPES: dict[str, str] = {
    "ts": "TIMESTAMPTZ",
    "borrowedAt": "DATE",
    "returnedAt": "DATE",
}

_HEADER_SQL = """
    SELECT column_name
    FROM information_schema.columns
    WHERE table_schema = current_schema()
      AND table_name = %s
    ORDER BY ordinal_position
"""

_EXISTS_SQL = """
    SELECT EXISTS (SELECT 1
                   FROM information_schema.tables
                   WHERE table_schema = current_schema()
                     AND table_name = %s)
"""


_SCHEMA_LOCK_SQL = "SELECT pg_advisory_xact_lock(hashtext(%s))"


class PostgresRowStore:
    """`RowStore` implementation over a single Postgres table."""

    def __init__(
            self,
            pool: AsyncConnectionPool,
            name: str,
            *,
            column_types: Mapping[str, str] | None = None,
    ) -> None:
        self._pool = pool
        self.name = name
        self._column_types = dict(column_types or {})

    def _table(self) -> sql.Identifier:
        return sql.Identifier(self.name)

    def _position_subquery(self) -> sql.Composed:
        return sql.SQL("(SELECT {key} FROM {table} ORDER BY {key} OFFSET %s LIMIT 1)").format(
            key=sql.Identifier(ROW_KEY),
            table=self._table(),
        )

    async def _header(self, conn: psycopg.AsyncConnection) -> list[str]:
        async with conn.cursor() as cur:
            await cur.execute(_HEADER_SQL, (self.name,))
            rows = await cur.fetchall()
        return [r[0] for r in rows if r[0] != ROW_KEY]

    async def exists(self) -> bool:
        try:
            async with get_conn(self._pool) as conn:
                async with conn.cursor() as cur:
                    await cur.execute(_EXISTS_SQL, (self.name,))
                    row = await cur.fetchone()
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot inspect table {self.name}") from exc
        return bool(row and row[0])

    async def header(self) -> list[str]:
        try:
            async with get_conn(self._pool) as conn:
                return await self._header(conn)
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot read header of {self.name}") from exc

    async def list_rows(self) -> list[tuple[Any, ...]]:
        try:
            async with get_conn(self._pool) as conn:
                header = await self._header(conn)
                if not header:
                    return []
                query = sql.SQL("SELECT {columns} FROM {table} ORDER BY {key}").format(
                    columns=sql.SQL(", ").join(sql.Identifier(c) for c in header),
                    table=self._table(),
                    key=sql.Identifier(ROW_KEY),
                )
                async with conn.cursor() as cur:
                    await cur.execute(query)
                    rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot list rows of {self.name}") from exc
        return [tuple(r) for r in rows]

    async def append_row(self, values: Sequence[Any]) -> None:
        try:
            async with get_conn(self._pool) as conn:
                header = await self._header(conn)
                columns = header[: len(values)]
                query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
                    table=self._table(),
                    columns=sql.SQL(", ").join(sql.Identifier(c) for c in columns),
                    values=sql.SQL(", ").join(sql.Placeholder() for _ in columns),
                )
                async with conn.transaction():
                    await conn.execute(query, tuple(values[: len(columns)]))
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot append to {self.name}") from exc

    async def set_cell(self, position: int, column: str, value: Any) -> None:
        query = sql.SQL("UPDATE {table} SET {column} = %s WHERE {key} = {target}").format(
            table=self._table(),
            column=sql.Identifier(column),
            key=sql.Identifier(ROW_KEY),
            target=self._position_subquery(),
        )
        try:
            async with get_conn(self._pool) as conn:
                async with conn.transaction():
                    cur = await conn.execute(query, (value, position))
                    if cur.rowcount != 1:
                        raise RowStoreError(f"no row at position {position} in {self.name}")
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot update {self.name}") from exc

    async def delete_row(self, position: int) -> None:
        query = sql.SQL("DELETE FROM {table} WHERE {key} = {target}").format(
            table=self._table(),
            key=sql.Identifier(ROW_KEY),
            target=self._position_subquery(),
        )
        try:
            async with get_conn(self._pool) as conn:
                async with conn.transaction():
                    cur = await conn.execute(query, (position,))
                    if cur.rowcount != 1:
                        raise RowStoreError(f"no row at position {position} in {self.name}")
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot delete from {self.name}") from exc

    async def ensure_header(self, columns: Sequence[str]) -> bool:
        try:
            async with get_conn(self._pool) as conn:
                if await self._header(conn) == list(columns):
                    return False

                async with conn.transaction():
                    # Concurrent first updates queue here; the loser re-reads the finished header.
                    await conn.execute(_SCHEMA_LOCK_SQL, (self.name,))
                    header = await self._header(conn)
                    if header == list(columns):
                        return False
                    if header:
                        await conn.execute(
                            sql.SQL("DROP TABLE IF EXISTS {table}").format(table=self._table())
                        )
                    await conn.execute(self._create_table_sql(columns))
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot create or reset {self.name}") from exc
        return True

    async def drop(self) -> None:
        """Drop the table (used by `migrate --recreate`)."""

        try:
            async with get_conn(self._pool) as conn:
                async with conn.transaction():
                    await conn.execute(
                        sql.SQL("DROP TABLE IF EXISTS {table}").format(table=self._table())
                    )
        except psycopg.Error as exc:
            raise RowStoreError(f"cannot drop {self.name}") from exc

    def _create_table_sql(self, columns: Sequence[str]) -> sql.Composed:
        column_defs = [sql.SQL("{key} BIGSERIAL PRIMARY KEY").format(key=sql.Identifier(ROW_KEY))]
        for column in columns:
            column_type = self._column_types.get(column, "TEXT")
            column_defs.append(
                sql.SQL("{name} {type}").format(
                    name=sql.Identifier(column),
                    type=sql.SQL(column_type),
                )
            )
        return sql.SQL("CREATE TABLE IF NOT EXISTS {table} ({defs})").format(
            table=self._table(),
            defs=sql.SQL(", ").join(column_defs),
        )
