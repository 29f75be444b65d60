"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from typing import Any

from row_record.core.connection import ConnectionConfig
from row_record.core.exceptions import AdapterError
from row_record.mapping.column import Column


class SqliteSyncAdapter:
    """Synchronous SQLite adapter using stdlib sqlite3."""

    @property
    def paramstyle(self) -> str:
        return "qmark"

    def create_pool(self, config: ConnectionConfig) -> list[sqlite3.Connection]:
        """Create a 'pool' (list of connections) for SQLite."""
        pool: list[sqlite3.Connection] = []
        for _ in range(config.pool_size):
            conn = sqlite3.connect(config.database)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[sqlite3.Connection]) -> sqlite3.Connection:
        """Acquire a connection from the pool."""
        if not pool:
            raise RuntimeError("No connections available in pool")
        return pool.pop()

    def release_connection(
        self, connection: sqlite3.Connection, pool: list[sqlite3.Connection]
    ) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[sqlite3.Connection]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        values: Sequence[Any] | None = None,
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, tuple(values or ()))

    def quote_identifier(self, name: str) -> str:
        if name == "*":
            return name
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def introspect_columns(
        self,
        connection: sqlite3.Connection,
        table: str,
        schema: str | None = None,
    ) -> list[Column]:
        """Read columns with PRAGMA table_info."""
        prefix = f"{self.quote_identifier(schema)}." if schema else ""
        cursor = connection.execute(f"PRAGMA {prefix}table_info({self.quote_identifier(table)})")
        rows = cursor.fetchall()
        if not rows:
            raise sqlite3.OperationalError(f"no such table: {table}")
        # cid, name, type, notnull, dflt_value, pk
        return [
            Column.from_raw(row[1], row[2], pk=bool(row[5]), nullable=not row[3]) for row in rows
        ]

    def supports_sequences(self) -> bool:
        return False

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        return None

    def next_sequence_value(self, sequence: str) -> str:
        raise AdapterError("SQLite does not support sequences")

    def insert_id(
        self, connection: sqlite3.Connection, cursor: sqlite3.Cursor, sequence: str | None = None
    ) -> int | None:
        return cursor.lastrowid

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        # SQLite only accepts OFFSET after a LIMIT; -1 means unbounded
        sql += f" LIMIT {limit if limit is not None else -1}"
        if offset:
            sql += f" OFFSET {offset}"
        return sql
