"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_record.core.connection import ConnectionConfig
from row_record.mapping.column import Column

_COLUMNS_SQL = """
SELECT c.column_name, c.data_type, c.is_nullable,
       EXISTS (
           SELECT 1
           FROM information_schema.table_constraints tc
           JOIN information_schema.key_column_usage k
             ON k.constraint_name = tc.constraint_name
            AND k.table_schema = tc.table_schema
           WHERE tc.constraint_type = 'PRIMARY KEY'
             AND tc.table_schema = c.table_schema
             AND tc.table_name = c.table_name
             AND k.column_name = c.column_name
       ) AS pk
FROM information_schema.columns c
WHERE c.table_name = %s
  AND c.table_schema = COALESCE(%s, current_schema())
ORDER BY c.ordinal_position
"""


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlSyncAdapter:
    """Synchronous PostgreSQL adapter using psycopg (v3+)."""

    @property
    def paramstyle(self) -> str:
        return "format"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        import psycopg
        import psycopg.rows

        conninfo = _build_conninfo(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = psycopg.connect(conninfo, row_factory=psycopg.rows.dict_row)
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        if not pool:
            raise RuntimeError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        values: Sequence[Any] | None = None,
    ) -> Any:
        return connection.execute(sql, tuple(values) if values else None)

    def quote_identifier(self, name: str) -> str:
        if name == "*":
            return name
        escaped = name.replace('"', '""')
        return f'"{escaped}"'

    def introspect_columns(
        self,
        connection: Any,
        table: str,
        schema: str | None = None,
    ) -> list[Column]:
        rows = connection.execute(_COLUMNS_SQL, (table, schema)).fetchall()
        # "timestamp without time zone" -> "timestamp", "double precision" -> "double"
        return [
            Column.from_raw(
                row["column_name"],
                row["data_type"].split(" ")[0],
                pk=bool(row["pk"]),
                nullable=row["is_nullable"] == "YES",
            )
            for row in rows
        ]

    def supports_sequences(self) -> bool:
        return True

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        if pk is None:
            return None
        return f"{table}_{pk}_seq"

    def next_sequence_value(self, sequence: str) -> str:
        return f"nextval('{sequence}')"

    def insert_id(self, connection: Any, cursor: Any, sequence: str | None = None) -> Any:
        # psycopg cursors carry no lastrowid; currval is per session
        if sequence is None:
            return None
        return connection.execute("SELECT currval(%s) AS id", (sequence,)).fetchone()["id"]

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        if limit is not None:
            sql += f" LIMIT {limit}"
        if offset:
            sql += f" OFFSET {offset}"
        return sql
