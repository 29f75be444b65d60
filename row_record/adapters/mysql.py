"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_record.core.connection import ConnectionConfig
from row_record.core.exceptions import AdapterError
from row_record.mapping.column import Column

# Largest LIMIT MySQL accepts; used when only an offset is given
_MAX_ROWS = 18446744073709551615


class MysqlSyncAdapter:
    """Synchronous MySQL adapter using mysql-connector-python."""

    @property
    def paramstyle(self) -> str:
        return "format"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a pool (list of connections) for MySQL."""
        import mysql.connector

        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = mysql.connector.connect(
                host=config.host,
                port=config.port,
                user=config.user,
                password=config.password,
                database=config.database,
            )
            pool.append(conn)
        return pool

    def acquire_connection(self, pool: list[Any]) -> Any:
        """Acquire a connection from the pool."""
        if not pool:
            raise RuntimeError("No connections available in pool")
        return pool.pop()

    def release_connection(self, connection: Any, pool: list[Any]) -> None:
        """Release a connection back to the pool."""
        pool.append(connection)

    def close_pool(self, pool: list[Any]) -> None:
        """Close all connections in the pool."""
        for conn in pool:
            conn.close()
        pool.clear()

    def execute(
        self,
        connection: Any,
        sql: str,
        values: Sequence[Any] | None = None,
    ) -> Any:
        """Execute SQL and return a cursor with dictionary results."""
        cursor = connection.cursor(dictionary=True)
        cursor.execute(sql, tuple(values) if values else None)
        return cursor

    def quote_identifier(self, name: str) -> str:
        if name == "*":
            return name
        escaped = name.replace("`", "``")
        return f"`{escaped}`"

    def introspect_columns(
        self,
        connection: Any,
        table: str,
        schema: str | None = None,
    ) -> list[Column]:
        target = self.quote_identifier(table)
        if schema:
            target = f"{self.quote_identifier(schema)}.{target}"
        cursor = connection.cursor(dictionary=True)
        cursor.execute(f"SHOW COLUMNS FROM {target}")
        columns = []
        for row in cursor.fetchall():
            raw_type = row["Type"]
            if isinstance(raw_type, bytes):
                raw_type = raw_type.decode("utf-8")
            # "int(11) unsigned" -> "int(11)"
            columns.append(
                Column.from_raw(
                    row["Field"],
                    raw_type.split(" ")[0],
                    pk=row["Key"] == "PRI",
                    nullable=row["Null"] == "YES",
                )
            )
        return columns

    def supports_sequences(self) -> bool:
        return False

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        return None

    def next_sequence_value(self, sequence: str) -> str:
        raise AdapterError("MySQL does not support sequences")

    def insert_id(self, connection: Any, cursor: Any, sequence: str | None = None) -> Any:
        return cursor.lastrowid

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        return f"{sql} LIMIT {offset or 0},{limit if limit is not None else _MAX_ROWS}"
