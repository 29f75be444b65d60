"""Oracle adapter using oracledb."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_record.core.connection import ConnectionConfig
from row_record.mapping.column import Column

_COLUMNS_SQL = """
SELECT c.column_name, c.data_type, c.nullable,
       (SELECT COUNT(*)
        FROM all_constraints k
        JOIN all_cons_columns kc
          ON kc.owner = k.owner AND kc.constraint_name = k.constraint_name
        WHERE k.constraint_type = 'P'
          AND k.owner = c.owner
          AND kc.table_name = c.table_name
          AND kc.column_name = c.column_name) AS pk
FROM all_tab_columns c
WHERE c.table_name = :1
  AND c.owner = NVL(:2, USER)
ORDER BY c.column_id
"""


def _build_dsn(config: ConnectionConfig) -> str:
    """Build an Oracle DSN string from config fields (host:port/database)."""
    return f"{config.host}:{config.port}/{config.database}"


def _make_row_factory(cursor: Any) -> Any:
    """Create a row factory that converts tuples to dicts using column names."""
    columns = [col[0].lower() for col in cursor.description]

    def factory(*args: Any) -> dict[str, Any]:
        return dict(zip(columns, args, strict=True))

    return factory


class OracleSyncAdapter:
    """Synchronous Oracle adapter using oracledb."""

    @property
    def paramstyle(self) -> str:
        return "numeric"

    def create_pool(self, config: ConnectionConfig) -> list[Any]:
        """Create a 'pool' (list of connections) for Oracle."""
        import oracledb

        dsn = _build_dsn(config)
        pool: list[Any] = []
        for _ in range(config.pool_size):
            conn = oracledb.connect(user=config.user, password=config.password, dsn=dsn)
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
        """Execute SQL and return a cursor with dict row factory."""
        cursor = connection.cursor()
        cursor.execute(sql, list(values) if values else None)
        if cursor.description is not None:
            cursor.rowfactory = _make_row_factory(cursor)
        return cursor

    def quote_identifier(self, name: str) -> str:
        # Quoting would make Oracle identifiers case-sensitive
        return name

    def introspect_columns(
        self,
        connection: Any,
        table: str,
        schema: str | None = None,
    ) -> list[Column]:
        cursor = connection.cursor()
        cursor.execute(_COLUMNS_SQL, [table.upper(), schema.upper() if schema else None])
        return [
            Column.from_raw(name.lower(), data_type, pk=bool(pk), nullable=nullable == "Y")
            for name, data_type, nullable, pk in cursor.fetchall()
        ]

    def supports_sequences(self) -> bool:
        return True

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        return f"{table}_seq"

    def next_sequence_value(self, sequence: str) -> str:
        return f"{sequence}.nextval"

    def insert_id(self, connection: Any, cursor: Any, sequence: str | None = None) -> Any:
        # cursor.lastrowid is a ROWID here, not the key
        if sequence is None:
            return None
        id_cursor = connection.cursor()
        id_cursor.execute(f"SELECT {sequence}.currval FROM dual")
        return id_cursor.fetchone()[0]

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        offset = offset or 0
        upper = f" WHERE ROWNUM <= {offset + limit}" if limit is not None else ""
        return (
            f"SELECT * FROM (SELECT a.*, ROWNUM rr_rownum FROM ({sql}) a{upper})"
            f" WHERE rr_rownum > {offset}"
        )
