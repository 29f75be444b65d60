"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
ConnectionManager pairs a config with its adapter, owns the pool and
executes statements. ConnectionRegistry holds named managers so models can
pick a connection by name.
"""

from __future__ import annotations

import importlib
import logging
import threading
from collections.abc import Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from row_record.core.enums import DatabaseBackend
from row_record.core.exceptions import AdapterError, ConnectionError, DatabaseError  # noqa: A004
from row_record.core.params import normalize_params

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION = "default"


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    pool_size: int = 5
    pool_timeout: int = 30
    pool_recycle: int = 1800
    extra: dict[str, Any] = {}


# Adapter module mapping: backend → (module_path, class_name)
_ADAPTER_MAP: dict[DatabaseBackend, tuple[str, str]] = {
    DatabaseBackend.SQLITE: ("row_record.adapters.sqlite", "SqliteSyncAdapter"),
    DatabaseBackend.POSTGRESQL: ("row_record.adapters.postgresql", "PostgresqlSyncAdapter"),
    DatabaseBackend.MYSQL: ("row_record.adapters.mysql", "MysqlSyncAdapter"),
    DatabaseBackend.ORACLE: ("row_record.adapters.oracle", "OracleSyncAdapter"),
}


def _load_adapter(driver: str | DatabaseBackend) -> Any:
    """Load an adapter by driver name."""
    try:
        backend = DatabaseBackend(driver.lower() if isinstance(driver, str) else driver)
    except ValueError:
        raise AdapterError(f"Unsupported database driver: {driver}") from None

    module_path, cls_name = _ADAPTER_MAP[backend]

    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


def _rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    if cursor.description is None:
        return []
    columns = [desc[0] for desc in cursor.description]
    rows = cursor.fetchall()
    if not rows:
        return []

    # Check if rows are already dict-like (e.g., psycopg dict_row, MySQL dict cursor)
    first_row = rows[0]
    if isinstance(first_row, dict):
        return [dict(row) for row in rows]

    # Tuple-like rows, zip with columns
    return [dict(zip(columns, row, strict=True)) for row in rows]


@dataclass(frozen=True)
class QueryResult:
    """Outcome of a single statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Any = None


class ConnectionManager:
    """Synchronous connection manager using the SyncAdapter protocol."""

    def __init__(self, config: ConnectionConfig, adapter: Any | None = None) -> None:
        self.config = config
        self._adapter = adapter if adapter is not None else _load_adapter(config.driver)
        self._pool: Any = None
        self.last_query: str | None = None

    @property
    def adapter(self) -> Any:
        return self._adapter

    def initialize_pool(self) -> Any:
        """Initialize the connection pool."""
        if self._pool is None:
            self._pool = self._adapter.create_pool(self.config)
        return self._pool

    @contextmanager
    def get_connection(self):  # type: ignore[no-untyped-def]
        """Get a connection from the pool as a context manager.

        Raises:
            ConnectionError: If the pool cannot be created or is exhausted.
        """
        try:
            if self._pool is None:
                self.initialize_pool()
            connection = self._adapter.acquire_connection(self._pool)
        except Exception as e:
            raise ConnectionError(
                f"Failed to acquire a {self.config.driver} connection: {e}"
            ) from e
        try:
            yield connection
        finally:
            self._adapter.release_connection(connection, self._pool)

    def close_pool(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._adapter.close_pool(self._pool)
            self._pool = None

    def query(
        self,
        sql: str,
        values: Sequence[Any] | None = None,
        insert_id: bool = False,
        sequence: str | None = None,
    ) -> QueryResult:
        """Execute one statement with positional ``?`` values.

        Statements that return no rows are committed immediately. With
        *insert_id*, the generated key is read back on the same connection
        (through *sequence* on adapters that use sequences) and reported as
        ``lastrowid``.

        Raises:
            ConnectionError: If no connection can be acquired.
            DatabaseError: If the driver fails to execute the statement.
        """
        values = list(values or ())
        self.last_query = sql
        logger.debug("%s %r", sql, values)

        driver_sql = normalize_params(sql, self._adapter.paramstyle)
        with self.get_connection() as conn:
            try:
                cursor = self._adapter.execute(conn, driver_sql, values)
                rows = _rows_to_dicts(cursor)
                lastrowid = self._adapter.insert_id(conn, cursor, sequence) if insert_id else None
                if cursor.description is None:
                    conn.commit()
            except Exception as e:
                raise DatabaseError(sql, str(e)) from e

            return QueryResult(rows=rows, rowcount=int(cursor.rowcount), lastrowid=lastrowid)

    def columns(self, table: str, schema: str | None = None) -> list[Any]:
        """Introspect the columns of *table*.

        Raises:
            DatabaseError: If the table cannot be introspected.
        """
        with self.get_connection() as conn:
            try:
                return self._adapter.introspect_columns(conn, table, schema)
            except Exception as e:
                raise DatabaseError(f"<columns of {table}>", str(e)) from e


class ConnectionRegistry:
    """Named connection managers.

    Configs are turned into managers on first use. The registry is safe to
    share between threads.

    Args:
        configs: Optional initial name -> config mapping.
        default: Name returned by ``get()`` when no name is given.
    """

    def __init__(
        self,
        configs: dict[str, ConnectionConfig] | None = None,
        default: str = DEFAULT_CONNECTION,
    ) -> None:
        self.default = default
        self._configs: dict[str, ConnectionConfig] = dict(configs or {})
        self._managers: dict[str, ConnectionManager] = {}
        self._lock = threading.RLock()

    def add(self, name: str, connection: ConnectionConfig | ConnectionManager) -> None:
        """Register a config or a ready-made manager under *name*."""
        with self._lock:
            if isinstance(connection, ConnectionManager):
                self._managers[name] = connection
                self._configs[name] = connection.config
            else:
                self._managers.pop(name, None)
                self._configs[name] = connection

    def get(self, name: str | None = None) -> ConnectionManager:
        """Return the manager for *name*, or for the default connection.

        Raises:
            ConnectionError: If no connection is configured under that name.
        """
        name = name or self.default
        with self._lock:
            manager = self._managers.get(name)
            if manager is None:
                config = self._configs.get(name)
                if config is None:
                    raise ConnectionError(f"No connection configured with name '{name}'")
                manager = ConnectionManager(config)
                self._managers[name] = manager
            return manager

    @property
    def names(self) -> list[str]:
        return sorted(self._configs)

    def clear(self) -> None:
        """Close every pool and forget all connections."""
        with self._lock:
            for manager in self._managers.values():
                manager.close_pool()
            self._managers.clear()
            self._configs.clear()
