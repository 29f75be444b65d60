"""Database adapter protocol.

Every adapter module MUST implement this protocol. The core only talks to a
database through these methods, so dialect differences (quoting, sequences,
limit/offset syntax, schema introspection) live in the adapters.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from row_record.core.connection import ConnectionConfig
from row_record.mapping.column import Column


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def paramstyle(self) -> str:
        """DB-API marker style: 'qmark', 'format' or 'numeric'."""
        ...

    def create_pool(self, config: ConnectionConfig) -> Any:
        """Create a connection pool."""
        ...

    def acquire_connection(self, pool: Any) -> Any:
        """Acquire a connection from the pool."""
        ...

    def release_connection(self, connection: Any, pool: Any) -> None:
        """Release a connection back to the pool."""
        ...

    def close_pool(self, pool: Any) -> None:
        """Close the pool and release all connections."""
        ...

    def execute(
        self,
        connection: Any,
        sql: str,
        values: Sequence[Any] | None = None,
    ) -> Any:
        """Execute SQL with positional values and return a cursor-like object."""
        ...

    def quote_identifier(self, name: str) -> str:
        """Quote a table or column name for this dialect."""
        ...

    def introspect_columns(
        self,
        connection: Any,
        table: str,
        schema: str | None = None,
    ) -> list[Column]:
        """Return the table's columns in schema order."""
        ...

    def supports_sequences(self) -> bool:
        """True if primary keys come from named sequences."""
        ...

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        """Conventional sequence name for *table*, or None."""
        ...

    def next_sequence_value(self, sequence: str) -> str:
        """SQL expression yielding the next value of *sequence*."""
        ...

    def insert_id(self, connection: Any, cursor: Any, sequence: str | None = None) -> Any:
        """Primary key generated by the INSERT just run on *connection*.

        Adapters with sequences read the current value of *sequence* in the
        same session; the others report the cursor's ``lastrowid``.
        """
        ...

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        """Restrict a SELECT to a window of rows."""
        ...
