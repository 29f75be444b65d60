"""Contract tests for adapter protocol compliance."""

from __future__ import annotations

import sqlite3

import pytest

from row_record.adapters.protocol import SyncAdapter
from row_record.adapters.sqlite import SqliteSyncAdapter
from row_record.core.connection import ConnectionConfig
from row_record.core.enums import ColumnType


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


class TestSqliteSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        adapter = SqliteSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.paramstyle == "qmark"

    def test_lifecycle(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        assert len(pool) == 1

        conn = adapter.acquire_connection(pool)
        assert conn is not None

        cursor = adapter.execute(conn, "SELECT ? AS val", [1])
        row = cursor.fetchone()
        assert row["val"] == 1

        adapter.release_connection(conn, pool)
        assert len(pool) == 1

        adapter.close_pool(pool)
        assert len(pool) == 0

    def test_introspect_columns(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        conn = adapter.acquire_connection(pool)
        conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name VARCHAR(10) NOT NULL, at DATETIME)")

        columns = adapter.introspect_columns(conn, "t")
        assert [c.name for c in columns] == ["id", "name", "at"]
        assert [c.type for c in columns] == [ColumnType.INTEGER, ColumnType.STRING, ColumnType.DATETIME]
        assert columns[0].pk is True
        assert columns[1].nullable is False

        with pytest.raises(sqlite3.OperationalError, match="no such table"):
            adapter.introspect_columns(conn, "missing")

        adapter.release_connection(conn, pool)
        adapter.close_pool(pool)

    def test_quote_identifier(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.quote_identifier("name") == '"name"'
        assert adapter.quote_identifier('we"ird') == '"we""ird"'
        assert adapter.quote_identifier("*") == "*"

    def test_no_sequences(self) -> None:
        adapter = SqliteSyncAdapter()
        assert adapter.supports_sequences() is False
        assert adapter.resolve_sequence_name("authors", "author_id") is None

    def test_insert_id_is_lastrowid(self, sqlite_config: ConnectionConfig) -> None:
        adapter = SqliteSyncAdapter()
        pool = adapter.create_pool(sqlite_config)
        conn = adapter.acquire_connection(pool)
        conn.execute("CREATE TABLE t (id INTEGER PRIMARY KEY, name TEXT)")

        cursor = adapter.execute(conn, "INSERT INTO t (name) VALUES (?)", ["a"])
        assert adapter.insert_id(conn, cursor) == 1

        adapter.release_connection(conn, pool)
        adapter.close_pool(pool)


# --- PostgreSQL protocol compliance ---


class TestPostgresqlSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        from row_record.adapters.postgresql import PostgresqlSyncAdapter

        adapter = PostgresqlSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        from row_record.adapters.postgresql import PostgresqlSyncAdapter

        adapter = PostgresqlSyncAdapter()
        assert adapter.paramstyle == "format"

    def test_sequences(self) -> None:
        from row_record.adapters.postgresql import PostgresqlSyncAdapter

        adapter = PostgresqlSyncAdapter()
        assert adapter.supports_sequences() is True
        assert adapter.resolve_sequence_name("authors", "author_id") == "authors_author_id_seq"
        assert adapter.next_sequence_value("authors_author_id_seq") == "nextval('authors_author_id_seq')"
        assert adapter.insert_id(object(), object(), None) is None


# --- MySQL protocol compliance ---


class TestMysqlSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        from row_record.adapters.mysql import MysqlSyncAdapter

        adapter = MysqlSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        from row_record.adapters.mysql import MysqlSyncAdapter

        adapter = MysqlSyncAdapter()
        assert adapter.paramstyle == "format"

    def test_quote_identifier(self) -> None:
        from row_record.adapters.mysql import MysqlSyncAdapter

        assert MysqlSyncAdapter().quote_identifier("name") == "`name`"


# --- Oracle protocol compliance ---


class TestOracleSyncAdapterProtocol:
    def test_implements_sync_protocol(self) -> None:
        from row_record.adapters.oracle import OracleSyncAdapter

        adapter = OracleSyncAdapter()
        assert isinstance(adapter, SyncAdapter)

    def test_paramstyle(self) -> None:
        from row_record.adapters.oracle import OracleSyncAdapter

        adapter = OracleSyncAdapter()
        assert adapter.paramstyle == "numeric"

    def test_sequences(self) -> None:
        from row_record.adapters.oracle import OracleSyncAdapter

        adapter = OracleSyncAdapter()
        assert adapter.resolve_sequence_name("authors", "author_id") == "authors_seq"
        assert adapter.next_sequence_value("authors_seq") == "authors_seq.nextval"
        assert adapter.insert_id(object(), object(), None) is None
