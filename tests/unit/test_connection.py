"""Unit tests for adapter loading and ConnectionManager error wrapping."""

from __future__ import annotations

from typing import Any

import pytest

from row_record.adapters.sqlite import SqliteSyncAdapter
from row_record.core.connection import ConnectionConfig, ConnectionManager, _load_adapter
from row_record.core.enums import DatabaseBackend
from row_record.core.exceptions import AdapterError, ConnectionError, DatabaseError  # noqa: A004


class TestLoadAdapter:
    def test_by_backend(self) -> None:
        assert isinstance(_load_adapter(DatabaseBackend.SQLITE), SqliteSyncAdapter)

    def test_by_driver_name(self) -> None:
        assert isinstance(_load_adapter("SQLite"), SqliteSyncAdapter)

    def test_unsupported_driver(self) -> None:
        with pytest.raises(AdapterError, match="db2"):
            ConnectionManager(ConnectionConfig(driver="db2", database="x"))


class TestConnectionManager:
    def test_exhausted_pool_is_a_connection_error(
        self, fake_manager: ConnectionManager, fake_adapter: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def exhausted(pool: Any) -> Any:
            raise RuntimeError("No connections available in pool")

        monkeypatch.setattr(fake_adapter, "acquire_connection", exhausted)
        with pytest.raises(ConnectionError, match="No connections available") as exc_info:
            fake_manager.query("SELECT 1")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert fake_adapter.executed == []

    def test_pool_creation_failure_is_a_connection_error(
        self, fake_manager: ConnectionManager, fake_adapter: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def refused(config: ConnectionConfig) -> Any:
            raise OSError("connection refused")

        monkeypatch.setattr(fake_adapter, "create_pool", refused)
        with pytest.raises(ConnectionError, match="connection refused"):
            fake_manager.columns("authors")

    def test_driver_failure_is_a_database_error(
        self, fake_manager: ConnectionManager, fake_adapter: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def broken(connection: Any, sql: str, values: Any = None) -> Any:
            raise ValueError("syntax error")

        monkeypatch.setattr(fake_adapter, "execute", broken)
        with pytest.raises(DatabaseError) as exc_info:
            fake_manager.query("SELEC 1")
        assert exc_info.value.sql == "SELEC 1"

    def test_insert_id_read_only_on_request(
        self, fake_manager: ConnectionManager, fake_adapter: Any, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        reads: list[str | None] = []

        def insert_id(connection: Any, cursor: Any, sequence: str | None = None) -> int:
            reads.append(sequence)
            return 9

        monkeypatch.setattr(fake_adapter, "insert_id", insert_id)
        assert fake_manager.query("DELETE FROM t").lastrowid is None
        assert fake_manager.query("INSERT INTO t VALUES(?)", [1], insert_id=True, sequence="t_seq").lastrowid == 9
        assert reads == ["t_seq"]
