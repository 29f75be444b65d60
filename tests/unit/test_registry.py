"""Unit tests for the table registry."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

import pytest

from row_record.core.connection import ConnectionManager
from row_record.core.exceptions import ConnectionError, RelationshipError  # noqa: A004
from row_record.core.registry import TableRegistry
from row_record.mapping.association import has_many
from row_record.mapping.model import Model

registry = TableRegistry()


class RegistryModel(Model):
    __registry__ = registry


class Author(RegistryModel):
    associations = [has_many("books")]


class Book(RegistryModel):
    pass


class Tag(RegistryModel):
    connection = "reporting"


@pytest.fixture(autouse=True)
def bound_registry(fake_manager: ConnectionManager) -> Iterator[TableRegistry]:
    registry.connections.add("default", fake_manager)
    yield registry
    registry.clear()
    registry.connections.clear()


class TestTableRegistry:
    def test_load_builds_once(self, fake_adapter: Any) -> None:
        table = registry.load(Author)
        assert registry.load(Author) is table
        assert Author.table() is table
        assert fake_adapter.introspected == ["authors"]
        assert Author in registry
        assert len(registry) == 1

    def test_table_name_inferred_from_class(self) -> None:
        assert registry.load(Book).table == "books"

    def test_clear_forces_rebuild(self, fake_adapter: Any) -> None:
        first = registry.load(Author)
        registry.clear()
        assert len(registry) == 0
        assert registry.load(Author) is not first
        assert fake_adapter.introspected == ["authors", "authors"]

    def test_concurrent_first_load_builds_one_table(self, fake_adapter: Any) -> None:
        barrier = threading.Barrier(8)
        tables = []

        def load() -> None:
            barrier.wait()
            tables.append(registry.load(Book))

        threads = [threading.Thread(target=load) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len({id(table) for table in tables}) == 1
        assert fake_adapter.introspected == ["books"]

    def test_relationships_registered_once(self) -> None:
        registry.load(Author)
        registry.load(Author)
        assert list(registry.load(Author).relationships) == ["books"]

    def test_resolve_model_by_name(self) -> None:
        assert registry.resolve_model("Book", "Author", "books") is Book
        assert registry.resolve_model(Book, "Author", "books") is Book

    def test_resolve_unknown_model(self) -> None:
        with pytest.raises(RelationshipError) as exc_info:
            registry.resolve_model("Widget", "Author", "widgets")
        assert exc_info.value.entity == "Author"
        assert exc_info.value.relationship == "widgets"

    def test_unconfigured_connection(self) -> None:
        with pytest.raises(ConnectionError, match="reporting"):
            registry.load(Tag)
