"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_record.core.connection import ConnectionConfig, ConnectionManager
from row_record.core.registry import default_registry
from row_record.mapping.column import Column

SCHEMA = [
    "CREATE TABLE publishers (publisher_id INTEGER PRIMARY KEY, name VARCHAR(50))",
    """CREATE TABLE authors (
        author_id INTEGER PRIMARY KEY,
        parent_author_id INTEGER,
        publisher_id INTEGER,
        name VARCHAR(25) NOT NULL,
        created_at DATETIME,
        updated_at DATETIME
    )""",
    """CREATE TABLE books (
        book_id INTEGER PRIMARY KEY,
        author_id INTEGER,
        name VARCHAR(50),
        price NUMERIC(10,2),
        published_on DATE
    )""",
    "CREATE TABLE tags (tag_id INTEGER PRIMARY KEY, name VARCHAR(25))",
    "CREATE TABLE books_tags (book_id INTEGER, tag_id INTEGER)",
    "CREATE TABLE events (name VARCHAR(25), venue VARCHAR(25))",
    """CREATE TABLE editions (
        isbn VARCHAR(13),
        printing INTEGER,
        title VARCHAR(50),
        PRIMARY KEY (isbn, printing)
    )""",
    "CREATE TABLE copies (copy_id INTEGER PRIMARY KEY, isbn VARCHAR(13), printing INTEGER, shelf VARCHAR(5))",
]

FIXTURE_ROWS = [
    ("INSERT INTO publishers (publisher_id, name) VALUES (?, ?)", [1, "Penguin"]),
    ("INSERT INTO publishers (publisher_id, name) VALUES (?, ?)", [2, "Tor"]),
    (
        "INSERT INTO authors (author_id, parent_author_id, publisher_id, name) VALUES (?, ?, ?, ?)",
        [1, None, 1, "Tito"],
    ),
    (
        "INSERT INTO authors (author_id, parent_author_id, publisher_id, name) VALUES (?, ?, ?, ?)",
        [2, 1, 2, "George W. Bush"],
    ),
    (
        "INSERT INTO authors (author_id, parent_author_id, publisher_id, name) VALUES (?, ?, ?, ?)",
        [3, 1, None, "Bill Clinton"],
    ),
    (
        "INSERT INTO books (book_id, author_id, name, price, published_on) VALUES (?, ?, ?, ?, ?)",
        [1, 1, "Ancient Art of Main Tanking", 19.99, "2009-03-01"],
    ),
    (
        "INSERT INTO books (book_id, author_id, name, price, published_on) VALUES (?, ?, ?, ?, ?)",
        [2, 1, "Another Book", 5, None],
    ),
    (
        "INSERT INTO books (book_id, author_id, name, price, published_on) VALUES (?, ?, ?, ?, ?)",
        [3, 2, "My Life", 12.5, None],
    ),
    ("INSERT INTO tags (tag_id, name) VALUES (?, ?)", [1, "fantasy"]),
    ("INSERT INTO tags (tag_id, name) VALUES (?, ?)", [2, "classic"]),
    ("INSERT INTO books_tags (book_id, tag_id) VALUES (?, ?)", [1, 1]),
    ("INSERT INTO books_tags (book_id, tag_id) VALUES (?, ?)", [1, 2]),
    ("INSERT INTO books_tags (book_id, tag_id) VALUES (?, ?)", [3, 2]),
    ("INSERT INTO events (name, venue) VALUES (?, ?)", ["launch", "hall"]),
    ("INSERT INTO editions (isbn, printing, title) VALUES (?, ?, ?)", ["111", 1, "First"]),
    ("INSERT INTO editions (isbn, printing, title) VALUES (?, ?, ?)", ["111", 2, "Second"]),
    ("INSERT INTO editions (isbn, printing, title) VALUES (?, ?, ?)", ["222", 1, "Other"]),
    ("INSERT INTO copies (copy_id, isbn, printing, shelf) VALUES (?, ?, ?, ?)", [1, "111", 1, "A"]),
    ("INSERT INTO copies (copy_id, isbn, printing, shelf) VALUES (?, ?, ?, ?)", [2, "111", 2, "B"]),
    ("INSERT INTO copies (copy_id, isbn, printing, shelf) VALUES (?, ?, ?, ?)", [3, "111", 1, "B"]),
    ("INSERT INTO copies (copy_id, isbn, printing, shelf) VALUES (?, ?, ?, ?)", [4, "222", 1, "A"]),
]


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config.

    A single pooled connection, since each in-memory connection is its own database.
    """
    return ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)


@pytest.fixture
def sqlite_manager(sqlite_config: ConnectionConfig) -> Iterator[ConnectionManager]:
    manager = ConnectionManager(sqlite_config)
    yield manager
    manager.close_pool()


@pytest.fixture
def database(sqlite_manager: ConnectionManager) -> Iterator[ConnectionManager]:
    """Populated in-memory database bound as the default connection of the default registry."""
    for statement in SCHEMA:
        sqlite_manager.query(statement)
    for sql, values in FIXTURE_ROWS:
        sqlite_manager.query(sql, values)

    default_registry.connections.add("default", sqlite_manager)
    yield sqlite_manager
    default_registry.clear()
    default_registry.connections.clear()


class FakeCursor:
    description = None
    rowcount = 0
    lastrowid = None

    def fetchall(self) -> list:
        return []


class FakeConnection:
    def commit(self) -> None:
        pass


class FakeAdapter:
    """Adapter serving canned column metadata and recording every statement."""

    paramstyle = "qmark"

    def __init__(self, tables: dict[str, list[Column]]) -> None:
        self.tables = tables
        self.executed: list[tuple[str, list]] = []
        self.introspected: list[str] = []

    def create_pool(self, config: ConnectionConfig) -> list:
        return []

    def acquire_connection(self, pool: list) -> FakeConnection:
        return FakeConnection()

    def release_connection(self, connection: FakeConnection, pool: list) -> None:
        pass

    def close_pool(self, pool: list) -> None:
        pass

    def execute(self, connection: FakeConnection, sql: str, values=None) -> FakeCursor:
        self.executed.append((sql, list(values or ())))
        return FakeCursor()

    def quote_identifier(self, name: str) -> str:
        return name if name == "*" else f'"{name}"'

    def introspect_columns(self, connection: FakeConnection, table: str, schema=None) -> list[Column]:
        self.introspected.append(table)
        return self.tables[table]

    def supports_sequences(self) -> bool:
        return False

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        return None

    def next_sequence_value(self, sequence: str) -> str:
        raise NotImplementedError

    def insert_id(self, connection: FakeConnection, cursor: FakeCursor, sequence=None):  # type: ignore[no-untyped-def]
        return cursor.lastrowid

    def apply_limit_offset(self, sql: str, offset: int | None, limit: int | None) -> str:
        return f"{sql} LIMIT {limit if limit is not None else -1} OFFSET {offset or 0}"


FAKE_TABLES = {
    "widgets": [Column.from_raw("widget_id", "int", pk=True), Column.from_raw("name", "text")],
    "authors": [
        Column.from_raw("author_id", "int", pk=True),
        Column.from_raw("publisher_id", "int"),
        Column.from_raw("name", "varchar(25)"),
    ],
    "publishers": [Column.from_raw("publisher_id", "int", pk=True), Column.from_raw("name", "text")],
    "books": [
        Column.from_raw("book_id", "int", pk=True),
        Column.from_raw("author_id", "int"),
        Column.from_raw("name", "varchar(50)"),
    ],
    "tags": [Column.from_raw("tag_id", "int", pk=True), Column.from_raw("name", "text")],
    "events": [Column.from_raw("name", "text"), Column.from_raw("venue", "text")],
}


@pytest.fixture
def fake_adapter() -> FakeAdapter:
    return FakeAdapter(FAKE_TABLES)


@pytest.fixture
def fake_manager(sqlite_config: ConnectionConfig, fake_adapter: FakeAdapter) -> ConnectionManager:
    return ConnectionManager(sqlite_config, adapter=fake_adapter)


class SequenceFakeAdapter(FakeAdapter):
    """FakeAdapter for a dialect whose primary keys come from sequences.

    Its cursors report a driver-specific ``lastrowid`` that is not the key,
    like Oracle's ROWID.
    """

    def __init__(self, tables: dict[str, list[Column]], next_id: int = 41) -> None:
        super().__init__(tables)
        self.next_id = next_id
        self.id_reads: list[str | None] = []

    def execute(self, connection: FakeConnection, sql: str, values=None) -> FakeCursor:
        cursor = super().execute(connection, sql, values)
        cursor.lastrowid = "AAAR3sAAEAAAACXAAA"
        return cursor

    def supports_sequences(self) -> bool:
        return True

    def resolve_sequence_name(self, table: str, pk: str | None) -> str | None:
        return f"{table}_seq"

    def next_sequence_value(self, sequence: str) -> str:
        return f"{sequence}.nextval"

    def insert_id(self, connection: FakeConnection, cursor: FakeCursor, sequence=None):  # type: ignore[no-untyped-def]
        self.id_reads.append(sequence)
        return self.next_id


@pytest.fixture
def sequence_adapter() -> SequenceFakeAdapter:
    return SequenceFakeAdapter(FAKE_TABLES)


@pytest.fixture
def sequence_manager(
    sqlite_config: ConnectionConfig, sequence_adapter: SequenceFakeAdapter
) -> ConnectionManager:
    return ConnectionManager(sqlite_config, adapter=sequence_adapter)
