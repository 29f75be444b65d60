"""RowRecord - an active-record style ORM over plain SQL."""

from __future__ import annotations

from row_record.core.callbacks import EVENTS, CallBack
from row_record.core.connection import (
    ConnectionConfig,
    ConnectionManager,
    ConnectionRegistry,
    QueryResult,
)
from row_record.core.enums import ColumnType, DatabaseBackend, Operation, RelationshipKind
from row_record.core.exceptions import (
    AdapterError,
    ArgumentError,
    ConnectionError,  # noqa: A004
    DatabaseError,
    MissingPrimaryKeyError,
    ReadOnlyError,
    RecordNotFound,
    RelationshipError,
    RowRecordError,
    UndefinedPropertyError,
)
from row_record.core.expressions import Expressions
from row_record.core.options import QueryOptions
from row_record.core.registry import TableRegistry, default_registry
from row_record.core.sql_builder import SQLBuilder
from row_record.core.table import Table
from row_record.mapping.association import (
    Association,
    belongs_to,
    has_and_belongs_to_many,
    has_many,
    has_one,
)
from row_record.mapping.column import Column
from row_record.mapping.model import Model

__all__ = [
    # Connection
    "ConnectionConfig",
    "ConnectionManager",
    "ConnectionRegistry",
    "QueryResult",
    # Query compilation
    "Expressions",
    "SQLBuilder",
    "QueryOptions",
    # Metadata
    "Table",
    "TableRegistry",
    "default_registry",
    "Column",
    # Models
    "Model",
    "CallBack",
    "EVENTS",
    # Associations
    "Association",
    "has_many",
    "has_one",
    "belongs_to",
    "has_and_belongs_to_many",
    # Enums
    "DatabaseBackend",
    "ColumnType",
    "Operation",
    "RelationshipKind",
    # Exceptions
    "RowRecordError",
    "ArgumentError",
    "MissingPrimaryKeyError",
    "RelationshipError",
    "RecordNotFound",
    "ReadOnlyError",
    "UndefinedPropertyError",
    "DatabaseError",
    "AdapterError",
    "ConnectionError",
]
