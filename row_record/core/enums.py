"""Enumerations shared across the package."""

from __future__ import annotations

from enum import Enum


class DatabaseBackend(Enum):
    """Supported database backends."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    ORACLE = "oracle"


class ColumnType(Enum):
    """Storage-independent column types."""

    INTEGER = "integer"
    DECIMAL = "decimal"
    STRING = "string"
    DATETIME = "datetime"
    DATE = "date"


class Operation(Enum):
    """Statement kinds assembled by SQLBuilder."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class RelationshipKind(Enum):
    """Association topologies."""

    HAS_MANY = "has_many"
    HAS_ONE = "has_one"
    BELONGS_TO = "belongs_to"
    HAS_AND_BELONGS_TO_MANY = "has_and_belongs_to_many"
