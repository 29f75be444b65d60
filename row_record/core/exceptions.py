"""RowRecord exception hierarchy.

All exceptions are RowRecord-specific. Driver exceptions raised while a
statement executes are wrapped in DatabaseError and chained, never exposed
bare to callers.
"""

from __future__ import annotations


class RowRecordError(Exception):
    """Base exception for all RowRecord errors."""


# --- Arguments ---


class ArgumentError(RowRecordError):
    """Raised on malformed builder, condition or query option input."""


class MissingPrimaryKeyError(ArgumentError):
    """Raised when an update or delete cannot be restricted by primary key."""

    def __init__(self, entity: str, action: str) -> None:
        self.entity = entity
        self.action = action
        super().__init__(f"Cannot {action} {entity}: no primary key value available")


# --- Relationships ---


class RelationshipError(RowRecordError):
    """Raised when a relationship name or target cannot be resolved."""

    def __init__(self, entity: str, relationship: str, detail: str | None = None) -> None:
        self.entity = entity
        self.relationship = relationship
        message = detail or f"Relationship named '{relationship}' has not been declared"
        super().__init__(f"{message} for class: {entity}")


# --- Records ---


class RecordNotFound(RowRecordError):
    """Raised when a lookup by primary key matches no row."""

    def __init__(self, entity: str, keys: object) -> None:
        self.entity = entity
        self.keys = keys
        super().__init__(f"Couldn't find {entity} with primary key {keys!r}")


class ReadOnlyError(RowRecordError):
    """Raised when persisting a model that was loaded read-only."""

    def __init__(self, entity: str, action: str) -> None:
        self.entity = entity
        self.action = action
        super().__init__(f"{entity} was loaded read-only and cannot {action}")


class UndefinedPropertyError(RowRecordError, AttributeError):
    """Raised when assigning an attribute that is not a column of the table."""

    def __init__(self, entity: str, names: list[str]) -> None:
        self.entity = entity
        self.names = names
        super().__init__(f"Undefined property on {entity}: {', '.join(names)}")


# --- Database ---


class DatabaseError(RowRecordError):
    """Raised when the adapter fails to execute a statement."""

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        super().__init__(f"{detail} (SQL: {sql})")


# --- Adapter ---


class AdapterError(RowRecordError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures or unknown connection names."""
