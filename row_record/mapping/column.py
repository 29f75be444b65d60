"""Column metadata loaded from schema introspection."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from row_record.core.enums import ColumnType

_TYPE_MAP: dict[str, ColumnType] = {
    "datetime": ColumnType.DATETIME,
    "timestamp": ColumnType.DATETIME,
    "date": ColumnType.DATE,
    "int": ColumnType.INTEGER,
    "tinyint": ColumnType.INTEGER,
    "smallint": ColumnType.INTEGER,
    "mediumint": ColumnType.INTEGER,
    "bigint": ColumnType.INTEGER,
    "float": ColumnType.DECIMAL,
    "double": ColumnType.DECIMAL,
    "numeric": ColumnType.DECIMAL,
    "decimal": ColumnType.DECIMAL,
    "dec": ColumnType.DECIMAL,
    "real": ColumnType.DECIMAL,
}

# varchar(255), numeric(10,2) ...
_LENGTH_SUFFIX = re.compile(r"\s*\(.*\)\s*$")


@dataclass(frozen=True)
class Column:
    """A single table column.

    Attributes:
        name: Column name as reported by the database.
        raw_type: Normalized database type (lower-case, no length suffix).
        type: Mapped storage-independent type.
        pk: True if the column is part of the primary key.
        nullable: True if the column accepts NULL.
    """

    name: str
    raw_type: str
    type: ColumnType
    pk: bool = False
    nullable: bool = True

    @classmethod
    def from_raw(cls, name: str, raw_type: str, pk: bool = False, nullable: bool = True) -> Column:
        """Build a Column from introspected values, mapping the raw type."""
        normalized, mapped = cls.map_raw_type(raw_type)
        return cls(name=name, raw_type=normalized, type=mapped, pk=pk, nullable=nullable)

    @staticmethod
    def map_raw_type(raw_type: str) -> tuple[str, ColumnType]:
        """Normalize *raw_type* and map it to a ColumnType.

        Unknown types map to STRING.
        """
        normalized = _LENGTH_SUFFIX.sub("", (raw_type or "").strip().lower())
        if normalized == "integer":
            normalized = "int"
        return normalized, _TYPE_MAP.get(normalized, ColumnType.STRING)

    def cast(self, value: Any) -> Any:
        """Convert a stored value to the Python type for this column."""
        if value is None:
            return None

        if self.type is ColumnType.INTEGER:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            try:
                return int(value)
            except ValueError:
                return int(float(value))

        if self.type is ColumnType.DECIMAL:
            return float(value)

        if self.type is ColumnType.DATETIME:
            if isinstance(value, datetime):
                return value
            if isinstance(value, date):
                return datetime(value.year, value.month, value.day)
            return datetime.fromisoformat(str(value))

        if self.type is ColumnType.DATE:
            if isinstance(value, datetime):
                return value.date()
            if isinstance(value, date):
                return value
            return date.fromisoformat(str(value)[:10])

        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)
