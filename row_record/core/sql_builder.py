"""Programmatic SQL statement assembly.

One SQLBuilder per statement. The terminal calls ``select``, ``insert``,
``update`` and ``delete`` set the statement kind; the last one called wins.
All values are bound through ``?`` markers and returned by ``bind_values``
in the order the markers appear in ``to_sql()``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from row_record.core.enums import Operation
from row_record.core.exceptions import ArgumentError
from row_record.core.expressions import Expressions, is_sequence, quote_column

_DIRECTION = re.compile(r"\s+(ASC|DESC)\s*$", re.IGNORECASE)
_CONNECTORS = re.compile(r"(_and_|_or_)", re.IGNORECASE)


class SQLBuilder:
    """Helper for building SQL statements.

    Args:
        adapter: Database adapter, used for identifier quoting, sequences and
            limit/offset dialects.
        table: Fully qualified (already quoted) table name.

    Raises:
        ArgumentError: If no adapter is given.
    """

    def __init__(self, adapter: Any, table: str) -> None:
        if adapter is None:
            raise ArgumentError("A valid database adapter is required.")

        self._adapter = adapter
        self._table = table
        self._operation = Operation.SELECT
        self._select = "*"
        self._joins: str | None = None
        self._order: str | None = None
        self._group: str | None = None
        self._having: str | None = None
        self._limit: int | None = None
        self._offset: int | None = None

        self._where: str | None = None
        self._where_values: list[Any] = []

        self._data: dict[str, Any] | None = None
        self._sequence_column: tuple[str, str] | None = None

    def __str__(self) -> str:
        return self.to_sql()

    @property
    def operation(self) -> Operation:
        return self._operation

    @property
    def where_values(self) -> list[Any]:
        return list(self._where_values)

    def to_sql(self) -> str:
        builders = {
            Operation.SELECT: self._build_select,
            Operation.INSERT: self._build_insert,
            Operation.UPDATE: self._build_update,
            Operation.DELETE: self._build_delete,
        }
        return builders[self._operation]()

    def bind_values(self) -> list[Any]:
        """Insert/update values in key order followed by WHERE values."""
        values: list[Any] = []
        if self._data:
            values.extend(self._data.values())
        values.extend(self._where_values)
        return values

    # --- clauses ---

    def where(self, conditions: Mapping[str, Any] | str, *values: Any) -> SQLBuilder:
        expression = Expressions(self._adapter, conditions, *values)
        self._where = expression.to_sql()
        self._where_values = expression.values()
        return self

    def order(self, order: str) -> SQLBuilder:
        self._order = order
        return self

    def group(self, group: str) -> SQLBuilder:
        self._group = group
        return self

    def having(self, having: str) -> SQLBuilder:
        self._having = having
        return self

    def limit(self, limit: int) -> SQLBuilder:
        self._limit = int(limit)
        return self

    def offset(self, offset: int) -> SQLBuilder:
        self._offset = int(offset)
        return self

    def joins(self, joins: str) -> SQLBuilder:
        self._joins = joins
        return self

    # --- terminal operations ---

    def select(self, columns: str = "*") -> SQLBuilder:
        self._operation = Operation.SELECT
        self._select = columns
        return self

    def insert(
        self,
        data: Mapping[str, Any],
        pk: str | None = None,
        sequence: str | None = None,
    ) -> SQLBuilder:
        """Prepare an INSERT.

        When *sequence* is given, the adapter supports sequences and *pk* is
        not part of *data*, the primary key is filled from the sequence.
        """
        if not isinstance(data, Mapping) or not data:
            raise ArgumentError("Inserting requires a non-empty hash.")

        self._operation = Operation.INSERT
        self._data = dict(data)
        self._sequence_column = None
        if (
            pk is not None
            and sequence
            and pk not in self._data
            and self._adapter.supports_sequences()
        ):
            self._sequence_column = (pk, self._adapter.next_sequence_value(sequence))
        return self

    def update(self, data: Mapping[str, Any]) -> SQLBuilder:
        if not isinstance(data, Mapping) or not data:
            raise ArgumentError("Updating requires a non-empty hash.")

        self._operation = Operation.UPDATE
        self._data = dict(data)
        return self

    def delete(self, *conditions: Any) -> SQLBuilder:
        self._operation = Operation.DELETE
        if conditions:
            self.where(*conditions)
        return self

    # --- static helpers ---

    @staticmethod
    def reverse_order(order: str | None) -> str | None:
        """Reverse an ORDER BY clause.

        ``"a ASC, b DESC, c"`` -> ``"a DESC, b ASC, c DESC"``
        """
        if not order or not order.strip():
            return order

        terms: list[str] = []
        for term in order.split(","):
            term = term.strip()
            match = _DIRECTION.search(term)
            if match is None:
                terms.append(f"{term} DESC")
            else:
                flipped = "DESC" if match.group(1).upper() == "ASC" else "ASC"
                terms.append(f"{term[: match.start()]} {flipped}")
        return ", ".join(terms)

    @staticmethod
    def create_conditions_from_underscored_string(
        name: str,
        values: Sequence[Any] = (),
        alias_map: Mapping[str, str] | None = None,
    ) -> tuple[str, list[Any]] | None:
        """Convert ``"id_and_name_or_z"`` into ``("id=? AND name=? OR z=?", values)``.

        The value at each position picks the comparison: a sequence gives
        ``IN(?)``, ``None`` (or a missing value) gives ``IS NULL`` and
        consumes nothing. *alias_map* translates external names to columns.
        """
        if not name:
            return None

        parts = _CONNECTORS.split(name)
        sql = ""
        bound: list[Any] = []

        for index, field in enumerate(parts[::2]):
            if index > 0:
                sql += " AND " if parts[index * 2 - 1].lower() == "_and_" else " OR "

            value = values[index] if index < len(values) else None
            if value is None:
                bind = " IS NULL"
            elif is_sequence(value):
                bind = " IN(?)"
                bound.append(value)
            else:
                bind = "=?"
                bound.append(value)

            if alias_map and field in alias_map:
                field = alias_map[field]
            sql += field + bind

        return sql, bound

    # --- builders ---

    def _build_select(self) -> str:
        sql = f"SELECT {self._select} FROM {self._table}"

        if self._joins:
            sql += f" {self._joins}"

        if self._where:
            sql += f" WHERE {self._where}"

        if self._group:
            sql += f" GROUP BY {self._group}"

        if self._having:
            sql += f" HAVING {self._having}"

        if self._order:
            sql += f" ORDER BY {self._order}"

        if self._limit is not None or self._offset is not None:
            sql = self._adapter.apply_limit_offset(sql, self._offset, self._limit)

        return sql

    def _build_insert(self) -> str:
        assert self._data is not None
        keys = [quote_column(self._adapter, key) for key in self._data]
        markers = ["?"] * len(keys)

        if self._sequence_column is not None:
            pk, next_value = self._sequence_column
            keys.append(quote_column(self._adapter, pk))
            markers.append(next_value)

        return f"INSERT INTO {self._table}({','.join(keys)}) VALUES({','.join(markers)})"

    def _build_update(self) -> str:
        assert self._data is not None
        assignments = ", ".join(f"{quote_column(self._adapter, key)}=?" for key in self._data)
        sql = f"UPDATE {self._table} SET {assignments}"

        if self._where:
            sql += f" WHERE {self._where}"

        return sql

    def _build_delete(self) -> str:
        sql = f"DELETE FROM {self._table}"

        if self._where:
            sql += f" WHERE {self._where}"

        return sql
