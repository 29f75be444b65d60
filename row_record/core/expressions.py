"""Condition compiler.

Turns a condition into a parameterized SQL fragment plus its bind values.
Two input forms are accepted:

    {"name": "Tito", "id": [1, 2], "deleted_at": None}
        -> '"name"=? AND "id" IN(?,?) AND "deleted_at" IS NULL', ["Tito", 1, 2]

    ("name=? AND id IN(?)", "Tito", [1, 2])
        -> "name=? AND id IN(?,?)", ["Tito", 1, 2]

Bind values are always returned in placeholder order.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from row_record.core.exceptions import ArgumentError
from row_record.core.params import split_placeholders


def is_sequence(value: Any) -> bool:
    """True for values that expand into an IN(...) group."""
    return isinstance(value, (list, tuple, set, frozenset))


def quote_column(adapter: Any, name: str) -> str:
    """Quote a possibly table-qualified column name part by part."""
    if adapter is None:
        return name
    return ".".join(adapter.quote_identifier(part) for part in name.split("."))


class Expressions:
    """A compiled condition.

    Args:
        adapter: Adapter used to quote hash keys. May be None, in which case
            keys are emitted as given.
        expression: A mapping of column -> value, or a raw SQL fragment.
        *values: Substitution values for a raw fragment.

    Raises:
        ArgumentError: On an invalid hash key or a placeholder/value mismatch.
    """

    def __init__(self, adapter: Any, expression: Mapping[str, Any] | str, *values: Any) -> None:
        self._adapter = adapter
        if isinstance(expression, Mapping):
            if values:
                raise ArgumentError("Hash conditions do not take substitution values")
            self._sql, self._values = self._compile_hash(expression)
        elif isinstance(expression, str):
            self._sql, self._values = self._compile_fragment(expression, values)
        else:
            raise ArgumentError(
                f"Conditions must be a mapping or a SQL string, got {type(expression).__name__}"
            )

    def to_sql(self) -> str:
        return self._sql

    def values(self) -> list[Any]:
        return list(self._values)

    def __str__(self) -> str:
        return self._sql

    def _compile_hash(self, conditions: Mapping[str, Any]) -> tuple[str, list[Any]]:
        parts: list[str] = []
        values: list[Any] = []

        for name, value in conditions.items():
            if not isinstance(name, str) or not name.strip():
                raise ArgumentError(f"Invalid condition key: {name!r}")

            column = quote_column(self._adapter, name)
            if value is None:
                parts.append(f"{column} IS NULL")
            elif is_sequence(value):
                items = list(value)
                if items:
                    parts.append(f"{column} IN({','.join('?' * len(items))})")
                    values.extend(items)
                else:
                    parts.append(f"{column} IN(NULL)")
            else:
                parts.append(f"{column}=?")
                values.append(value)

        return " AND ".join(parts), values

    def _compile_fragment(self, sql: str, values: tuple[Any, ...]) -> tuple[str, list[Any]]:
        segments = split_placeholders(sql)
        expected = len(segments) - 1

        if expected != len(values):
            raise ArgumentError(
                f"Conditions have {expected} placeholder(s) but {len(values)} value(s): {sql}"
            )

        parts = [segments[0]]
        flat: list[Any] = []
        for value, segment in zip(values, segments[1:]):
            if is_sequence(value):
                items = list(value)
                parts.append(",".join("?" * len(items)) if items else "NULL")
                flat.extend(items)
            else:
                parts.append("?")
                flat.append(value)
            parts.append(segment)

        return "".join(parts), flat


def compile_conditions(
    adapter: Any,
    conditions: Mapping[str, Any] | str | list[Any] | tuple[Any, ...],
) -> tuple[str, list[Any]]:
    """Compile any accepted condition form into ``(sql, values)``.

    Lists and tuples are unpacked as ``[fragment, *values]``.
    """
    if isinstance(conditions, (list, tuple)):
        if not conditions:
            raise ArgumentError("Empty conditions list")
        expression = Expressions(adapter, conditions[0], *conditions[1:])
    else:
        expression = Expressions(adapter, conditions)
    return expression.to_sql(), expression.values()


def key_conditions(adapter: Any, columns: Sequence[str], keys: Sequence[tuple[Any, ...]]) -> Any:
    """Condition matching any of *keys* on *columns*.

    A single column compiles to ``col IN(...)``; composite keys to
    ``(a=? AND b=?) OR (a=? AND b=?) ...``.
    """
    if len(columns) == 1:
        return {columns[0]: [key[0] for key in keys]}

    group = " AND ".join(f"{quote_column(adapter, column)}=?" for column in columns)
    sql = " OR ".join(f"({group})" for _ in keys)
    return [sql, *(value for key in keys for value in key)]


def merge_conditions(adapter: Any, *conditions: Any) -> list[Any]:
    """AND together several conditions into a single ``[sql, *values]``.

    ``None`` entries are skipped.
    """
    parts: list[str] = []
    values: list[Any] = []
    for condition in conditions:
        if condition is None:
            continue
        sql, condition_values = compile_conditions(adapter, condition)
        parts.append(sql)
        values.extend(condition_values)

    if not parts:
        raise ArgumentError("No conditions to merge")
    if len(parts) == 1:
        return [parts[0], *values]
    return [" AND ".join(f"({part})" for part in parts), *values]
