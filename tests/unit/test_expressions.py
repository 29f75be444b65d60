"""Unit tests for the condition compiler."""

from __future__ import annotations

import pytest

from row_record.adapters.sqlite import SqliteSyncAdapter
from row_record.core.exceptions import ArgumentError
from row_record.core.expressions import (
    Expressions,
    compile_conditions,
    key_conditions,
    merge_conditions,
    quote_column,
)


@pytest.fixture
def adapter() -> SqliteSyncAdapter:
    return SqliteSyncAdapter()


class TestHashConditions:
    def test_equality_and_implicit_and(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"name": "Tito", "id": 1})
        assert e.to_sql() == '"name"=? AND "id"=?'
        assert e.values() == ["Tito", 1]

    def test_sequence_becomes_in(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"id": [1, 2, 3]})
        assert e.to_sql() == '"id" IN(?,?,?)'
        assert e.values() == [1, 2, 3]

    def test_none_becomes_is_null_and_binds_nothing(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"deleted_at": None, "name": "x"})
        assert e.to_sql() == '"deleted_at" IS NULL AND "name"=?'
        assert e.values() == ["x"]

    def test_empty_sequence_matches_nothing(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"id": []})
        assert e.to_sql() == '"id" IN(NULL)'
        assert e.values() == []

    def test_conjunct_and_value_counts(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"a": 1, "b": None, "c": (2, 3), "d": "x"})
        assert e.to_sql().count(" AND ") == 3
        assert len(e.values()) == 4

    def test_qualified_key_quoted_per_part(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, {"books.name": "x"})
        assert e.to_sql() == '"books"."name"=?'

    def test_invalid_key(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            Expressions(adapter, {"": 1})

    def test_hash_with_values_rejected(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            Expressions(adapter, {"id": 1}, 2)

    def test_no_adapter_leaves_keys_unquoted(self) -> None:
        assert Expressions(None, {"id": 1}).to_sql() == "id=?"


class TestFragmentConditions:
    def test_scalar_values(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, "name=? AND id>?", "Tito", 3)
        assert e.to_sql() == "name=? AND id>?"
        assert e.values() == ["Tito", 3]

    def test_sequence_expands_its_placeholder(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, "name=? AND id IN(?) AND x=?", "Tito", [1, 2], "y")
        assert e.to_sql() == "name=? AND id IN(?,?) AND x=?"
        assert e.values() == ["Tito", 1, 2, "y"]

    def test_fragment_text_not_quoted(self, adapter: SqliteSyncAdapter) -> None:
        assert Expressions(adapter, "name = 'a'").to_sql() == "name = 'a'"

    def test_question_mark_in_literal_is_not_a_placeholder(self, adapter: SqliteSyncAdapter) -> None:
        e = Expressions(adapter, "name = 'who?' AND id=?", 1)
        assert e.values() == [1]

    def test_too_few_values(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError, match="2 placeholder"):
            Expressions(adapter, "a=? AND b=?", 1)

    def test_too_many_values(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            Expressions(adapter, "a=?", 1, 2)

    def test_unsupported_type(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            Expressions(adapter, 42)  # type: ignore[arg-type]


class TestHelpers:
    def test_compile_conditions_unpacks_list(self, adapter: SqliteSyncAdapter) -> None:
        assert compile_conditions(adapter, ["id IN(?)", [1, 2]]) == ("id IN(?,?)", [1, 2])

    def test_compile_conditions_empty_list(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            compile_conditions(adapter, [])

    def test_key_conditions_single_column(self, adapter: SqliteSyncAdapter) -> None:
        assert key_conditions(adapter, ["id"], [(1,), (2,)]) == {"id": [1, 2]}

    def test_key_conditions_composite(self, adapter: SqliteSyncAdapter) -> None:
        sql, *values = key_conditions(adapter, ["a", "b"], [(1, 2), (3, 4)])
        assert sql == '("a"=? AND "b"=?) OR ("a"=? AND "b"=?)'
        assert values == [1, 2, 3, 4]

    def test_merge_conditions(self, adapter: SqliteSyncAdapter) -> None:
        merged = merge_conditions(adapter, {"id": [1, 2]}, None, ["name=?", "x"])
        assert merged == ['("id" IN(?,?)) AND (name=?)', 1, 2, "x"]

    def test_merge_single_condition_unwrapped(self, adapter: SqliteSyncAdapter) -> None:
        assert merge_conditions(adapter, "a=1", None) == ["a=1"]

    def test_merge_nothing(self, adapter: SqliteSyncAdapter) -> None:
        with pytest.raises(ArgumentError):
            merge_conditions(adapter, None)

    def test_quote_column_star(self, adapter: SqliteSyncAdapter) -> None:
        assert quote_column(adapter, "books.*") == '"books".*'
