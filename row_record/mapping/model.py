"""Declarative model base class.

A model describes one table through class attributes and exposes finders and
persistence methods that delegate to its Table::

    class Book(Model):
        table_name = "books"
        primary_key = "book_id"
        associations = [belongs_to("author")]

    books = Book.all({"conditions": {"author_id": 1}, "include": ["author"]})

Attribute values live in a per-instance dict. Assignments to columns are
tracked as dirty until the next save. Names listed in ``setters`` are routed
through the model's ``set_<name>`` method, and ``delegates`` expose attributes
of a related record. Assigning any other name raises UndefinedPropertyError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any, ClassVar

from row_record.core.callbacks import Handler
from row_record.core.exceptions import (
    ArgumentError,
    ReadOnlyError,
    RecordNotFound,
    RelationshipError,
    UndefinedPropertyError,
)
from row_record.core.expressions import key_conditions, merge_conditions
from row_record.core.options import QueryOptions
from row_record.core.registry import TableRegistry, default_registry
from row_record.core.sql_builder import SQLBuilder
from row_record.core.table import Table
from row_record.mapping.association import Association


class Model:
    """Base class for mapped entities."""

    table_name: ClassVar[str | None] = None
    db_name: ClassVar[str | None] = None
    primary_key: ClassVar[str | Sequence[str] | None] = None
    sequence: ClassVar[str | None] = None
    connection: ClassVar[str | None] = None
    associations: ClassVar[Sequence[Association]] = ()
    callbacks: ClassVar[Mapping[str, Sequence[Handler]]] = {}
    delegates: ClassVar[Sequence[Mapping[str, Any]]] = ()
    setters: ClassVar[Sequence[str]] = ()

    __registry__: ClassVar[TableRegistry] = default_registry

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__registry__.register_model(cls)

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._init_state(new_record=True)
        self.set_attributes({**(attributes or {}), **kwargs})
        self.table().callbacks.invoke(self, "after_construct")

    def _init_state(self, new_record: bool) -> None:
        object.__setattr__(self, "_attributes", {})
        object.__setattr__(self, "_dirty", {})
        object.__setattr__(self, "_relationships", {})
        object.__setattr__(self, "_new_record", new_record)
        object.__setattr__(self, "_readonly", False)

    @classmethod
    def _from_row(cls, row: Mapping[str, Any]) -> Model:
        """Build a persisted model from a (typecast) row without marking anything dirty."""
        model = cls.__new__(cls)
        model._init_state(new_record=False)
        model._attributes.update(row)
        return model

    @classmethod
    def table(cls) -> Table:
        return cls.__registry__.load(cls)

    # --- attribute access ---

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)

        attributes = self.__dict__.get("_attributes", {})
        if name in attributes:
            return attributes[name]
        if name in self._relationships:
            return self._relationships[name]

        table = self.table()
        if table.has_column(name):
            return None

        relationship = table.get_relationship(name)
        if relationship is not None:
            if self._new_record:
                return relationship.empty()
            return relationship.load(self, table)

        delegate = table.delegates.get(name)
        if delegate is not None:
            relationship_name, attribute = delegate
            target = getattr(self, relationship_name)
            return None if target is None else getattr(target, attribute)

        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return

        table = self.table()
        setter = table.setters.get(name)
        if setter is not None:
            getattr(self, setter)(value)
        elif table.has_column(name):
            self.write_attribute(name, value)
        elif table.get_relationship(name) is not None:
            self.set_relationship(name, value)
        elif name in table.delegates:
            self._write_delegate(name, value)
        else:
            raise UndefinedPropertyError(type(self).__name__, [name])

    def _write_delegate(self, name: str, value: Any) -> None:
        relationship_name, attribute = self.table().delegates[name]
        target = getattr(self, relationship_name)
        if target is None:
            raise RelationshipError(
                type(self).__name__,
                relationship_name,
                f"Cannot assign '{name}' through empty relationship '{relationship_name}'",
            )
        setattr(target, attribute, value)

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={value!r}" for name, value in self._attributes.items())
        return f"<{type(self).__name__} {values}>"

    def read_attribute(self, name: str) -> Any:
        return self._attributes.get(name)

    def write_attribute(self, name: str, value: Any) -> None:
        self._attributes[name] = value
        self._dirty[name] = None

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        """Assign several attributes at once.

        Raises:
            UndefinedPropertyError: Listing every name that is not a column,
                before anything is assigned.
        """
        table = self.table()
        unknown = [name for name in attributes if not table.has_attribute(name)]
        if unknown:
            raise UndefinedPropertyError(type(self).__name__, unknown)

        for name, value in attributes.items():
            setattr(self, name, value)

    @property
    def attributes(self) -> dict[str, Any]:
        return dict(self._attributes)

    def to_dict(self) -> dict[str, Any]:
        return self.attributes

    # --- relationships ---

    def set_relationship(self, name: str, value: Any) -> None:
        self._relationships[name] = value

    def read_relationship(self, name: str) -> Any:
        return self._relationships.get(name)

    # --- state ---

    def dirty_attributes(self) -> dict[str, Any]:
        return {name: self._attributes.get(name) for name in self._dirty}

    def is_dirty(self) -> bool:
        return bool(self._dirty)

    def reset_dirty(self) -> None:
        self._dirty.clear()

    def is_new_record(self) -> bool:
        return self._new_record

    def readonly(self, readonly: bool = True) -> None:
        self._readonly = readonly

    def is_readonly(self) -> bool:
        return self._readonly

    def set_timestamps(self) -> None:
        """Stamp ``updated_at`` (and ``created_at`` on new records) when those columns exist."""
        table = self.table()
        now = datetime.now().replace(microsecond=0)

        if "updated_at" in table.columns:
            self.write_attribute("updated_at", now)

        if self._new_record and "created_at" in table.columns:
            self.write_attribute("created_at", now)

    def values_for_pk(self) -> dict[str, Any]:
        return {name: self.read_attribute(name) for name in self.table().pk}

    # --- persistence ---

    def save(self) -> bool:
        """Insert or update this model.

        Returns False if a before callback halted the save.

        Raises:
            ReadOnlyError: If the model was loaded read-only.
            MissingPrimaryKeyError: When updating without a primary key.
        """
        if self._readonly:
            raise ReadOnlyError(type(self).__name__, "save")
        return self._insert() if self._new_record else self._update()

    def _insert(self) -> bool:
        table = self.table()
        callback = table.callbacks
        if not callback.invoke(self, "before_save") or not callback.invoke(self, "before_create"):
            return False

        data = {name: value for name, value in self._attributes.items() if name in table.columns}
        if not data and table.pk and not table.sequence:
            data = {table.pk[0]: None}

        result = table.insert(data)

        if len(table.pk) == 1 and self.read_attribute(table.pk[0]) is None:
            if result.lastrowid is not None:
                self._attributes[table.pk[0]] = table.columns[table.pk[0]].cast(result.lastrowid)

        self._new_record = False
        callback.invoke(self, "after_create")
        callback.invoke(self, "after_save")
        return True

    def _update(self) -> bool:
        table = self.table()
        callback = table.callbacks
        if not callback.invoke(self, "before_save") or not callback.invoke(self, "before_update"):
            return False

        if self._dirty:
            table.update(self.dirty_attributes(), self.values_for_pk())

        callback.invoke(self, "after_update")
        callback.invoke(self, "after_save")
        return True

    def update_attributes(self, attributes: Mapping[str, Any]) -> bool:
        self.set_attributes(attributes)
        return self.save()

    def update_attribute(self, name: str, value: Any) -> bool:
        setattr(self, name, value)
        return self.save()

    def delete(self) -> bool:
        """Delete this model's row.

        Raises:
            ReadOnlyError: If the model was loaded read-only.
            MissingPrimaryKeyError: If the table has no primary key.
        """
        if self._readonly:
            raise ReadOnlyError(type(self).__name__, "delete")

        table = self.table()
        if not table.callbacks.invoke(self, "before_destroy"):
            return False

        table.delete(self.values_for_pk())
        table.callbacks.invoke(self, "after_destroy")
        return True

    def reload(self) -> Model:
        """Re-read this model's row, discarding unsaved changes and loaded relationships."""
        pk = self.values_for_pk()
        if not pk or any(value is None for value in pk.values()):
            raise RecordNotFound(type(self).__name__, pk)

        found = self.table().find({"conditions": pk, "limit": 1})
        if not found:
            raise RecordNotFound(type(self).__name__, pk)

        self._attributes.clear()
        self._attributes.update(found[0]._attributes)
        self._relationships.clear()
        self.reset_dirty()
        return self

    # --- finders ---

    @classmethod
    def find(cls, *ids: Any, options: Mapping[str, Any] | None = None) -> Any:
        """Find by primary key.

        ``find(1)`` returns one model; ``find(1, 2)`` and ``find([1, 2])``
        return a list. Composite keys are passed as tuples.

        Raises:
            RecordNotFound: If any of the keys matches no row.
        """
        if not ids:
            raise ArgumentError(f"{cls.__name__}.find requires at least one primary key")

        single = len(ids) == 1 and not isinstance(ids[0], list)
        keys = list(ids[0]) if len(ids) == 1 and isinstance(ids[0], list) else list(ids)

        table = cls.table()
        if not table.pk:
            raise ArgumentError(f"{cls.__name__} has no primary key to find by")
        normalized = [key if isinstance(key, tuple) else (key,) for key in keys]
        if any(len(key) != len(table.pk) for key in normalized):
            raise ArgumentError(f"{cls.__name__} keys must have {len(table.pk)} value(s)")

        opts = QueryOptions.parse(options)
        conditions = merge_conditions(
            table.conn.adapter,
            key_conditions(table.conn.adapter, table.pk, normalized),
            opts.conditions,
        )
        found = table.find(opts.merge(conditions=conditions))

        if len(found) < len(set(normalized)):
            raise RecordNotFound(cls.__name__, ids[0] if single else keys)
        return found[0] if single else found

    @classmethod
    def all(cls, options: Mapping[str, Any] | None = None) -> list[Any]:
        return cls.table().find(options)

    @classmethod
    def first(cls, options: Mapping[str, Any] | None = None) -> Any:
        found = cls.table().find(QueryOptions.parse(options).merge(limit=1))
        return found[0] if found else None

    @classmethod
    def last(cls, options: Mapping[str, Any] | None = None) -> Any:
        """Last model by the given order, or by primary key."""
        table = cls.table()
        opts = QueryOptions.parse(options)
        order = opts.order or ", ".join(table.pk)
        found = table.find(opts.merge(order=SQLBuilder.reverse_order(order), limit=1))
        return found[0] if found else None

    @classmethod
    def find_by(cls, expression: str, *values: Any, options: Mapping[str, Any] | None = None) -> Any:
        """First model matching an underscored attribute expression.

        ``Author.find_by("name_and_parent_author_id", "Tito", None)``
        """
        found = cls.find_all_by(expression, *values, options=QueryOptions.parse(options).merge(limit=1))
        return found[0] if found else None

    @classmethod
    def find_all_by(
        cls,
        expression: str,
        *values: Any,
        options: Mapping[str, Any] | QueryOptions | None = None,
    ) -> list[Any]:
        opts = QueryOptions.parse(options)
        conditions = SQLBuilder.create_conditions_from_underscored_string(
            expression, values, opts.mapped_names
        )
        if conditions is None:
            raise ArgumentError(f"Empty attribute expression for {cls.__name__}")
        sql, bound = conditions
        return cls.table().find(opts.merge(conditions=[sql, *bound]))

    @classmethod
    def exists(cls, *ids: Any) -> bool:
        try:
            cls.find(*ids)
        except RecordNotFound:
            return False
        return True

    @classmethod
    def create(cls, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        model = cls(attributes, **kwargs)
        model.save()
        return model

    @classmethod
    def delete_all(cls, conditions: Any = None) -> int:
        """Delete all rows, or those matching *conditions*; returns the row count."""
        return cls.table().delete_all(conditions).rowcount
