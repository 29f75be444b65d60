"""Association resolution.

Each Relationship variant knows how to join its target into a SELECT and how
to eager load the target for a whole list of models with one batched query
per relationship (two for has_and_belongs_to_many), attaching the results by
key correlation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar

from row_record.core import inflector
from row_record.core.enums import RelationshipKind
from row_record.core.exceptions import RelationshipError
from row_record.core.expressions import key_conditions, merge_conditions, quote_column
from row_record.core.sql_builder import SQLBuilder
from row_record.mapping.association import Association

if TYPE_CHECKING:
    from row_record.core.registry import TableRegistry
    from row_record.core.table import Table

logger = logging.getLogger(__name__)

Key = tuple[Any, ...]


def _as_list(columns: str | Sequence[str] | None) -> list[str]:
    if columns is None:
        return []
    if isinstance(columns, str):
        return [columns]
    return list(columns)


def _key_of(model: Any, columns: Sequence[str]) -> Key | None:
    """Values of *columns* on *model*, or None if any of them is NULL."""
    key = tuple(model.read_attribute(column) for column in columns)
    if any(value is None for value in key):
        return None
    return key


def _unique_keys(models: Iterable[Any], columns: Sequence[str]) -> list[Key]:
    seen: dict[Key, None] = {}
    for model in models:
        key = _key_of(model, columns)
        if key is not None:
            seen.setdefault(key, None)
    return list(seen)


def _join_on(
    adapter: Any,
    left_table: str,
    left_columns: Sequence[str],
    right_table: str,
    right_columns: Sequence[str],
) -> str:
    return " AND ".join(
        f"{left_table}.{quote_column(adapter, left)} = {right_table}.{quote_column(adapter, right)}"
        for left, right in zip(left_columns, right_columns)
    )


class Relationship(ABC):
    """Base for the association variants.

    Args:
        owner_class: Model class declaring the association.
        association: The declarative descriptor.
        registry: Registry used to resolve and load the target model's table.
    """

    kind: ClassVar[RelationshipKind]
    many: ClassVar[bool] = False

    def __init__(
        self,
        owner_class: type,
        association: Association,
        registry: TableRegistry,
    ) -> None:
        self.owner_class = owner_class
        self.attribute_name = association.name
        self.conditions = association.conditions
        self.order = association.order
        self.select = association.select
        self._registry = registry
        self._class_name = association.class_name or self._default_class_name()
        self.foreign_key = _as_list(association.foreign_key) or self._default_foreign_key()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.owner_class.__name__}.{self.attribute_name}>"

    @property
    def target_class(self) -> type:
        """The related model class.

        Raises:
            RelationshipError: If the class cannot be resolved.
        """
        return self._registry.resolve_model(
            self._class_name, self.owner_class.__name__, self.attribute_name
        )

    @property
    def target_class_name(self) -> str:
        if isinstance(self._class_name, str):
            return self._class_name
        return self._class_name.__name__

    def target_table(self) -> Table:
        return self._registry.load(self.target_class)

    def _default_class_name(self) -> str:
        return inflector.classify(self.attribute_name)

    def _default_foreign_key(self) -> list[str]:
        return [inflector.foreign_key(self.owner_class.__name__)]

    @abstractmethod
    def construct_inner_join_sql(self, owner_table: Table) -> str:
        """INNER JOIN clause bringing the target into a SELECT on *owner_table*."""

    @abstractmethod
    def load_eagerly(self, models: Sequence[Any], owner_table: Table) -> None:
        """Load the target for all *models* and attach it to each of them."""

    def load(self, model: Any, owner_table: Table) -> Any:
        """Load and attach the target for a single model, returning it."""
        self.load_eagerly([model], owner_table)
        return model.read_relationship(self.attribute_name)

    def empty(self) -> Any:
        """Value attached when nothing matches."""
        return [] if self.many else None

    def _owner_pk(self, owner_table: Table) -> list[str]:
        if not owner_table.pk:
            raise RelationshipError(
                self.owner_class.__name__,
                self.attribute_name,
                f"Relationship '{self.attribute_name}' needs a primary key to correlate on",
            )
        return owner_table.pk

    def _find_by_keys(self, table: Table, columns: Sequence[str], keys: Sequence[Key]) -> list[Any]:
        """One batched SELECT on *table* for all *keys*.

        A declared select list always gets the key *columns* appended, since
        the results are matched back to their owners by those values.
        """
        adapter = table.conn.adapter
        conditions = merge_conditions(
            adapter, key_conditions(adapter, columns, keys), self.conditions or None
        )

        options: dict[str, Any] = {"conditions": conditions}
        if self.order:
            options["order"] = self.order
        if self.select:
            table_name = table.get_fully_qualified_table_name()
            options["select"] = ", ".join(
                [self.select, *(f"{table_name}.{quote_column(adapter, c)}" for c in columns)]
            )

        logger.debug("Eager loading %r for %d key(s)", self, len(keys))
        return table.find(options)

    def _attach(self, models: Sequence[Any], columns: Sequence[str], index: dict[Key, Any]) -> None:
        for model in models:
            key = _key_of(model, columns)
            found = index.get(key) if key is not None else None
            if self.many:
                model.set_relationship(self.attribute_name, list(found or []))
            else:
                model.set_relationship(self.attribute_name, found)


class BelongsTo(Relationship):
    """The owner row carries the foreign key to the target's primary key."""

    kind = RelationshipKind.BELONGS_TO

    def _default_foreign_key(self) -> list[str]:
        return [f"{inflector.uncamelize(self.attribute_name)}_id"]

    def construct_inner_join_sql(self, owner_table: Table) -> str:
        target = self.target_table()
        target_name = target.get_fully_qualified_table_name()
        on = _join_on(
            owner_table.conn.adapter,
            owner_table.get_fully_qualified_table_name(),
            self.foreign_key,
            target_name,
            target.pk,
        )
        return f"INNER JOIN {target_name} ON({on})"

    def load_eagerly(self, models: Sequence[Any], owner_table: Table) -> None:
        keys = _unique_keys(models, self.foreign_key)
        index: dict[Key, Any] = {}

        if keys:
            target = self.target_table()
            for record in self._find_by_keys(target, target.pk, keys):
                key = _key_of(record, target.pk)
                if key is not None:
                    index.setdefault(key, record)

        self._attach(models, self.foreign_key, index)


class HasMany(Relationship):
    """The target rows carry a foreign key to the owner's primary key."""

    kind = RelationshipKind.HAS_MANY
    many = True

    def construct_inner_join_sql(self, owner_table: Table) -> str:
        owner_name = owner_table.get_fully_qualified_table_name()
        target_name = self.target_table().get_fully_qualified_table_name()
        on = _join_on(
            owner_table.conn.adapter,
            owner_name,
            self._owner_pk(owner_table),
            target_name,
            self.foreign_key,
        )
        return f"INNER JOIN {target_name} ON({on})"

    def load_eagerly(self, models: Sequence[Any], owner_table: Table) -> None:
        owner_pk = self._owner_pk(owner_table)
        keys = _unique_keys(models, owner_pk)
        groups: dict[Key, list[Any]] = {}

        if keys:
            for record in self._find_by_keys(self.target_table(), self.foreign_key, keys):
                key = _key_of(record, self.foreign_key)
                if key is not None:
                    groups.setdefault(key, []).append(record)

        if self.many:
            self._attach(models, owner_pk, groups)
        else:
            self._attach(models, owner_pk, {key: records[0] for key, records in groups.items()})


class HasOne(HasMany):
    """Like HasMany, but at most one target is attached."""

    kind = RelationshipKind.HAS_ONE
    many = False


class HasAndBelongsToMany(Relationship):
    """Owner and target are linked through rows of a join table."""

    kind = RelationshipKind.HAS_AND_BELONGS_TO_MANY
    many = True

    def __init__(
        self,
        owner_class: type,
        association: Association,
        registry: TableRegistry,
    ) -> None:
        super().__init__(owner_class, association, registry)
        self._join_table = association.join_table
        self.association_foreign_key = _as_list(association.association_foreign_key) or [
            inflector.foreign_key(self.target_class_name)
        ]

    def join_table(self, owner_table: Table) -> str:
        """Join table name, defaulting to both table names sorted and joined by ``_``."""
        if self._join_table is None:
            self._join_table = "_".join(sorted([owner_table.table, self.target_table().table]))
        return self._join_table

    def construct_inner_join_sql(self, owner_table: Table) -> str:
        adapter = owner_table.conn.adapter
        owner_name = owner_table.get_fully_qualified_table_name()
        target = self.target_table()
        target_name = target.get_fully_qualified_table_name()
        join_name = adapter.quote_identifier(self.join_table(owner_table))

        first = _join_on(
            adapter, owner_name, self._owner_pk(owner_table), join_name, self.foreign_key
        )
        second = _join_on(adapter, join_name, self.association_foreign_key, target_name, target.pk)
        return f"INNER JOIN {join_name} ON({first}) INNER JOIN {target_name} ON({second})"

    def load_eagerly(self, models: Sequence[Any], owner_table: Table) -> None:
        owner_pk = self._owner_pk(owner_table)
        keys = _unique_keys(models, owner_pk)
        links: list[tuple[Key, Key]] = []
        index: dict[Key, Any] = {}

        if keys:
            links = self._load_links(owner_table, keys)

        target_keys = list(dict.fromkeys(target_key for _, target_key in links))
        if target_keys:
            target = self.target_table()
            for record in self._find_by_keys(target, target.pk, target_keys):
                key = _key_of(record, target.pk)
                if key is not None:
                    index.setdefault(key, record)

        groups: dict[Key, list[Any]] = {}
        for owner_key, target_key in dict.fromkeys(links):
            record = index.get(target_key)
            if record is not None:
                groups.setdefault(owner_key, []).append(record)

        self._attach(models, owner_pk, groups)

    def _load_links(self, owner_table: Table, keys: Sequence[Key]) -> list[tuple[Key, Key]]:
        """Batched read of (owner key, target key) pairs from the join table."""
        conn = owner_table.conn
        adapter = conn.adapter
        columns = [*self.foreign_key, *self.association_foreign_key]

        sql = SQLBuilder(adapter, adapter.quote_identifier(self.join_table(owner_table)))
        sql.select(",".join(quote_column(adapter, column) for column in columns))
        conditions = key_conditions(adapter, self.foreign_key, keys)
        if isinstance(conditions, list):
            sql.where(*conditions)
        else:
            sql.where(conditions)

        result = conn.query(sql.to_sql(), sql.bind_values())
        split = len(self.foreign_key)
        return [
            (
                tuple(row[column] for column in columns[:split]),
                tuple(row[column] for column in columns[split:]),
            )
            for row in result.rows
        ]


RELATIONSHIP_TYPES: dict[RelationshipKind, type[Relationship]] = {
    RelationshipKind.HAS_MANY: HasMany,
    RelationshipKind.HAS_ONE: HasOne,
    RelationshipKind.BELONGS_TO: BelongsTo,
    RelationshipKind.HAS_AND_BELONGS_TO_MANY: HasAndBelongsToMany,
}
