"""Table metadata and statement orchestration.

There is one Table per model class, created and cached by the TableRegistry.
It holds the columns, primary key, sequence and relationships of the model's
table and runs find/insert/update/delete through SQLBuilder and the
connection's adapter.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from row_record.core import inflector
from row_record.core.callbacks import CallBack
from row_record.core.connection import ConnectionManager, QueryResult
from row_record.core.exceptions import ArgumentError, MissingPrimaryKeyError, RelationshipError
from row_record.core.options import QueryOptions
from row_record.core.sql_builder import SQLBuilder
from row_record.mapping.column import Column
from row_record.mapping.relationship import RELATIONSHIP_TYPES, Relationship

if TYPE_CHECKING:
    from row_record.core.registry import TableRegistry

logger = logging.getLogger(__name__)

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Table:
    """Manages reading and writing one model's database table.

    Args:
        model_class: The model class this table backs. Its ``table_name``,
            ``db_name``, ``primary_key``, ``sequence``, ``associations`` and
            ``callbacks`` class attributes are honoured when set.
        conn: Connection manager the table reads and writes through.
        registry: Registry used to resolve related models.
    """

    def __init__(
        self,
        model_class: type,
        conn: ConnectionManager,
        registry: TableRegistry,
    ) -> None:
        self.model_class = model_class
        self.conn = conn
        self.last_sql: str | None = None
        self._registry = registry
        self._relationships: dict[str, Relationship] = {}

        self._set_table_name()
        self.columns: dict[str, Column] = {
            column.name: column for column in conn.columns(self.table, self.db_name)
        }
        self._set_primary_key()
        self._set_sequence_name()
        self._set_callbacks()
        self._set_delegates()
        self._set_setters()

        logger.debug(
            "Loaded table %s for %s (pk=%s, %d columns)",
            self.table,
            self.entity,
            self.pk,
            len(self.columns),
        )

    def __repr__(self) -> str:
        return f"<Table {self.table} for {self.entity}>"

    @property
    def entity(self) -> str:
        return self.model_class.__name__

    @property
    def relationships(self) -> dict[str, Relationship]:
        return dict(self._relationships)

    # --- metadata ---

    def get_fully_qualified_table_name(self) -> str:
        adapter = self.conn.adapter
        table = adapter.quote_identifier(self.table)
        if self.db_name:
            table = f"{adapter.quote_identifier(self.db_name)}.{table}"
        return table

    def get_relationship(self, name: str) -> Relationship | None:
        return self._relationships.get(name)

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def has_attribute(self, name: str) -> bool:
        """True if *name* can be assigned on the model."""
        return (
            self.has_column(name)
            or name in self.setters
            or name in self.delegates
            or name in self._relationships
        )

    def set_associations(self) -> None:
        """Build Relationship objects from the model's association descriptors.

        Raises:
            ArgumentError: If a descriptor has an unknown kind.
            RelationshipError: If a delegate points at an undeclared relationship.
        """
        for association in getattr(self.model_class, "associations", None) or ():
            try:
                relationship_cls = RELATIONSHIP_TYPES[association.kind]
            except KeyError:
                raise ArgumentError(
                    f"Unknown association kind {association.kind!r} on {self.entity}"
                ) from None
            relationship = relationship_cls(self.model_class, association, self._registry)
            self._relationships[relationship.attribute_name] = relationship

        for relationship_name, _ in self.delegates.values():
            if relationship_name not in self._relationships:
                raise RelationshipError(self.entity, relationship_name)

    # --- reading ---

    def create_joins(self, joins: str | Sequence[str]) -> tuple[str, bool]:
        """Render a joins option.

        Returns the SQL and whether any relationship-based join was used.

        Raises:
            RelationshipError: If a name is neither SQL nor a relationship.
        """
        if isinstance(joins, str):
            return joins, False

        parts: list[str] = []
        uses_relationship = False
        for value in joins:
            if "join " in value.lower():
                parts.append(value)
                continue

            relationship = self.get_relationship(value)
            if relationship is None:
                raise RelationshipError(self.entity, value)
            parts.append(relationship.construct_inner_join_sql(self))
            uses_relationship = True

        return " ".join(parts), uses_relationship

    def find(self, options: Mapping[str, Any] | QueryOptions | None = None) -> list[Any]:
        """Find models matching *options*.

        Raises:
            ArgumentError: On invalid options.
            RelationshipError: On an undeclared relationship in joins/include.
            DatabaseError: If the statement fails.
        """
        opts = QueryOptions.parse(options)
        self._check_includes(opts.include)

        table = opts.from_ or self.get_fully_qualified_table_name()
        sql = SQLBuilder(self.conn.adapter, table)

        select = opts.select
        if opts.joins:
            joins, uses_relationship = self.create_joins(opts.joins)
            sql.joins(joins)
            # an inner join would otherwise pull the joined table's columns in
            if uses_relationship and select is None:
                select = f"{self.get_fully_qualified_table_name()}.*"

        if select is not None:
            sql.select(select)

        if opts.conditions is not None:
            conditions = opts.conditions
            if isinstance(conditions, Mapping):
                if opts.mapped_names:
                    conditions = self._map_names(conditions, opts.mapped_names)
                sql.where(conditions)
            elif isinstance(conditions, str):
                sql.where(conditions)
            elif isinstance(conditions, (list, tuple)) and conditions:
                sql.where(*conditions)
            else:
                raise ArgumentError(f"Invalid conditions for {self.entity}: {conditions!r}")

        if opts.order:
            sql.order(opts.order)

        if opts.limit is not None:
            sql.limit(opts.limit)

        if opts.offset is not None:
            sql.offset(opts.offset)

        if opts.group:
            sql.group(opts.group)

        if opts.having:
            sql.having(opts.having)

        return self.find_by_sql(sql.to_sql(), sql.where_values, opts.readonly, opts.include)

    def find_by_sql(
        self,
        sql: str,
        values: Sequence[Any] | None = None,
        readonly: bool = False,
        include: Sequence[str] | None = None,
    ) -> list[Any]:
        """Run *sql* and materialize every row as a model."""
        if include:
            self._check_includes(include)

        self.last_sql = sql
        result = self.conn.query(sql, values)

        models = []
        for row in result.rows:
            model = self.model_class._from_row(self._cast_row(row))
            if readonly:
                model.readonly()
            models.append(model)

        if include and models:
            self.execute_eager_load(models, include)

        return models

    def execute_eager_load(self, models: Sequence[Any], include: Sequence[str]) -> None:
        """Eager load each included relationship onto *models*.

        Raises:
            RelationshipError: Before any query if a name is not declared.
        """
        self._check_includes(include)
        for name in include:
            self._relationships[name].load_eagerly(models, self)

    # --- writing ---

    def insert(self, data: Mapping[str, Any]) -> QueryResult:
        """Insert one row.

        When a single-column primary key is left for the database to fill,
        the generated value is reported as the result's ``lastrowid``.
        """
        data = self.process_data(data)
        pk = self.pk[0] if self.pk else None

        sql = SQLBuilder(self.conn.adapter, self.get_fully_qualified_table_name())
        sql.insert(data, pk, self.sequence)

        self.last_sql = sql.to_sql()
        return self.conn.query(
            self.last_sql,
            sql.bind_values(),
            insert_id=len(self.pk) == 1 and data.get(pk) is None,
            sequence=self.sequence,
        )

    def update(self, data: Mapping[str, Any], where: Mapping[str, Any]) -> QueryResult:
        """Update the row identified by the primary key values in *where*.

        Raises:
            MissingPrimaryKeyError: If no complete primary key is available.
        """
        self._check_primary_key(where, "update")
        data = self.process_data(data)

        sql = SQLBuilder(self.conn.adapter, self.get_fully_qualified_table_name())
        sql.update(data).where(self.process_data(where))
        return self._execute(sql)

    def delete(self, where: Mapping[str, Any]) -> QueryResult:
        """Delete the row identified by the primary key values in *where*.

        Raises:
            MissingPrimaryKeyError: If no complete primary key is available.
        """
        self._check_primary_key(where, "delete")

        sql = SQLBuilder(self.conn.adapter, self.get_fully_qualified_table_name())
        sql.delete(self.process_data(where))
        return self._execute(sql)

    def delete_all(self, conditions: Any = None) -> QueryResult:
        """Delete every row, or the rows matching *conditions*."""
        sql = SQLBuilder(self.conn.adapter, self.get_fully_qualified_table_name())
        if conditions is None:
            sql.delete()
        elif isinstance(conditions, Mapping):
            sql.delete(self.process_data(conditions))
        elif isinstance(conditions, (list, tuple)):
            sql.delete(*conditions)
        else:
            sql.delete(conditions)
        return self._execute(sql)

    @staticmethod
    def process_data(data: Mapping[str, Any]) -> dict[str, Any]:
        """Render date and time values in their storage form."""
        processed: dict[str, Any] = {}
        for name, value in data.items():
            if isinstance(value, datetime):
                value = value.strftime(DATETIME_FORMAT)
            elif isinstance(value, date):
                value = value.isoformat()
            processed[name] = value
        return processed

    # --- internals ---

    def _execute(self, sql: SQLBuilder) -> QueryResult:
        self.last_sql = sql.to_sql()
        return self.conn.query(self.last_sql, sql.bind_values())

    def _cast_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        return {
            name: self.columns[name].cast(value) if name in self.columns else value
            for name, value in row.items()
        }

    def _check_includes(self, include: Sequence[str]) -> None:
        for name in include:
            if name not in self._relationships:
                raise RelationshipError(self.entity, name)

    def _check_primary_key(self, where: Mapping[str, Any], action: str) -> None:
        if not self.pk or not where:
            raise MissingPrimaryKeyError(self.entity, action)
        if any(where.get(column) is None for column in self.pk):
            raise MissingPrimaryKeyError(self.entity, action)

    @staticmethod
    def _map_names(conditions: Mapping[str, Any], mapped_names: Mapping[str, str]) -> dict[str, Any]:
        """Replace aliased condition keys with their real column names."""
        return {mapped_names.get(name, name): value for name, value in conditions.items()}

    def _set_table_name(self) -> None:
        self.table: str = getattr(self.model_class, "table_name", None) or inflector.tableize(
            self.model_class.__name__
        )
        self.db_name: str | None = getattr(self.model_class, "db_name", None)

    def _set_primary_key(self) -> None:
        pk = getattr(self.model_class, "primary_key", None)
        if pk:
            self.pk: list[str] = [pk] if isinstance(pk, str) else list(pk)
        else:
            self.pk = [column.name for column in self.columns.values() if column.pk]

    def _set_sequence_name(self) -> None:
        explicit = getattr(self.model_class, "sequence", None)
        if explicit:
            self.sequence: str | None = explicit
        elif self.conn.adapter.supports_sequences():
            self.sequence = self.conn.adapter.resolve_sequence_name(
                self.table, self.pk[0] if self.pk else None
            )
        else:
            self.sequence = None

    def _set_callbacks(self) -> None:
        self.callbacks = CallBack(self.entity)
        for event, handlers in (getattr(self.model_class, "callbacks", None) or {}).items():
            for handler in handlers:
                self.callbacks.register(event, handler)

        self.callbacks.register("before_save", lambda model: model.set_timestamps(), prepend=True)
        self.callbacks.register("after_save", lambda model: model.reset_dirty(), prepend=True)

    def _set_delegates(self) -> None:
        """Index ``delegates`` declarations by the attribute name they expose.

        ``{"delegate": ["name"], "to": "author", "prefix": "author"}`` makes
        ``author_name`` read and write ``author.name``.
        """
        self.delegates: dict[str, tuple[str, str]] = {}
        for declaration in getattr(self.model_class, "delegates", None) or ():
            if not isinstance(declaration, Mapping) or not declaration.get("to"):
                raise ArgumentError(
                    f"Delegate declarations on {self.entity} need a 'to' relationship"
                )
            prefix = declaration.get("prefix")
            for attribute in declaration.get("delegate", ()):
                name = f"{prefix}_{attribute}" if prefix else attribute
                self.delegates[name] = (declaration["to"], attribute)

    def _set_setters(self) -> None:
        """Map each name in ``setters`` to its ``set_<name>`` method."""
        self.setters: dict[str, str] = {}
        for name in getattr(self.model_class, "setters", None) or ():
            attribute = name[4:] if name.startswith("set_") else name
            method = f"set_{attribute}"
            if not callable(getattr(self.model_class, method, None)):
                raise ArgumentError(f"Setter {method!r} is not a method of {self.entity}")
            self.setters[attribute] = method
