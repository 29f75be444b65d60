"""Declarative association descriptors.

Models list their associations as data; the Table turns each descriptor into
a Relationship when it is constructed::

    class Author(Model):
        associations = [
            has_many("books", order="name"),
            belongs_to("publisher"),
            has_and_belongs_to_many("tags"),
        ]
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from row_record.core.enums import RelationshipKind


@dataclass(frozen=True)
class Association:
    """Description of one association.

    Attributes:
        kind: Association topology.
        name: Attribute the related record(s) are attached under.
        class_name: Target model class, or its name. Inferred from *name*.
        foreign_key: Foreign key column(s). Inferred by convention.
        join_table: Intermediate table (has_and_belongs_to_many only).
        association_foreign_key: Join table column(s) pointing at the target
            (has_and_belongs_to_many only).
        conditions: Extra conditions applied when loading the target.
        order: ORDER BY applied when loading the target.
        select: Select list applied when loading the target.
    """

    kind: RelationshipKind
    name: str
    class_name: type | str | None = None
    foreign_key: str | Sequence[str] | None = None
    join_table: str | None = None
    association_foreign_key: str | Sequence[str] | None = None
    conditions: Any = None
    order: str | None = None
    select: str | None = None


def has_many(name: str, **options: Any) -> Association:
    return Association(RelationshipKind.HAS_MANY, name, **options)


def has_one(name: str, **options: Any) -> Association:
    return Association(RelationshipKind.HAS_ONE, name, **options)


def belongs_to(name: str, **options: Any) -> Association:
    return Association(RelationshipKind.BELONGS_TO, name, **options)


def has_and_belongs_to_many(name: str, **options: Any) -> Association:
    return Association(RelationshipKind.HAS_AND_BELONGS_TO_MANY, name, **options)
