"""Mapping layer - column metadata, association descriptors and relationships.

``Model`` lives in ``row_record.mapping.model`` and is exported from the top
level package; it is not imported here because it depends on ``core.table``,
which itself imports from this package.
"""

from __future__ import annotations

from row_record.mapping.association import (
    Association,
    belongs_to,
    has_and_belongs_to_many,
    has_many,
    has_one,
)
from row_record.mapping.column import Column

__all__ = [
    "Association",
    "Column",
    "belongs_to",
    "has_and_belongs_to_many",
    "has_many",
    "has_one",
]
