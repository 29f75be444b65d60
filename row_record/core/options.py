"""Query specification accepted by ``Table.find``."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from row_record.core.exceptions import ArgumentError


class QueryOptions(BaseModel):
    """Recognized find options.

    ``joins`` and ``include`` accept a single name or a list; ``conditions``
    accepts a hash, a SQL string or ``[sql, *values]``. The ``from`` key
    overrides the table the SELECT reads from.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    select: str | None = None
    joins: str | list[str] | None = None
    conditions: Any = None
    order: str | None = None
    limit: int | None = None
    offset: int | None = None
    group: str | None = None
    having: str | None = None
    include: list[str] = Field(default_factory=list)
    readonly: bool = False
    from_: str | None = Field(default=None, alias="from")
    mapped_names: dict[str, str] = Field(default_factory=dict)

    @field_validator("include", mode="before")
    @classmethod
    def _listify_include(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @classmethod
    def parse(cls, options: Mapping[str, Any] | QueryOptions | None) -> QueryOptions:
        """Validate a caller-supplied options mapping.

        Raises:
            ArgumentError: On unknown keys or values of the wrong type.
        """
        if options is None:
            return cls()
        if isinstance(options, QueryOptions):
            return options
        if not isinstance(options, Mapping):
            raise ArgumentError(f"Find options must be a mapping, got {type(options).__name__}")
        try:
            return cls.model_validate(dict(options))
        except ValidationError as e:
            raise ArgumentError(f"Invalid find options: {e}") from e

    def merge(self, **changes: Any) -> QueryOptions:
        """Copy with *changes* applied (keys as in ``parse``)."""
        data = self.model_dump(by_alias=True, exclude_unset=True)
        data.update(changes)
        return QueryOptions.parse(data)
