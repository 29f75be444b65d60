"""Table registry - the process-wide cache of Table metadata.

Tables are built on first access and kept for the lifetime of the registry.
Construction happens under a lock so concurrent first access builds each
Table (and registers its relationships) exactly once. ``clear()`` drops every
cached Table, e.g. between tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from row_record.core.connection import ConnectionRegistry
from row_record.core.exceptions import RelationshipError
from row_record.core.table import Table

logger = logging.getLogger(__name__)


class TableRegistry:
    """Caches one Table per model class.

    Args:
        connections: Named connections models are bound to. A fresh, empty
            ConnectionRegistry is created when omitted.
    """

    def __init__(self, connections: ConnectionRegistry | None = None) -> None:
        self.connections = connections if connections is not None else ConnectionRegistry()
        self._tables: dict[type, Table] = {}
        self._models: dict[str, type] = {}
        self._lock = threading.RLock()

    def load(self, model_class: type) -> Table:
        """Return the Table for *model_class*, building it on first use."""
        table = self._tables.get(model_class)
        if table is not None:
            return table

        with self._lock:
            table = self._tables.get(model_class)
            if table is None:
                conn = self.connections.get(getattr(model_class, "connection", None))
                table = Table(model_class, conn, self)
                table.set_associations()
                self._tables[model_class] = table
                logger.debug("Registered table for %s", model_class.__name__)
            return table

    def register_model(self, model_class: type) -> None:
        """Make *model_class* resolvable by name for associations."""
        with self._lock:
            self._models[model_class.__name__] = model_class

    def resolve_model(self, target: type | str, owner: str, attribute: str) -> type:
        """Resolve an association target given as a class or class name.

        Raises:
            RelationshipError: If no model with that name is registered.
        """
        if isinstance(target, type):
            return target
        try:
            return self._models[target]
        except KeyError:
            raise RelationshipError(
                owner, attribute, f"Unknown model class '{target}' in relationship '{attribute}'"
            ) from None

    def __len__(self) -> int:
        """Number of cached tables."""
        return len(self._tables)

    def __contains__(self, model_class: Any) -> bool:
        return model_class in self._tables

    def clear(self) -> None:
        """Drop every cached Table. Registered model names are kept."""
        with self._lock:
            self._tables.clear()


default_registry = TableRegistry()
