"""Model lifecycle callbacks.

Handlers are registered per event name. A handler is either a callable taking
the model, or the name of a model method looked up when the event fires.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from row_record.core.exceptions import ArgumentError

EVENTS = (
    "after_construct",
    "before_save",
    "after_save",
    "before_create",
    "after_create",
    "before_update",
    "after_update",
    "before_destroy",
    "after_destroy",
)

Handler = Callable[[Any], Any] | str


class CallBack:
    """Callback chains for one model class.

    Args:
        entity: Model class name, used in error messages.
    """

    def __init__(self, entity: str) -> None:
        self._entity = entity
        self._chains: dict[str, list[Handler]] = {event: [] for event in EVENTS}

    def register(self, event: str, handler: Handler, prepend: bool = False) -> None:
        """Add *handler* to the chain for *event*.

        Raises:
            ArgumentError: If *event* is unknown.
        """
        chain = self._chain(event)
        if prepend:
            chain.insert(0, handler)
        else:
            chain.append(handler)

    def handlers(self, event: str) -> list[Handler]:
        return list(self._chain(event))

    def invoke(self, model: Any, event: str) -> bool:
        """Run the chain for *event*.

        Returns False as soon as a handler returns False; remaining handlers
        are skipped.

        Raises:
            ArgumentError: If a named handler is not a method of *model*.
        """
        for handler in self._chain(event):
            if isinstance(handler, str):
                method = getattr(type(model), handler, None)
                if not callable(method):
                    raise ArgumentError(
                        f"Callback '{handler}' for {event} is not a method of {self._entity}"
                    )
                result = method(model)
            else:
                result = handler(model)
            if result is False:
                return False
        return True

    def _chain(self, event: str) -> list[Handler]:
        try:
            return self._chains[event]
        except KeyError:
            raise ArgumentError(f"Unknown callback event '{event}' for {self._entity}") from None
