"""
Observer registration.

Each :py:class:`~skinprint.constants.Event` has at most one subscriber; a new
subscription replaces the previous one::

    observers = Observers()
    unsubscribe = observers.subscribe(Event.SELECTION_CHANGED, print)
    observers.emit(Event.SELECTION_CHANGED, LayerKind.INK)
    unsubscribe()
"""

import logging
from typing import Any, Callable, Optional

from skinprint.constants import Event

logger = logging.getLogger(__name__)


class Observers:
    """Event channel with one callback slot per event."""

    def __init__(self) -> None:
        self._callbacks: dict[Event, Callable[..., Any]] = {}

    def subscribe(self, event: Event, callback: Callable[..., Any]) -> Callable[[], None]:
        """Register ``callback`` for ``event`` and return an unsubscribe callable."""
        if event in self._callbacks:
            logger.debug("Replacing subscriber for %s", event.value)
        self._callbacks[event] = callback

        def unsubscribe() -> None:
            if self._callbacks.get(event) is callback:
                del self._callbacks[event]

        return unsubscribe

    def unsubscribe(self, event: Event) -> None:
        self._callbacks.pop(event, None)

    def get(self, event: Event) -> Optional[Callable[..., Any]]:
        return self._callbacks.get(event)

    def emit(self, event: Event, *args: Any) -> bool:
        """Call the subscriber of ``event``; return False when there is none."""
        callback = self._callbacks.get(event)
        if callback is None:
            return False
        callback(*args)
        return True

    def __contains__(self, event: Event) -> bool:
        return event in self._callbacks

    def __repr__(self) -> str:
        return "%s(%s)" % (
            self.__class__.__name__,
            ", ".join(event.value for event in self._callbacks),
        )
