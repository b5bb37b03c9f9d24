"""Event dispatch for the combat engine.

The EventBus replaces per-object delegates with one registry of handlers
keyed by event class. Handlers registered for a base class also receive
its subclasses, so subscribing to GameEvent observes everything.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from skirmish.core.logging import get_logger
from skirmish.models.events import GameEvent


logger = get_logger(__name__)

E = TypeVar("E", bound=GameEvent)
EventHandler = Callable[[GameEvent], None]


class EventBus:
    """Synchronous publish/subscribe dispatcher for engine events."""

    def __init__(self) -> None:
        """Initialize an empty event bus."""
        self._handlers: dict[type[GameEvent], list[EventHandler]] = {}
        self._history: list[GameEvent] = []
        self._record_history = False

    def on(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Register an event handler.

        Args:
            event_type: Event class to handle (subclasses included).
            handler: Callback invoked with the event.
        """
        self._handlers.setdefault(event_type, []).append(handler)  # type: ignore[arg-type]

    def off(self, event_type: type[E], handler: Callable[[E], None]) -> None:
        """Remove a previously registered handler. Unknown handlers are ignored."""
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)  # type: ignore[arg-type]

    def record(self, enabled: bool = True) -> None:
        """Start (or stop) keeping a history of emitted events."""
        self._record_history = enabled

    @property
    def history(self) -> list[GameEvent]:
        """Get the recorded events, oldest first.

        Returns:
            Copy of the event history.
        """
        return list(self._history)

    def emitted(self, event_type: type[E]) -> list[E]:
        """Get recorded events of one type.

        Args:
            event_type: Event class to filter by.

        Returns:
            Matching events, oldest first.
        """
        return [e for e in self._history if isinstance(e, event_type)]

    def emit(self, event: GameEvent) -> None:
        """Emit an event to registered handlers.

        Handler failures are logged and do not interrupt combat resolution.

        Args:
            event: The event to emit.
        """
        if self._record_history:
            self._history.append(event)

        for event_type in type(event).__mro__:
            for handler in list(self._handlers.get(event_type, [])):
                try:
                    handler(event)
                except Exception:
                    logger.exception(
                        "Event handler error",
                        event_type=type(event).__name__,
                    )


__all__ = [
    "EventBus",
    "EventHandler",
]
