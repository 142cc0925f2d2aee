"""Event bus for editor observability.

Provides a simple synchronous event bus for emitting domain events from the
editing engine to whatever renders the graph. Keeps the engine free of any
UI framework: a canvas, a CLI, or a test subscribes the same way.
"""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations.

    Allows both EventBus and NullEventBus to satisfy the interface
    without inheritance, preventing accidental substitution bugs.
    """

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an event type."""
        ...

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers."""
        ...


class EventBus:
    """Simple synchronous event bus.

    Events are dispatched synchronously to all subscribers in subscription
    order. Handler exceptions propagate to the caller.

    Example:
        bus = EventBus()
        bus.subscribe(NodeAdded, lambda e: print(f"added {e.node.id}"))
        editor = GraphEditor(catalog, event_bus=bus)
    """

    def __init__(self) -> None:
        self._subscribers: dict[type, list[Callable[[Any], None]]] = {}

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: The event class to subscribe to
            handler: Callable that receives the event instance
        """
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def unsubscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """Remove a previously subscribed handler.

        Raises:
            ValueError: If the handler was never subscribed to this event type
        """
        handlers = self._subscribers.get(event_type, [])
        handlers.remove(handler)

    def emit(self, event: T) -> None:
        """Emit an event to all subscribers.

        Events with no subscribers are silently ignored.

        Args:
            event: The event instance to emit
        """
        handlers = self._subscribers.get(type(event), [])
        for handler in handlers:
            handler(event)


class NullEventBus:
    """No-op event bus for library use where nothing renders the graph.

    Does NOT inherit from EventBus. If someone subscribes expecting
    callbacks, inheritance would hide the bug; the protocol makes the
    no-op behavior explicit.
    """

    def subscribe(self, event_type: type[T], handler: Callable[[T], None]) -> None:
        """No-op subscription - handler will never be called."""
        pass

    def emit(self, event: T) -> None:
        """No-op emission - no handlers to call."""
        pass
