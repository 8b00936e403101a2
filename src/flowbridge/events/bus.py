"""Synchronous publish/subscribe bus for conversion progress events."""

from typing import Any, Callable

Listener = Callable[[Any], None]


class EventBus:
    """Delivers progress events to listeners on the converting thread.

    Catch-all listeners registered with :meth:`on_all` run before typed
    listeners; within each group, registration order is kept. A listener
    may cancel the run (or subscribe more listeners) while an event is being
    delivered; the change takes effect from the next event.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, list[Listener]] = {}
        self._catch_all: list[Listener] = []

    def subscribe(self, event_type: type, callback: Listener) -> None:
        """Call *callback* for every event of *event_type* or a subclass."""
        self._by_type.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: type, callback: Listener) -> None:
        listeners = self._by_type.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def on_all(self, callback: Listener) -> None:
        """Call *callback* for every event."""
        self._catch_all.append(callback)

    def emit(self, event: Any) -> None:
        listeners = list(self._catch_all)
        for event_type in type(event).__mro__:
            listeners.extend(self._by_type.get(event_type, ()))
        for callback in listeners:
            callback(event)
