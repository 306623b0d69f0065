"""Lifecycle event bus: listeners and async subscribers.

The transition engine emits ``route``, ``init:controller`` and
``start:controller`` through the app's ``EventBus``. Two ways to observe
them:

- ``on(name, listener)``: a plain callback, run synchronously at the
  moment of emission, in registration order.
- ``subscribe()``: an async iterator of ``LifecycleEvent`` records,
  backed by its own anyio memory stream.

Free-threading safety:
    - LifecycleEvent is a frozen dataclass (immutable, safe to share)
    - EventBus uses a Lock to protect the listener and subscriber sets
    - Each subscriber gets its own stream (no shared mutable state)
"""

import threading
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from typing import Any

import anyio
from anyio.streams.memory import MemoryObjectSendStream

from vertebrae._internal.types import Listener

ROUTE = "route"
INIT_CONTROLLER = "init:controller"
START_CONTROLLER = "start:controller"


@dataclass(frozen=True, slots=True)
class LifecycleEvent:
    """A single emitted event."""

    name: str
    payload: Any
    timestamp: float = field(default_factory=time.monotonic)


class EventBus:
    """Named-event broadcast channel.

    Usage::

        app.events.on("route", lambda route: print("now on", route))

        async for event in app.events.subscribe():
            if event.name == "start:controller":
                ...
    """

    __slots__ = ("_listeners", "_lock", "_queue_size", "_subscribers")

    def __init__(self, queue_size: int = 256) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._subscribers: set[MemoryObjectSendStream[LifecycleEvent]] = set()
        self._queue_size = queue_size
        self._lock = threading.Lock()

    def on(self, name: str, listener: Listener) -> Listener:
        """Register *listener* for events called *name*. Returns it."""
        with self._lock:
            self._listeners.setdefault(name, []).append(listener)
        return listener

    def off(self, name: str, listener: Listener | None = None) -> None:
        """Remove one listener, or every listener for *name*."""
        with self._lock:
            if listener is None:
                self._listeners.pop(name, None)
                return
            listeners = self._listeners.get(name, [])
            if listener in listeners:
                listeners.remove(listener)

    def emit(self, name: str, payload: Any = None) -> None:
        """Call listeners for *name*, then fan the event out to subscribers.

        Listener exceptions propagate to the caller.
        """
        with self._lock:
            listeners = list(self._listeners.get(name, ()))
            subscribers = set(self._subscribers)
        for listener in listeners:
            listener(payload)

        event = LifecycleEvent(name=name, payload=payload)
        for stream in subscribers:
            try:
                stream.send_nowait(event)
            except anyio.WouldBlock:
                # Drop event for slow consumers rather than blocking
                pass
            except (anyio.BrokenResourceError, anyio.ClosedResourceError):
                with self._lock:
                    self._subscribers.discard(stream)

    async def subscribe(self) -> AsyncIterator[LifecycleEvent]:
        """Subscribe to every emitted event.

        Returns an async iterator that yields events as they are emitted.
        The subscription is cleaned up when the iterator exits or the bus
        is closed.
        """
        send, receive = anyio.create_memory_object_stream[LifecycleEvent](self._queue_size)
        with self._lock:
            self._subscribers.add(send)
        try:
            async with receive:
                async for event in receive:
                    yield event
        finally:
            with self._lock:
                self._subscribers.discard(send)
            send.close()

    def close(self) -> None:
        """End every subscription; listeners stay registered."""
        with self._lock:
            subscribers = set(self._subscribers)
            self._subscribers.clear()
        for stream in subscribers:
            stream.close()
