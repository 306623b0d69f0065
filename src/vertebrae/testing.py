"""Test utilities for vertebrae applications.

``EventRecorder`` attaches to an app's event bus and keeps every
lifecycle event in emission order::

    recorder = EventRecorder(app)
    app.navigate("reports", trigger=True)
    await app.settled()
    assert recorder.names == ["route", "init:controller", "start:controller"]
"""

from typing import Any

from vertebrae.events import INIT_CONTROLLER, ROUTE, START_CONTROLLER

LIFECYCLE_EVENTS = (ROUTE, INIT_CONTROLLER, START_CONTROLLER)


class EventRecorder:
    """Collects ``(name, payload)`` pairs for the given event names."""

    __slots__ = ("_app", "_listeners", "events")

    def __init__(self, app: Any, names: tuple[str, ...] = LIFECYCLE_EVENTS) -> None:
        self._app = app
        self.events: list[tuple[str, Any]] = []
        self._listeners = {name: self._listener(name) for name in names}
        for name, listener in self._listeners.items():
            app.on(name, listener)

    def _listener(self, name: str) -> Any:
        def record(payload: Any) -> None:
            self.events.append((name, payload))

        return record

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def payloads(self, name: str) -> list[Any]:
        """Payloads of every recorded *name* event, in order."""
        return [payload for event, payload in self.events if event == name]

    def clear(self) -> None:
        self.events.clear()

    def detach(self) -> None:
        for name, listener in self._listeners.items():
            self._app.off(name, listener)
