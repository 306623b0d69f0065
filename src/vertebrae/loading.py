"""Lazy controller loading: resolves ``"module:attribute"`` strings to classes.

A route may name its controller by import string instead of by class::

    class MyApp(App):
        routes = {
            "": HomePage,
            "reports/{year:int}": "myapp.pages.reports:ReportsPage",
        }

The string is wrapped in a :class:`LazyController` when routes are set
up. The first navigation to the route imports the module (in a worker
thread by default) and caches the class on the wrapper.
"""

import importlib
import logging
from typing import Any

import anyio
import anyio.to_thread

from vertebrae.errors import ControllerLoadError

logger = logging.getLogger("vertebrae.loading")


def import_controller(import_string: str, default_attribute: str = "Controller") -> Any:
    """Resolve an import string to a controller class.

    Accepts ``"module:attribute"`` format. When the attribute portion
    is omitted, *default_attribute* is used (e.g. ``"myapp.home"``
    resolves to ``myapp.home.Controller``).

    Raises:
        ControllerLoadError: If the module cannot be imported, the
            attribute does not exist, or it is not callable. The
            original exception is chained.
    """
    module_path, _, attr_name = import_string.partition(":")
    attr_name = attr_name or default_attribute

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ControllerLoadError(import_string, str(exc)) from exc

    try:
        obj = getattr(module, attr_name)
    except AttributeError as exc:
        detail = f"module {module_path!r} has no attribute {attr_name!r}"
        raise ControllerLoadError(import_string, detail) from exc

    if not callable(obj):
        detail = f"resolved to {type(obj).__name__}, not a controller class"
        raise ControllerLoadError(import_string, detail)

    return obj


class LazyController:
    """A controller reference that is imported on first use."""

    __slots__ = ("_lock", "_resolved", "path")

    def __init__(self, path: str) -> None:
        self.path = path
        self._resolved: Any = None
        self._lock: anyio.Lock | None = None

    def __repr__(self) -> str:
        state = "resolved" if self._resolved is not None else "pending"
        return f"LazyController({self.path!r}, {state})"

    @property
    def resolved(self) -> Any:
        """The loaded class, or ``None`` before the first resolve."""
        return self._resolved

    async def resolve(
        self,
        import_string: str | None = None,
        *,
        default_attribute: str = "Controller",
        in_thread: bool = True,
    ) -> Any:
        """Import the controller once and return the class.

        *import_string* overrides ``self.path`` (the app passes the
        result of its ``get_controller_path`` hook). Concurrent callers
        share a single import.
        """
        if self._resolved is not None:
            return self._resolved
        if self._lock is None:
            self._lock = anyio.Lock()

        async with self._lock:
            if self._resolved is None:
                target = import_string or self.path
                logger.debug("Loading controller %r", target)
                if in_thread:
                    self._resolved = await anyio.to_thread.run_sync(
                        import_controller, target, default_attribute
                    )
                else:
                    self._resolved = import_controller(target, default_attribute)
        return self._resolved
