"""In-memory hash history.

Tracks the current URL fragment and a stack of visited fragments, and
dispatches fragments to route handlers through the compiled trie
router. This is the router contract the app drives: ``navigate``,
``get_hash``, and ``start``.

Fragment handling::

    history = History()
    history.route("users/{id:int}", show_user)
    history.start("users/7")        # calls show_user(7), returns True
    history.navigate("about")       # URL only, no handler call
    history.navigate("users/8", trigger=True)  # calls show_user(8)
"""

import logging
from collections.abc import Callable
from typing import Any

from vertebrae.errors import RouteNotFound
from vertebrae.routing.route import Route, RouteMatch
from vertebrae.routing.router import Router

logger = logging.getLogger("vertebrae.history")


def normalize_fragment(fragment: str | None) -> str:
    """Strip the leading ``#`` and surrounding slashes from a fragment."""
    if not fragment:
        return ""
    return fragment.lstrip("#").strip("/")


class History:
    """Hash history backed by a :class:`Router`.

    Routes are added before :meth:`start`; starting compiles the router.
    Handlers are plain callables invoked with the converted path
    parameters as positional arguments. Whatever they return is ignored.
    """

    __slots__ = ("_router", "_stack", "_started")

    def __init__(self) -> None:
        self._router = Router()
        self._stack: list[str] = []
        self._started = False

    # -- Registration --

    def route(
        self,
        pattern: str,
        handler: Callable[..., Any],
        *,
        name: str | None = None,
    ) -> None:
        """Register *handler* for fragments matching *pattern*."""
        self._router.add(Route(path=normalize_fragment(pattern), handler=handler, name=name))

    @property
    def routes(self) -> list[Route]:
        return self._router.routes

    # -- State --

    @property
    def started(self) -> bool:
        return self._started

    @property
    def fragment(self) -> str | None:
        """The current fragment, or ``None`` before anything was visited."""
        return self._stack[-1] if self._stack else None

    @property
    def entries(self) -> tuple[str, ...]:
        """Visited fragments, oldest first."""
        return tuple(self._stack)

    def get_hash(self) -> str:
        return self.fragment or ""

    # -- Navigation --

    def start(self, fragment: str | None = None) -> bool:
        """Start tracking history and load the initial fragment.

        Returns ``True`` if a route matched the initial fragment. When
        *fragment* is ``None`` nothing is loaded and the result is ``False``.
        """
        if self._started:
            msg = "History has already been started."
            raise RuntimeError(msg)
        self._router.compile()
        self._started = True
        if fragment is None:
            return False
        self._stack.append(normalize_fragment(fragment))
        return self.load_url()

    def stop(self) -> None:
        self._started = False

    def navigate(
        self,
        fragment: str | None,
        *,
        trigger: bool = False,
        replace: bool = False,
    ) -> bool:
        """Move to *fragment*.

        Navigating to the current fragment does nothing. With
        ``trigger=True`` the matching handler runs. With ``replace=True``
        the current entry is replaced instead of pushing a new one.

        Returns ``True`` if the fragment changed and, when triggering,
        a route handled it.
        """
        if not self._started:
            return False
        fragment = normalize_fragment(fragment)
        if fragment == self.fragment:
            return False

        if replace and self._stack:
            self._stack[-1] = fragment
        else:
            self._stack.append(fragment)
        logger.debug("Navigated to %r (trigger=%s, replace=%s)", fragment, trigger, replace)

        if trigger:
            return self.load_url(fragment)
        return True

    def back(self) -> bool:
        """Pop the current entry and load the one before it."""
        if len(self._stack) < 2:
            return False
        self._stack.pop()
        return self.load_url()

    def resolve(self, fragment: str) -> RouteMatch:
        """Match *fragment* without dispatching. Raises ``RouteNotFound``."""
        return self._router.match(normalize_fragment(fragment))

    def load_url(self, fragment: str | None = None) -> bool:
        """Dispatch *fragment* (default: the current one) to its handler.

        Returns ``False`` and logs a warning when no route matches.
        """
        target = self.get_hash() if fragment is None else normalize_fragment(fragment)
        try:
            match = self._router.match(target)
        except RouteNotFound:
            logger.warning("No route matches fragment %r", target)
            return False
        match.route.handler(*match.args)
        return True
