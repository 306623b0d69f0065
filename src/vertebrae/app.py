"""Vertebrae application class.

Mutable during setup (route registration, hook overrides).
Started once inside ``async with app:``. From then on the route table
is frozen and every navigation runs as a :class:`Transition` on the
app's task group. An app runs once; leaving the block ends it.
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any, ClassVar, Self

import anyio
from anyio.abc import TaskGroup

from vertebrae._internal.invoke import invoke
from vertebrae._internal.types import ControllerRef, Listener, RouteHandler
from vertebrae.config import AppConfig
from vertebrae.errors import ConfigurationError
from vertebrae.events import ROUTE, EventBus
from vertebrae.loading import LazyController
from vertebrae.routing.history import History, normalize_fragment
from vertebrae.routing.route import RouteEntry
from vertebrae.transition import Outcome, Transition
from vertebrae.view import Container, css_class_name

logger = logging.getLogger("vertebrae.app")


class App:
    """The vertebrae application.

    Subclass it to declare routes and override hooks::

        class MyApp(App):
            routes = {
                "": HomePage,
                "users/{id:int}": "myapp.pages.users:UserPage",
            }
            default_route = ""

            def route_did_fail(self, fragment, args):
                flash(f"Could not open {fragment}")
                return False

        async with MyApp.launch(Container(classes=["main"])) as app:
            app.navigate("users/7", trigger=True)

    Every hook may be ``def`` or ``async def``.

    Invariants:
        At most one controller is current. At most one transition is in
        flight; a new navigation chains after it rather than running
        beside it. Only transitions mutate the controller slot and the
        container.
    """

    #: Route pattern -> controller class or ``"module:attribute"`` string.
    routes: ClassVar[dict[str, ControllerRef]] = {}

    #: Fragment used at start and for recovery. ``None`` uses the config value.
    default_route: str | None = None

    def __init__(
        self,
        container: Container | None = None,
        config: AppConfig | None = None,
        *,
        history: History | None = None,
        **options: Any,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self.container: Container = container if container is not None else Container()
        self.options: dict[str, Any] = options
        self.history: History = history or History()
        self.events: EventBus = EventBus(self.config.event_queue_size)
        if self.default_route is None:
            self.default_route = self.config.default_route

        self._route_table: dict[str, ControllerRef] = {
            normalize_fragment(pattern): ref for pattern, ref in type(self).routes.items()
        }
        self._entries: dict[str, RouteEntry] = {}
        self._started = False

        # Navigation state: mutated only by transitions
        self._active_route: str | None = None
        self._active_fragment: str | None = None
        self._controller: Any = None
        self._current_transition: Transition | None = None
        self._last_outcome: Outcome | None = None

        # Container classes and id before the first controller attached
        self._baseline: tuple[tuple[str, ...], str | None] | None = None

        # Set while running (inside ``async with``)
        self._task_group: TaskGroup | None = None

    # -- Route registration --

    def route(self, pattern: str) -> Callable[[type], type]:
        """Register a controller class for *pattern* via decorator::

            @app.route("about")
            class About(Controller):
                name = "About"
        """

        def decorator(controller: type) -> type:
            self.add_route(pattern, controller)
            return controller

        return decorator

    def add_route(self, pattern: str, controller: ControllerRef) -> None:
        """Map *pattern* to a controller class or a lazy import string."""
        self._check_not_started()
        pattern = normalize_fragment(pattern)
        if pattern in self._route_table:
            msg = f"Route {pattern!r} is already registered."
            raise ConfigurationError(msg)
        self._route_table[pattern] = controller

    @property
    def route_table(self) -> dict[str, ControllerRef]:
        """A copy of the pattern -> controller mapping."""
        return dict(self._route_table)

    @property
    def route_entries(self) -> tuple[RouteEntry, ...]:
        """Entries built by :meth:`setup_routes`."""
        return tuple(self._entries.values())

    def setup_routes(self) -> Self:
        """Build a bound handler per route and register it on the history.

        Must run before the history starts. Routes registered by an
        earlier call are skipped, so calling it again only picks up
        routes added since.
        """
        for pattern, ref in self._route_table.items():
            if pattern in self._entries:
                continue
            controller = LazyController(ref) if isinstance(ref, str) else ref
            entry = RouteEntry(pattern, controller)
            self._entries[pattern] = entry
            self.history.route(pattern, self.generate_route_handler(pattern, controller))
            logger.debug("Registered route %r -> %r", pattern, controller)

        return self

    def generate_route_handler(self, route: str, controller: Any) -> RouteHandler:
        """Build the handler the history calls for *route*.

        Calling it begins a transition to *controller* with the
        positional path arguments and returns the :class:`Transition`.
        """

        def handler(*args: Any) -> Transition:
            return self._begin_transition(route, controller, args)

        handler.__name__ = f"route_{route or 'root'}".replace("/", "_")
        return handler

    # -- Navigation --

    def navigate(
        self,
        url: str | None,
        *,
        trigger: bool = False,
        replace: bool = False,
    ) -> str | None:
        """Move the history to *url*; with ``trigger=True`` run its route."""
        self.history.navigate(url, trigger=trigger, replace=replace)
        return url

    def get_hash(self) -> str:
        """The current URL fragment."""
        return self.history.get_hash()

    @property
    def active_route(self) -> str | None:
        """Pattern of the route whose controller is (being) shown."""
        return self._active_route

    @property
    def active_fragment(self) -> str | None:
        return self._active_fragment

    @property
    def controller(self) -> Any:
        """The current controller, or ``None``."""
        return self._controller

    @property
    def current_transition(self) -> Transition | None:
        """The newest transition that has not settled yet."""
        return self._current_transition

    async def settled(self) -> Outcome | None:
        """Wait until no transition is in flight; return the last outcome."""
        while (transition := self._current_transition) is not None:
            await transition.wait()
        return self._last_outcome

    # -- Events --

    def on(self, name: str, listener: Listener) -> Listener:
        """Shortcut for ``app.events.on``."""
        return self.events.on(name, listener)

    def off(self, name: str, listener: Listener | None = None) -> None:
        self.events.off(name, listener)

    # -- Hooks (override in subclasses) --

    def show_loading(self) -> Any:
        """Show a loading indicator while content changes."""

    def hide_loading(self) -> Any:
        """Hide the loading indicator. Runs after every transition."""

    def hide_controller(self) -> Any:
        """Hide the current controller before it is unloaded."""

    def can_leave_current_controller(self) -> Any:
        """Return a falsy value to keep the user on the current controller."""
        return True

    def route_did_fail(self, fragment: str, args: tuple[Any, ...]) -> Any:
        """Called when a transition fails.

        Return ``True`` to report the failure handled; anything else
        makes the app navigate back to the previous (or default) route.
        """
        return False

    def get_controller_path(self, path: str) -> str:
        """Map a lazy controller path to an import string.

        Joins ``config.controller_package`` in front when it is set.
        """
        package = self.config.controller_package
        if package:
            return f"{package}.{path}"
        return path

    def get_initial_route(self) -> str:
        """Fragment loaded at start when history has nothing to resume."""
        return self.default_route or ""

    def get_controller_element(self) -> Container:
        """The container controllers attach to."""
        return self.container

    # -- Controller host --

    def unload_controller(self) -> Any:
        """Unload the current controller, if any."""
        controller = self._controller
        if controller is None:
            return True
        return controller.unload()

    def destroy_controller(self) -> Any:
        """Destroy the current controller, if any."""
        controller = self._controller
        if controller is None:
            return True
        return controller.destroy()

    def initialize_controller(self, controller_type: Callable[[], Any]) -> Any:
        """Construct a controller and attach it to the container.

        The container is emptied and its classes and id are reset to
        what they were before the first controller attached. The
        controller's display name is added as a CSS class and its id,
        if any, set on the container. ``start`` is not called here.
        """
        controller = controller_type()
        element = self.get_controller_element()
        if self._baseline is None:
            self._baseline = (tuple(element.classes), element.id)
        classes, element_id = self._baseline

        element.empty()
        element.remove_class()
        element.add_class(*classes)
        element.id = element_id

        name = controller.display_name
        if isinstance(name, str):
            element.add_class(css_class_name(name))
        if isinstance(controller.id, str):
            element.id = controller.id

        controller.setup_view_properties(element)
        return controller

    async def resolve_controller(self, controller: Any) -> Any:
        """Return the controller class, importing lazy references once."""
        if isinstance(controller, LazyController):
            if controller.resolved is not None:
                return controller.resolved
            path = await invoke(self.get_controller_path, controller.path)
            return await controller.resolve(
                path,
                default_attribute=self.config.controller_attribute,
                in_thread=self.config.load_in_thread,
            )
        return controller

    # -- Lifecycle --

    def start(self, fragment: str | None = None) -> None:
        """Register routes and start the history.

        *fragment* is the location to resume (the URL hash the page was
        opened with). When nothing matches it, the initial route is
        loaded in its place.
        """
        self._check_running()
        self._check_not_started()
        self.setup_routes()
        self._started = True
        logger.info("Starting with %d route(s)", len(self._entries))

        if not self.history.start(fragment):
            self.navigate(self.get_initial_route(), trigger=True, replace=True)

    @classmethod
    @asynccontextmanager
    async def launch(
        cls,
        container: Container | None = None,
        config: AppConfig | None = None,
        **options: Any,
    ) -> AsyncIterator[Self]:
        """Construct, run and start an app::

            async with MyApp.launch(Container()) as app:
                await app.settled()
        """
        async with cls(container, config, **options) as app:
            app.start(options.get("fragment"))
            yield app

    def stop(self) -> None:
        """Cancel in-flight transitions and leave the running state."""
        if self._task_group is not None:
            self._task_group.cancel_scope.cancel()

    async def __aenter__(self) -> Self:
        if self._task_group is not None:
            msg = "App is already running."
            raise RuntimeError(msg)
        if self._started:
            msg = "App has already run. Create a new instance to run it again."
            raise RuntimeError(msg)
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        task_group = self._task_group
        assert task_group is not None
        try:
            return await task_group.__aexit__(exc_type, exc, tb)
        finally:
            self._task_group = None
            self.history.stop()
            self.events.close()

    # -- Internal (used by Transition) --

    def _begin_transition(self, route: str, controller: Any, args: tuple[Any, ...]) -> Transition:
        self._check_running()
        transition = Transition(
            self, route, controller, args, previous=self._current_transition
        )
        self._current_transition = transition
        self._spawn(transition.run)
        return transition

    def _spawn(self, func: Callable[[], Any]) -> None:
        self._check_running()
        assert self._task_group is not None
        self._task_group.start_soon(func)

    def _commit_route(self, route: str, fragment: str) -> None:
        self._active_route = route
        self._active_fragment = fragment
        logger.info("Route %r (fragment %r)", route, fragment)
        self.events.emit(ROUTE, route)

    def _clear_route(self) -> None:
        self._active_route = None
        self._active_fragment = None

    def _swap_controller(self, controller: Any) -> None:
        self._controller = controller

    def _release_transition(self, transition: Transition) -> None:
        self._last_outcome = transition.outcome
        if self._current_transition is transition:
            self._current_transition = None

    def _check_running(self) -> None:
        if self._task_group is None:
            msg = (
                "App is not running. Use 'async with app:' or "
                "'async with App.launch(...)' before starting or navigating."
            )
            raise RuntimeError(msg)

    def _check_not_started(self) -> None:
        if self._started:
            msg = (
                "Cannot modify routes after the app has started. "
                "Register routes before calling app.start()."
            )
            raise RuntimeError(msg)
