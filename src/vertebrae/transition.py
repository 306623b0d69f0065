"""Route transitions: the state machine that hands the page from one
controller to the next.

One ``Transition`` is created per navigation. It runs on the app's task
group and walks these states in order::

    GUARDING      can_leave_current_controller()      falsy -> Cancelled(GUARD)
    RESOLVING     show_loading(), start loading the controller class,
                  wait for the previous transition    newer one queued -> Cancelled(SUPERSEDED)
    COMMITTING    active_route = route, emit "route", hide_controller()
    UNLOADING     show_loading(), await unload + the controller class
    DESTROYING    destroy_controller(), clear the controller slot
    CONSTRUCTING  initialize_controller(cls), emit "init:controller"
    STARTING      controller.start(*args), emit "start:controller"
    SETTLED       hide_loading() always ran; outcome recorded

Any exception in a step ends the walk: ``hide_loading()`` still runs,
then the failure path calls ``route_did_fail(hash, args)``, clears the
active route, and navigates back unless the hook reports it handled the
failure. ``Cancelled`` outcomes skip the failure path entirely.

Serialization:
    Each transition remembers the transition that was in flight when it
    was created and waits for it to settle before committing. A guard
    rejection waits for it too, so transitions settle in the order they
    were created. The app never has two transitions past RESOLVING at
    once, so hide, unload, destroy and construct of consecutive
    navigations never interleave.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeAlias

import anyio

from vertebrae._internal.invoke import invoke
from vertebrae.events import INIT_CONTROLLER, START_CONTROLLER

if TYPE_CHECKING:
    from collections.abc import Generator

    from vertebrae.app import App

logger = logging.getLogger("vertebrae.transition")


class TransitionState(Enum):
    PENDING = "pending"
    GUARDING = "guarding"
    RESOLVING = "resolving"
    COMMITTING = "committing"
    UNLOADING = "unloading"
    DESTROYING = "destroying"
    CONSTRUCTING = "constructing"
    STARTING = "starting"
    SETTLED = "settled"


class CancelReason(Enum):
    GUARD = "guard"  # can_leave_current_controller() refused
    SUPERSEDED = "superseded"  # a newer navigation was issued while waiting
    ABORTED = "aborted"  # the app's task group was cancelled


# -- Outcomes --


@dataclass(frozen=True, slots=True)
class Completed:
    """The new controller started and is current."""

    controller: Any


@dataclass(frozen=True, slots=True)
class Cancelled:
    """The transition stopped without error. Never reported as a failure."""

    reason: CancelReason


@dataclass(frozen=True, slots=True)
class Failed:
    """A step raised. ``handled`` is ``route_did_fail``'s verdict."""

    error: Exception
    handled: bool = False


Outcome: TypeAlias = Completed | Cancelled | Failed


class Transition:
    """One navigation attempt.

    Created by the app's route handlers; not meant to be built directly.
    Awaiting a transition waits for it to settle and returns its outcome::

        app.navigate("reports/2024", trigger=True)
        match await app.current_transition:
            case Completed(controller):
                ...
    """

    __slots__ = (
        "_controller_type",
        "_resolve_error",
        "_resolved",
        "_settled",
        "app",
        "args",
        "controller_ref",
        "fragment",
        "outcome",
        "previous",
        "previous_fragment",
        "previous_route",
        "route",
        "state",
    )

    def __init__(
        self,
        app: App,
        route: str,
        controller_ref: Any,
        args: tuple[Any, ...],
        *,
        previous: Transition | None = None,
    ) -> None:
        self.app = app
        self.route = route
        self.controller_ref = controller_ref
        self.args = args
        self.fragment = app.get_hash()
        self.previous = previous
        self.previous_route: str | None = app.active_route
        self.previous_fragment: str | None = app.active_fragment
        self.state = TransitionState.PENDING
        self.outcome: Outcome | None = None
        self._settled = anyio.Event()
        self._resolved = anyio.Event()
        self._controller_type: Any = None
        self._resolve_error: Exception | None = None

    def __repr__(self) -> str:
        return f"<Transition {self.route!r} {self.state.value}>"

    def __await__(self) -> Generator[Any, None, Outcome]:
        return self.wait().__await__()

    @property
    def settled(self) -> bool:
        return self._settled.is_set()

    async def wait(self) -> Outcome:
        """Wait until the transition settles and return its outcome."""
        await self._settled.wait()
        assert self.outcome is not None
        return self.outcome

    # -- Driver --

    async def run(self) -> Outcome:
        """Walk every state and settle. Only cancellation escapes."""
        outcome: Outcome = Cancelled(CancelReason.ABORTED)
        try:
            try:
                outcome = await self._drive()
            finally:
                await invoke(self.app.hide_loading)
        except Exception as exc:
            outcome = await self._recover(exc)
        finally:
            self._settle(outcome)
        return outcome

    async def _drive(self) -> Outcome:
        app = self.app

        self._enter(TransitionState.GUARDING)
        if not await invoke(app.can_leave_current_controller):
            # Going back to the route we are already on would loop forever.
            if self.previous_route is not None and self.route != self.previous_route:
                app.navigate(self._previous_location())
            # Settle in order so navigations queued behind this one still
            # wait for the transition in flight.
            if self.previous is not None:
                await self.previous.wait()
            return Cancelled(CancelReason.GUARD)

        self._enter(TransitionState.RESOLVING)
        await invoke(app.show_loading)
        app._spawn(self._resolve_controller)
        if self.previous is not None:
            await self.previous.wait()
        if app.config.skip_superseded and app.current_transition is not self:
            return Cancelled(CancelReason.SUPERSEDED)

        self._enter(TransitionState.COMMITTING)
        app._commit_route(self.route, self.fragment)
        await invoke(app.hide_controller)

        self._enter(TransitionState.UNLOADING)
        await invoke(app.show_loading)
        await invoke(app.unload_controller)
        controller_type = await self._controller_class()

        self._enter(TransitionState.DESTROYING)
        await invoke(app.destroy_controller)
        app._swap_controller(None)

        self._enter(TransitionState.CONSTRUCTING)
        controller = await invoke(app.initialize_controller, controller_type)
        app._swap_controller(controller)
        app.events.emit(INIT_CONTROLLER, controller)

        self._enter(TransitionState.STARTING)
        await invoke(controller.start, *self.args)
        app.events.emit(START_CONTROLLER, controller)
        logger.info("Started %s for route %r", type(controller).__name__, self.route)
        return Completed(controller)

    async def _recover(self, error: Exception) -> Failed:
        """The single failure path for every step."""
        app = self.app
        logger.error("Route %r failed", self.route, exc_info=error)

        handled = False
        try:
            handled = await invoke(app.route_did_fail, app.get_hash(), self.args) is True
        except Exception:
            logger.exception("route_did_fail raised while handling route %r", self.route)

        app._clear_route()
        if not handled:
            app.navigate(self.previous_fragment or app.default_route, trigger=True)
        return Failed(error, handled)

    # -- Controller resolution --

    async def _resolve_controller(self) -> None:
        """Load the controller class. Runs beside the main walk.

        Errors are kept and re-raised by ``_controller_class``; a
        superseded transition never reads them.
        """
        try:
            self._controller_type = await self.app.resolve_controller(self.controller_ref)
        except Exception as exc:
            self._resolve_error = exc
        finally:
            self._resolved.set()

    async def _controller_class(self) -> Any:
        await self._resolved.wait()
        if self._resolve_error is not None:
            raise self._resolve_error
        return self._controller_type

    # -- Bookkeeping --

    def _previous_location(self) -> str:
        if self.previous_fragment is not None:
            return self.previous_fragment
        return self.previous_route or ""

    def _enter(self, state: TransitionState) -> None:
        logger.debug("%r: %s -> %s", self.route, self.state.value, state.value)
        self.state = state

    def _settle(self, outcome: Outcome) -> None:
        self.outcome = outcome
        self.previous = None
        self._enter(TransitionState.SETTLED)
        if isinstance(outcome, Cancelled):
            logger.debug("%r cancelled (%s)", self.route, outcome.reason.value)
        self.app._release_transition(self)
        self._settled.set()
