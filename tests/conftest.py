"""Shared fixtures: a hook-recording app and controller factories."""

from collections.abc import Callable
from typing import Any

import pytest

from vertebrae.app import App
from vertebrae.config import AppConfig
from vertebrae.controller import Controller
from vertebrae.view import Container


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class RecordingApp(App):
    """App that records hook calls and navigations in order."""

    def __init__(
        self,
        container: Container | None = None,
        config: AppConfig | None = None,
        *,
        guard: Any = True,
        handled: Any = False,
        journal: list[str] | None = None,
        **options: Any,
    ) -> None:
        super().__init__(container, config or AppConfig(load_in_thread=False), **options)
        self.guard = guard
        self.handled = handled
        self.journal: list[str] = journal if journal is not None else []
        self.navigations: list[tuple[str | None, bool]] = []
        self.failures: list[tuple[str, tuple[Any, ...]]] = []

    def navigate(self, url, *, trigger=False, replace=False):
        self.navigations.append((url, trigger))
        return super().navigate(url, trigger=trigger, replace=replace)

    def show_loading(self) -> None:
        self.journal.append("show_loading")

    def hide_loading(self) -> None:
        self.journal.append("hide_loading")

    def hide_controller(self) -> None:
        self.journal.append("hide_controller")

    def unload_controller(self) -> Any:
        self.journal.append("unload_controller")
        return super().unload_controller()

    def destroy_controller(self) -> Any:
        self.journal.append("destroy_controller")
        return super().destroy_controller()

    def can_leave_current_controller(self) -> Any:
        return self.guard

    def route_did_fail(self, fragment: str, args: tuple[Any, ...]) -> Any:
        self.failures.append((fragment, args))
        return self.handled


PageFactory = Callable[..., type[Controller]]


@pytest.fixture
def journal() -> list[str]:
    return []


@pytest.fixture
def page(journal: list[str]) -> PageFactory:
    """Build a controller class that writes its life-cycle into ``journal``.

    ``page("a")`` -> class named "a"; ``fail=True`` makes ``start`` raise.
    """

    def factory(
        name: str, *, fail: bool = False, element_id: str | None = None
    ) -> type[Controller]:
        class Page(Controller):
            def start(self, *args: Any) -> None:
                journal.append(f"{name}.start")
                if fail:
                    msg = f"{name} failed to start"
                    raise RuntimeError(msg)
                self.args = args

            def unload(self) -> bool:
                journal.append(f"{name}.unload")
                return True

            def destroy(self) -> bool:
                journal.append(f"{name}.destroy")
                return super().destroy()

        Page.name = name
        Page.id = element_id
        Page.__qualname__ = f"Page_{name}"
        return Page

    return factory


@pytest.fixture
def make_app(journal: list[str]) -> Callable[..., RecordingApp]:
    def factory(routes: dict[str, Any], **kwargs: Any) -> RecordingApp:
        app = RecordingApp(journal=journal, **kwargs)
        for pattern, controller in routes.items():
            app.add_route(pattern, controller)
        return app

    return factory


@pytest.fixture
def app_class() -> type[RecordingApp]:
    """The recording app class, for tests that override more hooks."""
    return RecordingApp
