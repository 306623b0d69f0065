"""Tests for vertebrae.app: registration, bootstrap, and the controller host."""

import pytest

from vertebrae.app import App
from vertebrae.config import AppConfig
from vertebrae.controller import Controller
from vertebrae.errors import ConfigurationError
from vertebrae.loading import LazyController
from vertebrae.transition import Completed
from vertebrae.view import Container


class Home(Controller):
    name = "Home"


class About(Controller):
    content_name = "About_Us"
    id = "about"


class TestAppRegistration:
    def test_routes_class_attribute(self) -> None:
        class MyApp(App):
            routes = {"": Home, "/about/": About}

        app = MyApp()
        assert app.route_table == {"": Home, "about": About}

    def test_route_decorator(self) -> None:
        app = App()

        @app.route("home")
        class Page(Controller):
            pass

        assert app.route_table == {"home": Page}

    def test_add_route_lazy(self) -> None:
        app = App()
        app.add_route("reports", "myapp.reports:Reports")
        assert app.route_table["reports"] == "myapp.reports:Reports"

    def test_duplicate_route_raises(self) -> None:
        app = App()
        app.add_route("home", Home)
        with pytest.raises(ConfigurationError, match="already registered"):
            app.add_route("/home", About)

    def test_subclass_routes_not_shared(self) -> None:
        class MyApp(App):
            routes = {"": Home}

        first = MyApp()
        first.add_route("about", About)
        assert "about" not in MyApp().route_table

    def test_setup_routes_empty_is_noop(self) -> None:
        app = App()
        assert app.setup_routes() is app
        assert app.route_entries == ()
        assert app.history.routes == []

    def test_setup_routes_builds_entries(self) -> None:
        app = App()
        app.add_route("", Home)
        app.add_route("reports", "myapp.reports:Reports")
        app.setup_routes()

        entries = {e.pattern: e.controller for e in app.route_entries}
        assert entries[""] is Home
        assert isinstance(entries["reports"], LazyController)
        assert entries["reports"].path == "myapp.reports:Reports"
        assert len(app.history.routes) == 2

    def test_setup_routes_twice_is_noop(self) -> None:
        app = App()
        app.add_route("", Home)
        app.setup_routes()
        app.setup_routes()
        assert len(app.history.routes) == 1

    def test_setup_routes_picks_up_later_routes(self) -> None:
        app = App()
        app.add_route("", Home)
        app.setup_routes()
        app.add_route("about", About)
        app.setup_routes()

        assert [e.pattern for e in app.route_entries] == ["", "about"]
        assert len(app.history.routes) == 2

    def test_generated_handler_name(self) -> None:
        app = App()
        handler = app.generate_route_handler("users/{id}", Home)
        assert handler.__name__ == "route_users_{id}"


class TestAppConfig:
    def test_default_route_from_config(self) -> None:
        app = App(config=AppConfig(default_route="home"))
        assert app.default_route == "home"
        assert app.get_initial_route() == "home"

    def test_class_default_route_wins(self) -> None:
        class MyApp(App):
            default_route = "dashboard"

        app = MyApp(config=AppConfig(default_route="home"))
        assert app.get_initial_route() == "dashboard"

    def test_controller_path_prefix(self) -> None:
        app = App(config=AppConfig(controller_package="myapp.pages"))
        assert app.get_controller_path("users:Users") == "myapp.pages.users:Users"

    def test_controller_path_unchanged(self) -> None:
        assert App().get_controller_path("myapp.users:Users") == "myapp.users:Users"

    def test_options_kept(self) -> None:
        app = App(Container(), theme="dark")
        assert app.options == {"theme": "dark"}


class TestControllerHost:
    def test_initialize_sanitizes_name(self) -> None:
        class Page(Controller):
            name = "My Page_View"

        container = Container(classes=["app", "main"])
        app = App(container)
        controller = app.initialize_controller(Page)

        assert container.classes == ["app", "main", "my-page-view"]
        assert controller.container is container

    def test_initialize_uses_content_name_and_id(self) -> None:
        container = Container(classes=["app"])
        app = App(container)
        app.initialize_controller(About)

        assert container.classes == ["app", "about-us"]
        assert container.id == "about"

    def test_initialize_resets_to_baseline(self) -> None:
        container = Container(classes=["app"], id="root")
        app = App(container)
        first = app.initialize_controller(About)
        first.container.append("about content")
        container.add_class("added-later")

        app.initialize_controller(Home)

        assert container.classes == ["app", "home"]
        assert container.id == "root"
        assert container.children == []

    def test_initialize_does_not_start(self) -> None:
        started: list[bool] = []

        class Page(Controller):
            def start(self, *args):
                started.append(True)

        App().initialize_controller(Page)
        assert started == []

    def test_initialize_without_name(self) -> None:
        container = Container(classes=["app"])
        App(container).initialize_controller(Controller)
        assert container.classes == ["app"]

    def test_unload_and_destroy_without_controller(self) -> None:
        app = App()
        assert app.unload_controller() is True
        assert app.destroy_controller() is True

    def test_default_hooks(self) -> None:
        app = App()
        assert app.can_leave_current_controller() is True
        assert app.route_did_fail("x", ()) is False
        assert app.show_loading() is None
        assert app.hide_loading() is None
        assert app.hide_controller() is None
        assert app.get_controller_element() is app.container


class TestAppLifecycle:
    def test_start_requires_running_app(self) -> None:
        app = App()
        with pytest.raises(RuntimeError, match="not running"):
            app.start()

    @pytest.mark.anyio
    async def test_add_route_after_start_raises(self) -> None:
        app = App()
        app.add_route("", Home)
        async with app:
            app.start()
            with pytest.raises(RuntimeError, match="after the app has started"):
                app.add_route("about", About)
            await app.settled()

    @pytest.mark.anyio
    async def test_start_twice_raises(self) -> None:
        app = App()
        async with app:
            app.start()
            with pytest.raises(RuntimeError):
                app.start()

    @pytest.mark.anyio
    async def test_enter_twice_raises(self) -> None:
        app = App()
        async with app:
            with pytest.raises(RuntimeError, match="already running"):
                await app.__aenter__()

    @pytest.mark.anyio
    async def test_start_resumes_matching_fragment(self) -> None:
        app = App(config=AppConfig(default_route=""))
        app.add_route("", Home)
        app.add_route("about", About)
        async with app:
            app.start("#/about")
            await app.settled()

        assert app.active_route == "about"
        assert app.history.entries == ("about",)

    @pytest.mark.anyio
    async def test_start_falls_back_to_initial_route(self) -> None:
        app = App(config=AppConfig(default_route="about"))
        app.add_route("", Home)
        app.add_route("about", About)
        async with app:
            app.start("nowhere")
            await app.settled()

        assert app.active_route == "about"
        # The unmatched entry was replaced
        assert app.history.entries == ("about",)

    @pytest.mark.anyio
    async def test_start_without_routes(self) -> None:
        app = App()
        async with app:
            app.start()
            assert await app.settled() is None
        assert app.controller is None

    @pytest.mark.anyio
    async def test_launch(self) -> None:
        class MyApp(App):
            routes = {"": Home, "about": About}

        container = Container(classes=["shell"])
        async with MyApp.launch(container, fragment="about") as app:
            outcome = await app.settled()

        assert isinstance(app, MyApp)
        assert isinstance(outcome, Completed)
        assert isinstance(app.controller, About)
        assert container.classes == ["shell", "about-us"]

    @pytest.mark.anyio
    async def test_navigate_returns_url(self) -> None:
        app = App()
        app.add_route("", Home)
        app.add_route("about", About)
        async with app:
            app.start()
            assert app.navigate("about", trigger=True) == "about"
            await app.settled()
            assert app.get_hash() == "about"

    @pytest.mark.anyio
    async def test_navigate_after_exit_is_ignored(self) -> None:
        app = App()
        app.add_route("", Home)
        app.add_route("about", About)
        async with app:
            app.start()
            await app.settled()
        # History stopped on exit: navigation is ignored
        assert app.navigate("about", trigger=True) == "about"
        assert app.active_route == ""

    @pytest.mark.anyio
    async def test_on_and_off(self) -> None:
        routes: list[str] = []
        app = App()
        app.add_route("", Home)
        app.add_route("about", About)
        listener = app.on("route", routes.append)
        async with app:
            app.start()
            await app.settled()
            app.off("route", listener)
            app.navigate("about", trigger=True)
            await app.settled()

        assert routes == [""]

    @pytest.mark.anyio
    async def test_route_added_after_manual_setup_is_reachable(self) -> None:
        app = App()
        app.add_route("", Home)
        app.setup_routes()
        app.add_route("about", About)
        async with app:
            app.start("about")
            outcome = await app.settled()

        assert isinstance(outcome, Completed)
        assert isinstance(app.controller, About)
        assert app.active_route == "about"

    @pytest.mark.anyio
    async def test_app_runs_once(self) -> None:
        app = App()
        app.add_route("", Home)
        async with app:
            app.start()
            await app.settled()

        with pytest.raises(RuntimeError, match="already run"):
            async with app:
                pass
