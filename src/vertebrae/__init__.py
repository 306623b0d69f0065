"""Vertebrae: an application shell that hands the page from one controller to the next.

Routes map URL fragments to controllers. Each navigation runs a
transition: ask the current controller whether it may be left, load the
next controller on demand, unload and destroy the old one, then attach
and start the new one. Failures and superseded navigations are
recovered from without leaving two controllers on the page.

Basic usage::

    from vertebrae import App, Container, Controller

    class Home(Controller):
        name = "Home"

    class MyApp(App):
        routes = {"": Home, "reports/{year:int}": "myapp.reports:Reports"}

    async with MyApp.launch(Container()) as app:
        app.navigate("reports/2024", trigger=True)
        await app.settled()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "CancelReason",
    "Cancelled",
    "Completed",
    "ConfigurationError",
    "Container",
    "Controller",
    "ControllerLike",
    "ControllerLoadError",
    "EventBus",
    "Failed",
    "History",
    "LazyController",
    "RouteNotFound",
    "Transition",
    "TransitionState",
    "VertebraeError",
]

# Public name -> defining module
_LAZY_IMPORTS: dict[str, str] = {
    "App": "vertebrae.app",
    "AppConfig": "vertebrae.config",
    "CancelReason": "vertebrae.transition",
    "Cancelled": "vertebrae.transition",
    "Completed": "vertebrae.transition",
    "ConfigurationError": "vertebrae.errors",
    "Container": "vertebrae.view",
    "Controller": "vertebrae.controller",
    "ControllerLike": "vertebrae.controller",
    "ControllerLoadError": "vertebrae.errors",
    "EventBus": "vertebrae.events",
    "Failed": "vertebrae.transition",
    "History": "vertebrae.routing.history",
    "LazyController": "vertebrae.loading",
    "RouteNotFound": "vertebrae.errors",
    "Transition": "vertebrae.transition",
    "TransitionState": "vertebrae.transition",
    "VertebraeError": "vertebrae.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import vertebrae`` fast while providing a clean top-level API.
    """
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_path), name)
