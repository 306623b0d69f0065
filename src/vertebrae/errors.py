"""Vertebrae exception hierarchy.

Shared across the history, the loader, and the app so every module
raises and catches the same types.

Cancelled transitions are not errors and have no exception type here;
they settle as :class:`vertebrae.transition.Cancelled` outcomes.
"""

from dataclasses import dataclass


class VertebraeError(Exception):
    """Base for all vertebrae-specific errors."""


class ConfigurationError(VertebraeError):
    """Raised when app configuration is invalid.

    Typically raised while routes are registered, before ``App.start()``.
    """


@dataclass(frozen=True, slots=True)
class ControllerLoadError(VertebraeError):
    """A lazy controller reference could not be resolved.

    Raised by the loader when the import string does not name a module,
    the attribute is missing, or the attribute is not a controller class.
    The original exception is chained as ``__cause__``.
    """

    path: str
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"Cannot load controller {self.path!r}: {self.detail}"
        return f"Cannot load controller {self.path!r}"


class RouteNotFound(VertebraeError):  # noqa: N818
    """No registered route matches a fragment."""

    def __init__(self, fragment: str) -> None:
        self.fragment = fragment
        super().__init__(f"No route matches {fragment!r}")
