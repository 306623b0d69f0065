"""Route, RouteEntry, and RouteMatch dataclasses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``users``  (is_param=False)
    Param:   ``{id}``   (is_param=True, param_name="id")
    Typed:   ``{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition: pattern plus the bound handler."""

    path: str
    handler: Callable[..., Any]
    name: str | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match.

    ``args`` holds the converted parameter values in pattern order,
    the positional arguments the handler is called with.
    """

    route: Route
    path_params: dict[str, str]
    args: tuple[Any, ...] = ()


@dataclass(slots=True)
class RouteEntry:
    """One row of an app's route table.

    ``controller`` is a controller class or a
    :class:`~vertebrae.loading.LazyController`. A lazy reference stays on
    the entry after it resolves, so later navigations reuse the class.
    """

    pattern: str
    controller: Any
