"""Compiled router with trie-based fragment matching.

Routes are registered during setup and compiled into an immutable
lookup structure when the history starts. Static segments beat
parameters, parameters beat a trailing ``{name:path}`` catch-all.
"""

import re
from dataclasses import dataclass, field

from vertebrae.errors import ConfigurationError, RouteNotFound
from vertebrae.routing.params import CONVERTERS, convert_param
from vertebrae.routing.route import PathSegment, Route, RouteMatch

_PARAM = re.compile(r"^\{(?P<name>\w+)(?::(?P<type>\w+))?\}$")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern string into segments.

    Examples::

        "users"              -> [PathSegment("users")]
        "users/{id}"         -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "users/{id:int}"     -> [PathSegment("users"), PathSegment("{id:int}", param_type="int")]
        "files/{rest:path}"  -> [PathSegment("files"), PathSegment("{rest:path}", ...)]

    Raises ``ConfigurationError`` for ``<param>`` or ``:param`` segments,
    for unknown converters, and for a catch-all that is not last.
    """
    parts = [part for part in path.strip("#").strip("/").split("/") if part]
    segments: list[PathSegment] = []
    for position, part in enumerate(parts):
        if part.startswith((":", "<")):
            msg = (
                f"Route pattern {path!r} uses <param> or :param syntax. "
                "Use {param} instead, e.g. 'users/{id}'."
            )
            raise ConfigurationError(msg)

        found = _PARAM.match(part)
        if found is None:
            segments.append(PathSegment(value=part))
            continue

        param_type = found["type"] or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown converter {param_type!r} in route pattern {path!r}"
            raise ConfigurationError(msg)
        if param_type == "path" and position != len(parts) - 1:
            msg = f"Catch-all segment {part!r} must end route pattern {path!r}"
            raise ConfigurationError(msg)
        segments.append(
            PathSegment(
                value=part,
                is_param=True,
                param_name=found["name"],
                param_type=param_type,
            )
        )
    return segments


@dataclass(slots=True)
class _Node:
    """One trie level. Mutable until the router compiles."""

    static: dict[str, "_Node"] = field(default_factory=dict)
    params: list["_ParamEdge"] = field(default_factory=list)
    catch_all: "_CatchAll | None" = None
    route: Route | None = None

    def param_edge(self, segment: PathSegment) -> "_ParamEdge":
        """Return the edge for *segment*, adding it on first use."""
        for edge in self.params:
            if edge.name == segment.param_name and edge.converter == segment.param_type:
                return edge
        pattern, _ = CONVERTERS[segment.param_type]
        edge = _ParamEdge(
            name=segment.param_name or "",
            converter=segment.param_type,
            regex=re.compile(pattern),
        )
        self.params.append(edge)
        return edge


@dataclass(slots=True)
class _ParamEdge:
    name: str
    converter: str
    regex: re.Pattern[str]
    node: _Node = field(default_factory=_Node)


@dataclass(frozen=True, slots=True)
class _CatchAll:
    name: str
    route: Route


class Router:
    """Compiled router with trie-based fragment matching.

    Usage::

        router = Router()
        router.add(Route("users", handler))
        router.add(Route("users/{id:int}", handler))
        router.compile()
        match = router.match("users/42")
        match.args  # (42,)
    """

    __slots__ = ("_compiled", "_root", "_signatures")

    def __init__(self) -> None:
        self._root = _Node()
        self._compiled = False
        # id(route) -> ((param name, converter), ...) in pattern order
        self._signatures: dict[int, tuple[tuple[str, str], ...]] = {}

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        segments = parse_path(route.path)
        node = self._root
        for segment in segments:
            if segment.is_param and segment.param_type == "path":
                if node.catch_all is not None:
                    self._conflict(route, node.catch_all.route)
                node.catch_all = _CatchAll(segment.param_name or "path", route)
                break
            if segment.is_param:
                node = node.param_edge(segment).node
            else:
                node = node.static.setdefault(segment.value, _Node())
        else:
            if node.route is not None:
                self._conflict(route, node.route)
            node.route = route

        self._signatures[id(route)] = tuple(
            (segment.param_name or "", segment.param_type)
            for segment in segments
            if segment.is_param
        )

    @staticmethod
    def _conflict(route: Route, existing: Route) -> None:
        msg = f"Route pattern {route.path!r} conflicts with {existing.path!r}"
        raise ConfigurationError(msg)

    @property
    def routes(self) -> list[Route]:
        """Every registered route, collected depth-first from the trie.

        Used for introspection (``vertebrae routes``).
        """
        found: list[Route] = []
        pending = [self._root]
        while pending:
            node = pending.pop()
            if node.route is not None:
                found.append(node.route)
            if node.catch_all is not None:
                found.append(node.catch_all.route)
            pending.extend(node.static.values())
            pending.extend(edge.node for edge in node.params)
        return found

    @property
    def compiled(self) -> bool:
        return self._compiled

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, fragment: str) -> RouteMatch:
        """Match a fragment against the compiled routes.

        Returns a ``RouteMatch`` whose ``args`` are the converted
        parameters in pattern order.
        Raises ``RouteNotFound`` if no route matches the fragment.
        """
        parts = [part for part in fragment.strip("/").split("/") if part]
        found = self._walk(self._root, parts, {})
        if found is None:
            raise RouteNotFound(fragment)

        route, params = found
        args = tuple(
            convert_param(params[name], converter)
            for name, converter in self._signatures[id(route)]
        )
        return RouteMatch(route=route, path_params=params, args=args)

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        params: dict[str, str],
    ) -> tuple[Route, dict[str, str]] | None:
        if not parts:
            return (node.route, params) if node.route is not None else None

        head, rest = parts[0], parts[1:]
        child = node.static.get(head)
        if child is not None and (found := self._walk(child, rest, params)) is not None:
            return found

        for edge in node.params:
            if edge.regex.fullmatch(head) is None:
                continue
            found = self._walk(edge.node, rest, {**params, edge.name: head})
            if found is not None:
                return found

        if node.catch_all is not None:
            return node.catch_all.route, {**params, node.catch_all.name: "/".join(parts)}
        return None
