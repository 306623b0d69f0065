"""Shared type aliases used across vertebrae modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: bound callable the history invokes with positional path args
RouteHandler: TypeAlias = Callable[..., Any]

# Event listener: receives the event payload
Listener: TypeAlias = Callable[[Any], Any]

# Controller reference in a route table: a class or a lazy import string
ControllerRef: TypeAlias = type | str
