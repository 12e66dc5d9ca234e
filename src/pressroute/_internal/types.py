"""Shared type aliases used across pressroute modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler or decorated helper receiving the request envelope
HandlerFunc: TypeAlias = Callable[..., Any]

# Middleware entry as declared on a route: "name", "name:a,b", ("name", a, b), or a callable
MiddlewareEntry: TypeAlias = str | tuple[Any, ...] | Callable[..., Any]
