"""Run a route's middleware stack against one envelope.

Entries run in declared order. The first entry returning something other
than ``None`` ends the request: its result is returned at once and no
later entry (and no handler) runs. The same pipeline serves all four
surfaces.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pressroute._internal.types import MiddlewareEntry
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import Response, RouteError, Terminal
from pressroute.middleware.registry import MiddlewareRegistry

logger = logging.getLogger("pressroute.middleware")


def parse_entry(entry: MiddlewareEntry) -> tuple[str | None, Any, tuple[Any, ...]]:
    """Split an entry into ``(name, inline_callable, args)``.

    ``"rate_limit:10,60"`` -> ``("rate_limit", None, ("10", "60"))``
    ``("rate_limit", 10, 60)`` -> ``("rate_limit", None, (10, 60))``
    ``my_func`` -> ``(None, my_func, ())``
    """
    if isinstance(entry, str):
        name, _, raw_args = entry.partition(":")
        args = tuple(arg.strip() for arg in raw_args.split(",")) if raw_args else ()
        return name.strip(), None, args
    if isinstance(entry, tuple):
        if not entry:
            msg = "Empty middleware tuple."
            raise ValueError(msg)
        head, *args = entry
        if isinstance(head, str):
            return head, None, tuple(args)
        return None, head, tuple(args)
    return None, entry, ()


def _callable_of(middleware: Any) -> Any | None:
    handle = getattr(middleware, "handle", None)
    if callable(handle):
        return handle
    if callable(middleware):
        return middleware
    return None


def _as_terminal(result: Any) -> Terminal:
    if isinstance(result, (Response, RouteError)):
        return result
    if isinstance(result, (dict, list)):
        return Response.json(result)
    return Response.html(str(result))


def run_entry(entry: MiddlewareEntry, envelope: RequestEnvelope, registry: MiddlewareRegistry) -> Terminal | None:
    """Run a single entry. Failures become 500 ``RouteError`` values."""
    name, inline, args = parse_entry(entry)
    label = name or getattr(inline, "__qualname__", repr(inline))

    if inline is None:
        middleware = registry.get(name or "")
        if middleware is None:
            logger.error("Middleware %r is not registered", name)
            return RouteError("middleware_not_found", f"Middleware '{name}' not found", status=500)
    else:
        middleware = inline

    call = _callable_of(middleware)
    if call is None:
        return RouteError("invalid_middleware", f"Middleware '{label}' is not callable", status=500)

    try:
        result = call(envelope, *args)
    except Exception:
        logger.exception("Middleware %s raised on %s %s", label, envelope.method, envelope.path)
        return RouteError("middleware_error", "An unexpected error occurred.", status=500)

    if result is None:
        return None
    logger.debug("Middleware %s ended %s %s", label, envelope.method, envelope.path)
    return _as_terminal(result)


def run_pipeline(
    entries: Iterable[MiddlewareEntry],
    envelope: RequestEnvelope,
    registry: MiddlewareRegistry,
) -> Terminal | None:
    """Run *entries* in order, stopping at the first terminal result."""
    for entry in entries:
        result = run_entry(entry, envelope, registry)
        if result is not None:
            return result
    return None
