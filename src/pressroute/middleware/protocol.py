"""Middleware protocol and result alias.

A middleware is any callable matching::

    def my_mw(envelope: RequestEnvelope, *args: str) -> Response | RouteError | None: ...

No base class required. The pipeline checks the shape, not the lineage:
objects exposing a ``handle`` method with the same signature work too.

Returning ``None`` lets the request continue. Returning a ``Response`` or
``RouteError`` ends it: no later middleware and no handler run.
"""

from typing import Any, Protocol

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import Response, RouteError

# What a middleware may return
type MiddlewareResult = Response | RouteError | None


class Middleware(Protocol):
    """Protocol for pressroute middleware.

    Accepts both functions and callable objects::

        # Function middleware
        def staff_only(envelope: RequestEnvelope) -> MiddlewareResult:
            if not envelope.can("edit_others_posts"):
                return RouteError("forbidden", "Staff only", status=403)
            return None

        # Class middleware with arguments from "header:X-Api-Key"
        class RequireHeader:
            def __call__(self, envelope: RequestEnvelope, name: str) -> MiddlewareResult:
                ...
    """

    def __call__(self, envelope: RequestEnvelope, *args: Any) -> MiddlewareResult: ...
