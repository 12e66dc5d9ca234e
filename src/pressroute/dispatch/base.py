"""The dispatch algorithm shared by all four surfaces.

For one inbound request a strategy:

1. builds a ``RequestEnvelope`` from the host's ``RawInbound``
2. runs the route's middleware, stopping at the first terminal result
3. invokes the handler
4. translates the handler's return value into a surface ``Response``

Handler exceptions stop at this boundary: they are logged with their
traceback and turned into the surface's 500 result. Headers queued on the
envelope by middleware are added to whatever response goes out.
"""

from __future__ import annotations

import html
import logging
from typing import TYPE_CHECKING, Any

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.http.response import Response, RouteError, Terminal
from pressroute.middleware.pipeline import run_pipeline
from pressroute.routing.handlers import invoke

if TYPE_CHECKING:
    from pressroute.dispatch.context import DispatchContext
    from pressroute.routing.route import Route

logger = logging.getLogger("pressroute.dispatch")


def error_page(title: str, message: str, status: int) -> Response:
    """A minimal HTML page for denials and failures on HTML surfaces."""
    body = (
        "<!DOCTYPE html>\n<html>\n<head><meta charset=\"utf-8\">"
        f"<title>{html.escape(title)}</title></head>\n"
        f"<body>\n<h1>{html.escape(title)}</h1>\n<p>{html.escape(message)}</p>\n</body>\n</html>\n"
    )
    return Response.html(body, status=status)


class Strategy:
    """Base class for the per-surface strategies.

    Subclasses implement ``register`` (hand the route to the host),
    ``deny`` (render a middleware's terminal result), ``translate``
    (render the handler's return value) and ``failure`` (render a handler
    exception).
    """

    __slots__ = ("context", "route")

    def __init__(self, route: Route, context: DispatchContext) -> None:
        self.route = route
        self.context = context

    # -- Registration --

    def register(self) -> None:
        raise NotImplementedError

    # -- Dispatch --

    def build_envelope(self, raw: RawInbound) -> RequestEnvelope:
        return RequestEnvelope.capture(raw, self.context.host, self.context.config, self.route.surface.value)

    def run_middleware(self, envelope: RequestEnvelope) -> Terminal | None:
        return run_pipeline(self.route.effective_middleware, envelope, self.context.registry)

    def call_handler(self, envelope: RequestEnvelope) -> Any:
        handler = self.route.handler
        if handler is None:
            # Routes always resolve their handler before registering
            handler = self.context.resolver.resolve(self.route.handler_spec)
        return invoke(handler, envelope)

    def dispatch(self, raw: RawInbound) -> Response:
        """Run the full request cycle for an inbound request this route owns."""
        envelope = self.build_envelope(raw)

        terminal = self.run_middleware(envelope)
        if terminal is not None:
            return self.finish(self.deny(terminal, envelope), envelope)

        # Render and title errors in translate count as handler failures
        try:
            result = self.call_handler(envelope)
            response = self.translate(result, envelope)
        except Exception as exc:
            logger.exception(
                "Handler %s failed on %s %s",
                self.route.describe_handler(),
                envelope.method,
                envelope.path,
            )
            return self.finish(self.failure(exc, envelope), envelope)

        return self.finish(response, envelope)

    def finish(self, response: Response, envelope: RequestEnvelope) -> Response:
        """Add headers queued by middleware that let the request through."""
        for name, value in envelope.deferred_headers:
            if response.header(name) is None:
                response = response.with_header(name, value)
        return response

    # -- Surface rendering --

    def deny(self, terminal: Terminal, envelope: RequestEnvelope) -> Response:
        if isinstance(terminal, RouteError):
            return terminal.to_response()
        return terminal

    def translate(self, result: Any, envelope: RequestEnvelope) -> Response:
        raise NotImplementedError

    def failure(self, exc: Exception, envelope: RequestEnvelope) -> Response:
        return RouteError("internal_server_error", "An unexpected error occurred.", status=500).to_response()
