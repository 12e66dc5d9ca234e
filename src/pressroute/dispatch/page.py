"""Page endpoints: full HTML pages at arbitrary site paths.

The route registers a matcher on the host's page hook. The host calls
every matcher with the inbound request; a matcher that does not own the
path returns ``None`` and the host moves on.

Handler results are normalized onto two variants:

* a non-empty string or ``Emitted`` is the finished body
* ``None``, ``""``, a mapping, or ``Deferred`` is rendered through the
  virtual resource synthesizer
"""

import logging
from collections.abc import Mapping
from typing import Any

from pressroute.dispatch.base import Strategy, error_page
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.http.response import Deferred, Emitted, HandlerResult, Response, RouteError, Terminal

logger = logging.getLogger("pressroute.dispatch")


def normalize_result(result: Any) -> HandlerResult | Terminal:
    """Map whatever a page handler returned onto ``Emitted`` or ``Deferred``."""
    if isinstance(result, (Emitted, Deferred, Response, RouteError)):
        return result
    if result is None or result == "":
        return Deferred()
    if isinstance(result, str):
        return Emitted(result)
    if isinstance(result, Mapping):
        return Deferred(dict(result))
    return Deferred({"data": result})


class PageStrategy(Strategy):
    """Registers a path matcher on the host's page hook."""

    __slots__ = ()

    def register(self) -> None:
        self.context.host.register_page_matcher(self.context.config.page_hook, self.match_and_dispatch)
        logger.debug("Registered page route %s /%s", "|".join(self.route.methods), self.route.path)

    def accepts(self, method: str) -> bool:
        methods = self.route.methods
        method = method.upper()
        return not methods or method in methods or (method == "HEAD" and "GET" in methods)

    def match_and_dispatch(self, raw: RawInbound) -> Response | None:
        """The host-facing matcher: ``None`` when this route does not own *raw*."""
        if not self.accepts(raw.method):
            return None
        params = self.route.path_template.match(raw.path)
        if params is None:
            return None
        return self.dispatch(raw.with_path_params(params))

    # -- Titles --

    def page_title(self, envelope: RequestEnvelope) -> str:
        title = self.route.settings.title
        if callable(title):
            return str(title(envelope))
        if title:
            return str(title)
        path = self.route.path
        return path[:1].upper() + path[1:]

    # -- Rendering --

    def deny(self, terminal: Terminal, envelope: RequestEnvelope) -> Response:
        if isinstance(terminal, RouteError):
            return error_page("Access Denied", terminal.message, terminal.status)
        return terminal

    def translate(self, result: Any, envelope: RequestEnvelope) -> Response:
        if result is None and not self.route.settings.template:
            logger.warning(
                "Page handler %s returned None and route /%s has no template; rendering the built-in page",
                self.route.describe_handler(),
                self.route.path,
            )

        normalized = normalize_result(result)
        match normalized:
            case Response():
                return normalized
            case RouteError():
                return error_page("Error", normalized.message, normalized.status)
            case Emitted(body=body, status=status):
                return Response.html(body, status=status)
            case Deferred(payload=payload):
                return self.context.synthesizer.synthesize(
                    envelope,
                    payload,
                    title=self.page_title(envelope),
                    template=self.route.settings.template,
                )

    def failure(self, exc: Exception, envelope: RequestEnvelope) -> Response:
        return error_page("Route Error", "The page could not be generated.", 500)
