"""Virtual resource synthesis for page routes.

When a page handler returns data instead of a finished body, the
synthesizer:

1. stores the payload where templates can read it (``get_route_data()``)
2. builds a ``VirtualResource`` with the sentinel ID
3. forces the host's active query state onto that resource
4. locates the route's template file
5. renders it with the payload as ``route_data`` and as individual
   variables (``route_data``, ``post``, ``request`` and ``title`` are
   reserved and never shadowed by payload keys)

A missing template is not an error: the built-in renderer shows the
title and the raw payload.
"""

import logging
from collections.abc import Mapping
from contextvars import ContextVar
from typing import Any

from pressroute.config import RouterConfig
from pressroute.host import Host
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import Response
from pressroute.pages.resource import VirtualResource, force_query_state
from pressroute.pages.templates import TemplateLocator
from pressroute.templating.integration import TemplateRenderer

logger = logging.getLogger("pressroute.pages")

RESERVED_NAMES = frozenset({"route_data", "post", "request", "title"})

_route_data: ContextVar[Mapping[str, Any] | None] = ContextVar("pressroute_route_data", default=None)


def get_route_data(name: str | None = None, default: Any = None) -> Any:
    """The payload of the page currently being rendered.

    Available to templates (as a global) and to any code running during
    the render. Outside a render it returns *default* (or ``{}``).
    """
    data = _route_data.get()
    if name is None:
        return dict(data) if data is not None else ({} if default is None else default)
    if data is None:
        return default
    return data.get(name, default)


class VirtualResourceSynthesizer:
    """Builds the virtual page and renders it."""

    __slots__ = ("config", "host", "locator", "renderer")

    def __init__(
        self,
        host: Host,
        config: RouterConfig,
        locator: TemplateLocator,
        renderer: TemplateRenderer,
    ) -> None:
        self.host = host
        self.config = config
        self.locator = locator
        self.renderer = renderer
        renderer.add_global("get_route_data", get_route_data)

    def build_resource(self, envelope: RequestEnvelope, title: str, template: str | None) -> VirtualResource:
        return VirtualResource.build(
            title=title,
            path=envelope.path,
            site_url=self.config.site_url,
            author=envelope.user_id if envelope.is_authenticated() else None,
            template=template,
        )

    def synthesize(
        self,
        envelope: RequestEnvelope,
        payload: Mapping[str, Any],
        *,
        title: str,
        template: str | None = None,
        status: int = 200,
    ) -> Response:
        """Render *payload* through a virtual resource for *envelope*."""
        token = _route_data.set(payload)
        try:
            resource = self.build_resource(envelope, title, template)

            state = self.host.active_query_state()
            if state is None:
                logger.debug("Host has no active query state; skipping query splice")
            else:
                force_query_state(state, resource)

            path = self.locator.locate(template, "page")
            if path is None:
                if template:
                    logger.debug("Template %r unresolved; using built-in renderer", template)
                body = self.renderer.render_builtin(title, dict(payload))
            else:
                context = {
                    **payload,
                    "route_data": dict(payload),
                    "post": resource,
                    "request": envelope,
                    "title": title,
                }
                body = self.renderer.render_file(path, context)
        finally:
            _route_data.reset(token)

        return Response.html(body, status=status)
