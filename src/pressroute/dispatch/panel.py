"""Panel endpoints: administrative screens in the host's dashboard.

The host's menu capability is checked before anything else runs. The
handler's result is rendered through the route's template when one
resolves, otherwise through the default panel markup:

* a mapping with ``title``, ``content`` and optional ``tabs``
* a plain string (printed under the panel title)
* nothing (a placeholder paragraph)
"""

import html
import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from pressroute.dispatch.base import Strategy, error_page
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.http.response import Response, RouteError, Terminal
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.dispatch")

PERMISSION_MESSAGE = "You do not have sufficient permissions to access this page."


class PanelStrategy(Strategy):
    """Registers an admin panel under the route's slug."""

    __slots__ = ()

    @property
    def slug(self) -> str:
        return self.route.path

    @property
    def page_title(self) -> str:
        return self.route.settings.page_title or self.slug

    def register(self) -> None:
        settings = self.route.settings
        self.context.host.register_panel(
            self.slug,
            self.page_title,
            settings.capability,
            self.dispatch,
            parent=settings.parent,
            icon=settings.icon,
            position=settings.position,
            menu_title=settings.menu_title or self.page_title,
        )
        logger.debug("Registered panel %r (capability %s)", self.slug, settings.capability)

    def dispatch(self, raw: RawInbound) -> Response:
        capability = self.route.settings.capability
        if not self.context.host.identity_has_capability(capability):
            logger.info("Panel %r denied: missing capability %s", self.slug, capability)
            emit_security_event(
                "capability.denied",
                details={"panel": self.slug, "capability": capability},
            )
            return error_page("Access Denied", PERMISSION_MESSAGE, 403)
        return super().dispatch(raw)

    # -- Request extras --

    def panel_url(self, tab: str | None = None) -> str:
        query = {"page": self.slug}
        if tab is not None:
            query["tab"] = tab
        return f"{self.context.config.admin_base}/admin.php?{urlencode(query)}"

    def request_extras(self, envelope: RequestEnvelope) -> dict[str, Any]:
        """Panel details exposed to templates as ``admin_route_request``."""
        return {
            "slug": self.slug,
            "capability": self.route.settings.capability,
            "nonce": self.context.host.create_token(f"admin_{self.slug}"),
            "ajax_url": self.context.config.action_base,
            "admin_url": self.panel_url(),
            "is_authenticated": envelope.is_authenticated(),
            "user": envelope.identity,
            "query": envelope.query(),
            "body": dict(envelope.raw.body),
        }

    # -- Rendering --

    def deny(self, terminal: Terminal, envelope: RequestEnvelope) -> Response:
        if isinstance(terminal, RouteError):
            return error_page("Access Denied", terminal.message, terminal.status)
        return terminal

    def translate(self, result: Any, envelope: RequestEnvelope) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, RouteError):
            return error_page("Error", result.message, result.status)

        template = self.route.settings.template
        if template:
            synthesizer = self.context.synthesizer
            path = synthesizer.locator.locate(template, "panel")
            if path is not None:
                payload = dict(result) if isinstance(result, Mapping) else {}
                context = {
                    **payload,
                    "admin_route_data": result,
                    "admin_route_request": self.request_extras(envelope),
                    "request": envelope,
                    "title": self.page_title,
                }
                return Response.html(synthesizer.renderer.render_file(path, context))
            logger.debug("Panel template %r unresolved; using default markup", template)

        return Response.html(self.render_default(result, envelope))

    def render_default(self, result: Any, envelope: RequestEnvelope) -> str:
        parts = ['<div class="wrap">']
        if isinstance(result, Mapping):
            title = result.get("title") or self.page_title
            parts.append(f"<h1>{html.escape(str(title))}</h1>")
            if result.get("content") is not None:
                parts.append(str(result["content"]))
            tabs = result.get("tabs")
            if isinstance(tabs, Mapping) and tabs:
                parts.append(self.render_tabs(tabs, envelope.query("tab")))
        elif isinstance(result, str):
            parts.append(f"<h1>{html.escape(self.page_title)}</h1>")
            parts.append(result)
        else:
            parts.append(f"<h1>{html.escape(self.page_title)}</h1>")
            parts.append("<p>No content provided for this admin page.</p>")
        parts.append("</div>")
        return "\n".join(parts)

    def render_tabs(self, tabs: Mapping[str, Any], current: str | None) -> str:
        """Tab navigation; the active tab comes from the ``tab`` query parameter."""
        keys = [str(key) for key in tabs]
        if current not in keys:
            current = keys[0]
        links = ['<nav class="nav-tab-wrapper">']
        for key, label in tabs.items():
            css = "nav-tab nav-tab-active" if str(key) == current else "nav-tab"
            links.append(
                f'<a href="{html.escape(self.panel_url(str(key)))}" class="{css}">{html.escape(str(label))}</a>'
            )
        links.append("</nav>")
        return "".join(links)

    def failure(self, exc: Exception, envelope: RequestEnvelope) -> Response:
        return error_page("Error", "The admin page could not be generated.", 500)
