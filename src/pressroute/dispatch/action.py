"""Action endpoints: client-triggered background actions.

Registered with the host's action dispatcher under the route's action
name. Results follow the host's JSON conventions::

    {"success": true, "data": ...}     mappings and lists
    {"success": false, "data": "..."}  errors, denials, exceptions
    plain text                         any other scalar
"""

import logging
from collections.abc import Mapping
from typing import Any

from pressroute.dispatch.base import Strategy
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.http.response import Response, RouteError, Terminal
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.dispatch")

NONCE_FIELD = "nonce"


def action_error(message: str, status: int = 400) -> Response:
    return Response.json({"success": False, "data": message}, status=status)


class ActionStrategy(Strategy):
    """Registers the route's action name, optionally open to visitors."""

    __slots__ = ()

    @property
    def action(self) -> str:
        return self.route.path

    def register(self) -> None:
        public = self.route.settings.public
        self.context.host.register_action(self.action, self.dispatch, allow_unauthenticated=public)
        logger.debug("Registered action %r (public=%s)", self.action, public)

    def dispatch(self, raw: RawInbound) -> Response:
        # A request carrying a nonce must carry a valid one for this action
        token = raw.body.get(NONCE_FIELD, raw.query.get(NONCE_FIELD))
        if token is not None and not self.context.host.verify_token(str(token), f"ajax_{self.action}"):
            logger.info("Action %r rejected: invalid nonce", self.action)
            emit_security_event("nonce.invalid", details={"action": self.action})
            return action_error("Invalid nonce", status=403)
        return super().dispatch(raw)

    def deny(self, terminal: Terminal, envelope: RequestEnvelope) -> Response:
        if isinstance(terminal, RouteError):
            return action_error(terminal.message, terminal.status).with_headers(dict(terminal.headers))
        return terminal

    def translate(self, result: Any, envelope: RequestEnvelope) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, RouteError):
            return action_error(result.message, result.status)
        if isinstance(result, (Mapping, list, tuple)):
            data = dict(result) if isinstance(result, Mapping) else list(result)
            return Response.json({"success": True, "data": data})
        if result is None:
            return Response(body="", content_type="text/plain; charset=utf-8")
        return Response(body=str(result), content_type="text/plain; charset=utf-8")

    def failure(self, exc: Exception, envelope: RequestEnvelope) -> Response:
        return action_error("An unexpected error occurred.", status=500)
