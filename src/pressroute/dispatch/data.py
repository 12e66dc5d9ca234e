"""Data endpoints: structured request in, structured payload out."""

import logging
from typing import Any

from pressroute.dispatch.base import Strategy
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.http.response import Response, RouteError, success_payload
from pressroute.routing.template import normalize_path

logger = logging.getLogger("pressroute.dispatch")


class DataStrategy(Strategy):
    """Registers with the host's structured-data API.

    The host matches the route's pattern within the namespace and passes
    the extracted parameters as ``RawInbound.path_params``. Return values
    become ``{"success": true, "message": ..., "data": ...}`` unless the
    handler returned a ``Response`` or ``RouteError`` itself.
    """

    __slots__ = ()

    def register(self) -> None:
        route = self.route
        namespace = route.effective_namespace or self.context.config.default_namespace
        self.context.host.register_data_endpoint(
            namespace,
            route.path_template.host_pattern,
            route.methods,
            self.dispatch,
            self.permission,
        )
        logger.debug("Registered data route %s /%s/%s", "|".join(route.methods), namespace, route.path)

    @staticmethod
    def permission(raw: RawInbound) -> bool:
        # Access control is the middleware pipeline's job
        return True

    def build_envelope(self, raw: RawInbound) -> RequestEnvelope:
        template = self.route.path_template
        if not raw.path_params and not template.is_plain:
            # Hosts that do not extract parameters pass the full route path
            path = normalize_path(raw.path)
            namespace = normalize_path(self.route.effective_namespace or "")
            if namespace and path.startswith(f"{namespace}/"):
                path = path[len(namespace) + 1 :]
            params = template.match(path)
            if params:
                raw = raw.with_path_params(params)
        return super().build_envelope(raw)

    def translate(self, result: Any, envelope: RequestEnvelope) -> Response:
        if isinstance(result, Response):
            return result
        if isinstance(result, RouteError):
            return result.to_response()
        return Response.json(success_payload(result))
