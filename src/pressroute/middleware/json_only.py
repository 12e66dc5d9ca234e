"""Content negotiation: JSON in, JSON out.

For ``POST``/``PUT``/``PATCH`` the request must declare a JSON content
type and carry a body that parses. Every request must accept JSON back
(a missing ``Accept`` header counts as accepting it).
"""

import json

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError
from pressroute.middleware.protocol import MiddlewareResult

JSON_CONTENT_TYPES = ("application/json", "application/vnd.api+json", "text/json")
_ACCEPTABLE = (*JSON_CONTENT_TYPES, "*/*", "application/*")


class JsonOnlyMiddleware:
    """Enforce JSON request and response bodies."""

    __slots__ = ("body_methods", "require_content_type", "require_json_body")

    def __init__(
        self,
        require_content_type: bool = True,
        require_json_body: bool = True,
        body_methods: tuple[str, ...] = ("POST", "PUT", "PATCH"),
    ) -> None:
        self.require_content_type = require_content_type
        self.require_json_body = require_json_body
        self.body_methods = tuple(method.upper() for method in body_methods)

    def _check_content_type(self, envelope: RequestEnvelope) -> RouteError | None:
        content_type = envelope.content_type
        if not content_type:
            return RouteError("missing_content_type", "Content-Type header is required for this endpoint", status=400)
        main_type = content_type.split(";")[0].strip().lower()
        if main_type not in JSON_CONTENT_TYPES:
            allowed = ", ".join(JSON_CONTENT_TYPES)
            return RouteError(
                "invalid_content_type",
                f"Content-Type must be one of: {allowed}. Received: {main_type}",
                status=415,
            )
        return None

    @staticmethod
    def _check_body(envelope: RequestEnvelope) -> RouteError | None:
        raw = envelope.raw.raw_body
        if not raw:
            return None
        try:
            json.loads(raw)
        except ValueError as exc:
            return RouteError("invalid_json", f"Request body contains invalid JSON: {exc}", status=400)
        return None

    @staticmethod
    def _check_accept(envelope: RequestEnvelope) -> RouteError | None:
        accept = envelope.header("accept")
        if not accept:
            return None
        offered = [part.split(";")[0].strip().lower() for part in accept.split(",")]
        if any(media_type in _ACCEPTABLE for media_type in offered):
            return None
        return RouteError(
            "json_not_acceptable",
            "This endpoint only returns JSON. Please include application/json in your Accept header.",
            status=406,
        )

    def __call__(self, envelope: RequestEnvelope) -> MiddlewareResult:
        if envelope.method in self.body_methods:
            if self.require_content_type:
                error = self._check_content_type(envelope)
                if error is not None:
                    return error
            if self.require_json_body:
                error = self._check_body(envelope)
                if error is not None:
                    return error
        return self._check_accept(envelope)
