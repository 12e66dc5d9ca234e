"""Nonce (request token) verification.

Tokens are verified through the host's ``verify_token(token, action)``
captured on the envelope. The token is read from the nonce header first,
then from the ``_wpnonce`` input field.

Usage::

    router.post("settings", save).middleware("nonce")               # action "wp_rest"
    router.post("profile", save).middleware("nonce:update_profile")
"""

import logging

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError
from pressroute.middleware.protocol import MiddlewareResult
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.middleware")


class NonceMiddleware:
    """Reject state-changing requests without a valid nonce.

    ``GET`` requests pass through. With ``check_both`` set, the header and
    the input field must both be present and equal.
    """

    __slots__ = ("action", "check_both", "header_name", "parameter_name")

    def __init__(
        self,
        action: str = "wp_rest",
        parameter_name: str = "_wpnonce",
        header_name: str = "X-WP-Nonce",
        check_both: bool = False,
    ) -> None:
        self.action = action
        self.parameter_name = parameter_name
        self.header_name = header_name
        self.check_both = check_both

    def _token(self, envelope: RequestEnvelope, parameter_name: str) -> str | None:
        from_header = envelope.header(self.header_name)
        from_input = envelope.input(parameter_name)
        from_input = str(from_input) if from_input else None
        if self.check_both:
            if from_header and from_input and from_header == from_input:
                return from_header
            return None
        return from_header or from_input

    def __call__(
        self,
        envelope: RequestEnvelope,
        action: str | None = None,
        parameter_name: str | None = None,
    ) -> MiddlewareResult:
        if envelope.method == "GET":
            return None

        if not envelope.is_authenticated():
            return RouteError("unauthenticated", "Authentication required for nonce validation", status=401)

        parameter_name = parameter_name or self.parameter_name
        token = self._token(envelope, parameter_name)
        if not token:
            return RouteError(
                "missing_nonce",
                f"Nonce is required. Please provide it via {self.header_name} header "
                f"or {parameter_name} parameter.",
                status=400,
            )

        purpose = action or self.action
        if not envelope.verify_token(token, purpose):
            logger.info("nonce rejected for %r on %s %s", purpose, envelope.method, envelope.path)
            emit_security_event("nonce.invalid", envelope=envelope, details={"action": purpose})
            return RouteError("invalid_nonce", "Invalid nonce. Please refresh the page and try again.", status=403)
        return None
