"""Authentication and capability middleware.

Both read only the envelope: identity, session state, and the host's
capability check were captured when the envelope was built.

Usage::

    router.get("me", profile).middleware("auth")
    router.delete("posts/{id}", destroy).middleware("capability:delete_posts")

    # Check the capability against the routed object ("id" path parameter)
    router.put("posts/{id}", update).middleware(("capability", "edit_post", True))
"""

import logging

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError
from pressroute.middleware.protocol import MiddlewareResult
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.middleware")


class AuthMiddleware:
    """Reject requests without an authenticated identity (401)."""

    __slots__ = ()

    def __call__(self, envelope: RequestEnvelope) -> MiddlewareResult:
        if envelope.is_authenticated():
            return None
        logger.info("auth denied %s %s", envelope.method, envelope.path)
        emit_security_event("auth.denied", envelope=envelope)
        return RouteError("rest_not_logged_in", "You are not currently logged in.", status=401)


class CapabilityMiddleware:
    """Require a capability of the current identity.

    401 when nobody is signed in, 403 when the identity lacks the
    capability. With ``with_object`` set, the capability is checked
    against the ``id`` path parameter (or input field) when present.
    """

    __slots__ = ()

    def __call__(
        self,
        envelope: RequestEnvelope,
        capability: str = "read",
        with_object: bool | str = False,
    ) -> MiddlewareResult:
        if not envelope.is_authenticated():
            emit_security_event("auth.denied", envelope=envelope, details={"capability": capability})
            return RouteError("unauthenticated", "Authentication required", status=401)

        object_id = None
        if with_object and with_object not in ("0", "false"):
            object_id = envelope.param("id") or envelope.input("id")

        allowed = envelope.can(capability, object_id) if object_id else envelope.can(capability)
        if allowed:
            return None

        logger.info("capability %r denied %s %s", capability, envelope.method, envelope.path)
        emit_security_event("capability.denied", envelope=envelope, details={"capability": capability})
        if object_id:
            message = f"You do not have permission to {capability} this resource"
        else:
            message = f'You need the "{capability}" capability to access this resource'
        return RouteError("insufficient_capability", message, status=403)
