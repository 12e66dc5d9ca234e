"""Webhook verification middleware.

Three checks for inbound webhook deliveries, each denying with 403
``access_denied``:

``signature:<secret>``
    GitHub-style ``X-Hub-Signature-256: sha256=<hex>`` HMAC of the raw body.
``bearer:<token>``
    ``Authorization: Bearer <token>`` must equal the configured token.
``ip:<addr>,<cidr>,...``
    The client address must match one entry (exact or CIDR).
"""

import hashlib
import hmac
import ipaddress
import logging

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError
from pressroute.middleware.protocol import MiddlewareResult
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.middleware")

SIGNATURE_HEADER = "X-Hub-Signature-256"


def _deny(envelope: RequestEnvelope, check: str) -> RouteError:
    logger.info("webhook %s check failed on %s", check, envelope.path)
    emit_security_event("webhook.denied", envelope=envelope, details={"check": check})
    return RouteError("access_denied", "Access Denied", status=403)


def sign_body(body: bytes, secret: str) -> str:
    """The ``sha256=<hex>`` signature a sender computes for *body*."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


def verify_signature(envelope: RequestEnvelope, secret: str) -> MiddlewareResult:
    received = envelope.header(SIGNATURE_HEADER)
    if not received or not hmac.compare_digest(sign_body(envelope.raw.raw_body, secret), received):
        return _deny(envelope, "signature")
    return None


def verify_bearer(envelope: RequestEnvelope, token: str) -> MiddlewareResult:
    authorization = envelope.header("authorization") or ""
    if not authorization.startswith("Bearer "):
        return _deny(envelope, "bearer")
    if not hmac.compare_digest(authorization[len("Bearer ") :].strip(), token):
        return _deny(envelope, "bearer")
    return None


def _ip_matches(client: str, allowed: str) -> bool:
    allowed = allowed.strip()
    if not allowed:
        return False
    if client == allowed:
        return True
    if "/" not in allowed:
        return False
    try:
        return ipaddress.ip_address(client) in ipaddress.ip_network(allowed, strict=False)
    except ValueError:
        return False


def verify_ip(envelope: RequestEnvelope, *allowed: str) -> MiddlewareResult:
    client = envelope.ip
    if any(_ip_matches(client, entry) for entry in allowed):
        return None
    return _deny(envelope, "ip")
