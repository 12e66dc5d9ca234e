"""Security utilities: audit events and signed request tokens.

Audit events (opt-in)::

    from pressroute.security import set_security_event_sink

    set_security_event_sink(lambda event: log.warning("%s %s", event.name, event.path))

Signed tokens for hosts without a nonce primitive::

    from pressroute.security import TokenSigner

    signer = TokenSigner("secret")
    token = signer.create("wp_rest", subject=7)
"""

from pressroute.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from pressroute.security.tokens import TokenSigner

__all__ = [
    "SecurityEvent",
    "TokenSigner",
    "emit_security_event",
    "set_security_event_sink",
]
