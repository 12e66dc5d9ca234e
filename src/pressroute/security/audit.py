"""Security audit events.

Opt-in event channel for authentication and authorization decisions made
by the built-in middleware (denials, nonce failures, rate-limit hits).
Applications register a sink to forward events to logs, metrics, or SIEM.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    surface: str | None = None
    path: str | None = None
    method: str | None = None
    ip: str | None = None
    user_id: int | str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    envelope: Any | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort security event to the configured sink.

    Request context (surface, path, method, client address, user id) is
    read from *envelope* when one is given.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    event = SecurityEvent(
        name=name,
        surface=getattr(envelope, "surface", None),
        path=getattr(envelope, "path", None),
        method=getattr(envelope, "method", None),
        ip=getattr(envelope, "ip", None),
        user_id=getattr(envelope, "user_id", None),
        details=details or {},
    )
    sink(event)
