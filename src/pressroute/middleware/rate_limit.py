"""Fixed-window rate limiting.

Requests are counted per identity (``user_{id}``) or, for anonymous
clients, per address (``ip_{addr}``), in windows aligned to multiples of
the window length. Each client has one counter, which expires at the end
of its window.

Counting goes through a ``CounterStore``. Stores that provide an atomic
``incr`` are used atomically. Stores with only ``get``/``set`` fall back
to read-then-write: two concurrent requests may both read the same count,
so a burst can overshoot the limit by the number of racing requests.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, runtime_checkable

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError
from pressroute.middleware.protocol import MiddlewareResult
from pressroute.security.audit import emit_security_event

logger = logging.getLogger("pressroute.middleware")


class CounterStore(Protocol):
    """Minimal key/value store for counters (a host's transient cache).

    ``ttl`` is in seconds; stores may round it to whole seconds.
    """

    def get(self, key: str) -> int | None: ...

    def set(self, key: str, value: int, ttl: float) -> None: ...


@runtime_checkable
class AtomicCounterStore(CounterStore, Protocol):
    """A counter store with an atomic increment."""

    def incr(self, key: str, ttl: float) -> int: ...


class MemoryCounterStore:
    """Process-local counter store with expiry.

    ``incr`` holds a lock, so it is atomic across threads of one process.
    Expired entries are dropped when read and, at most once per
    ``sweep_interval`` seconds, swept on write.
    """

    __slots__ = ("_clock", "_data", "_lock", "_next_sweep", "sweep_interval")

    def __init__(self, clock: Callable[[], float] = time.time, sweep_interval: float = 60.0) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (value, expires_at)
        self._data: dict[str, tuple[int, float]] = {}
        self.sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _live(self, key: str, now: float) -> int | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at <= now:
            del self._data[key]
            return None
        return value

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.sweep_interval
        expired = [key for key, (_, expires_at) in self._data.items() if expires_at <= now]
        for key in expired:
            del self._data[key]

    def get(self, key: str) -> int | None:
        with self._lock:
            return self._live(key, self._clock())

    def set(self, key: str, value: int, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            self._data[key] = (value, now + ttl)

    def incr(self, key: str, ttl: float) -> int:
        with self._lock:
            now = self._clock()
            self._sweep(now)
            current = self._live(key, now)
            if current is None:
                self._data[key] = (1, now + ttl)
                return 1
            expires_at = self._data[key][1]
            self._data[key] = (current + 1, expires_at)
            return current + 1

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class RateLimitMiddleware:
    """At most ``requests`` per ``window`` seconds per client.

    Arguments may come from the route (``"rate_limit:10,60"`` or
    ``("rate_limit", 10, 60)``); otherwise the defaults given here apply.
    """

    __slots__ = ("_clock", "default_requests", "default_window", "store")

    def __init__(
        self,
        store: CounterStore,
        default_requests: int = 60,
        default_window: int = 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.default_requests = default_requests
        self.default_window = default_window
        self._clock = clock

    @staticmethod
    def identifier(envelope: RequestEnvelope) -> str:
        if envelope.is_authenticated() and envelope.user_id:
            return f"user_{envelope.user_id}"
        return f"ip_{envelope.ip}"

    def _count(self, key: str, ttl: float) -> int:
        if isinstance(self.store, AtomicCounterStore):
            return self.store.incr(key, ttl)
        count = (self.store.get(key) or 0) + 1
        self.store.set(key, count, ttl)
        return count

    def __call__(
        self,
        envelope: RequestEnvelope,
        requests: int | str | None = None,
        window: int | str | None = None,
    ) -> MiddlewareResult:
        limit = int(requests) if requests is not None else self.default_requests
        length = max(1, int(window) if window is not None else self.default_window)

        now = self._clock()
        bucket = int(now // length)
        reset_at = (bucket + 1) * length
        key = f"pressroute_rate_limit:{self.identifier(envelope)}:{length}"
        count = self._count(key, ttl=reset_at - now)

        if count > limit:
            retry_after = max(1, int(reset_at - now))
            logger.info("rate limit hit for %s on %s", self.identifier(envelope), envelope.path)
            emit_security_event(
                "rate_limit.exceeded",
                envelope=envelope,
                details={"limit": limit, "window": length},
            )
            return RouteError(
                "rest_too_many_requests",
                "Too many requests. Please try again later.",
                status=429,
                headers=(
                    ("X-RateLimit-Limit", str(limit)),
                    ("X-RateLimit-Remaining", "0"),
                    ("X-RateLimit-Reset", str(reset_at)),
                    ("Retry-After", str(retry_after)),
                ),
            )

        envelope.defer_header("X-RateLimit-Limit", str(limit))
        envelope.defer_header("X-RateLimit-Remaining", str(max(0, limit - count)))
        return None
