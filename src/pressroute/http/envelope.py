"""Surface-agnostic request envelope.

Every strategy builds one of these from the host's ``RawInbound`` before
middleware runs. The envelope is honest about what it is: data captured
once at construction. Identity, session state, and the token verifier are
read from the host up front, so accessors never call back into ambient
host state.

The one writable slot is the validated-data side channel, populated by
the validation middleware and read by handlers.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pressroute.http.headers import Headers
from pressroute.http.inbound import RawInbound, UploadedFile

if TYPE_CHECKING:
    from pressroute.config import RouterConfig
    from pressroute.host import Host, Identity

_MISSING = object()


@dataclass(frozen=True, slots=True)
class RequestEnvelope:
    """A read-only view over one inbound request.

    Build with :meth:`capture` from strategies; construct directly in tests
    when no host is involved.

    Input precedence for :meth:`input` and :meth:`all` is
    query < path < body < JSON: a JSON field beats a body field of the
    same name, which beats a path parameter, which beats a query value.
    """

    raw: RawInbound
    headers: Headers
    surface: str = "data"
    identity: Identity | None = None
    session_active: bool = False
    nonce_header: str = "X-WP-Nonce"
    nonce_param: str = "_wpnonce"
    rest_nonce_action: str = "wp_rest"

    # Host callables captured at construction
    _verify_token: Callable[[str, str], bool] | None = field(default=None, repr=False)
    _has_capability: Callable[..., bool] | None = field(default=None, repr=False)

    # Private: validated data written by validation middleware
    _state: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def capture(
        cls,
        raw: RawInbound,
        host: Host,
        config: RouterConfig,
        surface: str,
    ) -> RequestEnvelope:
        """Snapshot *raw* together with the host's identity and session state."""
        return cls(
            raw=raw,
            headers=Headers(raw.headers),
            surface=surface,
            identity=host.current_identity(),
            session_active=bool(host.is_session_active()),
            nonce_header=config.nonce_header,
            nonce_param=config.nonce_param,
            rest_nonce_action=config.rest_nonce_action,
            _verify_token=host.verify_token,
            _has_capability=host.identity_has_capability,
        )

    @classmethod
    def from_inbound(cls, raw: RawInbound, **kwargs: Any) -> RequestEnvelope:
        """Build an envelope without a host (tests, offline tooling)."""
        return cls(raw=raw, headers=Headers(raw.headers), **kwargs)

    # -- Request line --

    @property
    def method(self) -> str:
        return self.raw.method.upper()

    @property
    def path(self) -> str:
        return self.raw.path

    # -- Parameters --

    def param(self, name: str, default: Any = None) -> Any:
        """A path parameter extracted by the route template."""
        return self.raw.path_params.get(name, default)

    @property
    def params(self) -> dict[str, str]:
        return dict(self.raw.path_params)

    def query(self, name: str | None = None, default: Any = None) -> Any:
        """A query-string parameter, or all of them when *name* is omitted."""
        if name is None:
            return dict(self.raw.query)
        return self.raw.query.get(name, default)

    def json(self, name: str | None = None, default: Any = None) -> Any:
        """A field of the JSON body, or the whole decoded body."""
        data = self.raw.json
        if name is None:
            return data if data is not None else {}
        if isinstance(data, Mapping):
            return data.get(name, default)
        return default

    def all(self) -> dict[str, Any]:
        """Every input field merged with query < path < body < JSON precedence."""
        merged: dict[str, Any] = {}
        merged.update(self.raw.query)
        merged.update(self.raw.path_params)
        merged.update(self.raw.body)
        if isinstance(self.raw.json, Mapping):
            merged.update(self.raw.json)
        return merged

    def input(self, name: str | None = None, default: Any = None) -> Any:
        """One merged input field, or all of them when *name* is omitted."""
        if name is None:
            return self.all()
        return self.all().get(name, default)

    def only(self, names: Iterable[str]) -> dict[str, Any]:
        data = self.all()
        return {name: data[name] for name in names if name in data}

    def except_(self, names: Iterable[str]) -> dict[str, Any]:
        excluded = set(names)
        return {key: value for key, value in self.all().items() if key not in excluded}

    def has(self, name: str) -> bool:
        """True when *name* is present and neither ``None`` nor ``""``."""
        value = self.all().get(name, _MISSING)
        return value is not _MISSING and value is not None and value != ""

    def filled(self, name: str) -> bool:
        """True when *name* is present and truthy."""
        return self.has(name) and bool(self.input(name))

    # -- Headers --

    def header(self, name: str, default: str | None = None) -> str | None:
        """A header value, matched case-insensitively."""
        return self.headers.get(name, default)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent") or ""

    @property
    def ip(self) -> str:
        """Client address, preferring proxy headers over the socket address."""
        forwarded = self.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return self.headers.get("x-real-ip") or self.raw.client_ip or "127.0.0.1"

    def wants_json(self) -> bool:
        """True if the client's Accept header mentions JSON."""
        return "application/json" in (self.headers.get("accept") or "")

    def is_json(self) -> bool:
        """True if the request body was sent as JSON."""
        return "application/json" in (self.content_type or "")

    # -- Files --

    def file(self, name: str) -> UploadedFile | None:
        return self.raw.files.get(name)

    def has_file(self, name: str) -> bool:
        return name in self.raw.files

    @property
    def files(self) -> dict[str, UploadedFile]:
        return dict(self.raw.files)

    # -- Identity --

    @property
    def user_id(self) -> int | str | None:
        return self.identity.id if self.identity is not None else None

    def is_authenticated(self) -> bool:
        """True on the first positive signal.

        Checked in order: the host session, a REST token from the nonce
        header or query parameter, then the resolved identity.
        """
        if self.session_active:
            return True
        token = self.header(self.nonce_header) or self.raw.query.get(self.nonce_param)
        if token and self._verify_token is not None:
            if self._verify_token(str(token), self.rest_nonce_action):
                return True
        return self.identity is not None and bool(self.identity.id)

    def can(self, capability: str, *args: Any) -> bool:
        """Whether the current identity holds *capability*."""
        if self._has_capability is None:
            return False
        return bool(self._has_capability(capability, *args))

    # -- Nonces --

    def nonce(self, name: str | None = None) -> str | None:
        """The nonce field from merged input (``_wpnonce`` by default)."""
        value = self.input(name or self.nonce_param)
        return str(value) if value else None

    def verify_nonce(self, action: str, name: str | None = None) -> bool:
        token = self.nonce(name)
        return bool(token) and self.verify_token(token, action)

    def verify_token(self, token: str, purpose: str) -> bool:
        """Check *token* with the host's verifier (False when there is none)."""
        if self._verify_token is None:
            return False
        return bool(self._verify_token(token, purpose))

    # -- Validated data --

    def validated(self, name: str | None = None, default: Any = None) -> Any:
        """Data accepted by the validation middleware."""
        data = self._state.get("validated", {})
        if name is None:
            return dict(data)
        return data.get(name, default)

    def has_validated(self) -> bool:
        return bool(self._state.get("validated"))

    def set_validated(self, data: Mapping[str, Any]) -> None:
        """Record validated data. Only the validation middleware calls this."""
        self._state["validated"] = dict(data)

    # -- Response headers --

    def defer_header(self, name: str, value: str) -> None:
        """Queue a header for whatever response this request ends with.

        Lets middleware that lets the request through (CORS, rate limit)
        still decorate the handler's response.
        """
        self._state.setdefault("response_headers", []).append((name, str(value)))

    @property
    def deferred_headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._state.get("response_headers", ()))
