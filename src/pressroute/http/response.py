"""Responses, terminal errors, and page handler results.

``Response`` and ``RouteError`` are immutable; each ``.with_*()`` call
returns a new value. Middleware returns either of them to short-circuit
the pipeline, handlers may return them to bypass result translation.

Page handlers may additionally return ``Emitted`` (the body is final) or
``Deferred`` (render the payload through the virtual resource).
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
HTML_CONTENT_TYPE = "text/html; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """A response built through immutable transformations.

    ``body`` is a string for HTML/text responses and any JSON-serializable
    value for JSON responses; the host does the final serialization.
    """

    body: Any = ""
    status: int = 200
    content_type: str = HTML_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    # -- Factories --

    @classmethod
    def json(cls, data: Any, status: int = 200) -> Response:
        """A JSON response carrying *data* unserialized."""
        return cls(body=data, status=status, content_type=JSON_CONTENT_TYPE)

    @classmethod
    def html(cls, body: str, status: int = 200) -> Response:
        """A text/html response."""
        return cls(body=body, status=status, content_type=HTML_CONTENT_TYPE)

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple((name, str(value)) for name, value in headers.items())
        return replace(self, headers=(*self.headers, *new))

    # -- Accessors --

    @property
    def is_json(self) -> bool:
        return self.content_type.startswith("application/json")

    @property
    def text(self) -> str:
        """The body as text, serializing JSON bodies."""
        if self.is_json:
            return json_module.dumps(self.body, default=str)
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return str(self.body)

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the first header value for *name* (case-insensitive)."""
        lower = name.lower()
        for key, value in self.headers:
            if key.lower() == lower:
                return value
        return default


@dataclass(frozen=True, slots=True)
class RouteError:
    """A terminal error result.

    Returned (never raised) by middleware and handlers. Each surface
    renders it in its own way: a structured error object for data
    endpoints, an access-denied page for pages and panels, a JSON error
    payload for actions.

    Attributes:
        code: Machine-readable error code (``"rest_not_logged_in"``).
        message: Human-readable message.
        status: HTTP status equivalent.
        errors: Field -> messages, for validation failures only.
        headers: Extra headers to emit with the error.
    """

    code: str
    message: str
    status: int = 400
    errors: Mapping[str, list[str]] | None = None
    details: Any = None
    headers: tuple[tuple[str, str], ...] = ()

    def with_header(self, name: str, value: str) -> RouteError:
        """Return a new RouteError with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def to_dict(self) -> dict[str, Any]:
        """The structured error shape: ``{code, message, data: {status, ...}}``."""
        data: dict[str, Any] = {"status": self.status}
        if self.errors is not None:
            data["errors"] = {name: list(messages) for name, messages in self.errors.items()}
        if self.details is not None:
            data["details"] = self.details
        return {"code": self.code, "message": self.message, "data": data}

    def to_response(self) -> Response:
        """Render as a JSON Response with the error's status and headers."""
        return Response(
            body=self.to_dict(),
            status=self.status,
            content_type=JSON_CONTENT_TYPE,
            headers=self.headers,
        )


def validation_failed(errors: Mapping[str, list[str]]) -> RouteError:
    """A 422 ``validation_failed`` error carrying per-field messages."""
    return RouteError(
        code="validation_failed",
        message="Validation failed",
        status=422,
        errors=dict(errors),
    )


def success_payload(data: Any = None, message: str = "Success") -> dict[str, Any]:
    """The standard success envelope: ``{success, message, data?}``."""
    payload: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        payload["data"] = data
    return payload


# -- Page handler results --


@dataclass(frozen=True, slots=True)
class Emitted:
    """The handler produced the final page body itself."""

    body: str
    status: int = 200


@dataclass(frozen=True, slots=True)
class Deferred:
    """The handler produced data; render it through the virtual resource."""

    payload: Mapping[str, Any] = field(default_factory=dict)


type HandlerResult = Emitted | Deferred
type Terminal = Response | RouteError
