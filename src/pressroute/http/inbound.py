"""Raw inbound request data handed over by the host.

``RawInbound`` is the explicit value every surface builds its envelope
from. Hosts translate whatever they natively hold (a structured REST
request, the query/body of a page load, an admin screen submission) into
one of these before calling into a strategy; nothing in pressroute reads
process-wide request state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit


@dataclass(frozen=True, slots=True)
class UploadedFile:
    """An uploaded file from a multipart submission.

    Content is held in memory as bytes (suitable for typical uploads).
    """

    filename: str
    content_type: str
    size: int
    content: bytes = field(default=b"", repr=False)

    def read(self) -> bytes:
        """Return the file content as bytes."""
        return self.content

    def save(self, path: Path) -> None:
        """Write the file content to *path*. Parent directories must exist."""
        path.write_bytes(self.content)


@dataclass(frozen=True, slots=True)
class RawInbound:
    """Everything the host knows about one inbound request.

    Attributes:
        method: Upper-case HTTP verb.
        path: Request path without query string (leading/trailing slashes
            are ignored by matching).
        query: Query-string parameters.
        body: Form-encoded body fields.
        json: Parsed JSON body, or ``None`` when the body was not JSON.
        raw_body: The undecoded body bytes (used by signature checks).
        headers: Header name/value pairs in any casing.
        files: Uploaded files keyed by field name.
        path_params: Parameters the host already extracted (data surface).
        client_ip: Remote address as seen by the host.
    """

    method: str = "GET"
    path: str = "/"
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)
    json: Any = None
    raw_body: bytes = b""
    headers: Mapping[str, Any] = field(default_factory=dict)
    files: Mapping[str, UploadedFile] = field(default_factory=dict)
    path_params: Mapping[str, str] = field(default_factory=dict)
    client_ip: str | None = None

    def with_path_params(self, params: Mapping[str, str]) -> RawInbound:
        """Return a copy carrying *params* as the matched path parameters."""
        return replace(self, path_params=dict(params))

    @classmethod
    def from_url(cls, url: str, *, method: str = "GET", **kwargs: Any) -> RawInbound:
        """Build an inbound request from a URL (path + optional query string).

        Convenience for hosts and tests::

            RawInbound.from_url("/posts/42?preview=1")
        """
        parts = urlsplit(url)
        query = {
            key: values[0] if len(values) == 1 else values
            for key, values in parse_qs(parts.query, keep_blank_values=True).items()
        }
        if "query" in kwargs:
            query = {**query, **kwargs.pop("query")}
        return cls(method=method.upper(), path=parts.path or "/", query=query, **kwargs)
