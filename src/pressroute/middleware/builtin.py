"""Built-in middleware: CORS.

Answers preflight ``OPTIONS`` requests itself and queues the CORS headers
for every other response.
"""

import re
from dataclasses import dataclass, replace

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import Response, RouteError
from pressroute.middleware.protocol import MiddlewareResult


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    Defaults allow any origin. Narrow what you need::

        CORSConfig(
            allow_origins=("https://example.com", "https://*.example.com"),
            allow_methods=("GET", "POST"),
        )
    """

    allow_origins: tuple[str, ...] = ("*",)
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = (
        "Accept",
        "Authorization",
        "Content-Type",
        "X-Requested-With",
        "X-WP-Nonce",
        "Cache-Control",
        "X-API-Key",
    )
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = True
    max_age: int = 86400  # 24 hours


def _origin_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile("^" + re.escape(pattern).replace(r"\*", ".*") + "$")


class CORSMiddleware:
    """CORS handling for one route or the whole router.

    Handles:
    - Preflight ``OPTIONS`` requests (204 with CORS headers, or a 403/405
      error when the origin, method, or a requested header is not allowed)
    - Actual requests (CORS headers queued on the envelope, 403 for
      disallowed origins)
    - Wildcard origin patterns (``https://*.example.com``)

    Origins passed as route arguments (``route.cors("https://a.test")``)
    replace the configured allow list for that route.
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    @staticmethod
    def _is_allowed_origin(origin: str | None, allowed: tuple[str, ...]) -> bool:
        # No Origin header: same-origin request
        if not origin:
            return True
        if "*" in allowed or origin in allowed:
            return True
        return any("*" in pattern and _origin_pattern(pattern).match(origin) for pattern in allowed)

    def _cors_headers(self, config: CORSConfig, origin: str | None, preflight: bool) -> list[tuple[str, str]]:
        headers: list[tuple[str, str]] = []
        if origin and self._is_allowed_origin(origin, config.allow_origins):
            headers.append(("Access-Control-Allow-Origin", origin))
        else:
            headers.append(("Access-Control-Allow-Origin", "*" if "*" in config.allow_origins else config.allow_origins[0]))
        headers.append(("Access-Control-Allow-Methods", ", ".join(config.allow_methods)))
        if config.allow_headers:
            headers.append(("Access-Control-Allow-Headers", ", ".join(config.allow_headers)))
        if config.expose_headers:
            headers.append(("Access-Control-Expose-Headers", ", ".join(config.expose_headers)))
        if config.allow_credentials:
            headers.append(("Access-Control-Allow-Credentials", "true"))
        if preflight:
            headers.append(("Access-Control-Max-Age", str(config.max_age)))
        headers.append(("Vary", "Origin, Access-Control-Request-Method, Access-Control-Request-Headers"))
        return headers

    def _preflight(self, envelope: RequestEnvelope, config: CORSConfig, origin: str | None) -> MiddlewareResult:
        if not self._is_allowed_origin(origin, config.allow_origins):
            return RouteError("cors_origin_not_allowed", "CORS: Origin not allowed for preflight", status=403)

        requested_method = envelope.header("access-control-request-method")
        allowed_methods = {method.upper() for method in config.allow_methods}
        if requested_method and "*" not in allowed_methods and requested_method.upper() not in allowed_methods:
            return RouteError("cors_method_not_allowed", "CORS: Method not allowed", status=405)

        requested_headers = envelope.header("access-control-request-headers")
        if requested_headers:
            allowed_headers = {header.lower() for header in config.allow_headers}
            for header in (h.strip() for h in requested_headers.split(",")):
                if header and "*" not in allowed_headers and header.lower() not in allowed_headers:
                    return RouteError(
                        "cors_header_not_allowed",
                        f"CORS: Header '{header}' not allowed",
                        status=403,
                    )

        response = Response(body="", status=204)
        for name, value in self._cors_headers(config, origin, preflight=True):
            response = response.with_header(name, value)
        return response

    def __call__(self, envelope: RequestEnvelope, *origins: str) -> MiddlewareResult:
        config = replace(self.config, allow_origins=tuple(origins)) if origins else self.config
        origin = envelope.header("origin")

        if envelope.method == "OPTIONS":
            return self._preflight(envelope, config, origin)

        if not self._is_allowed_origin(origin, config.allow_origins):
            return RouteError("cors_origin_not_allowed", "CORS: Origin not allowed", status=403)

        for name, value in self._cors_headers(config, origin, preflight=False):
            envelope.defer_header(name, value)
        return None
