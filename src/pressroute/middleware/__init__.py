"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    def mw(envelope: RequestEnvelope, *args) -> Response | RouteError | None

Built-in names (seeded into every router's registry):
    auth -- 401 unless the request is authenticated
    capability:<cap> -- 401/403 unless the identity holds a capability
    rate_limit:<requests>,<window> -- fixed-window limiter (429)
    cors[:<origin>,...] -- CORS preflight and response headers
    validate:<field>,... -- required-field validation (422)
    json_only -- JSON content type, body, and Accept enforcement
    nonce[:<action>] -- request token verification
    signature:<secret> / bearer:<token> / ip:<addr>,... -- webhook checks
"""

from typing import Any

from pressroute.config import RouterConfig
from pressroute.middleware.auth import AuthMiddleware, CapabilityMiddleware
from pressroute.middleware.builtin import CORSConfig, CORSMiddleware
from pressroute.middleware.json_only import JsonOnlyMiddleware
from pressroute.middleware.nonce import NonceMiddleware
from pressroute.middleware.pipeline import run_pipeline
from pressroute.middleware.protocol import Middleware, MiddlewareResult
from pressroute.middleware.rate_limit import CounterStore, MemoryCounterStore, RateLimitMiddleware
from pressroute.middleware.registry import Factory, MethodTarget, MiddlewareRegistry
from pressroute.middleware.validation import ValidationMiddleware
from pressroute.middleware.webhook import verify_bearer, verify_ip, verify_signature

__all__ = [
    "AuthMiddleware",
    "CORSConfig",
    "CORSMiddleware",
    "CapabilityMiddleware",
    "CounterStore",
    "Factory",
    "JsonOnlyMiddleware",
    "MemoryCounterStore",
    "MethodTarget",
    "Middleware",
    "MiddlewareRegistry",
    "MiddlewareResult",
    "NonceMiddleware",
    "RateLimitMiddleware",
    "ValidationMiddleware",
    "builtin_middleware",
    "run_pipeline",
]


def builtin_middleware(
    config: RouterConfig,
    store: CounterStore,
    cors: CORSConfig | None = None,
) -> dict[str, Any]:
    """Registry targets for every built-in name.

    Class-backed built-ins are factories, so each lookup builds a fresh
    instance bound to this router's config and counter store.
    """
    return {
        "auth": AuthMiddleware,
        "capability": CapabilityMiddleware,
        "rate_limit": Factory(
            lambda: RateLimitMiddleware(store, config.rate_limit_requests, config.rate_limit_window)
        ),
        "cors": Factory(lambda: CORSMiddleware(cors)),
        "validate": ValidationMiddleware,
        "json_only": JsonOnlyMiddleware,
        "nonce": Factory(
            lambda: NonceMiddleware(
                action=config.rest_nonce_action,
                parameter_name=config.nonce_param,
                header_name=config.nonce_header,
            )
        ),
        "signature": verify_signature,
        "bearer": verify_bearer,
        "ip": verify_ip,
    }
