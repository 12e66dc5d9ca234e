"""pressroute: one route declaration for every surface of a content-management host.

Structured-data endpoints, rendered pages at arbitrary paths, dashboard
panels, and client-triggered actions share one Route type, one
middleware pipeline, and one request envelope.

Basic usage::

    from pressroute import Router, RouterConfig

    router = Router(host, RouterConfig(site_url="https://example.com"))

    router.get("posts/{id:int}", show_post).middleware("auth")
    router.web("welcome", lambda request: {"name": "visitor"}).template("welcome")

    router.register_routes()
"""

__version__ = "0.1.0-dev"
__all__ = [
    "Controller",
    "Deferred",
    "Emitted",
    "FormRequest",
    "Host",
    "RawInbound",
    "RequestEnvelope",
    "Response",
    "Route",
    "RouteError",
    "Router",
    "RouterConfig",
    "RouterError",
    "Surface",
    "get_route_data",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import pressroute`` fast while providing a clean top-level API.
    """
    if name == "Router":
        from pressroute.router import Router

        return Router

    if name == "RouterConfig":
        from pressroute.config import RouterConfig

        return RouterConfig

    if name == "Controller":
        from pressroute.controller import Controller

        return Controller

    if name == "FormRequest":
        from pressroute.validation.form import FormRequest

        return FormRequest

    if name == "Host":
        from pressroute.host import Host

        return Host

    if name in ("Route", "Surface"):
        from pressroute.routing import route as _route

        return getattr(_route, name)

    if name == "RawInbound":
        from pressroute.http.inbound import RawInbound

        return RawInbound

    if name == "RequestEnvelope":
        from pressroute.http.envelope import RequestEnvelope

        return RequestEnvelope

    if name in ("Response", "RouteError", "Emitted", "Deferred"):
        from pressroute.http import response as _resp

        return getattr(_resp, name)

    if name == "get_route_data":
        from pressroute.pages.synthesizer import get_route_data

        return get_route_data

    if name == "RouterError":
        from pressroute.errors import RouterError

        return RouterError

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
