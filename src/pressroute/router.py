"""The Router: declaration surface and owner of every registry.

Mutable during setup (route declaration, middleware, controllers,
template filters). Routes register with the host when
``register_routes()`` runs; routes declared later can be registered by
calling it again, already-registered routes are left alone.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pressroute._internal.types import HandlerFunc, MiddlewareEntry
from pressroute.config import RouterConfig
from pressroute.dispatch.context import DispatchContext
from pressroute.host import Host
from pressroute.middleware import builtin_middleware
from pressroute.middleware.builtin import CORSConfig
from pressroute.middleware.rate_limit import CounterStore, MemoryCounterStore
from pressroute.middleware.registry import MiddlewareRegistry
from pressroute.pages.synthesizer import VirtualResourceSynthesizer
from pressroute.pages.templates import TemplateLocator
from pressroute.routing.handlers import HandlerResolver, HandlerSpec
from pressroute.routing.manager import GroupSpec, RouteManager
from pressroute.routing.route import Route, Surface
from pressroute.templating.integration import TemplateRenderer

ALL_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")

# action -> (method, path suffix)
RESOURCE_ACTIONS: dict[str, tuple[str, str]] = {
    "index": ("GET", ""),
    "show": ("GET", "{id:int}"),
    "store": ("POST", ""),
    "update": ("PUT", "{id:int}"),
    "destroy": ("DELETE", "{id:int}"),
}


def _no_content(request: Any) -> None:
    return None


class Router:
    """Declares routes on four host surfaces.

    Usage::

        router = Router(host, RouterConfig(site_url="https://example.com"))

        router.get("posts/{id:int}", show_post).name("posts.show")
        router.web("dashboard", dashboard).template("dashboard").private()
        router.admin("my-plugin", "My Plugin", settings_panel).can("manage_options")
        router.ajax("save_draft", save_draft)

        with router.group({"prefix": "v1", "middleware": ["auth"]}):
            router.resource("products", "ProductController")

        router.register_routes()
    """

    __slots__ = (
        "_manager",
        "_renderer",
        "config",
        "context",
        "host",
        "registry",
        "resolver",
        "store",
    )

    def __init__(
        self,
        host: Host,
        config: RouterConfig | None = None,
        *,
        store: CounterStore | None = None,
        cors: CORSConfig | None = None,
        controller_packages: Iterable[str] = (),
        filters: Mapping[str, Callable[..., Any]] | None = None,
        globals_: Mapping[str, Any] | None = None,
    ) -> None:
        self.host = host
        self.config: RouterConfig = config or RouterConfig()
        self.store: CounterStore = store if store is not None else MemoryCounterStore()
        self.registry = MiddlewareRegistry(builtin_middleware(self.config, self.store, cors))
        self.resolver = HandlerResolver(controller_packages)

        self._renderer = TemplateRenderer(self.config, filters, globals_)
        synthesizer = VirtualResourceSynthesizer(
            host,
            self.config,
            TemplateLocator(self.config, host),
            self._renderer,
        )
        self.context = DispatchContext(
            host=host,
            config=self.config,
            registry=self.registry,
            resolver=self.resolver,
            synthesizer=synthesizer,
        )
        self._manager = RouteManager(self.context)
        self._renderer.add_global("url_for", self.url_for)

    @property
    def manager(self) -> RouteManager:
        return self._manager

    # -- Data routes --

    def route(self, surface: Surface | str, methods: Iterable[str], path: str, handler: HandlerSpec) -> Route:
        """Declare a route on any surface. The verb helpers below cover the usual cases."""
        return Route(surface, methods, path, handler, manager=self._manager)

    def get(self, path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, ("GET",), path, handler)

    def post(self, path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, ("POST",), path, handler)

    def put(self, path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, ("PUT",), path, handler)

    def patch(self, path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, ("PATCH",), path, handler)

    def delete(self, path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, ("DELETE",), path, handler)

    def any(self, path: str, handler: HandlerSpec) -> Route:
        """A data route answering every verb."""
        return self.route(Surface.DATA, ALL_METHODS, path, handler)

    def match(self, methods: Iterable[str], path: str, handler: HandlerSpec) -> Route:
        return self.route(Surface.DATA, methods, path, handler)

    def webhook(self, path: str, handler: HandlerSpec) -> Route:
        """A POST data route meant for third-party deliveries.

        Chain ``.signature()``, ``.bearer()`` or ``.allow_ips()`` to verify
        the sender.
        """
        return self.route(Surface.DATA, ("POST",), path, handler)

    def resource(
        self,
        name: str,
        controller: str | type,
        *,
        only: Iterable[str] | None = None,
        except_: Iterable[str] = (),
    ) -> dict[str, Route]:
        """Declare the index/show/store/update/destroy routes for *controller*.

        Routes are named ``"{name}.{action}"``; item routes take an
        integer ``id``.
        """
        excluded = set(except_)
        selected = RESOURCE_ACTIONS if only is None else only
        actions = [action for action in selected if action not in excluded]
        routes: dict[str, Route] = {}
        for action in actions:
            if action not in RESOURCE_ACTIONS:
                continue
            method, suffix = RESOURCE_ACTIONS[action]
            path = f"{name}/{suffix}" if suffix else name
            handler = f"{controller}@{action}" if isinstance(controller, str) else (controller, action)
            routes[action] = self.route(Surface.DATA, (method,), path, handler).name(f"{name}.{action}")
        return routes

    # -- Other surfaces --

    def web(
        self,
        path: str,
        handler: HandlerSpec | None = None,
        methods: Iterable[str] = ("GET",),
    ) -> Route:
        """A page route. Without a handler the page renders its template alone."""
        return self.route(Surface.PAGE, methods, path, handler or _no_content)

    def admin(self, slug: str, title: str, handler: HandlerSpec | None = None) -> Route:
        """A dashboard panel registered under *slug*."""
        return self.route(Surface.PANEL, ("GET", "POST"), slug, handler or _no_content).title(title)

    def ajax(self, action: str, handler: HandlerSpec, nopriv: bool = False) -> Route:
        """An action route; *nopriv* also opens it to visitors who are not signed in."""
        return self.route(Surface.ACTION, ("GET", "POST"), action, handler).nopriv(nopriv)

    # -- Groups & middleware --

    def group(self, attributes: GroupSpec, block: Callable[[], Any] | None = None) -> Any:
        """Share prefix, namespace and middleware across routes.

        Call with a block, or use as a context manager::

            with router.group({"prefix": "v1", "namespace": "shop"}):
                router.get("products", list_products)
        """
        return self._manager.group(attributes, block)

    def use(self, *middleware: MiddlewareEntry) -> None:
        """Run *middleware* first on every route declared from now on."""
        self._manager.use(*middleware)

    def middleware(self, name: str, target: Any = None) -> Any:
        """Register a named middleware, directly or as a decorator::

            @router.middleware("tenant")
            def tenant(request, slug=None): ...
        """
        if target is not None:
            self.registry.register(name, target)
            return target

        def decorator(func: HandlerFunc) -> HandlerFunc:
            self.registry.register(name, func)
            return func

        return decorator

    def controller(self, name: str, factory: Any) -> None:
        """Make *factory* resolvable in ``"Name@method"`` handler references."""
        self.resolver.register(name, factory)

    # -- Template integration --

    def template_global(self, name: str | None = None) -> Callable[[HandlerFunc], HandlerFunc]:
        """Register a kida template global."""

        def decorator(func: HandlerFunc) -> HandlerFunc:
            self._renderer.add_global(name or func.__name__, func)
            return func

        return decorator

    # -- Registration & lookup --

    def register_routes(self) -> list[Route]:
        """Register every pending route with the host. Returns the routes registered."""
        return self._manager.register_pending()

    def routes(self) -> list[Route]:
        """Registered routes, in registration order."""
        return self._manager.all()

    def url_for(self, name: str, params: Mapping[str, Any] | None = None) -> str | None:
        """Absolute URL of the route named *name*, or ``None`` for unknown names."""
        return self._manager.url_for(name, params)
