"""Route collection, named lookup, and group attribute stacking."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from pressroute._internal.types import MiddlewareEntry
from pressroute.routing.template import join_paths, normalize_path

if TYPE_CHECKING:
    from pressroute.dispatch.context import DispatchContext
    from pressroute.routing.route import Route


@dataclass(frozen=True, slots=True)
class GroupAttributes:
    """Attributes inherited by routes declared inside a group.

    ``merge`` stacks an inner group onto an outer one: prefixes and
    namespaces slash-join outer + inner, middleware concatenates
    outer-first. Inner groups extend, they never override.
    """

    prefix: str = ""
    namespace: str | None = None
    middleware: tuple[MiddlewareEntry, ...] = ()

    @classmethod
    def from_mapping(cls, attributes: Mapping[str, Any]) -> GroupAttributes:
        middleware = attributes.get("middleware", ())
        if isinstance(middleware, (str, tuple)) or callable(middleware):
            middleware = (middleware,)
        namespace = attributes.get("namespace")
        return cls(
            prefix=normalize_path(attributes.get("prefix", "") or ""),
            namespace=normalize_path(namespace) if namespace else None,
            middleware=tuple(middleware),
        )

    def merge(self, inner: GroupAttributes) -> GroupAttributes:
        if self.namespace and inner.namespace:
            namespace: str | None = join_paths(self.namespace, inner.namespace)
        else:
            namespace = inner.namespace or self.namespace
        return GroupAttributes(
            prefix=join_paths(self.prefix, inner.prefix),
            namespace=namespace,
            middleware=(*self.middleware, *inner.middleware),
        )


type GroupSpec = GroupAttributes | Mapping[str, Any]


class RouteManager:
    """Owns every route a router declares.

    Routes announce themselves when created (``track``) and join the
    registered collection once their strategy has registered them with
    the host (``add``). The collection is a plain list: two routes with the
    same surface, verbs, and path are both kept.
    """

    __slots__ = ("_groups", "_named", "_pending", "_routes", "context", "global_middleware")

    def __init__(self, context: DispatchContext) -> None:
        self.context = context
        self.global_middleware: tuple[MiddlewareEntry, ...] = ()
        self._groups: list[GroupAttributes] = []
        self._pending: list[Route] = []
        self._routes: list[Route] = []
        self._named: dict[str, Route] = {}

    @property
    def default_namespace(self) -> str:
        return self.context.config.default_namespace

    # -- Collection --

    def track(self, route: Route) -> None:
        """Remember a newly declared (still pending) route."""
        self._pending.append(route)

    def add(self, route: Route) -> None:
        """Append a registered route to the collection."""
        if route in self._pending:
            self._pending.remove(route)
        self._routes.append(route)
        if route.route_name:
            self._named[route.route_name] = route

    def name_route(self, name: str, route: Route, previous: str | None = None) -> None:
        """Index *route* under *name*, dropping its *previous* name."""
        if previous and previous != name and self._named.get(previous) is route:
            del self._named[previous]
        self._named[name] = route

    def by_name(self, name: str) -> Route | None:
        return self._named.get(name)

    def all(self) -> list[Route]:
        """Registered routes, in registration order."""
        return list(self._routes)

    def pending(self) -> list[Route]:
        return list(self._pending)

    def register_pending(self) -> list[Route]:
        """Register every route still pending. Returns the routes registered."""
        routes = list(self._pending)
        for route in routes:
            route.register()
        return routes

    def use(self, *middleware: MiddlewareEntry) -> None:
        """Prepend *middleware* to every route declared from now on."""
        self.global_middleware = (*self.global_middleware, *middleware)

    # -- Groups --

    def current_group(self) -> GroupAttributes:
        """The merged attributes of every active group (outermost first)."""
        merged = GroupAttributes()
        for group in self._groups:
            merged = merged.merge(group)
        return merged

    @contextmanager
    def _scope(self, attributes: GroupSpec) -> Iterator[GroupAttributes]:
        if not isinstance(attributes, GroupAttributes):
            attributes = GroupAttributes.from_mapping(attributes)
        self._groups.append(attributes)
        try:
            yield self.current_group()
        finally:
            self._groups.pop()

    def group(self, attributes: GroupSpec, block: Callable[[], Any] | None = None) -> Any:
        """Apply *attributes* to routes declared in *block*.

        Without a block, returns a context manager::

            with manager.group({"prefix": "v1"}):
                ...

        The group is popped even when the block raises.
        """
        if block is None:
            return self._scope(attributes)
        with self._scope(attributes):
            return block()

    # -- Reverse routing --

    def url_for(self, name: str, params: Mapping[str, Any] | None = None) -> str | None:
        """Build the absolute URL of the route named *name*.

        Returns ``None`` for unknown names. Parameters the template does not
        consume are appended as a query string. Raises ``URLBuildError``
        when a required parameter is missing.
        """
        from pressroute.routing.route import Surface

        route = self.by_name(name)
        if route is None:
            return None
        config = self.context.config
        path, unused = route.path_template.expand(params or {})

        match route.surface:
            case Surface.DATA:
                url = f"{config.api_base}/{join_paths(route.effective_namespace or '', path)}"
            case Surface.ACTION:
                url = f"{config.action_base}?{urlencode({'action': path})}"
            case _:
                url = f"{config.site_url.rstrip('/')}/{path}"

        if unused:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(unused, doseq=True)}"
        return url
