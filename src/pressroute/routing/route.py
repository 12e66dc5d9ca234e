"""The Route: one declared endpoint on one host surface.

A route is created pending. Fluent setters configure it, ``register()``
hands it to the strategy for its surface exactly once::

    router.get("posts/{id:int}", show_post).name("posts.show").middleware("auth")
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pressroute._internal.types import MiddlewareEntry
from pressroute.errors import UnknownSurfaceError
from pressroute.routing.handlers import HandlerRef, HandlerSpec
from pressroute.routing.template import PathTemplate, join_paths

if TYPE_CHECKING:
    from pressroute.dispatch.base import Strategy
    from pressroute.routing.manager import RouteManager


class Surface(Enum):
    """The host subsystem a route registers with."""

    DATA = "data"
    PAGE = "page"
    PANEL = "panel"
    ACTION = "action"

    @classmethod
    def coerce(cls, value: object) -> Surface:
        """Accept a Surface, its value, or a host-flavoured alias.

        Raises ``UnknownSurfaceError`` for anything else.
        """
        if isinstance(value, Surface):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _SURFACE_ALIASES.get(key, key)
            for surface in cls:
                if surface.value == key:
                    return surface
        raise UnknownSurfaceError(value)


_SURFACE_ALIASES = {"api": "data", "rest": "data", "web": "page", "admin": "panel", "ajax": "action"}


class RouteState(Enum):
    PENDING = "pending"
    REGISTERED = "registered"


# -- Surface settings --


@dataclass(slots=True)
class DataSettings:
    namespace: str | None = None


@dataclass(slots=True)
class PageSettings:
    template: str | None = None
    title: str | Callable[..., str] | None = None


@dataclass(slots=True)
class PanelSettings:
    page_title: str = ""
    menu_title: str | None = None
    capability: str = "manage_options"
    icon: str = "dashicons-admin-generic"
    parent: str | None = None
    position: int | None = None
    template: str | None = None


@dataclass(slots=True)
class ActionSettings:
    public: bool = False


type SurfaceSettings = DataSettings | PageSettings | PanelSettings | ActionSettings


def _settings_for(surface: Surface) -> SurfaceSettings:
    match surface:
        case Surface.DATA:
            return DataSettings()
        case Surface.PAGE:
            return PageSettings()
        case Surface.PANEL:
            return PanelSettings()
        case Surface.ACTION:
            return ActionSettings()


def describe_middleware(entry: MiddlewareEntry) -> str:
    """A printable label for one middleware entry."""
    if isinstance(entry, str):
        return entry
    if isinstance(entry, tuple) and entry:
        name, *args = entry
        return f"{name}:{','.join(str(arg) for arg in args)}" if args else str(name)
    return getattr(entry, "__qualname__", None) or type(entry).__name__


class Route:
    """A declared endpoint.

    Identity is (surface, verbs, path template). Parameter names within a
    template are unique; ``DuplicateParameterError`` is raised here, at
    construction, otherwise.

    Group attributes (prefix, namespace, middleware) active on the manager
    are snapshotted when the route is created. The group prefix applies to
    path-addressed surfaces (data and page); panel slugs and action names
    are taken verbatim.
    """

    __slots__ = (
        "_excluded",
        "_group_namespace",
        "_inherited",
        "_manager",
        "_middleware",
        "attributes",
        "handler",
        "handler_spec",
        "methods",
        "path_template",
        "route_name",
        "settings",
        "state",
        "strategy",
        "surface",
    )

    def __init__(
        self,
        surface: Surface | str,
        methods: Iterable[str],
        path: str,
        handler: HandlerSpec,
        *,
        manager: RouteManager,
    ) -> None:
        self.surface = Surface.coerce(surface)
        group = manager.current_group()
        if self.surface in (Surface.DATA, Surface.PAGE):
            path = join_paths(group.prefix, path)
        self.path_template = PathTemplate(path)
        self.methods: tuple[str, ...] = tuple(dict.fromkeys(m.upper() for m in methods))
        self.handler_spec = handler
        self.handler: HandlerRef | None = None
        self.route_name: str | None = None
        self.settings: SurfaceSettings = _settings_for(self.surface)
        self.attributes: dict[str, Any] = {}
        self.state = RouteState.PENDING
        self.strategy: Strategy | None = None

        self._manager = manager
        self._group_namespace = group.namespace
        self._inherited: tuple[MiddlewareEntry, ...] = (*manager.global_middleware, *group.middleware)
        self._middleware: list[MiddlewareEntry] = []
        self._excluded: set[str] = set()
        manager.track(self)

    # -- Identity --

    @property
    def path(self) -> str:
        return self.path_template.source

    @property
    def key(self) -> tuple[str, tuple[str, ...], str]:
        return (self.surface.value, self.methods, self.path)

    @property
    def is_registered(self) -> bool:
        return self.state is RouteState.REGISTERED

    @property
    def effective_middleware(self) -> tuple[MiddlewareEntry, ...]:
        """Inherited (global, then groups outer-first) followed by the route's own."""
        entries = (*self._inherited, *self._middleware)
        if not self._excluded:
            return entries
        return tuple(entry for entry in entries if describe_middleware(entry) not in self._excluded)

    @property
    def effective_namespace(self) -> str | None:
        """Namespace for data routes: explicit, then group, then the manager default."""
        if not isinstance(self.settings, DataSettings):
            return None
        return self.settings.namespace or self._group_namespace or self._manager.default_namespace

    # -- Fluent configuration --

    def middleware(self, *entries: MiddlewareEntry | list[MiddlewareEntry]) -> Route:
        """Append middleware entries (strings, ``(name, *args)`` tuples, callables)."""
        for entry in entries:
            if isinstance(entry, list):
                self._middleware.extend(entry)
            else:
                self._middleware.append(entry)
        return self

    def name(self, name: str) -> Route:
        previous = self.route_name
        self.route_name = name
        self._manager.name_route(name, self, previous)
        return self

    def namespace(self, namespace: str) -> Route:
        if isinstance(self.settings, DataSettings):
            self.settings.namespace = namespace.strip("/")
        return self

    def template(self, template: str) -> Route:
        """Template file for page and panel routes."""
        if isinstance(self.settings, (PageSettings, PanelSettings)):
            self.settings.template = template
        return self

    def title(self, title: str | Callable[..., str]) -> Route:
        """Page title (string or ``callable(envelope)``), or the panel page title."""
        if isinstance(self.settings, PageSettings):
            self.settings.title = title
        elif isinstance(self.settings, PanelSettings) and isinstance(title, str):
            self.settings.page_title = title
        return self

    def can(self, capability: str) -> Route:
        """Require *capability*: the panel's menu capability, middleware elsewhere."""
        if isinstance(self.settings, PanelSettings):
            self.settings.capability = capability
        else:
            self._middleware.append(f"capability:{capability}")
        return self

    capability = can

    def icon(self, icon: str) -> Route:
        if isinstance(self.settings, PanelSettings):
            self.settings.icon = icon
        return self

    def parent(self, parent: str) -> Route:
        if isinstance(self.settings, PanelSettings):
            self.settings.parent = parent
        return self

    def position(self, position: int) -> Route:
        if isinstance(self.settings, PanelSettings):
            self.settings.position = position
        return self

    def menu(self, title: str) -> Route:
        if isinstance(self.settings, PanelSettings):
            self.settings.menu_title = title
        return self

    def nopriv(self, allow: bool = True) -> Route:
        """Let unauthenticated visitors trigger an action route."""
        if isinstance(self.settings, ActionSettings):
            self.settings.public = allow
        return self

    def public(self) -> Route:
        """Drop ``auth`` middleware (inherited included); open actions to visitors."""
        self._excluded.add("auth")
        self._middleware = [entry for entry in self._middleware if entry != "auth"]
        return self.nopriv(True)

    def private(self) -> Route:
        """Require authentication: ``auth`` runs before the route's own middleware."""
        self._excluded.discard("auth")
        if "auth" not in self.effective_middleware:
            self._middleware.insert(0, "auth")
        return self.nopriv(False)

    def cors(self, *origins: str) -> Route:
        """Add CORS handling; with no origins the router's CORS config applies."""
        if not origins or origins == ("*",):
            self._middleware.append("cors")
        else:
            self._middleware.append(("cors", *origins))
        return self

    def validate(self, rules: Mapping[str, Any] | type, messages: Mapping[str, str] | None = None) -> Route:
        """Validate input against *rules* (or a ``FormRequest`` class) before the handler runs."""
        from pressroute.middleware.validation import rules_middleware

        self._middleware.append(rules_middleware(rules, messages))
        return self

    def rate_limit(self, requests: int = 60, window: int = 60) -> Route:
        """At most *requests* per *window* seconds per identity or client address."""
        self._middleware.append(("rate_limit", requests, window))
        return self

    def json_only(self) -> Route:
        self._middleware.append("json_only")
        return self

    # Webhook checks (see pressroute.middleware.webhook)

    def signature(self, secret: str) -> Route:
        self._middleware.append(("signature", secret))
        return self

    def bearer(self, token: str) -> Route:
        self._middleware.append(("bearer", token))
        return self

    def allow_ips(self, *addresses: str) -> Route:
        self._middleware.append(("ip", *addresses))
        return self

    def attribute(self, key: str, value: Any) -> Route:
        self.attributes[key] = value
        return self

    # -- Registration --

    def register(self) -> Route:
        """Register with the host through this surface's strategy.

        Idempotent: only the first call has any effect.
        """
        if self.state is RouteState.REGISTERED:
            return self
        from pressroute.dispatch import strategy_for

        context = self._manager.context
        if isinstance(self.settings, DataSettings):
            self.settings.namespace = self.effective_namespace
        self.handler = context.resolver.resolve(self.handler_spec)
        self.strategy = strategy_for(self.surface)(self, context)
        self.strategy.register()
        self.state = RouteState.REGISTERED
        self._manager.add(self)
        return self

    # -- Introspection --

    def describe_handler(self) -> str:
        if self.handler is not None:
            return self.handler.describe()
        if isinstance(self.handler_spec, str):
            return self.handler_spec
        return getattr(self.handler_spec, "__qualname__", "Custom Handler")

    def to_dict(self) -> dict[str, Any]:
        """A plain-data description (CLI listings, debugging)."""
        return {
            "surface": self.surface.value,
            "methods": list(self.methods),
            "path": self.path,
            "namespace": self.effective_namespace,
            "name": self.route_name,
            "handler": self.describe_handler(),
            "middleware": [describe_middleware(entry) for entry in self.effective_middleware],
            "params": list(self.path_template.param_names),
            "attributes": dict(self.attributes),
            "state": self.state.value,
        }

    def __repr__(self) -> str:
        methods = "|".join(self.methods)
        return f"<Route {self.surface.value} {methods} {self.path!r}>"
