"""pressroute exception hierarchy.

Shared across routes, strategies, the manager, and middleware so every
module raises and catches the same types. Everything here is raised at
declaration or registration time; request-time failures are returned as
``RouteError`` values instead (see ``pressroute.http.response``).
"""


class RouterError(Exception):
    """Base for all pressroute-specific errors."""


class ConfigurationError(RouterError):
    """Raised when a route or the router is misconfigured.

    Surfaces at boot, when routes are declared or registered, never at
    first request.
    """


class UnknownSurfaceError(ConfigurationError):
    """A route was declared with a surface the router does not know."""

    def __init__(self, surface: object) -> None:
        self.surface = surface
        super().__init__(
            f"Unknown route surface {surface!r}. "
            "Expected one of: 'data', 'page', 'panel', 'action'."
        )


class DuplicateParameterError(ConfigurationError):
    """A path template names the same parameter twice."""

    def __init__(self, template: str, name: str) -> None:
        self.template = template
        self.name = name
        super().__init__(f"Path template {template!r} declares parameter {{{name}}} more than once.")


class HandlerResolutionError(ConfigurationError):
    """A ``Class@method`` handler reference could not be resolved."""


class URLBuildError(RouterError):
    """``url_for`` was missing a parameter the route template requires."""
