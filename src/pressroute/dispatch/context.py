"""The collaborators every strategy needs, threaded in by the Router."""

from dataclasses import dataclass

from pressroute.config import RouterConfig
from pressroute.host import Host
from pressroute.middleware.registry import MiddlewareRegistry
from pressroute.pages.synthesizer import VirtualResourceSynthesizer
from pressroute.routing.handlers import HandlerResolver


@dataclass(frozen=True, slots=True)
class DispatchContext:
    """Everything a route needs from its router, built once per Router.

    No globals: two routers in one process never share a registry or a
    resolver unless they are handed the same ones.
    """

    host: Host
    config: RouterConfig
    registry: MiddlewareRegistry
    resolver: HandlerResolver
    synthesizer: VirtualResourceSynthesizer
