"""Dispatch strategies, one per surface.

A Route picks its strategy when it registers and holds it from then on.
The strategy owns the host registration and the request cycle for that
route (envelope, middleware, handler, result translation).
"""

from pressroute.dispatch.action import ActionStrategy
from pressroute.dispatch.base import Strategy
from pressroute.dispatch.context import DispatchContext
from pressroute.dispatch.data import DataStrategy
from pressroute.dispatch.page import PageStrategy
from pressroute.dispatch.panel import PanelStrategy
from pressroute.routing.route import Surface

STRATEGIES: dict[Surface, type[Strategy]] = {
    Surface.DATA: DataStrategy,
    Surface.PAGE: PageStrategy,
    Surface.PANEL: PanelStrategy,
    Surface.ACTION: ActionStrategy,
}


def strategy_for(surface: Surface) -> type[Strategy]:
    """The strategy class serving *surface*."""
    return STRATEGIES[surface]


__all__ = [
    "ActionStrategy",
    "DataStrategy",
    "DispatchContext",
    "PageStrategy",
    "PanelStrategy",
    "STRATEGIES",
    "Strategy",
    "strategy_for",
]
