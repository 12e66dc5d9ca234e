"""Virtual pages: render page-route output as if it were stored content.

A page handler that returns data (a dict, ``None``, ``Deferred``) gets a
``VirtualResource`` spliced into the host's active query, so the host's
theme treats the generated page like a published one::

    router.web("dashboard", lambda req: {"stats": load_stats()}).template("dashboard")

Templates read the payload as ``route_data``, as individual variables, or
through ``get_route_data()``.
"""

from pressroute.pages.resource import QUERY_FLAGS, VIRTUAL_RESOURCE_ID, QueryState, VirtualResource
from pressroute.pages.synthesizer import VirtualResourceSynthesizer, get_route_data
from pressroute.pages.templates import TemplateLocator

__all__ = [
    "QUERY_FLAGS",
    "VIRTUAL_RESOURCE_ID",
    "QueryState",
    "TemplateLocator",
    "VirtualResource",
    "VirtualResourceSynthesizer",
    "get_route_data",
]
