"""Test utilities for pressroute routers.

Provides an in-memory host that records registrations and drives
requests, plus response assertions::

    from pressroute.testing import MemoryHost, assert_success
"""

from pressroute.testing.assertions import (
    assert_header,
    assert_html_contains,
    assert_route_error,
    assert_success,
)
from pressroute.testing.host import ActionEntry, DataEndpoint, MemoryHost, PanelEntry, User

__all__ = [
    "ActionEntry",
    "DataEndpoint",
    "MemoryHost",
    "PanelEntry",
    "User",
    "assert_header",
    "assert_html_contains",
    "assert_route_error",
    "assert_success",
]
