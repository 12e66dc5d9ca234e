"""The boundary pressroute consumes from its content-management host.

No base class required. Any object with these methods works as a host;
``pressroute.testing.MemoryHost`` is a complete in-memory implementation.

Registration methods are called once per route while the router boots.
The remaining methods are read during dispatch: identity and capability
checks, token verification, and the host's active query state (only the
page strategy touches that).
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pressroute.http.inbound import RawInbound
from pressroute.http.response import Response


@runtime_checkable
class Identity(Protocol):
    """Minimal identity protocol.

    Any object with an ``id`` satisfies this. Hosts bring their own user
    model.
    """

    @property
    def id(self) -> int | str: ...


# What the host calls for each surface. Data and action handlers return a
# Response; page matchers return None when the request is not theirs;
# panel handlers return the rendered panel HTML as a Response.
type DataHandler = Callable[[RawInbound], Response]
type PageDispatcher = Callable[[RawInbound], Response | None]
type PanelHandler = Callable[[RawInbound], Response]
type ActionHandler = Callable[[RawInbound], Response]
type PermissionCheck = Callable[[RawInbound], bool]


class Host(Protocol):
    """Protocol for pressroute hosts."""

    # -- Registration --

    def register_data_endpoint(
        self,
        namespace: str,
        path: str,
        methods: tuple[str, ...],
        handler: DataHandler,
        permission: PermissionCheck,
    ) -> None: ...

    def register_page_matcher(self, hook: str, dispatch: PageDispatcher) -> None: ...

    def register_panel(
        self,
        slug: str,
        title: str,
        capability: str,
        handler: PanelHandler,
        *,
        parent: str | None = None,
        icon: str | None = None,
        position: int | None = None,
        menu_title: str | None = None,
    ) -> None: ...

    def register_action(
        self,
        action: str,
        handler: ActionHandler,
        *,
        allow_unauthenticated: bool,
    ) -> None: ...

    # -- Identity --

    def current_identity(self) -> Identity | None: ...

    def is_session_active(self) -> bool: ...

    def identity_has_capability(self, capability: str, *args: Any) -> bool: ...

    # -- Tokens --

    def verify_token(self, token: str, purpose: str) -> bool: ...

    def create_token(self, purpose: str) -> str: ...

    # -- Templating --

    def active_query_state(self) -> Any: ...

    def resolve_template_file(self, name: str, search_mode: str) -> Path | None: ...
