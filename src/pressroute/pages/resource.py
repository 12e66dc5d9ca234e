"""The virtual content record and the host query state it is spliced into.

``VirtualResource`` is built per request and never persisted. Its ID is
the reserved sentinel ``-99`` so host code can tell it apart from stored
content.

``QueryState`` mirrors the host's main-query object: a result list,
counters, the queried object, and one boolean per page classification
(``is_page``, ``is_404``, ...). Hosts may hand pressroute their own
object instead; the synthesizer only sets attributes on it.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

VIRTUAL_RESOURCE_ID = -99

# Every classification flag the synthesizer resets. is_page and
# is_singular are then switched back on.
QUERY_FLAGS: tuple[str, ...] = (
    "is_page",
    "is_singular",
    "is_single",
    "is_attachment",
    "is_archive",
    "is_category",
    "is_tag",
    "is_tax",
    "is_author",
    "is_date",
    "is_year",
    "is_month",
    "is_day",
    "is_time",
    "is_search",
    "is_feed",
    "is_comment_feed",
    "is_trackback",
    "is_home",
    "is_embed",
    "is_404",
    "is_paged",
    "is_admin",
    "is_preview",
    "is_robots",
    "is_posts_page",
    "is_post_type_archive",
)


def slugify(value: str) -> str:
    """Lower-case, ASCII-only, dash-separated slug."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug or "page"


@dataclass(frozen=True, slots=True)
class VirtualResource:
    """An in-memory page record standing in for stored content."""

    id: int
    title: str
    slug: str
    guid: str
    author: int | str = 0
    date: str = ""
    date_gmt: str = ""
    modified: str = ""
    modified_gmt: str = ""
    content: str = ""
    excerpt: str = ""
    status: str = "publish"
    type: str = "page"
    parent: int = 0
    menu_order: int = 0
    comment_status: str = "closed"
    ping_status: str = "closed"
    comment_count: int = 0
    is_virtual: bool = True

    @classmethod
    def build(
        cls,
        *,
        title: str,
        path: str,
        site_url: str,
        author: int | str | None = None,
        template: str | None = None,
        now: datetime | None = None,
    ) -> VirtualResource:
        """Build the record for one page request.

        The slug follows the template name when there is one, the path
        otherwise.
        """
        gmt = now or datetime.now(UTC)
        local = gmt.astimezone()
        stamp = local.strftime("%Y-%m-%d %H:%M:%S")
        stamp_gmt = gmt.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S")
        return cls(
            id=VIRTUAL_RESOURCE_ID,
            title=title,
            slug=slugify(template or path),
            guid=f"{site_url.rstrip('/')}/{path.strip('/')}",
            author=author or 0,
            date=stamp,
            date_gmt=stamp_gmt,
            modified=stamp,
            modified_gmt=stamp_gmt,
        )

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass(slots=True)
class QueryState:
    """The host's active query, as far as page rendering cares.

    ``MemoryHost`` uses this directly; real hosts adapt their own query
    object or return one of these from ``active_query_state()``.
    """

    posts: list[Any] = field(default_factory=list)
    post: Any = None
    post_count: int = 0
    found_posts: int = 0
    max_num_pages: int = 0
    current_post: int = -1
    queried_object: Any = None
    queried_object_id: int | None = None
    query_vars: dict[str, Any] = field(default_factory=dict)
    query: dict[str, Any] = field(default_factory=dict)

    is_page: bool = False
    is_singular: bool = False
    is_single: bool = False
    is_attachment: bool = False
    is_archive: bool = False
    is_category: bool = False
    is_tag: bool = False
    is_tax: bool = False
    is_author: bool = False
    is_date: bool = False
    is_year: bool = False
    is_month: bool = False
    is_day: bool = False
    is_time: bool = False
    is_search: bool = False
    is_feed: bool = False
    is_comment_feed: bool = False
    is_trackback: bool = False
    is_home: bool = False
    is_embed: bool = False
    is_404: bool = True
    is_paged: bool = False
    is_admin: bool = False
    is_preview: bool = False
    is_robots: bool = False
    is_posts_page: bool = False
    is_post_type_archive: bool = False


def force_query_state(state: Any, resource: VirtualResource) -> None:
    """Make *state* look like a successful single-page query for *resource*.

    One result, singular page, not a 404, every other classification
    off, counters at one, queried object set, error var cleared.
    """
    for flag in QUERY_FLAGS:
        setattr(state, flag, False)
    state.is_page = True
    state.is_singular = True

    state.posts = [resource]
    state.post = resource
    state.post_count = 1
    state.found_posts = 1
    state.max_num_pages = 1
    state.current_post = resource.id
    state.queried_object = resource
    state.queried_object_id = resource.id

    query_vars = getattr(state, "query_vars", None)
    if isinstance(query_vars, dict):
        query_vars["error"] = ""
    query = getattr(state, "query", None)
    if isinstance(query, dict):
        query.pop("error", None)
