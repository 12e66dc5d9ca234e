"""Shared fixtures: an in-memory host, a router bound to it, and a template tree."""

from pathlib import Path

import pytest

from pressroute import Router, RouterConfig
from pressroute.http.envelope import RequestEnvelope
from pressroute.http.inbound import RawInbound
from pressroute.testing import MemoryHost


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """An active template directory holding a couple of page templates."""
    theme = tmp_path / "theme"
    theme.mkdir()
    (theme / "welcome.html").write_text(
        "<h1>{{ title }}</h1><p>Hello {{ name }}</p><span>{{ post.id }}</span>",
        encoding="utf-8",
    )
    (theme / "stats.html").write_text(
        "<ul>{% for s in stats %}<li>{{ s }}</li>{% end %}</ul>",
        encoding="utf-8",
    )
    return theme


@pytest.fixture
def config(template_dir: Path) -> RouterConfig:
    return RouterConfig(site_url="https://example.test", active_template_dir=template_dir)


@pytest.fixture
def host() -> MemoryHost:
    return MemoryHost()


@pytest.fixture
def router(host: MemoryHost, config: RouterConfig) -> Router:
    return Router(host, config)


def make_envelope(
    method: str = "GET",
    url: str = "/",
    *,
    host: MemoryHost | None = None,
    surface: str = "data",
    **kwargs: object,
) -> RequestEnvelope:
    """An envelope for middleware tests, captured from *host* when given."""
    raw = RawInbound.from_url(url, method=method, **kwargs)
    if host is None:
        return RequestEnvelope.from_inbound(raw, surface=surface)
    return RequestEnvelope.capture(raw, host, RouterConfig(), surface)
