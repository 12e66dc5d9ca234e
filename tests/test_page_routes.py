"""Page surface: path matching, virtual resources, and template rendering."""

from pathlib import Path

import pytest

from pressroute import Deferred, Emitted, Router, RouterConfig
from pressroute.dispatch.page import normalize_result
from pressroute.http.response import Response, RouteError
from pressroute.pages import VIRTUAL_RESOURCE_ID
from pressroute.testing import MemoryHost, assert_html_contains


class TestNormalizeResult:
    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_defers(self, value: object) -> None:
        assert normalize_result(value) == Deferred()

    def test_string_is_emitted(self) -> None:
        assert normalize_result("<p>done</p>") == Emitted("<p>done</p>")

    def test_mapping_defers_payload(self) -> None:
        assert normalize_result({"a": 1}) == Deferred({"a": 1})

    def test_other_values_wrapped(self) -> None:
        assert normalize_result([1, 2]) == Deferred({"data": [1, 2]})

    def test_terminals_pass_through(self) -> None:
        error = RouteError("x", "y")
        assert normalize_result(error) is error


class TestMatching:
    def test_unowned_path_returns_none(self, router: Router, host: MemoryHost) -> None:
        router.web("welcome", lambda request: "<p>hi</p>")
        router.register_routes()
        assert host.request_page("/elsewhere") is None

    def test_path_params(self, router: Router, host: MemoryHost) -> None:
        router.web("profile/{user}", lambda request: f"<p>{request.param('user')}</p>")
        router.register_routes()
        assert_html_contains(host.request_page("/profile/ada/"), "<p>ada</p>")

    def test_method_filter_allows_head_for_get(self, router: Router, host: MemoryHost) -> None:
        router.web("welcome", lambda request: "<p>hi</p>")
        router.register_routes()
        assert host.request_page("/welcome", method="POST") is None
        assert host.request_page("/welcome", method="HEAD") is not None

    def test_group_prefix_applies(self, router: Router, host: MemoryHost) -> None:
        with router.group({"prefix": "members"}):
            router.web("area", lambda request: "<p>members</p>")
        router.register_routes()
        assert host.request_page("/area") is None
        assert_html_contains(host.request_page("/members/area"), "members")


class TestEmitted:
    def test_string_body_is_final(self, router: Router, host: MemoryHost) -> None:
        router.web("raw", lambda request: "<article>raw</article>")
        router.register_routes()
        response = host.request_page("/raw")
        assert response.body == "<article>raw</article>"
        # Emitted output never touches the query state
        assert host.query_state.is_404

    def test_emitted_status(self, router: Router, host: MemoryHost) -> None:
        router.web("gone", lambda request: Emitted("<p>gone</p>", status=410))
        router.register_routes()
        assert host.request_page("/gone").status == 410


class TestVirtualResource:
    def test_query_state_forced_to_single_page(self, router: Router, host: MemoryHost) -> None:
        router.web("welcome", lambda request: {"name": "visitor"}).template("welcome")
        router.register_routes()

        response = host.request_page("/welcome")

        state = host.query_state
        assert response.status == 200
        assert state.is_page and state.is_singular
        assert not state.is_404
        assert not state.is_archive and not state.is_home
        assert state.posts[0].id == VIRTUAL_RESOURCE_ID
        assert state.post_count == state.found_posts == 1
        assert state.queried_object_id == VIRTUAL_RESOURCE_ID
        assert state.query_vars.get("error", "") == ""

    def test_resource_fields(self, router: Router, host: MemoryHost) -> None:
        router.web("about-us", lambda request: {}).title("About Us")
        router.register_routes()
        host.login(8)
        host.request_page("/about-us")
        resource = host.query_state.post
        assert resource.title == "About Us"
        assert resource.slug == "about-us"
        assert resource.guid == "https://example.test/about-us"
        assert resource.author == 8
        assert resource.type == "page"
        assert resource.is_virtual


class TestTemplates:
    def test_template_renders_payload(self, router: Router, host: MemoryHost) -> None:
        router.web("welcome", lambda request: {"name": "visitor"}).template("welcome").title("Welcome")
        router.register_routes()
        response = host.request_page("/welcome")
        assert_html_contains(response, "<h1>Welcome</h1>")
        assert "Hello visitor" in response.text
        assert f"<span>{VIRTUAL_RESOURCE_ID}</span>" in response.text

    def test_loop_over_payload(self, router: Router, host: MemoryHost) -> None:
        router.web("stats", lambda request: {"stats": ["a", "b"]}).template("stats.html")
        router.register_routes()
        assert_html_contains(host.request_page("/stats"), "<li>a</li><li>b</li>")

    def test_payload_is_escaped(self, router: Router, host: MemoryHost) -> None:
        router.web("welcome", lambda request: {"name": "<script>"}).template("welcome")
        router.register_routes()
        response = host.request_page("/welcome")
        assert "<script>" not in response.text
        assert "&lt;script&gt;" in response.text

    def test_reserved_names_not_shadowed(self, router: Router, host: MemoryHost, template_dir: Path) -> None:
        (template_dir / "reserved.html").write_text("{{ title }}|{{ post.id }}", encoding="utf-8")
        router.web("r", lambda request: {"title": "spoofed", "post": "spoofed"}).template("reserved").title("Real")
        router.register_routes()
        assert host.request_page("/r").text == f"Real|{VIRTUAL_RESOURCE_ID}"

    def test_get_route_data_global(self, router: Router, host: MemoryHost, template_dir: Path) -> None:
        (template_dir / "lookup.html").write_text("{{ get_route_data('count') }}", encoding="utf-8")
        router.web("count", lambda request: {"count": 3}).template("lookup")
        router.register_routes()
        assert host.request_page("/count").text == "3"

    def test_missing_template_uses_builtin_page(self, router: Router, host: MemoryHost) -> None:
        router.web("fallback", lambda request: {"answer": 42}).template("does-not-exist").title("Fallback")
        router.register_routes()
        response = host.request_page("/fallback")
        assert_html_contains(response, "<h1>Fallback</h1>")
        assert "answer" in response.text
        assert "42" in response.text

    def test_no_handler_renders_template_alone(self, router: Router, host: MemoryHost, template_dir: Path) -> None:
        (template_dir / "static.html").write_text("<p>static {{ title }}</p>", encoding="utf-8")
        router.web("static").template("static").title("Page")
        router.register_routes()
        assert host.request_page("/static").text == "<p>static Page</p>"

    def test_host_lookup_wins(self, router: Router, host: MemoryHost, tmp_path: Path) -> None:
        override = tmp_path / "override.html"
        override.write_text("override {{ name }}", encoding="utf-8")
        host.template_files["welcome.html"] = override
        router.web("welcome", lambda request: {"name": "x"}).template("welcome")
        router.register_routes()
        assert host.request_page("/welcome").text == "override x"
        assert host.template_lookups == [("welcome.html", "page")]

    def test_url_for_global(self, router: Router, host: MemoryHost, template_dir: Path) -> None:
        (template_dir / "links.html").write_text("{{ url_for('posts.show', params) }}", encoding="utf-8")
        router.get("posts/{id}", lambda request: {}).name("posts.show")
        router.web("links", lambda request: {"params": {"id": 5}}).template("links")
        router.register_routes()
        assert host.request_page("/links").text == "https://example.test/wp-json/wp/v2/posts/5"

    def test_custom_filter(self, host: MemoryHost, template_dir: Path) -> None:
        (template_dir / "shout.html").write_text("{{ name | shout }}", encoding="utf-8")
        router = Router(
            host,
            RouterConfig(active_template_dir=template_dir),
            filters={"shout": lambda value: str(value).upper() + "!"},
        )
        router.web("shout", lambda request: {"name": "hey"}).template("shout")
        router.register_routes()
        assert host.request_page("/shout").text == "HEY!"


class TestTitles:
    def test_callable_title(self, router: Router, host: MemoryHost) -> None:
        router.web("u/{name}", lambda request: {}).title(lambda request: f"User {request.param('name')}")
        router.register_routes()
        host.request_page("/u/ada")
        assert host.query_state.post.title == "User ada"

    def test_default_title_from_path(self, router: Router, host: MemoryHost) -> None:
        router.web("dashboard", lambda request: {})
        router.register_routes()
        host.request_page("/dashboard")
        assert host.query_state.post.title == "Dashboard"


class TestDenialsAndFailures:
    def test_middleware_denial_is_access_denied_page(self, router: Router, host: MemoryHost) -> None:
        calls: list[object] = []
        router.web("secret", lambda request: calls.append(request)).middleware("auth")
        router.register_routes()
        response = host.request_page("/secret")
        assert_html_contains(response, "Access Denied", status=401)
        assert calls == []

    def test_handler_exception_is_route_error_page(self, router: Router, host: MemoryHost) -> None:
        def boom(request: object) -> None:
            raise KeyError("internal detail")

        router.web("broken", boom)
        router.register_routes()
        response = host.request_page("/broken")
        assert_html_contains(response, "Route Error", status=500)
        assert "internal detail" not in response.text

    def test_route_error_result(self, router: Router, host: MemoryHost) -> None:
        router.web("nope", lambda request: RouteError("missing", "Nothing here", status=404))
        router.register_routes()
        assert_html_contains(host.request_page("/nope"), "Nothing here", status=404)

    def test_response_result(self, router: Router, host: MemoryHost) -> None:
        router.web("redirect", lambda request: Response(status=302, headers=(("Location", "/x"),)))
        router.register_routes()
        response = host.request_page("/redirect")
        assert response.status == 302
        assert response.header("location") == "/x"

    def test_template_render_error_is_route_error_page(
        self, router: Router, host: MemoryHost, template_dir: Path
    ) -> None:
        def explode() -> str:
            raise ValueError("render detail")

        (template_dir / "explodes.html").write_text("{{ explode() }}", encoding="utf-8")
        router.web("explodes", lambda request: {"explode": explode}).template("explodes")
        router.register_routes()
        response = host.request_page("/explodes")
        assert_html_contains(response, "Route Error", status=500)
        assert "render detail" not in response.text

    def test_raising_title_callable_is_route_error_page(self, router: Router, host: MemoryHost) -> None:
        router.web("titled", lambda request: {}).title(lambda request: 1 / 0)
        router.register_routes()
        assert_html_contains(host.request_page("/titled"), "Route Error", status=500)

    def test_none_without_template_warns(
        self,
        router: Router,
        host: MemoryHost,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        router.web("empty", lambda request: None)
        router.register_routes()
        with caplog.at_level("WARNING", logger="pressroute.dispatch"):
            response = host.request_page("/empty")
        assert response.status == 200
        assert "no template" in caplog.text
