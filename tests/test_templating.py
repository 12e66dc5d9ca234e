"""Tests for pressroute.templating: built-in filters and the renderer."""

from pathlib import Path

from pressroute import RouterConfig
from pressroute.templating.filters import field_errors, nonce_field, pretty_json, qs
from pressroute.templating.integration import TemplateRenderer


class TestFilters:
    def test_pretty_json_sorted(self) -> None:
        assert pretty_json({"b": 1, "a": 2}) == '{\n  "a": 2,\n  "b": 1\n}'

    def test_pretty_json_falls_back_to_str(self) -> None:
        assert pretty_json({"path": Path("/tmp")}, indent=0) == '{\n"path": "/tmp"\n}'

    def test_field_errors(self) -> None:
        errors = {"email": ["Bad"], "name": "Missing"}
        assert field_errors(errors, "email") == ["Bad"]
        assert field_errors(errors, "name") == ["Missing"]
        assert field_errors(errors, "other") == []
        assert field_errors(None, "email") == []

    def test_qs(self) -> None:
        assert qs("/admin.php?page=x", tab="general", empty="") == "/admin.php?page=x&tab=general"
        assert qs("/path") == "/path"

    def test_nonce_field_escapes(self) -> None:
        html = str(nonce_field('a"b'))
        assert html == '<input type="hidden" name="_wpnonce" value="a&quot;b">'


class TestRenderer:
    def test_render_file(self, tmp_path: Path) -> None:
        (tmp_path / "hello.html").write_text("Hello {{ name }}", encoding="utf-8")
        renderer = TemplateRenderer(RouterConfig())
        assert renderer.render_file(tmp_path / "hello.html", {"name": "Ada"}) == "Hello Ada"

    def test_environment_cached_per_directory(self, tmp_path: Path) -> None:
        renderer = TemplateRenderer(RouterConfig())
        assert renderer.environment(tmp_path) is renderer.environment(tmp_path)

    def test_globals_added_later_reach_existing_environments(self, tmp_path: Path) -> None:
        (tmp_path / "g.html").write_text("{{ greeting() }}", encoding="utf-8")
        renderer = TemplateRenderer(RouterConfig())
        renderer.environment(tmp_path)
        renderer.add_global("greeting", lambda: "hi")
        assert renderer.render_file(tmp_path / "g.html", {}) == "hi"

    def test_builtin_page(self) -> None:
        renderer = TemplateRenderer(RouterConfig())
        html = renderer.render_builtin("Report", {"total": 3})
        assert "<title>Report</title>" in html
        assert "total" in html

    def test_builtin_page_escapes_title(self) -> None:
        html = TemplateRenderer(RouterConfig()).render_builtin("<i>x</i>", {})
        assert "<i>x</i>" not in html
