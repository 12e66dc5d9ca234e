"""Tests for pressroute.testing: the in-memory host and assertion helpers."""

import pytest

from pressroute.http.response import Response, RouteError
from pressroute.testing import (
    MemoryHost,
    assert_header,
    assert_html_contains,
    assert_route_error,
    assert_success,
)


class TestMemoryHost:
    def test_login_and_logout(self) -> None:
        host = MemoryHost()
        user = host.login(3, "edit_posts")
        assert host.current_identity() is user
        assert host.is_session_active()
        assert host.identity_has_capability("edit_posts")
        host.logout()
        assert host.current_identity() is None
        assert not host.identity_has_capability("edit_posts")

    def test_tokens_are_bound_to_identity(self) -> None:
        host = MemoryHost()
        host.login(1)
        token = host.create_token("wp_rest")
        assert host.verify_token(token, "wp_rest")
        host.login(2)
        assert not host.verify_token(token, "wp_rest")

    def test_registration_count(self) -> None:
        host = MemoryHost()
        host.register_action("a", lambda raw: Response(), allow_unauthenticated=False)
        host.register_page_matcher("template_redirect", lambda raw: None)
        assert host.registration_count == 2

    def test_unmatched_page(self) -> None:
        assert MemoryHost().request_page("/anything") is None


class TestAssertions:
    def test_assert_success_returns_data(self) -> None:
        response = Response.json({"success": True, "message": "Success", "data": [1]})
        assert assert_success(response) == [1]

    def test_assert_success_rejects_errors(self) -> None:
        with pytest.raises(AssertionError):
            assert_success(RouteError("bad", "Bad", status=400).to_response())

    def test_assert_route_error(self) -> None:
        response = RouteError("bad", "Bad", status=409).to_response()
        assert assert_route_error(response, "bad", status=409)["message"] == "Bad"
        with pytest.raises(AssertionError):
            assert_route_error(response, "other")

    def test_assert_html_contains(self) -> None:
        assert_html_contains(Response.html("<p>hi</p>"), "hi")
        with pytest.raises(AssertionError):
            assert_html_contains(Response.html("<p>hi</p>"), "bye")

    def test_assert_header(self) -> None:
        response = Response().with_header("X-Test", "1")
        assert_header(response, "x-test", "1")
        with pytest.raises(AssertionError):
            assert_header(response, "X-Missing")
