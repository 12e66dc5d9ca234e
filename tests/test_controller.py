"""Tests for the Controller base class."""

import pytest
from conftest import make_envelope

from pressroute import Controller, FormRequest, Router
from pressroute.http.response import Response, RouteError
from pressroute.testing import MemoryHost, assert_route_error, assert_success


class PostController(Controller):
    per_page = 2

    posts = [{"id": i, "title": f"Post {i}", "secret": "x"} for i in range(1, 6)]

    def index(self, request: object) -> dict[str, object]:
        page = self.pagination()
        items = self.posts[page.offset : page.offset + page.per_page]
        return self.paginated(items, len(self.posts), page)

    def show(self, request: object) -> object:
        post_id = int(self.request.param("id"))
        for post in self.posts:
            if post["id"] == post_id:
                return self.transform(post)
        return self.not_found("Post")

    def store(self, request: object) -> object:
        denied = self.authorize("publish_posts")
        if denied is not None:
            return denied
        data = self.validate({"title": ["required", "max:20"]})
        if isinstance(data, RouteError):
            return data
        return self.success(data, "Created", status=201)

    def transform(self, item: dict[str, object]) -> dict[str, object]:
        return {"id": item["id"], "title": item["title"]}


@pytest.fixture
def posts(router: Router, host: MemoryHost) -> MemoryHost:
    router.resource("posts", PostController, only=["index", "show", "store"])
    router.register_routes()
    return host


class TestResponses:
    def test_success(self) -> None:
        response = Controller().success({"a": 1}, "Done", status=202)
        assert isinstance(response, Response)
        assert response.status == 202
        assert response.body == {"success": True, "message": "Done", "data": {"a": 1}}

    def test_error_helpers(self) -> None:
        controller = Controller()
        assert controller.not_found("Product").code == "product_not_found"
        assert controller.not_found().status == 404
        assert controller.forbidden().status == 403
        assert controller.unauthorized().code == "unauthorized"
        error = controller.error("Broken", "broken", 409, details={"hint": "retry"})
        assert error.to_dict() == {
            "code": "broken",
            "message": "Broken",
            "data": {"status": 409, "details": {"hint": "retry"}},
        }

    def test_validation_error(self) -> None:
        error = Controller().validation_error({"email": ["Must be a valid email address"]})
        assert error.status == 422
        assert error.errors == {"email": ["Must be a valid email address"]}


class TestRequestAccess:
    def test_without_request_raises(self) -> None:
        with pytest.raises(RuntimeError, match="no request"):
            Controller().pagination()

    def test_pagination_bounds(self) -> None:
        controller = Controller().with_request(make_envelope(query={"page": "0", "per_page": "500"}))
        page = controller.pagination()
        assert (page.page, page.per_page) == (1, 100)

    def test_pagination_bad_values_use_defaults(self) -> None:
        controller = Controller().with_request(make_envelope(query={"page": "x", "per_page": "y"}))
        page = controller.pagination()
        assert (page.page, page.per_page, page.offset) == (1, 15, 0)

    def test_query_params(self) -> None:
        envelope = make_envelope(query={"search": " hello ", "orderby": "date", "order": "desc", "junk": "1"})
        params = Controller().with_request(envelope).query_params({"status": "publish"})
        assert params == {"search": "hello", "orderby": "date", "order": "DESC", "status": "publish"}

    def test_user_id(self) -> None:
        host = MemoryHost()
        host.login(11)
        assert Controller().with_request(make_envelope(host=host)).user_id == 11

    def test_validate_with_form_request(self) -> None:
        class TitleRequest(FormRequest):
            def rules(self) -> dict[str, str]:
                return {"title": "required"}

        controller = Controller().with_request(make_envelope("POST", body={"title": "Hi"}))
        assert controller.validate(TitleRequest) == {"title": "Hi"}
        empty = Controller().with_request(make_envelope("POST"))
        result = empty.validate(TitleRequest)
        assert isinstance(result, RouteError)
        assert result.status == 422


class TestDispatch:
    def test_paginated_listing(self, posts: MemoryHost) -> None:
        data = assert_success(posts.request_data("GET", "wp/v2/posts?page=2"))
        assert data["data"] == [{"id": 3, "title": "Post 3"}, {"id": 4, "title": "Post 4"}]
        assert data["pagination"] == {
            "current_page": 2,
            "per_page": 2,
            "total_items": 5,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }

    def test_show_and_not_found(self, posts: MemoryHost) -> None:
        assert assert_success(posts.request_data("GET", "wp/v2/posts/2")) == {"id": 2, "title": "Post 2"}
        assert_route_error(posts.request_data("GET", "wp/v2/posts/99"), "post_not_found", status=404)

    def test_authorize(self, posts: MemoryHost) -> None:
        assert_route_error(posts.request_data("POST", "wp/v2/posts"), "unauthorized", status=401)
        posts.login(1, "read")
        assert_route_error(posts.request_data("POST", "wp/v2/posts"), "forbidden", status=403)

    def test_validate_and_store(self, posts: MemoryHost) -> None:
        posts.login(1, "publish_posts")
        assert_route_error(posts.request_data("POST", "wp/v2/posts"), "validation_failed", status=422)
        created = posts.request_data("POST", "wp/v2/posts", json={"title": "New"})
        assert assert_success(created, status=201) == {"title": "New"}
        assert created.body["message"] == "Created"

    def test_fresh_instance_per_request(self, router: Router, host: MemoryHost) -> None:
        seen: list[Controller] = []

        class Tracker(Controller):
            def index(self, request: object) -> None:
                seen.append(self)

        router.get("track", (Tracker, "index"))
        router.register_routes()
        host.request_data("GET", "wp/v2/track")
        host.request_data("GET", "wp/v2/track")
        assert len(seen) == 2
        assert seen[0] is not seen[1]
