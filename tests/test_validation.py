"""Tests for pressroute.validation: composable rules, rule names, and validate()."""

import pytest
from conftest import make_envelope

from pressroute import FormRequest, Router
from pressroute.security import SecurityEvent, set_security_event_sink
from pressroute.testing import MemoryHost, assert_route_error, assert_success
from pressroute.validation import (
    ValidationResult,
    between,
    email,
    integer,
    lookup,
    matches,
    max_length,
    min_length,
    number,
    one_of,
    required,
    slug,
    url,
    validate,
)

# ---------------------------------------------------------------------------
# Individual rule tests
# ---------------------------------------------------------------------------


class TestRequired:
    def test_empty_string(self) -> None:
        assert required("") is not None

    def test_whitespace_only(self) -> None:
        assert required("   ") is not None

    def test_empty_list(self) -> None:
        assert required([]) is not None

    def test_zero_is_present(self) -> None:
        assert required(0) is None


class TestLength:
    def test_max(self) -> None:
        assert max_length(5)("12345") is None
        assert max_length(5)("123456") is not None

    def test_min(self) -> None:
        assert min_length(3)("abc") is None
        assert min_length(3)("ab") is not None

    def test_numbers_compare_by_value(self) -> None:
        assert max_length(10)(11) is not None
        assert between(1, 5)(3) is None
        assert between(1, 5)(6) is not None


class TestFormats:
    def test_email(self) -> None:
        assert email("first.last@sub.domain.org") is None
        assert email("not-an-email") is not None

    def test_url(self) -> None:
        assert url("https://example.com/path") is None
        assert url("ftp://example.com") is not None

    def test_slug(self) -> None:
        assert slug("hello-world") is None
        assert slug("Hello World") is not None

    def test_matches_custom_message(self) -> None:
        assert matches(r"^\d{4}$", "Four digits")("12") == "Four digits"

    def test_one_of(self) -> None:
        assert one_of("draft", "publish")("draft") is None
        assert one_of("draft", "publish")("trash") is not None


class TestTypes:
    def test_integer(self) -> None:
        assert integer("42") is None
        assert integer("4.2") is not None
        assert integer(True) is not None

    def test_number(self) -> None:
        assert number("4.2") is None
        assert number("abc") is not None


class TestLookup:
    def test_plain_name(self) -> None:
        assert lookup("email") is email

    def test_parameterized(self) -> None:
        rule = lookup("max:3")
        assert rule("abcd") is not None
        assert rule("abc") is None

    def test_in_list(self) -> None:
        rule = lookup("in:a, b")
        assert rule("b") is None
        assert rule("c") is not None

    def test_regex_keeps_commas(self) -> None:
        rule = lookup("regex:^[a-z]{2,3}$")
        assert rule("abc") is None
        assert rule("abcd") is not None

    def test_unknown(self) -> None:
        with pytest.raises(KeyError):
            lookup("telepathy")


# ---------------------------------------------------------------------------
# validate()
# ---------------------------------------------------------------------------


class TestValidate:
    def test_valid_data(self) -> None:
        result = validate({"title": "Hello", "extra": "x"}, {"title": [required, max_length(10)]})
        assert result
        assert result.data == {"title": "Hello"}

    def test_errors_collected_per_field(self) -> None:
        result = validate({"email": "nope", "age": "x"}, {"email": "email", "age": ["integer", "min:18"]})
        assert not result
        assert set(result.errors) == {"email", "age"}

    def test_optional_empty_field_skips_rules(self) -> None:
        result = validate({"website": ""}, {"website": ["url"]})
        assert result.is_valid

    def test_required_stops_remaining_rules(self) -> None:
        result = validate({}, {"title": ["required", "min:3", "slug"]})
        assert result.errors == {"title": ["This field is required"]}

    def test_custom_messages(self) -> None:
        messages = {"email.email": "Bad email", "name": "Name please"}
        result = validate({"email": "x"}, {"email": ["email"], "name": ["required"]}, messages)
        assert result.errors == {"email": ["Bad email"], "name": ["Name please"]}

    def test_result_is_falsy_when_invalid(self) -> None:
        assert not ValidationResult(data={}, errors={"a": ["bad"]})
        assert ValidationResult(data={"a": 1}, errors={})

    def test_attribute_placeholder(self) -> None:
        result = validate(
            {},
            {"title": ["required"], "body": ["required"]},
            {"title.required": "The {attribute} is required", "body": "Missing {attribute}"},
            {"title": "post title"},
        )
        assert result.errors == {"title": ["The post title is required"], "body": ["Missing body"]}


# ---------------------------------------------------------------------------
# FormRequest
# ---------------------------------------------------------------------------


class StorePostRequest(FormRequest):
    def rules(self) -> dict[str, list[str]]:
        return {"title": ["required", "max:20"], "status": ["in:draft,publish"]}

    def messages(self) -> dict[str, str]:
        return {"title.required": "Give the {attribute} a value."}

    def attributes(self) -> dict[str, str]:
        return {"title": "post title"}

    def authorize(self) -> bool:
        return self.request.can("edit_posts")


class OpenRequest(FormRequest):
    def rules(self) -> dict[str, str]:
        return {"q": "required"}


class TestFormRequest:
    def test_accepted_data(self) -> None:
        host = MemoryHost()
        host.login(1, "edit_posts")
        envelope = make_envelope("POST", "/", host=host, body={"title": "Hello", "status": "draft", "extra": 1})
        assert StorePostRequest(envelope).validate() == {"title": "Hello", "status": "draft"}

    def test_invalid_input_is_422(self) -> None:
        host = MemoryHost()
        host.login(1, "edit_posts")
        result = StorePostRequest(make_envelope("POST", "/", host=host)).validate()
        assert result.status == 422
        assert result.code == "validation_failed"
        assert result.errors == {"title": ["Give the post title a value."]}

    def test_unauthorized_is_403_before_rules_run(self) -> None:
        result = StorePostRequest(make_envelope("POST", "/", host=MemoryHost())).validate()
        assert (result.code, result.status) == ("forbidden", 403)
        assert result.errors is None

    def test_get_validates_query(self) -> None:
        form = OpenRequest(make_envelope("GET", "/search?q=pressroute", body={"q": ""}))
        assert form.validate() == {"q": "pressroute"}

    def test_input_access(self) -> None:
        form = OpenRequest(make_envelope("POST", "/", body={"q": "x"}))
        assert form.input("q") == "x"
        assert form.has("q")
        assert form.all() == {"q": "x"}

    def test_rules_required(self) -> None:
        with pytest.raises(NotImplementedError):
            FormRequest(make_envelope()).rules()


class TestFormRequestOnRoutes:
    def test_route_validates_with_form_request(self, router: Router, host: MemoryHost) -> None:
        router.post("posts", lambda request: request.validated()).validate(StorePostRequest)
        router.register_routes()
        host.login(1, "edit_posts")

        body = assert_route_error(host.request_data("POST", "wp/v2/posts"), "validation_failed", status=422)
        assert body["data"]["errors"] == {"title": ["Give the post title a value."]}
        created = host.request_data("POST", "wp/v2/posts", json={"title": "Hi"})
        assert assert_success(created) == {"title": "Hi"}

    def test_route_denies_unauthorized(self, router: Router, host: MemoryHost) -> None:
        calls: list[object] = []
        router.post("posts", lambda request: calls.append(request)).validate(StorePostRequest)
        router.register_routes()
        events: list[SecurityEvent] = []
        set_security_event_sink(events.append)
        try:
            response = host.request_data("POST", "wp/v2/posts", json={"title": "Hi"})
        finally:
            set_security_event_sink(None)
        assert_route_error(response, "forbidden", status=403)
        assert calls == []
        assert [event.name for event in events] == ["authorization.denied"]
