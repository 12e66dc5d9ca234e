"""Assertion helpers for pressroute tests.

Each assertion produces a clear error message on failure.
"""

from typing import Any

from pressroute.http.response import Response


def assert_success(response: Response, *, status: int = 200) -> Any:
    """Assert a ``{"success": true, ...}`` JSON response; return its ``data``."""
    assert response.status == status, f"Expected status {status}, got {response.status}: {response.text[:500]}"
    assert response.is_json, f"Expected a JSON response, got {response.content_type}"
    assert isinstance(response.body, dict) and response.body.get("success") is True, (
        f"Response is not a success payload: {response.text[:500]}"
    )
    return response.body.get("data")


def assert_route_error(response: Response, code: str, *, status: int | None = None) -> dict[str, Any]:
    """Assert a structured ``{code, message, data}`` error; return its body."""
    assert response.is_json, f"Expected a JSON error, got {response.content_type}"
    body = response.body
    assert isinstance(body, dict) and body.get("code") == code, (
        f"Expected error code {code!r}.\nResponse body: {response.text[:500]}"
    )
    if status is not None:
        assert response.status == status, f"Expected status {status}, got {response.status}"
        assert body["data"]["status"] == status, f"Error payload carries status {body['data']['status']}"
    return body


def assert_html_contains(response: Response, text: str, *, status: int = 200) -> None:
    """Assert an HTML response with *status* whose body contains *text*."""
    assert response.status == status, f"Expected status {status}, got {response.status}"
    assert text in response.text, f"HTML does not contain {text!r}.\nResponse body: {response.text[:500]}"


def assert_header(response: Response, name: str, value: str | None = None) -> None:
    """Assert *name* is present on the response (and equals *value* when given)."""
    actual = response.header(name)
    assert actual is not None, f"Response has no {name!r} header; headers: {response.headers}"
    if value is not None:
        assert actual == value, f"Expected {name}: {value!r}, got {actual!r}"
