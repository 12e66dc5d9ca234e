"""Class-based request validation.

A ``FormRequest`` gathers the rules, messages, display names, and the
authorization check for one endpoint in a single class::

    class StorePostRequest(FormRequest):
        def rules(self):
            return {"title": ["required", "max:200"], "email": "email"}

        def messages(self):
            return {"title.required": "Give the {attribute} a value."}

        def attributes(self):
            return {"title": "post title"}

        def authorize(self):
            return self.request.can("edit_posts")

    router.post("posts", store).validate(StorePostRequest)

As route validation it runs before the handler: a failed ``authorize``
ends the request with a 403 ``forbidden`` error, invalid input with the
422 ``validation_failed`` error, and accepted input is available through
``envelope.validated()``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

from pressroute.http.response import RouteError, validation_failed
from pressroute.validation import RuleSpec, validate

if TYPE_CHECKING:
    from pressroute.http.envelope import RequestEnvelope

UNAUTHORIZED_MESSAGE = "This action is unauthorized."


class FormRequest:
    """Base class for per-endpoint validation. Override ``rules``."""

    __slots__ = ("request",)

    def __init__(self, request: RequestEnvelope) -> None:
        self.request = request

    def rules(self) -> Mapping[str, RuleSpec | Iterable[RuleSpec]]:
        raise NotImplementedError

    def messages(self) -> Mapping[str, str]:
        return {}

    def attributes(self) -> Mapping[str, str]:
        return {}

    def authorize(self) -> bool:
        return True

    def data(self) -> Mapping[str, Any]:
        """The input under validation: the query for GET, merged input otherwise."""
        if self.request.method == "GET":
            return self.request.query()
        return self.request.all()

    def validate(self) -> dict[str, Any] | RouteError:
        """The accepted data, or a 403/422 ``RouteError``."""
        if not self.authorize():
            return RouteError("forbidden", UNAUTHORIZED_MESSAGE, status=403)
        result = validate(self.data(), self.rules(), self.messages(), self.attributes())
        if not result:
            return validation_failed(result.errors)
        return result.data

    # -- Input access --

    def input(self, name: str | None = None, default: Any = None) -> Any:
        return self.request.input(name, default)

    def all(self) -> dict[str, Any]:
        return self.request.all()

    def has(self, name: str) -> bool:
        return self.request.has(name)


def is_form_request(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, FormRequest)
