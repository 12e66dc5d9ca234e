"""Validation middleware.

Validates request input before the handler runs. On success the accepted
values are recorded on the envelope (``envelope.validated()``); on failure
the request ends with a 422 ``validation_failed`` error listing every
field's messages.

Usage::

    router.post("posts", store).validate({
        "title": ["required", "max:255"],
        "status": [one_of("draft", "publish")],
    })

    # Built-in name: the listed fields are required
    router.post("contact", send).middleware("validate:name,email")

    # A FormRequest class (see pressroute.validation.form)
    router.post("posts", store).validate(StorePostRequest)
"""

import logging
from collections.abc import Mapping
from typing import Any

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import RouteError, validation_failed
from pressroute.middleware.protocol import MiddlewareResult
from pressroute.security.audit import emit_security_event
from pressroute.validation import validate
from pressroute.validation.form import FormRequest, is_form_request

logger = logging.getLogger("pressroute.middleware")


class ValidationMiddleware:
    """Validate input against a field -> rules mapping.

    ``GET`` requests validate the query string; every other verb validates
    the merged input.
    """

    __slots__ = ("messages", "rules")

    def __init__(
        self,
        rules: Mapping[str, Any] | None = None,
        messages: Mapping[str, str] | None = None,
    ) -> None:
        self.rules = dict(rules or {})
        self.messages = dict(messages or {})

    def __call__(self, envelope: RequestEnvelope, *required_fields: str) -> MiddlewareResult:
        rules = dict(self.rules)
        for field_name in required_fields:
            existing = rules.get(field_name, [])
            existing = [existing] if isinstance(existing, str) or callable(existing) else list(existing)
            rules[field_name] = ["required", *existing]
        if not rules:
            return None

        data = envelope.query() if envelope.method == "GET" else envelope.all()
        result = validate(data, rules, self.messages)
        if not result:
            return validation_failed(result.errors)
        envelope.set_validated(result.data)
        return None


def rules_middleware(
    rules: Mapping[str, Any] | type[FormRequest],
    messages: Mapping[str, str] | None = None,
) -> ValidationMiddleware | FormRequestMiddleware:
    """An inline validation middleware for ``Route.validate``."""
    if is_form_request(rules):
        return FormRequestMiddleware(rules)
    return ValidationMiddleware(rules, messages)


class FormRequestMiddleware:
    """Run a ``FormRequest`` class against the request."""

    __slots__ = ("form_class",)

    def __init__(self, form_class: type[FormRequest]) -> None:
        self.form_class = form_class

    def __call__(self, envelope: RequestEnvelope) -> MiddlewareResult:
        result = self.form_class(envelope).validate()
        if isinstance(result, RouteError):
            if result.code == "forbidden":
                logger.info("%s denied %s %s", self.form_class.__qualname__, envelope.method, envelope.path)
                emit_security_event(
                    "authorization.denied",
                    envelope=envelope,
                    details={"form_request": self.form_class.__qualname__},
                )
            return result
        envelope.set_validated(result)
        return None
