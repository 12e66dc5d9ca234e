"""Controller base class for bound handlers.

Subclass it and reference methods as ``"PostController@index"`` (or
``(PostController, "index")``). A fresh instance is built per request and
handed the envelope through ``with_request`` before the method runs::

    class PostController(Controller):
        def index(self, request):
            page = self.pagination()
            items, total = store.page(page.offset, page.per_page)
            return self.paginated(items, total, page)

        def show(self, request):
            post = store.get(request.param("id"))
            return post if post else self.not_found("Post")
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.response import Response, RouteError, success_payload, validation_failed
from pressroute.validation import RuleSpec, validate
from pressroute.validation.form import FormRequest, is_form_request

logger = logging.getLogger("pressroute.controller")


@dataclass(frozen=True, slots=True)
class Pagination:
    page: int
    per_page: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def _int_or(value: Any, default: int) -> int:
    try:
        return int(value)
    except TypeError, ValueError:
        return default


class Controller:
    """Response helpers and request access for bound handlers."""

    per_page: int = 15
    max_per_page: int = 100

    request: RequestEnvelope | None = None

    def with_request(self, request: RequestEnvelope) -> Controller:
        self.request = request
        return self

    def _envelope(self) -> RequestEnvelope:
        if self.request is None:
            msg = f"{type(self).__name__} has no request; it is only usable during dispatch."
            raise RuntimeError(msg)
        return self.request

    # -- Responses --

    def success(self, data: Any = None, message: str = "Success", status: int = 200) -> Response:
        return Response.json(success_payload(data, message), status=status)

    def error(
        self,
        message: str,
        code: str = "error",
        status: int = 400,
        details: Any = None,
    ) -> RouteError:
        return RouteError(code=code, message=message, status=status, details=details)

    def validation_error(self, errors: Mapping[str, list[str]]) -> RouteError:
        return validation_failed(errors)

    def not_found(self, resource: str = "Resource") -> RouteError:
        return self.error(f"{resource} not found", f"{resource.lower()}_not_found", 404)

    def forbidden(self, message: str = "Access denied") -> RouteError:
        return self.error(message, "forbidden", 403)

    def unauthorized(self) -> RouteError:
        return self.error("Authentication required", "unauthorized", 401)

    # -- Access control --

    def authorize(self, capability: str, *args: Any) -> RouteError | None:
        """``None`` when allowed, otherwise the 401/403 error to return."""
        request = self._envelope()
        if not request.is_authenticated():
            return self.unauthorized()
        if not request.can(capability, *args):
            return self.forbidden()
        return None

    @property
    def user_id(self) -> int | str | None:
        return self._envelope().user_id

    # -- Input --

    def validate(
        self,
        rules: Mapping[str, RuleSpec] | type[FormRequest],
        messages: Mapping[str, str] | None = None,
    ) -> dict[str, Any] | RouteError:
        """Validate merged input; the cleaned data or a 422 error.

        A ``FormRequest`` class brings its own rules and may also answer 403.
        """
        if is_form_request(rules):
            return rules(self._envelope()).validate()
        result = validate(self._envelope().all(), rules, messages)
        if not result.is_valid:
            return validation_failed(result.errors)
        return result.data

    def query_params(self, defaults: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """Common listing filters: search, ordering, status, and date bounds."""
        request = self._envelope()
        params: dict[str, Any] = {}
        for name in ("search", "status", "date_after", "date_before"):
            value = request.query(name)
            if value:
                params[name] = str(value).strip()
        orderby = request.query("orderby")
        if orderby:
            params["orderby"] = str(orderby).strip()
            params["order"] = "DESC" if str(request.query("order", "ASC")).upper() == "DESC" else "ASC"
        return {**(defaults or {}), **params}

    # -- Pagination --

    def pagination(self) -> Pagination:
        """Page and page size from the ``page`` / ``per_page`` query parameters."""
        request = self._envelope()
        page = max(1, _int_or(request.query("page", 1), 1))
        per_page = min(self.max_per_page, max(1, _int_or(request.query("per_page", self.per_page), self.per_page)))
        return Pagination(page=page, per_page=per_page)

    def paginated(self, items: Iterable[Any], total: int, pagination: Pagination) -> dict[str, Any]:
        total_pages = math.ceil(total / pagination.per_page) if pagination.per_page else 0
        return {
            "data": [self.transform(item) for item in items],
            "pagination": {
                "current_page": pagination.page,
                "per_page": pagination.per_page,
                "total_items": total,
                "total_pages": total_pages,
                "has_next": pagination.page < total_pages,
                "has_prev": pagination.page > 1,
            },
        }

    # -- Hooks --

    def transform(self, item: Any) -> Any:
        """Shape one item for output. Override in subclasses."""
        return item

    def log(self, action: str, **data: Any) -> None:
        logger.debug("%s %s user=%s %s", type(self).__name__, action, self.user_id, data)
