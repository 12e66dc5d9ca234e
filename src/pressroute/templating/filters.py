"""Built-in pressroute template filters and globals.

Auto-registered on every kida Environment pressroute creates, for page,
panel, and built-in fallback rendering alike.
"""

import html
import json
from typing import Any
from urllib.parse import urlencode

from kida.template import Markup


def pretty_json(value: Any, indent: int = 2) -> str:
    """Serialize a payload for display in ``<pre>`` blocks.

    Example:
        <pre>{{ route_data | pretty_json }}</pre>
    """
    return json.dumps(value, indent=indent, default=str, sort_keys=True)


def field_errors(errors: Any, field_name: str) -> list[str]:
    """Validation messages for one field of a ``{field: [messages]}`` map.

    Example:
        {% for msg in errors | field_errors("email") %}
          <span class="error">{{ msg }}</span>
        {% end %}
    """
    if not errors or not isinstance(errors, dict):
        return []
    messages = errors.get(field_name, [])
    if isinstance(messages, str):
        return [messages]
    return list(messages)


def qs(base: str, **params: Any) -> str:
    """Append query parameters to a URL, skipping empty values.

    Example:
        {{ admin_url | qs(tab="general") }}
    """
    filtered = {key: value for key, value in params.items() if value is not None and value != ""}
    if not filtered:
        return base
    separator = "&" if "?" in base else "?"
    return f"{base}{separator}{urlencode(filtered)}"


def nonce_field(token: str, name: str = "_wpnonce") -> Markup:
    """A hidden form input carrying a request token."""
    return Markup(f'<input type="hidden" name="{html.escape(name)}" value="{html.escape(token)}">')


BUILTIN_FILTERS: dict[str, Any] = {
    "field_errors": field_errors,
    "pretty_json": pretty_json,
    "qs": qs,
}

BUILTIN_GLOBALS: dict[str, Any] = {
    "nonce_field": nonce_field,
}
