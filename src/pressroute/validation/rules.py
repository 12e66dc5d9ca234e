"""Built-in validation rules and the rule-name lookup.

Each rule is a callable with the signature::

    def rule(value: Any) -> str | None:
        '''Return an error message, or None if valid.'''

Parameterized rules are factory functions returning a rule::

    def max_length(n: float) -> Rule: ...

Routes may name rules instead of passing callables. ``lookup`` resolves
``"email"`` or ``"max:255"`` through the ``RULES`` table; a name with
``:args`` calls the registered factory with the (string) arguments.
"""

import ipaddress
import json
import re
from collections.abc import Callable
from typing import Any

# Type alias for a rule function
type Rule = Callable[[Any], str | None]


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: Any) -> str | None:
    """Field must be present and non-empty."""
    if value is None:
        return "This field is required"
    if isinstance(value, str) and not value.strip():
        return "This field is required"
    if isinstance(value, (list, dict, tuple)) and not value:
        return "This field is required"
    return None


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def _size(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, (list, dict, tuple)):
        return len(value)
    return len(_text(value))


def max_length(n: float) -> Rule:
    """At most *n* characters (or items, or a number no greater than *n*)."""

    def check(value: Any) -> str | None:
        if _size(value) > n:
            return f"Must be at most {n:g}"
        return None

    return check


def min_length(n: float) -> Rule:
    """At least *n* characters (or items, or a number no smaller than *n*)."""

    def check(value: Any) -> str | None:
        if _size(value) < n:
            return f"Must be at least {n:g}"
        return None

    return check


def between(low: float, high: float) -> Rule:
    def check(value: Any) -> str | None:
        if not low <= _size(value) <= high:
            return f"Must be between {low:g} and {high:g}"
        return None

    return check


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# Structure only, not deliverability
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


def email(value: Any) -> str | None:
    """Value must be a valid email address (basic format check)."""
    if not _EMAIL_RE.match(_text(value)):
        return "Must be a valid email address"
    return None


_URL_RE = re.compile(r"^https?://[^\s/$.?#].\S*$", re.IGNORECASE)


def url(value: Any) -> str | None:
    """Value must be a valid URL (http/https)."""
    if not _URL_RE.match(_text(value)):
        return "Must be a valid URL"
    return None


_SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slug(value: Any) -> str | None:
    """Lowercase letters, digits, and single dashes."""
    if not _SLUG_RE.match(_text(value)):
        return "Must be a valid slug"
    return None


def ip(value: Any) -> str | None:
    try:
        ipaddress.ip_address(_text(value))
    except ValueError:
        return "Must be a valid IP address"
    return None


def json_text(value: Any) -> str | None:
    """Value must be a string holding valid JSON."""
    try:
        json.loads(_text(value))
    except ValueError:
        return "Must be valid JSON"
    return None


def matches(pattern: str, message: str | None = None) -> Rule:
    """Value must match the given regex pattern."""
    compiled = re.compile(pattern)

    def check(value: Any) -> str | None:
        if not compiled.match(_text(value)):
            return message or f"Must match pattern: {pattern}"
        return None

    return check


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: str) -> Rule:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)

    def check(value: Any) -> str | None:
        if _text(value) not in allowed:
            options = ", ".join(sorted(allowed))
            return f"Must be one of: {options}"
        return None

    return check


# ---------------------------------------------------------------------------
# Type
# ---------------------------------------------------------------------------


def integer(value: Any) -> str | None:
    """Value must be a valid integer."""
    if isinstance(value, bool):
        return "Must be a whole number"
    try:
        int(_text(value))
    except ValueError, TypeError:
        return "Must be a whole number"
    return None


def number(value: Any) -> str | None:
    """Value must be a valid number (int or float)."""
    if isinstance(value, bool):
        return "Must be a number"
    try:
        float(_text(value))
    except ValueError, TypeError:
        return "Must be a number"
    return None


def string(value: Any) -> str | None:
    if not isinstance(value, str):
        return "Must be a string"
    return None


def boolean(value: Any) -> str | None:
    if value in (True, False, 0, 1, "0", "1", "true", "false"):
        return None
    return "Must be true or false"


def array(value: Any) -> str | None:
    if not isinstance(value, (list, tuple, dict)):
        return "Must be a list"
    return None


# ---------------------------------------------------------------------------
# Name lookup
# ---------------------------------------------------------------------------

# Plain rules by name
RULES: dict[str, Rule] = {
    "required": required,
    "email": email,
    "url": url,
    "slug": slug,
    "ip": ip,
    "json": json_text,
    "integer": integer,
    "numeric": number,
    "string": string,
    "boolean": boolean,
    "array": array,
}

# Parameterized rules by name; arguments arrive as strings
RULE_FACTORIES: dict[str, Callable[..., Rule]] = {
    "max": lambda n: max_length(float(n)),
    "min": lambda n: min_length(float(n)),
    "between": lambda low, high: between(float(low), float(high)),
    "in": one_of,
    "regex": matches,
}


def lookup(name: str) -> Rule:
    """Resolve a rule name (``"email"``, ``"max:255"``, ``"in:a,b"``).

    Raises ``KeyError`` for names neither table knows.
    """
    key, _, raw_args = name.partition(":")
    key = key.strip()
    if not raw_args:
        return RULES[key]
    if key == "regex":
        return matches(raw_args)
    args = [arg.strip() for arg in raw_args.split(",")]
    return RULE_FACTORIES[key](*args)


def rule_name(name: str) -> str:
    """The bare name of a rule reference (``"max:255"`` -> ``"max"``)."""
    return name.partition(":")[0].strip()
