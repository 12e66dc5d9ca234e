"""Path parameter converters.

Built-in converters for template segments like ``{id:int}``. A converter
only narrows what a segment matches; captured values stay strings.
"""

from pressroute.errors import ConfigurationError

# Regex fragment matched by each supported converter
CONVERTERS: dict[str, str] = {
    "str": r"[^/]+",
    "int": r"\d+",
    "float": r"\d+(?:\.\d+)?",
    "slug": r"[A-Za-z0-9_-]+",
    "path": r".+",
}


def converter_pattern(param_type: str, template: str) -> str:
    """Return the regex fragment for *param_type*.

    Raises ``ConfigurationError`` naming *template* for unknown converters.
    """
    try:
        return CONVERTERS[param_type]
    except KeyError:
        known = ", ".join(sorted(CONVERTERS))
        msg = f"Unknown converter {param_type!r} in path template {template!r}. Known: {known}."
        raise ConfigurationError(msg) from None
