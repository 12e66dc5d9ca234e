"""Path templates: parse once, then match and expand.

A template is a slash-separated path with named segments::

    "posts"               plain, matched exactly
    "posts/{id}"          one or more non-slash characters
    "posts/{id:int}"      digits only (see ``pressroute.routing.params``)
    "archive/{year?}"     optional, the preceding slash goes with it

Leading and trailing slashes are never significant.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from pressroute.errors import DuplicateParameterError, URLBuildError
from pressroute.routing.params import converter_pattern

_PARAM_RE = re.compile(r"\{([^}]+)\}")


@dataclass(frozen=True, slots=True)
class TemplateParam:
    """One ``{...}`` placeholder of a template."""

    name: str
    param_type: str = "str"
    optional: bool = False
    raw: str = ""


def normalize_path(path: str) -> str:
    """Strip surrounding slashes and collapse empty segments."""
    return "/".join(part for part in path.split("/") if part)


def join_paths(*parts: str) -> str:
    """Slash-join non-empty path fragments (``"v1", "users/"`` -> ``"v1/users"``)."""
    return "/".join(normalized for part in parts if (normalized := normalize_path(part)))


def _parse_placeholder(raw: str) -> TemplateParam:
    inner = raw[1:-1].strip()
    optional = inner.endswith("?")
    if optional:
        inner = inner[:-1]
    if ":" in inner:
        name, param_type = inner.split(":", 1)
    else:
        name, param_type = inner, "str"
    return TemplateParam(name=name.strip(), param_type=param_type.strip() or "str", optional=optional, raw=raw)


class PathTemplate:
    """A compiled path template.

    Raises ``DuplicateParameterError`` at construction when a parameter
    name appears twice.
    """

    __slots__ = ("_regex", "params", "source")

    def __init__(self, source: str) -> None:
        self.source = normalize_path(source)
        self.params: tuple[TemplateParam, ...] = self._collect_params()
        self._regex = re.compile(f"^{self.pattern}$") if self.params else None

    def _collect_params(self) -> tuple[TemplateParam, ...]:
        seen: set[str] = set()
        params: list[TemplateParam] = []
        for found in _PARAM_RE.finditer(self.source):
            param = _parse_placeholder(found.group(0))
            if param.name in seen:
                raise DuplicateParameterError(self.source, param.name)
            seen.add(param.name)
            params.append(param)
        return tuple(params)

    # -- Introspection --

    @property
    def is_plain(self) -> bool:
        return not self.params

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(param.name for param in self.params)

    @property
    def pattern(self) -> str:
        """Regex source (unanchored) with one named group per parameter.

        Literal text is escaped, so ``.`` or ``+`` in a template only ever
        match themselves.
        """
        out: list[str] = []
        position = 0
        for found, param in zip(_PARAM_RE.finditer(self.source), self.params, strict=True):
            literal = self.source[position : found.start()]
            fragment = converter_pattern(param.param_type, self.source)
            group = f"(?P<{param.name}>{fragment})"
            if param.optional and literal.endswith("/"):
                out.append(re.escape(literal[:-1]))
                out.append(f"(?:/{group})?")
            else:
                out.append(re.escape(literal))
                out.append(f"{group}?" if param.optional else group)
            position = found.end()
        out.append(re.escape(self.source[position:]))
        return "".join(out)

    @property
    def host_pattern(self) -> str:
        """Leading-slash route pattern handed to the host's data registry."""
        return "/" + self.pattern

    # -- Matching --

    def match(self, path: str) -> dict[str, str] | None:
        """Return the captured parameters, or ``None`` when *path* does not match.

        Plain templates compare exactly. Unmatched optional parameters are
        left out of the result.
        """
        candidate = normalize_path(path)
        if self._regex is None:
            return {} if candidate == self.source else None
        found = self._regex.match(candidate)
        if found is None:
            return None
        return {name: value for name, value in found.groupdict().items() if value is not None}

    # -- Reverse --

    def expand(self, values: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
        """Substitute *values* into the template.

        Returns the expanded path and the values the template did not
        consume. Raises ``URLBuildError`` for a missing required parameter.
        """
        path = self.source
        for param in self.params:
            if param.name in values and values[param.name] is not None:
                path = path.replace(param.raw, quote(str(values[param.name]), safe=""), 1)
            elif param.optional:
                path = path.replace("/" + param.raw, "", 1).replace(param.raw, "", 1)
            else:
                msg = f"Missing parameter {param.name!r} for path template {self.source!r}."
                raise URLBuildError(msg)
        consumed = set(self.param_names)
        unused = {key: value for key, value in values.items() if key not in consumed}
        return normalize_path(path), unused

    def __repr__(self) -> str:
        return f"PathTemplate({self.source!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PathTemplate) and other.source == self.source

    def __hash__(self) -> int:
        return hash(self.source)
