"""Kida environment setup for page and panel rendering.

Template files are located on disk by ``pressroute.pages.templates``; this
module turns a located file into HTML. One environment is created per
template directory (so ``{% include %}`` and ``{% extends %}`` resolve
relative to the file's own tree) and kept for the router's lifetime.
"""

from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from pressroute.config import RouterConfig
from pressroute.templating.filters import BUILTIN_FILTERS, BUILTIN_GLOBALS

BUILTIN_PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{{ title }}</title>
</head>
<body>
<main class="pressroute-page">
<h1>{{ title }}</h1>
<pre class="pressroute-data">{{ route_data | pretty_json }}</pre>
</main>
</body>
</html>
"""


def create_environment(
    config: RouterConfig,
    search_dirs: Iterable[str | Path],
    filters: Mapping[str, Callable[..., Any]] | None = None,
    globals_: Mapping[str, Any] | None = None,
) -> Environment:
    """Create a kida Environment searching *search_dirs* in order.

    pressroute's built-in filters and globals are registered first, so
    user-supplied ones with the same name win.
    """
    loaders = [FileSystemLoader(str(d)) for d in search_dirs]
    if loaders:
        env = Environment(loader=ChoiceLoader(loaders), autoescape=config.autoescape)
    else:
        # String templates only (the built-in page)
        env = Environment(autoescape=config.autoescape)

    env.update_filters(BUILTIN_FILTERS)
    if filters:
        env.update_filters(dict(filters))

    for name, value in BUILTIN_GLOBALS.items():
        env.add_global(name, value)
    for name, value in (globals_ or {}).items():
        env.add_global(name, value)

    return env


class TemplateRenderer:
    """Renders located template files and the built-in fallback page."""

    __slots__ = ("_builtin", "_config", "_environments", "_filters", "_globals")

    def __init__(
        self,
        config: RouterConfig,
        filters: Mapping[str, Callable[..., Any]] | None = None,
        globals_: Mapping[str, Any] | None = None,
    ) -> None:
        self._config = config
        self._filters = dict(filters or {})
        self._globals = dict(globals_ or {})
        self._environments: dict[Path, Environment] = {}
        self._builtin: Environment | None = None

    def add_global(self, name: str, value: Any) -> None:
        """Expose *value* to every template rendered from now on."""
        self._globals[name] = value
        for env in self._environments.values():
            env.add_global(name, value)
        if self._builtin is not None:
            self._builtin.add_global(name, value)

    def environment(self, directory: Path) -> Environment:
        env = self._environments.get(directory)
        if env is None:
            env = create_environment(self._config, [directory], self._filters, self._globals)
            self._environments[directory] = env
        return env

    def render_file(self, path: Path, context: Mapping[str, Any]) -> str:
        """Render the template file at *path* with *context*."""
        env = self.environment(path.parent)
        return env.get_template(path.name).render(dict(context))

    def render_builtin(self, title: str, payload: Any) -> str:
        """The page shown when no template file resolves: title plus raw payload."""
        if self._builtin is None:
            self._builtin = create_environment(self._config, [], self._filters, self._globals)
        template = self._builtin.from_string(BUILTIN_PAGE)
        return template.render({"title": title, "route_data": payload})
