"""Template file lookup across the layered, mode-dependent search path.

Lookup order for a template name:

1. an absolute path that exists, verbatim
2. the host's own lookup (``Host.resolve_template_file``)
3. the active template directory (child theme)
4. the parent template directory
5. plugin mode only: the bundle's ``templates/``, ``views/`` and root
   (panels first try ``admin-templates/``, ``templates/admin/`` and
   ``views/admin/``)

The first existing file wins. A miss returns ``None``; callers fall back
to the built-in renderer.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Literal

from pressroute.config import RouterConfig
from pressroute.host import Host

logger = logging.getLogger("pressroute.pages")

type SearchMode = Literal["page", "panel"]

_BUNDLE_DIRS: dict[str, tuple[str, ...]] = {
    "page": ("templates", "views", ""),
    "panel": ("admin-templates", "templates/admin", "templates", "views/admin", "views", ""),
}


class TemplateLocator:
    """Finds template files for page and panel routes."""

    __slots__ = ("config", "host")

    def __init__(self, config: RouterConfig, host: Host) -> None:
        self.config = config
        self.host = host

    def normalize(self, name: str) -> str:
        """Append the configured suffix when *name* has none."""
        if Path(name).suffix:
            return name
        return f"{name}{self.config.template_suffix}"

    def candidates(self, name: str, mode: SearchMode = "page") -> Iterator[Path]:
        """Every on-disk location tried for *name*, in order (host lookup excluded)."""
        for directory in (self.config.active_template_dir, self.config.parent_template_dir):
            if directory:
                yield Path(directory) / name

        if self.config.template_mode == "plugin" and self.config.bundle_dir:
            bundle = Path(self.config.bundle_dir)
            for sub in _BUNDLE_DIRS[mode]:
                yield (bundle / sub / name) if sub else (bundle / name)

    def locate(self, name: str | None, mode: SearchMode = "page") -> Path | None:
        """The first existing template file for *name*, or ``None``."""
        if not name:
            return None

        absolute = Path(name)
        if absolute.is_absolute():
            if absolute.is_file():
                return absolute
            logger.debug("Absolute template %s does not exist", name)
            return None

        normalized = self.normalize(name)
        found = self.host.resolve_template_file(normalized, mode)
        if found is not None and Path(found).is_file():
            return Path(found)

        for candidate in self.candidates(normalized, mode):
            if candidate.is_file():
                return candidate

        logger.debug("Template %r not found (mode=%s)", normalized, mode)
        return None
