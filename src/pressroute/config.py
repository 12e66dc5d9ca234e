"""Router configuration.

RouterConfig is a frozen dataclass: immutable after creation and
autocompletable, with no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

type TemplateMode = Literal["theme", "plugin"]


@dataclass(frozen=True, slots=True)
class RouterConfig:
    """Router configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = RouterConfig(site_url="https://example.com", template_mode="plugin")
    """

    # Host URLs
    site_url: str = "http://localhost"
    api_prefix: str = "wp-json"
    admin_path: str = "wp-admin"
    action_endpoint: str = "admin-ajax.php"

    # Routing
    default_namespace: str = "wp/v2"
    page_hook: str = "template_redirect"

    # Templates
    template_mode: TemplateMode = "theme"
    active_template_dir: str | Path | None = None  # child theme / stylesheet directory
    parent_template_dir: str | Path | None = None  # parent theme directory
    bundle_dir: str | Path | None = None  # plugin root, searched in plugin mode
    template_suffix: str = ".html"
    autoescape: bool = True

    # Auth
    nonce_header: str = "X-WP-Nonce"
    nonce_param: str = "_wpnonce"
    rest_nonce_action: str = "wp_rest"

    # Rate limiting (defaults for ``rate_limit`` with no arguments)
    rate_limit_requests: int = 60
    rate_limit_window: int = 60  # seconds

    # Signing key for the bundled token signer
    secret_key: str = ""

    # Logging
    log_level: str = "info"

    @property
    def api_base(self) -> str:
        """Absolute base URL for data endpoints (``{site}/{api_prefix}``)."""
        return f"{self.site_url.rstrip('/')}/{self.api_prefix.strip('/')}"

    @property
    def admin_base(self) -> str:
        """Absolute base URL of the host's admin area."""
        return f"{self.site_url.rstrip('/')}/{self.admin_path.strip('/')}"

    @property
    def action_base(self) -> str:
        """Absolute URL of the host's action dispatcher."""
        return f"{self.admin_base}/{self.action_endpoint}"
