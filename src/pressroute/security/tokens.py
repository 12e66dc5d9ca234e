"""Signed, expiring request tokens (nonces).

Tokens are signed with ``itsdangerous`` and salted with their purpose, so
a token minted for ``"wp_rest"`` never verifies for ``"ajax_save"``. The
optional subject binds a token to one identity.

Hosts that already have a nonce primitive keep using it; this signer is
what ``pressroute.testing.MemoryHost`` uses, and what a host without one
can delegate ``create_token``/``verify_token`` to::

    signer = TokenSigner.from_config(config)
    token = signer.create("wp_rest", subject=user.id)
    signer.verify(token, "wp_rest", subject=user.id)  # True
"""

from __future__ import annotations

from itsdangerous import BadSignature, URLSafeTimedSerializer

from pressroute.config import RouterConfig
from pressroute.errors import ConfigurationError


class TokenSigner:
    """Create and verify purpose-bound tokens."""

    __slots__ = ("_secret_key", "max_age")

    def __init__(self, secret_key: str, max_age: int = 86400) -> None:
        if not secret_key:
            msg = "TokenSigner requires a non-empty secret_key (RouterConfig.secret_key)."
            raise ConfigurationError(msg)
        self._secret_key = secret_key
        self.max_age = max_age

    @classmethod
    def from_config(cls, config: RouterConfig, max_age: int = 86400) -> TokenSigner:
        """A signer keyed with ``config.secret_key``."""
        return cls(config.secret_key, max_age)

    def _serializer(self, purpose: str) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(self._secret_key, salt=f"pressroute.{purpose}")

    def create(self, purpose: str, subject: int | str | None = None) -> str:
        return self._serializer(purpose).dumps({"sub": "" if subject is None else str(subject)})

    def verify(self, token: str, purpose: str, subject: int | str | None = None) -> bool:
        """True when *token* was minted for *purpose* (and *subject*) and has not expired."""
        try:
            data = self._serializer(purpose).loads(token, max_age=self.max_age)
        except BadSignature:
            return False
        expected = "" if subject is None else str(subject)
        return isinstance(data, dict) and data.get("sub") == expected
