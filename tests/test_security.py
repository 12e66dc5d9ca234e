"""Tests for signed request tokens and security audit events."""

import pytest
from conftest import make_envelope

from pressroute import RouterConfig
from pressroute.errors import ConfigurationError
from pressroute.security import SecurityEvent, TokenSigner, emit_security_event, set_security_event_sink
from pressroute.testing import MemoryHost


class TestTokenSigner:
    def test_round_trip(self) -> None:
        signer = TokenSigner("secret")
        token = signer.create("wp_rest", subject=7)
        assert signer.verify(token, "wp_rest", subject=7)

    def test_purpose_bound(self) -> None:
        signer = TokenSigner("secret")
        token = signer.create("wp_rest")
        assert not signer.verify(token, "ajax_save")

    def test_subject_bound(self) -> None:
        signer = TokenSigner("secret")
        token = signer.create("wp_rest", subject=7)
        assert not signer.verify(token, "wp_rest", subject=8)
        assert not signer.verify(token, "wp_rest")

    def test_other_key_rejected(self) -> None:
        token = TokenSigner("one").create("wp_rest")
        assert not TokenSigner("two").verify(token, "wp_rest")

    def test_garbage_rejected(self) -> None:
        assert not TokenSigner("secret").verify("not-a-token", "wp_rest")

    def test_expired(self) -> None:
        signer = TokenSigner("secret", max_age=-1)
        assert not signer.verify(signer.create("wp_rest"), "wp_rest")

    def test_empty_key(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenSigner("")

    def test_from_config_uses_secret_key(self) -> None:
        token = TokenSigner("configured").create("wp_rest")
        assert TokenSigner.from_config(RouterConfig(secret_key="configured")).verify(token, "wp_rest")

    def test_from_config_requires_key(self) -> None:
        with pytest.raises(ConfigurationError):
            TokenSigner.from_config(RouterConfig())

    def test_memory_host_signs_with_configured_key(self) -> None:
        host = MemoryHost(config=RouterConfig(secret_key="configured"))
        token = host.create_token("wp_rest")
        assert TokenSigner("configured").verify(token, "wp_rest")
        assert not TokenSigner("pressroute-testing-key").verify(token, "wp_rest")


class TestAuditEvents:
    def test_emit_without_sink_is_noop(self) -> None:
        set_security_event_sink(None)
        emit_security_event("auth.test")

    def test_event_carries_request_context(self) -> None:
        events: list[SecurityEvent] = []
        set_security_event_sink(events.append)
        try:
            envelope = make_envelope("POST", "/wp/v2/posts", surface="data", client_ip="10.9.8.7")
            emit_security_event("auth.denied", envelope=envelope, details={"why": "test"})
        finally:
            set_security_event_sink(None)

        event = events[0]
        assert event.name == "auth.denied"
        assert (event.surface, event.path, event.method, event.ip) == ("data", "/wp/v2/posts", "POST", "10.9.8.7")
        assert event.user_id is None
        assert event.details == {"why": "test"}
