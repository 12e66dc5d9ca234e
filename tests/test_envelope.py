"""Tests for RequestEnvelope: input precedence, headers, identity."""

from conftest import make_envelope

from pressroute.http.envelope import RequestEnvelope
from pressroute.http.headers import Headers
from pressroute.http.inbound import RawInbound, UploadedFile
from pressroute.testing import MemoryHost


class TestInputPrecedence:
    def _envelope(self) -> RequestEnvelope:
        raw = RawInbound(
            method="POST",
            path="/posts/5",
            query={"a": "query", "b": "query", "c": "query", "d": "query"},
            path_params={"b": "path", "c": "path", "d": "path"},
            body={"c": "body", "d": "body"},
            json={"d": "json"},
        )
        return RequestEnvelope.from_inbound(raw)

    def test_json_beats_body_beats_path_beats_query(self) -> None:
        envelope = self._envelope()
        assert envelope.all() == {"a": "query", "b": "path", "c": "body", "d": "json"}

    def test_input_single_field(self) -> None:
        envelope = self._envelope()
        assert envelope.input("c") == "body"
        assert envelope.input("missing", "fallback") == "fallback"

    def test_only_and_except(self) -> None:
        envelope = self._envelope()
        assert envelope.only(["a", "zzz"]) == {"a": "query"}
        assert "a" not in envelope.except_(["a"])

    def test_sources_stay_separate(self) -> None:
        envelope = self._envelope()
        assert envelope.query("d") == "query"
        assert envelope.param("d") == "path"
        assert envelope.json("d") == "json"

    def test_non_mapping_json_is_not_merged(self) -> None:
        raw = RawInbound(method="POST", json=[1, 2, 3], query={"x": "1"})
        envelope = RequestEnvelope.from_inbound(raw)
        assert envelope.all() == {"x": "1"}
        assert envelope.json() == [1, 2, 3]


class TestPresence:
    def test_has_rejects_none_and_empty(self) -> None:
        envelope = make_envelope(query={"blank": "", "zero": "0"})
        assert not envelope.has("blank")
        assert not envelope.has("missing")
        assert envelope.has("zero")

    def test_filled_requires_truthy(self) -> None:
        raw = RawInbound(method="POST", json={"count": 0, "name": "x"})
        envelope = RequestEnvelope.from_inbound(raw)
        assert envelope.has("count")
        assert not envelope.filled("count")
        assert envelope.filled("name")


class TestHeaders:
    def test_case_insensitive_lookup(self) -> None:
        envelope = make_envelope(headers={"X-WP-Nonce": "abc", "HTTP_USER_AGENT": "pytest"})
        assert envelope.header("x-wp-nonce") == "abc"
        assert envelope.header("X_WP_NONCE") == "abc"
        assert envelope.user_agent == "pytest"

    def test_multi_value_headers(self) -> None:
        headers = Headers([("Accept", "text/html"), ("accept", "application/json")])
        assert headers["ACCEPT"] == "text/html"
        assert headers.get_list("accept") == ["text/html", "application/json"]
        assert len(headers) == 1

    def test_wants_and_is_json(self) -> None:
        envelope = make_envelope(headers={"Accept": "application/json", "Content-Type": "application/json"})
        assert envelope.wants_json()
        assert envelope.is_json()

    def test_ip_prefers_forwarded_for(self) -> None:
        envelope = make_envelope(headers={"X-Forwarded-For": "10.0.0.1, 10.0.0.2"}, client_ip="127.0.0.9")
        assert envelope.ip == "10.0.0.1"

    def test_ip_falls_back_to_socket(self) -> None:
        assert make_envelope(client_ip="192.168.1.4").ip == "192.168.1.4"


class TestFiles:
    def test_uploaded_file(self) -> None:
        upload = UploadedFile(filename="a.txt", content_type="text/plain", size=3, content=b"abc")
        envelope = make_envelope("POST", files={"doc": upload})
        assert envelope.has_file("doc")
        assert envelope.file("doc").read() == b"abc"
        assert envelope.file("other") is None


class TestIdentity:
    def test_anonymous(self) -> None:
        host = MemoryHost()
        envelope = make_envelope(host=host)
        assert not envelope.is_authenticated()
        assert envelope.user_id is None
        assert not envelope.can("read")

    def test_session_counts_as_authenticated(self) -> None:
        host = MemoryHost()
        host.login(3, "edit_posts")
        envelope = make_envelope(host=host)
        assert envelope.is_authenticated()
        assert envelope.user_id == 3
        assert envelope.can("edit_posts")
        assert not envelope.can("manage_options")

    def test_rest_token_authenticates_without_session(self) -> None:
        host = MemoryHost()
        host.login(9, session=False)
        token = host.create_token("wp_rest")
        host.identity = None
        # Token minted for user 9 does not verify for the anonymous subject
        assert not make_envelope(host=host, headers={"X-WP-Nonce": token}).is_authenticated()

        host.login(9, session=False)
        assert make_envelope(host=host, headers={"X-WP-Nonce": token}).is_authenticated()

    def test_identity_is_captured_once(self) -> None:
        host = MemoryHost()
        host.login(1)
        envelope = make_envelope(host=host)
        host.logout()
        assert envelope.is_authenticated()


class TestSideChannels:
    def test_validated_data(self) -> None:
        envelope = make_envelope()
        assert not envelope.has_validated()
        envelope.set_validated({"title": "x"})
        assert envelope.validated() == {"title": "x"}
        assert envelope.validated("title") == "x"

    def test_deferred_headers(self) -> None:
        envelope = make_envelope()
        envelope.defer_header("X-One", "1")
        envelope.defer_header("X-Two", 2)
        assert envelope.deferred_headers == (("X-One", "1"), ("X-Two", "2"))
