"""
Tests for HttpGraphStore.

Tests HTTP communication with mocked server responses.
"""

import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from claimgraph.config import ClientConfig, DEFAULT_BASE_URL
from claimgraph.errors import (
    AuthError,
    Conflict,
    DanglingReference,
    NotFound,
    TransportError,
)
from claimgraph.filters import ClaimFilter, as_subject, by_id, named
from claimgraph.http_store import HttpGraphStore
from claimgraph.models import Attestation, Claim, Identity


def _started(httpx_mock: HTTPXMock, config: ClientConfig | None = None) -> HttpGraphStore:
    httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/health", json={"status": "ok"})
    store = HttpGraphStore(config)
    assert store.start() is True
    return store


def _body(httpx_mock: HTTPXMock, endpoint: str) -> dict:
    request = httpx_mock.get_request(url=f"{DEFAULT_BASE_URL}{endpoint}")
    return json.loads(request.content)


class TestLifecycle:
    """Tests for start/stop."""

    def test_initialization(self):
        store = HttpGraphStore()
        assert store.base_url == DEFAULT_BASE_URL
        assert store.config.timeout == 30.0

    def test_custom_url(self):
        store = HttpGraphStore(ClientConfig(base_url="http://localhost:9000/"))
        assert store.base_url == "http://localhost:9000"

    def test_start_failure(self, httpx_mock: HTTPXMock):
        """Test failed start (server unreachable)."""
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        store = HttpGraphStore()
        assert store.start() is False
        assert store._client is None

    def test_start_unhealthy_closes_client(self, httpx_mock: HTTPXMock):
        """Test a non-200 health check leaves no open client behind."""
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/health", status_code=503)
        store = HttpGraphStore()
        assert store.start() is False
        assert store._client is None

    def test_stop(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        store.stop()
        assert store._client is None

    def test_context_manager(self, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/health", json={"status": "ok"})
        with HttpGraphStore() as store:
            assert store._client is not None
        assert store._client is None

    def test_not_started(self):
        """Test operations on a store that was never started."""
        with pytest.raises(TransportError):
            HttpGraphStore().get_identity("id-alice")

    def test_credentials_sent(self, httpx_mock: HTTPXMock, identity_payload):
        store = _started(httpx_mock, ClientConfig(api_key="key-1", session="sess-1"))
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/identity.get", json={"data": identity_payload})
        store.get_identity("id-alice")
        request = httpx_mock.get_request(url=f"{DEFAULT_BASE_URL}/identity.get")
        assert request.headers["X-Api-Key"] == "key-1"
        assert request.headers["Authorization"] == "Bearer sess-1"
        store.stop()


class TestIdentities:
    """Tests for identity endpoints."""

    def test_create_identity(self, httpx_mock: HTTPXMock, identity_payload):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/identity.create", json={"data": identity_payload})

        identity = store.create_identity("Alice", "a user")
        assert identity == Identity("id-alice", "Alice", "a user")
        assert _body(httpx_mock, "/identity.create") == {"display_name": "Alice", "description": "a user"}
        store.stop()

    def test_create_identity_conflict(self, httpx_mock: HTTPXMock):
        """Test HTTP 409 maps to Conflict."""
        store = _started(httpx_mock)
        httpx_mock.add_response(
            url=f"{DEFAULT_BASE_URL}/identity.create",
            status_code=409,
            json={"error": {"code": "conflict", "message": "exists", "existing_id": "id-alice"}},
        )
        with pytest.raises(Conflict) as excinfo:
            store.create_identity("Alice")
        assert excinfo.value.existing_id == "id-alice"
        store.stop()

    def test_get_identity_not_found(self, httpx_mock: HTTPXMock):
        """Test HTTP 404 maps to NotFound."""
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/identity.get", status_code=404, json={})
        with pytest.raises(NotFound) as excinfo:
            store.get_identity("missing")
        assert excinfo.value.record_id == "missing"
        store.stop()

    def test_query_identities_sends_filter(self, httpx_mock: HTTPXMock, identity_payload):
        """Test the participation filter goes out in the service's input shape."""
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/queries.identities", json={"data": [identity_payload]})

        result = store.query_identities(
            as_subject(where_predicate=named("Esteemed Guest"), where_object=named("Internet Amigos"))
        )
        assert [i.display_name for i in result] == ["Alice"]
        assert _body(httpx_mock, "/queries.identities") == {
            "input": {
                "in_claim": {
                    "as_subject": {
                        "where_predicate": {"display_name": {"op": "=", "value": "Esteemed Guest"}},
                        "where_object": {"display_name": {"op": "=", "value": "Internet Amigos"}},
                    },
                },
            },
        }
        store.stop()

    def test_query_identities_empty(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/queries.identities", json={"data": []})
        assert store.query_identities(named("Nobody")) == []
        store.stop()


class TestClaims:
    """Tests for claim endpoints."""

    def test_create_claim(self, httpx_mock: HTTPXMock, claim_payload):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/claim.create", json={"data": claim_payload})

        claim = store.create_claim("id-alice", "id-guest", "id-club", True)
        assert claim == Claim("claim-1", "id-alice", "id-guest", "id-club", True)
        assert _body(httpx_mock, "/claim.create") == {
            "subject_id": "id-alice",
            "predicate_id": "id-guest",
            "object_id": "id-club",
            "direction": True,
        }
        store.stop()

    def test_create_claim_dangling(self, httpx_mock: HTTPXMock):
        """Test HTTP 422 dangling_reference maps to DanglingReference."""
        store = _started(httpx_mock)
        httpx_mock.add_response(
            url=f"{DEFAULT_BASE_URL}/claim.create",
            status_code=422,
            json={"error": {"code": "dangling_reference", "missing": {"object": "ghost"}}},
        )
        with pytest.raises(DanglingReference) as excinfo:
            store.create_claim("id-alice", "id-guest", "ghost")
        assert excinfo.value.missing == {"object": "ghost"}
        store.stop()

    def test_other_422_is_transport_error(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(
            url=f"{DEFAULT_BASE_URL}/claim.create",
            status_code=422,
            json={"error": {"code": "bad_input", "message": "nope"}},
        )
        with pytest.raises(TransportError) as excinfo:
            store.create_claim("id-alice", "id-guest", "id-club")
        assert excinfo.value.status_code == 422
        store.stop()

    def test_attest_claim(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(
            url=f"{DEFAULT_BASE_URL}/claim.attest",
            json={"data": {
                "attestation_id": "att-1",
                "claim_id": "claim-1",
                "direction": True,
                "created_at": "2024-01-01T00:00:00+00:00",
            }},
        )
        attestation = store.attest_claim("claim-1", True)
        assert isinstance(attestation, Attestation)
        assert attestation.claim_id == "claim-1"
        assert attestation.created_at.year == 2024
        assert _body(httpx_mock, "/claim.attest") == {"claim_id": "claim-1", "direction": True}
        store.stop()

    def test_query_claims_sends_filter(self, httpx_mock: HTTPXMock, claim_payload):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/queries.claims", json={"data": [claim_payload]})
        result = store.query_claims(ClaimFilter(with_subject=by_id("pp")))
        assert result[0].claim_id == "claim-1"
        assert _body(httpx_mock, "/queries.claims") == {
            "input": {"with_subject": {"identity_id": {"op": "=", "value": "pp"}}},
        }
        store.stop()

    def test_list_attestations(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(
            url=f"{DEFAULT_BASE_URL}/claim.attestations",
            json={"data": [
                {"attestation_id": "att-1", "claim_id": "claim-1", "direction": True},
                {"attestation_id": "att-2", "claim_id": "claim-1", "direction": True},
            ]},
        )
        assert len(store.list_attestations("claim-1")) == 2
        store.stop()


class TestTransportErrors:
    """Tests that transport failures stay distinct from domain errors."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, httpx_mock: HTTPXMock, status):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/identity.get", status_code=status, json={})
        with pytest.raises(AuthError) as excinfo:
            store.get_identity("id-alice")
        assert excinfo.value.status_code == status
        store.stop()

    def test_server_error(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/identity.create", status_code=500, text="boom")
        with pytest.raises(TransportError) as excinfo:
            store.create_identity("Alice")
        assert not isinstance(excinfo.value, Conflict)
        assert excinfo.value.status_code == 500
        store.stop()

    def test_timeout(self, httpx_mock: HTTPXMock):
        """Test a timeout surfaces as TransportError."""
        store = _started(httpx_mock)
        httpx_mock.add_exception(
            httpx.ReadTimeout("Connection timed out"),
            url=f"{DEFAULT_BASE_URL}/queries.claims",
        )
        with pytest.raises(TransportError):
            store.query_claims()
        store.stop()

    def test_invalid_json(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/claim.get", text="not json")
        with pytest.raises(TransportError):
            store.get_claim("claim-1")
        store.stop()

    def test_missing_data(self, httpx_mock: HTTPXMock):
        store = _started(httpx_mock)
        httpx_mock.add_response(url=f"{DEFAULT_BASE_URL}/claim.get", json={"ok": True})
        with pytest.raises(TransportError):
            store.get_claim("claim-1")
        store.stop()

    def test_invalid_ids_rejected_locally(self):
        store = HttpGraphStore()
        with pytest.raises(ValueError):
            store.create_claim("", "id-guest", "id-club")


class TestClientConfig:
    """Tests for ClientConfig."""

    def test_defaults(self):
        config = ClientConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.api_key is None
        assert config.headers() == {"Accept": "application/json"}

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CLAIMGRAPH_URL", "http://localhost:9000/")
        monkeypatch.setenv("CLAIMGRAPH_API_KEY", "key-1")
        monkeypatch.setenv("CLAIMGRAPH_SESSION", "sess-1")
        monkeypatch.setenv("CLAIMGRAPH_TIMEOUT", "5")
        config = ClientConfig.from_env()
        assert config.base_url == "http://localhost:9000"
        assert config.api_key == "key-1"
        assert config.session == "sess-1"
        assert config.timeout == 5.0

    def test_from_env_defaults(self, monkeypatch):
        for name in ("URL", "API_KEY", "SESSION", "TIMEOUT"):
            monkeypatch.delenv(f"CLAIMGRAPH_{name}", raising=False)
        config = ClientConfig.from_env()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 30.0

    def test_from_env_bad_timeout(self, monkeypatch):
        monkeypatch.setenv("CLAIMGRAPH_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            ClientConfig.from_env()

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            ClientConfig(timeout=0)

    def test_insecure_remote_warns(self):
        with pytest.warns(UserWarning, match="unencrypted"):
            ClientConfig(base_url="http://graph.example.com")

    def test_https_does_not_warn(self, recwarn):
        ClientConfig(base_url="https://graph.example.com")
        assert not [w for w in recwarn if issubclass(w.category, UserWarning)]

    def test_localhost_lookalike_warns(self):
        with pytest.warns(UserWarning, match="unencrypted"):
            ClientConfig(base_url="http://localhost.evil.com")

    def test_local_hosts_do_not_warn(self, recwarn):
        for url in ("http://localhost:9000", "http://127.0.0.1:8080", "http://[::1]:8080"):
            ClientConfig(base_url=url)
        assert not [w for w in recwarn if issubclass(w.category, UserWarning)]
