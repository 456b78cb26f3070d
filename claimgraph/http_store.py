"""
HttpGraphStore - GraphStore backed by a remote claim graph service.

Each operation is one POST to a procedure endpoint with a JSON body;
responses carry the result under "data". HTTP statuses are mapped onto
the error taxonomy so callers never see raw httpx exceptions.
"""

import json
import logging

import httpx

from .config import ClientConfig
from .errors import AuthError, Conflict, DanglingReference, NotFound, TransportError
from .models import Attestation, Claim, Identity
from .store import GraphStore, _validate_display_name, _validate_id

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> dict:
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return {}
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {}


def _raise_for_status(response: httpx.Response, kind: str, key: str) -> None:
    """Translate an error response into the matching ClaimGraphError."""
    status = response.status_code
    if status < 400:
        return
    error = _error_body(response)
    code = error.get("code", "")
    message = error.get("message") or f"HTTP {status}"

    if status == 409:
        raise Conflict(kind, key, existing_id=error.get("existing_id"))
    if status == 404:
        raise NotFound(kind, key)
    if status == 422 and code == "dangling_reference":
        raise DanglingReference(error.get("missing") or {})
    if status in (401, 403):
        raise AuthError(f"HTTP {status}: {message}", status_code=status)
    raise TransportError(f"HTTP {status}: {message}", status_code=status)


class HttpGraphStore(GraphStore):
    """
    Graph store talking to a remote service over HTTP.

    Lifecycle follows start()/stop() or a ``with`` block.
    """

    def __init__(self, config: ClientConfig | None = None):
        """
        Initialize the store.

        Args:
            config: Endpoint and credentials; defaults to ClientConfig()
        """
        self.config = config or ClientConfig()
        self.base_url = self.config.base_url
        self._client: httpx.Client | None = None

    def start(self) -> bool:
        """Initialize the HTTP client and verify connectivity."""
        try:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.config.timeout,
                headers=self.config.headers(),
            )
            # Health check
            response = self._client.get("/health")
            if response.status_code != 200:
                logger.warning("health check at %s returned HTTP %d", self.base_url, response.status_code)
                self.stop()
                return False
            return True
        except httpx.RequestError as e:
            logger.warning("cannot reach %s: %s", self.base_url, e)
            if self._client is not None:
                self._client.close()
                self._client = None
            return False

    def stop(self) -> None:
        """Close the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False

    def _post(self, endpoint: str, json_data: dict, kind: str, key: str):
        """Send a POST request and return the response's "data" payload."""
        if not self._client:
            raise TransportError("Client not started")

        try:
            response = self._client.post(endpoint, json=json_data)
        except httpx.RequestError as e:
            raise TransportError(f"{endpoint}: {e}") from e

        _raise_for_status(response, kind, key)

        try:
            payload = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(f"Invalid JSON response: {e}") from e
        if not isinstance(payload, dict) or "data" not in payload:
            raise TransportError(f"{endpoint}: response has no data")
        return payload["data"]

    # Identities

    def create_identity(self, display_name: str, description: str = "") -> Identity:
        _validate_display_name(display_name)
        data = self._post(
            "/identity.create",
            {"display_name": display_name, "description": description or ""},
            "identity",
            display_name,
        )
        return Identity.from_dict(data)

    def get_identity(self, identity_id: str) -> Identity:
        _validate_id("identity_id", identity_id)
        data = self._post("/identity.get", {"identity_id": identity_id}, "identity", identity_id)
        return Identity.from_dict(data)

    def query_identities(self, flt=None) -> list[Identity]:
        data = self._post(
            "/queries.identities",
            {"input": flt.to_input() if flt is not None else {}},
            "identity",
            "query",
        )
        return [Identity.from_dict(item) for item in data or []]

    # Claims

    def create_claim(self, subject_id: str, predicate_id: str, object_id: str, direction: bool = True) -> Claim:
        for name, value in (("subject_id", subject_id), ("predicate_id", predicate_id), ("object_id", object_id)):
            _validate_id(name, value)
        data = self._post(
            "/claim.create",
            {
                "subject_id": subject_id,
                "predicate_id": predicate_id,
                "object_id": object_id,
                "direction": bool(direction),
            },
            "claim",
            " --> ".join((subject_id, predicate_id, object_id)),
        )
        return Claim.from_dict(data)

    def attest_claim(self, claim_id: str, direction: bool = True) -> Attestation:
        _validate_id("claim_id", claim_id)
        data = self._post("/claim.attest", {"claim_id": claim_id, "direction": bool(direction)}, "claim", claim_id)
        return Attestation.from_dict(data)

    def get_claim(self, claim_id: str) -> Claim:
        _validate_id("claim_id", claim_id)
        data = self._post("/claim.get", {"claim_id": claim_id}, "claim", claim_id)
        return Claim.from_dict(data)

    def query_claims(self, flt=None) -> list[Claim]:
        data = self._post(
            "/queries.claims",
            {"input": flt.to_input() if flt is not None else {}},
            "claim",
            "query",
        )
        return [Claim.from_dict(item) for item in data or []]

    def list_attestations(self, claim_id: str) -> list[Attestation]:
        _validate_id("claim_id", claim_id)
        data = self._post("/claim.attestations", {"claim_id": claim_id}, "claim", claim_id)
        return [Attestation.from_dict(item) for item in data or []]
