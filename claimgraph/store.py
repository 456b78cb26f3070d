"""
Graph stores - the Identity Store and Claim Store contract.

GraphStore is the contract every backend satisfies; MemoryGraphStore is
the in-process implementation used by tests, the demo, and embedders.
The remote implementation lives in claimgraph.http_store.
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod

from .errors import Conflict, DanglingReference, NotFound
from .models import Attestation, Claim, Identity
from .query import GraphView, select_claims, select_identities

logger = logging.getLogger(__name__)


def _validate_display_name(display_name: str) -> None:
    if not isinstance(display_name, str) or not display_name.strip():
        raise ValueError("display_name must be a non-empty string")


def _validate_id(name: str, value: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string, got {value!r}")


class GraphStore(ABC):
    """
    Identity and claim storage with filtered queries.

    Creates raise Conflict on a uniqueness collision, point lookups raise
    NotFound, claim creation raises DanglingReference for unresolved
    endpoints. Queries return every match; an empty list is not an error.
    """

    @abstractmethod
    def create_identity(self, display_name: str, description: str = "") -> Identity:
        ...

    @abstractmethod
    def get_identity(self, identity_id: str) -> Identity:
        ...

    @abstractmethod
    def query_identities(self, flt=None) -> list[Identity]:
        ...

    @abstractmethod
    def create_claim(self, subject_id: str, predicate_id: str, object_id: str, direction: bool = True) -> Claim:
        ...

    @abstractmethod
    def attest_claim(self, claim_id: str, direction: bool = True) -> Attestation:
        ...

    @abstractmethod
    def get_claim(self, claim_id: str) -> Claim:
        ...

    @abstractmethod
    def query_claims(self, flt=None) -> list[Claim]:
        ...

    @abstractmethod
    def list_attestations(self, claim_id: str) -> list[Attestation]:
        ...


class MemoryGraphStore(GraphStore):
    """
    In-process graph store.

    Display names are unique, and so are (subject, predicate, object)
    triples. All mutations happen under one lock; queries evaluate over a
    snapshot taken under that lock.
    """

    def __init__(self):
        self._identities: dict[str, Identity] = {}
        self._names: dict[str, str] = {}
        self._claims: dict[str, Claim] = {}
        self._triples: dict[tuple[str, str, str], str] = {}
        self._attestations: dict[str, list[Attestation]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    def _snapshot(self) -> GraphView:
        with self._lock:
            return GraphView(
                identities=dict(self._identities),
                claims=list(self._claims.values()),
            )

    # Identities

    def create_identity(self, display_name: str, description: str = "") -> Identity:
        _validate_display_name(display_name)
        with self._lock:
            existing = self._names.get(display_name)
            if existing is not None:
                raise Conflict("identity", display_name, existing_id=existing)
            identity = Identity(
                identity_id=self._new_id(),
                display_name=display_name,
                description=description or "",
            )
            self._identities[identity.identity_id] = identity
            self._names[display_name] = identity.identity_id
        logger.debug("created identity %s (%s)", identity.identity_id, display_name)
        return identity

    def get_identity(self, identity_id: str) -> Identity:
        with self._lock:
            identity = self._identities.get(identity_id)
        if identity is None:
            raise NotFound("identity", identity_id)
        return identity

    def query_identities(self, flt=None) -> list[Identity]:
        return select_identities(flt, self._snapshot())

    # Claims

    def create_claim(self, subject_id: str, predicate_id: str, object_id: str, direction: bool = True) -> Claim:
        for name, value in (("subject_id", subject_id), ("predicate_id", predicate_id), ("object_id", object_id)):
            _validate_id(name, value)
        with self._lock:
            missing = {
                role: ident
                for role, ident in (("subject", subject_id), ("predicate", predicate_id), ("object", object_id))
                if ident not in self._identities
            }
            if missing:
                raise DanglingReference(missing)
            triple = (subject_id, predicate_id, object_id)
            existing = self._triples.get(triple)
            if existing is not None:
                raise Conflict("claim", " --> ".join(triple), existing_id=existing)
            claim = Claim(
                claim_id=self._new_id(),
                subject_id=subject_id,
                predicate_id=predicate_id,
                object_id=object_id,
                direction=bool(direction),
            )
            self._claims[claim.claim_id] = claim
            self._triples[triple] = claim.claim_id
            self._attestations[claim.claim_id] = []
        logger.debug("created claim %s %s", claim.claim_id, triple)
        return claim

    def attest_claim(self, claim_id: str, direction: bool = True) -> Attestation:
        with self._lock:
            if claim_id not in self._claims:
                raise NotFound("claim", claim_id)
            attestation = Attestation(
                attestation_id=self._new_id(),
                claim_id=claim_id,
                direction=bool(direction),
            )
            self._attestations[claim_id].append(attestation)
        logger.debug("attested claim %s direction=%s", claim_id, direction)
        return attestation

    def get_claim(self, claim_id: str) -> Claim:
        with self._lock:
            claim = self._claims.get(claim_id)
        if claim is None:
            raise NotFound("claim", claim_id)
        return claim

    def query_claims(self, flt=None) -> list[Claim]:
        return select_claims(flt, self._snapshot())

    def list_attestations(self, claim_id: str) -> list[Attestation]:
        with self._lock:
            if claim_id not in self._claims:
                raise NotFound("claim", claim_id)
            return list(self._attestations[claim_id])

    def get_summary(self) -> dict:
        """Counts of stored records."""
        with self._lock:
            return {
                "identities": len(self._identities),
                "claims": len(self._claims),
                "attestations": sum(len(a) for a in self._attestations.values()),
            }
