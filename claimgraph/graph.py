"""
ClaimGraph - idempotent operations over any GraphStore.

Wraps the raw store contract with get-or-create semantics, bounded
read-after-write polling, membership and profile helpers.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Mapping

from .errors import Conflict, ConsistencyViolation, NotFound
from .filters import ClaimFilter, InClaim, Role, by_id, named
from .models import Attestation, Claim, Created, Existed, Identity
from .profile import reconstruct_profile, resolve_profile_pointer, write_profile
from .registry import PredicateRegistry, SpecialPredicate
from .store import GraphStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """How long to wait for a freshly written record to become visible."""
    attempts: int = 5
    delay: float = 0.2

    def __post_init__(self):
        if not isinstance(self.attempts, int) or self.attempts < 1:
            raise ValueError(f"attempts must be a positive integer, got {self.attempts!r}")
        if self.delay < 0:
            raise ValueError(f"delay must be non-negative, got {self.delay!r}")


def _id_of(ref) -> str:
    return ref.identity_id if isinstance(ref, Identity) else ref


def _triple_filter(subject_id: str, predicate_id: str, object_id: str) -> ClaimFilter:
    return ClaimFilter(
        with_subject=by_id(subject_id),
        with_predicate=by_id(predicate_id),
        with_object=by_id(object_id),
    )


class ClaimGraph:
    """
    High-level access to a claim graph.

    Identity and claim arguments accept either the record or its id.
    """

    def __init__(self, store: GraphStore, retry: RetryPolicy | None = None):
        self.store = store
        self.retry = retry or RetryPolicy()

    def _poll(self, fetch: Callable, what: str):
        """
        Call ``fetch`` until it yields a non-empty result.

        NotFound counts as "not visible yet". Returns the last result,
        which may be empty; re-raises NotFound if every attempt raised it.
        """
        result = None
        error = None
        for attempt in range(1, self.retry.attempts + 1):
            try:
                result = fetch()
                error = None
            except NotFound as e:
                result, error = None, e
            if result:
                return result
            if attempt < self.retry.attempts:
                logger.debug("%s not visible yet (attempt %d/%d)", what, attempt, self.retry.attempts)
                time.sleep(self.retry.delay)
        if error is not None:
            raise error
        return result

    # Identities

    def get_identity(self, identity_id: str) -> Identity:
        """Point lookup that tolerates read-after-write lag."""
        return self._poll(lambda: self.store.get_identity(identity_id), f"identity {identity_id}")

    def find_identity(self, display_name: str) -> Identity | None:
        """
        The identity named ``display_name``, or None.

        Raises:
            ConsistencyViolation: several identities share the name
        """
        matches = self.store.query_identities(named(display_name))
        if len(matches) > 1:
            raise ConsistencyViolation(f"{len(matches)} identities are named {display_name!r}")
        return matches[0] if matches else None

    def identity_named(self, display_name: str) -> Identity:
        """
        The identity named ``display_name``, polling until it is visible.

        Raises:
            NotFound: still absent after every retry
            ConsistencyViolation: several identities share the name
        """
        matches = self._poll(lambda: self.store.query_identities(named(display_name)), f"identity {display_name!r}")
        if not matches:
            raise NotFound("identity", display_name)
        if len(matches) > 1:
            raise ConsistencyViolation(f"{len(matches)} identities are named {display_name!r}")
        return matches[0]

    def get_or_create_identity(self, display_name: str, description: str = "") -> Created | Existed:
        """Create an identity, or return the one already using ``display_name``."""
        try:
            identity = self.store.create_identity(display_name, description)
        except Conflict:
            logger.info("identity %r already created", display_name)
            return Existed(self.identity_named(display_name))
        logger.info("created identity %r (%s)", display_name, identity.identity_id)
        return Created(identity)

    # Claims

    def find_claim(self, subject, predicate, obj) -> Claim | None:
        matches = self.store.query_claims(_triple_filter(_id_of(subject), _id_of(predicate), _id_of(obj)))
        if len(matches) > 1:
            raise ConsistencyViolation(f"{len(matches)} claims share one triple")
        return matches[0] if matches else None

    def ensure_claim(self, subject, predicate, obj, direction: bool = True) -> Created | Existed:
        """
        Create the claim subject --predicate--> obj, or return the existing one.

        Raises:
            DanglingReference: an endpoint does not exist
            ConsistencyViolation: the triple is already claimed with the
                opposite direction
        """
        triple = (_id_of(subject), _id_of(predicate), _id_of(obj))
        try:
            claim = self.store.create_claim(*triple, direction=direction)
        except Conflict:
            logger.info("claim %s already created", " --> ".join(triple))
            matches = self._poll(lambda: self.store.query_claims(_triple_filter(*triple)), "claim")
            if not matches:
                raise NotFound("claim", " --> ".join(triple))
            if len(matches) > 1:
                raise ConsistencyViolation(f"{len(matches)} claims share one triple")
            if matches[0].direction != direction:
                raise ConsistencyViolation(
                    f"claim {matches[0].claim_id} has direction={matches[0].direction}, "
                    f"asked for direction={direction}"
                )
            return Existed(matches[0])
        logger.info("created claim %s", claim.claim_id)
        return Created(claim)

    def attest(self, claim, direction: bool = True) -> Attestation:
        """Endorse a claim, polling briefly if it was only just created."""
        claim_id = claim.claim_id if isinstance(claim, Claim) else claim
        attestation = self._poll(lambda: self.store.attest_claim(claim_id, direction), f"claim {claim_id}")
        logger.info("attested claim %s direction=%s", claim_id, direction)
        return attestation

    def attestations(self, claim) -> list[Attestation]:
        claim_id = claim.claim_id if isinstance(claim, Claim) else claim
        return self.store.list_attestations(claim_id)

    # Participation

    def subjects_of(self, predicate, obj) -> list[Identity]:
        """Identities X with a claim X --predicate--> obj."""
        return self.store.query_identities(
            InClaim(Role.SUBJECT, where_predicate=by_id(_id_of(predicate)), where_object=by_id(_id_of(obj)))
        )

    def objects_of(self, subject, predicate) -> list[Identity]:
        """Identities X with a claim subject --predicate--> X."""
        return self.store.query_identities(
            InClaim(Role.OBJECT, where_subject=by_id(_id_of(subject)), where_predicate=by_id(_id_of(predicate)))
        )

    def join(self, user, group, registry: PredicateRegistry, attest: bool = True) -> Claim:
        """Claim user --member--> group, attesting it when newly created."""
        outcome = self.ensure_claim(user, registry[SpecialPredicate.MEMBER], group)
        if attest and outcome.created:
            self.attest(outcome.record)
        return outcome.record

    def members(self, group, registry: PredicateRegistry) -> list[Identity]:
        return self.subjects_of(registry[SpecialPredicate.MEMBER], group)

    # Profiles

    def write_profile(
        self,
        user,
        registry: PredicateRegistry,
        pointer_name: str,
        fields: Mapping[str, "str | Identity"],
        pointer_description: str = "",
        descriptions: Mapping[str, str] | None = None,
    ) -> Identity:
        return write_profile(
            self,
            user,
            registry[SpecialPredicate.PROFILE],
            pointer_name,
            fields,
            pointer_description=pointer_description,
            descriptions=descriptions,
        )

    def profile_pointer(self, user, registry: PredicateRegistry) -> Identity:
        pointer_id = resolve_profile_pointer(self.store, _id_of(user), registry.id_of(SpecialPredicate.PROFILE))
        return self.get_identity(pointer_id)

    def reconstruct_profile(self, user, registry: PredicateRegistry) -> dict[str, str]:
        return reconstruct_profile(self.store, user, registry[SpecialPredicate.PROFILE])
