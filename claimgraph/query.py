"""
Query Engine - evaluates filter trees against a snapshot of the graph.

Evaluation is a pure function of a GraphView; stores take the snapshot
and hand it over, so nothing here needs locking.
"""

from dataclasses import dataclass, field
from typing import Any

from .filters import (
    CLAIM_FIELDS,
    IDENTITY_FIELDS,
    AllOf,
    AnyOf,
    ClaimFilter,
    Field,
    InClaim,
    Role,
)
from .models import Claim, Identity


@dataclass
class GraphView:
    """Read-only snapshot of identities (by id) and claims (in creation order)."""
    identities: dict[str, Identity] = field(default_factory=dict)
    claims: list[Claim] = field(default_factory=list)


def _compare(flt: Field, stored: Any) -> bool:
    if flt.op == "=":
        return stored == flt.value
    if flt.op == "!=":
        return stored != flt.value
    if flt.op == "contains":
        return isinstance(stored, str) and isinstance(flt.value, str) and flt.value in stored
    raise ValueError(f"unsupported operator {flt.op!r}")


def _field_value(record: Any, name: str, allowed: tuple) -> Any:
    if name not in allowed:
        raise ValueError(f"unknown field {name!r}, expected one of {allowed}")
    return getattr(record, name)


def _endpoint(claim: Claim, role: Role) -> str:
    if role is Role.SUBJECT:
        return claim.subject_id
    if role is Role.PREDICATE:
        return claim.predicate_id
    return claim.object_id


def _endpoint_matches(flt, identity_id: str, view: GraphView) -> bool:
    if flt is None:
        return True
    identity = view.identities.get(identity_id)
    if identity is None:
        return False
    return match_identity(flt, identity, view)


def _participates(flt: InClaim, identity: Identity, claim: Claim, view: GraphView) -> bool:
    if _endpoint(claim, flt.role) != identity.identity_id:
        return False
    for role in Role:
        if role is flt.role:
            continue
        if not _endpoint_matches(flt.sub_filter(role), _endpoint(claim, role), view):
            return False
    return True


def match_identity(flt, identity: Identity, view: GraphView) -> bool:
    """Return True when ``identity`` satisfies the identity filter ``flt``."""
    if flt is None:
        return True
    if isinstance(flt, Field):
        return _compare(flt, _field_value(identity, flt.field, IDENTITY_FIELDS))
    if isinstance(flt, InClaim):
        return any(_participates(flt, identity, claim, view) for claim in view.claims)
    if isinstance(flt, AllOf):
        return all(match_identity(f, identity, view) for f in flt.filters)
    if isinstance(flt, AnyOf):
        return any(match_identity(f, identity, view) for f in flt.filters)
    raise TypeError(f"not an identity filter: {flt!r}")


def match_claim(flt, claim: Claim, view: GraphView) -> bool:
    """Return True when ``claim`` satisfies the claim filter ``flt``."""
    if flt is None:
        return True
    if isinstance(flt, ClaimFilter):
        if flt.where is not None and not _compare(flt.where, _field_value(claim, flt.where.field, CLAIM_FIELDS)):
            return False
        return (
            _endpoint_matches(flt.with_subject, claim.subject_id, view)
            and _endpoint_matches(flt.with_predicate, claim.predicate_id, view)
            and _endpoint_matches(flt.with_object, claim.object_id, view)
        )
    if isinstance(flt, Field):
        return _compare(flt, _field_value(claim, flt.field, CLAIM_FIELDS))
    if isinstance(flt, AllOf):
        return all(match_claim(f, claim, view) for f in flt.filters)
    if isinstance(flt, AnyOf):
        return any(match_claim(f, claim, view) for f in flt.filters)
    raise TypeError(f"not a claim filter: {flt!r}")


def select_identities(flt, view: GraphView) -> list[Identity]:
    """All identities matching ``flt``, in store order."""
    return [ident for ident in view.identities.values() if match_identity(flt, ident, view)]


def select_claims(flt, view: GraphView) -> list[Claim]:
    """All claims matching ``flt``, in store order."""
    return [claim for claim in view.claims if match_claim(flt, claim, view)]
