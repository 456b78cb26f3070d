"""
Profiles - flexible records built from claims.

A profile is a pointer identity linked from a user through the profile
predicate (user --profile--> pointer). Each field is a claim
pointer --field--> value, so a profile can carry any set of fields
without schema changes.
"""

import logging
from typing import Mapping

from .errors import ConsistencyViolation
from .filters import ClaimFilter, by_id
from .models import Identity

logger = logging.getLogger(__name__)


def _identity_id(ref) -> str:
    return ref.identity_id if isinstance(ref, Identity) else ref


def resolve_profile_pointer(store, user_id: str, profile_predicate_id: str) -> str:
    """
    Find the profile pointer linked from a user.

    Raises:
        ConsistencyViolation: the user has zero or several profile claims
    """
    claims = store.query_claims(
        ClaimFilter(with_subject=by_id(user_id), with_predicate=by_id(profile_predicate_id))
    )
    if len(claims) != 1:
        raise ConsistencyViolation(
            f"expected exactly one profile claim for identity {user_id}, found {len(claims)}"
        )
    return claims[0].object_id


def reconstruct_profile(store, user, profile_predicate) -> dict[str, str]:
    """
    Rebuild a user's profile as ``{field name: value name}``.

    Field claims sharing a predicate name overwrite each other, last seen
    wins. Reads only.

    Args:
        store: GraphStore to read from
        user: Identity or identity id of the user
        profile_predicate: Identity or identity id of the profile predicate
    """
    pointer_id = resolve_profile_pointer(store, _identity_id(user), _identity_id(profile_predicate))
    field_claims = store.query_claims(ClaimFilter(with_subject=by_id(pointer_id)))

    names: dict[str, str] = {}

    def display_name(identity_id: str) -> str:
        if identity_id not in names:
            names[identity_id] = store.get_identity(identity_id).display_name
        return names[identity_id]

    profile: dict[str, str] = {}
    for claim in field_claims:
        field = display_name(claim.predicate_id)
        if field in profile:
            logger.warning("profile %s has field %r more than once, keeping last", pointer_id, field)
        profile[field] = display_name(claim.object_id)
    return profile


def write_profile(
    graph,
    user,
    profile_predicate,
    pointer_name: str,
    fields: Mapping[str, "str | Identity"],
    pointer_description: str = "",
    descriptions: Mapping[str, str] | None = None,
) -> Identity:
    """
    Create (or complete) a user's profile.

    Values given as Identity are reused as-is, so users can share one
    value identity instead of fragmenting it. Every step is get-or-create,
    so writing the same profile twice is harmless.

    Args:
        graph: ClaimGraph to write through
        user: Identity of the user
        profile_predicate: Identity of the profile predicate
        pointer_name: Display name of the profile pointer identity
        fields: Field name -> value name or value Identity
        pointer_description: Description of the pointer identity
        descriptions: Optional descriptions for field and value identities, by name

    Returns:
        The profile pointer identity

    Raises:
        ConsistencyViolation: the user already points at a different profile
    """
    descriptions = descriptions or {}
    user_id = _identity_id(user)
    predicate_id = _identity_id(profile_predicate)

    # Refuse before writing anything
    existing = graph.store.query_claims(
        ClaimFilter(with_subject=by_id(user_id), with_predicate=by_id(predicate_id))
    )
    linked = [graph.store.get_identity(claim.object_id) for claim in existing]
    if any(identity.display_name != pointer_name for identity in linked):
        raise ConsistencyViolation(f"identity {user_id} already has a different profile pointer")

    if linked:
        pointer = linked[0]
    else:
        pointer = graph.get_or_create_identity(pointer_name, pointer_description).record

    for field_name, value in fields.items():
        field = graph.get_or_create_identity(field_name, descriptions.get(field_name, "")).record
        if not isinstance(value, Identity):
            value = graph.get_or_create_identity(value, descriptions.get(value, "")).record
        graph.ensure_claim(pointer, field, value)

    # User link goes last: a partial profile is unreachable
    graph.ensure_claim(user_id, predicate_id, pointer)
    logger.info("profile %r written for identity %s (%d fields)", pointer_name, user_id, len(fields))
    return pointer
