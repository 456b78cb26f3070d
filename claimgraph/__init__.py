"""
claimgraph - Identity/claim graph data layer.

Identities are nodes, claims are attestable subject --predicate--> object
triples between them. Applications build flexible, schema-less records
(memberships, profiles) out of claims and read them back with filter
queries.

Example:
    from claimgraph import ClaimGraph, MemoryGraphStore, named, as_subject

    graph = ClaimGraph(MemoryGraphStore())
    alice = graph.get_or_create_identity("Alice").record
    guest = graph.get_or_create_identity("Guest").record
    club = graph.get_or_create_identity("Club").record
    graph.ensure_claim(alice, guest, club)

    graph.store.query_identities(
        as_subject(where_predicate=named("Guest"), where_object=named("Club"))
    )

    # Remote service
    with HttpGraphStore(ClientConfig.from_env()) as store:
        graph = ClaimGraph(store)
"""

from .config import ClientConfig, DEFAULT_BASE_URL
from .errors import (
    ClaimGraphError,
    Conflict,
    NotFound,
    DanglingReference,
    ConsistencyViolation,
    TransportError,
    AuthError,
)
from .filters import (
    Field,
    InClaim,
    Role,
    AllOf,
    AnyOf,
    ClaimFilter,
    eq,
    named,
    by_id,
    all_of,
    any_of,
    as_subject,
    as_object,
)
from .graph import ClaimGraph, RetryPolicy
from .http_store import HttpGraphStore
from .models import Identity, Claim, Attestation, Created, Existed
from .profile import reconstruct_profile, resolve_profile_pointer, write_profile
from .registry import SpecialPredicate, PredicateDefinition, PredicateRegistry
from .store import GraphStore, MemoryGraphStore

__version__ = "0.1.0"
__all__ = [
    # Records
    "Identity",
    "Claim",
    "Attestation",
    "Created",
    "Existed",
    # Errors
    "ClaimGraphError",
    "Conflict",
    "NotFound",
    "DanglingReference",
    "ConsistencyViolation",
    "TransportError",
    "AuthError",
    # Filters
    "Field",
    "InClaim",
    "Role",
    "AllOf",
    "AnyOf",
    "ClaimFilter",
    "eq",
    "named",
    "by_id",
    "all_of",
    "any_of",
    "as_subject",
    "as_object",
    # Stores
    "GraphStore",
    "MemoryGraphStore",
    "HttpGraphStore",
    "ClientConfig",
    "DEFAULT_BASE_URL",
    # Graph
    "ClaimGraph",
    "RetryPolicy",
    "SpecialPredicate",
    "PredicateDefinition",
    "PredicateRegistry",
    "reconstruct_profile",
    "resolve_profile_pointer",
    "write_profile",
]
