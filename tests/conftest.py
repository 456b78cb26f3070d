"""
Pytest fixtures for claimgraph tests.
"""

import pytest

from claimgraph.graph import ClaimGraph, RetryPolicy
from claimgraph.registry import PredicateRegistry, SpecialPredicate
from claimgraph.store import MemoryGraphStore
from claimgraph.config import DEFAULT_BASE_URL


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryGraphStore()


@pytest.fixture
def graph(store):
    """ClaimGraph over the in-memory store, retrying without delay."""
    return ClaimGraph(store, retry=RetryPolicy(attempts=3, delay=0))


@pytest.fixture
def alice(store):
    return store.create_identity("Alice", "a user")


@pytest.fixture
def guest(store):
    return store.create_identity("Guest", "membership predicate")


@pytest.fixture
def club(store):
    return store.create_identity("Club", "an app")


@pytest.fixture
def registry(graph):
    """Registry with the membership and profile predicates resolved."""
    return PredicateRegistry.resolve(graph, {
        SpecialPredicate.MEMBER: "Esteemed Guest",
        SpecialPredicate.PROFILE: "Internet Amigos Profile",
    })


@pytest.fixture
def base_url():
    return DEFAULT_BASE_URL


@pytest.fixture
def mock_health_response():
    """Mock health endpoint response."""
    return {"status": "ok"}


@pytest.fixture
def identity_payload():
    return {
        "identity_id": "id-alice",
        "display_name": "Alice",
        "description": "a user",
    }


@pytest.fixture
def claim_payload():
    return {
        "claim_id": "claim-1",
        "subject_id": "id-alice",
        "predicate_id": "id-guest",
        "object_id": "id-club",
        "direction": True,
    }
