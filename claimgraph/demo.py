"""
Internet Amigos - a walkthrough of building an app on the claim graph.

Two users join an app through a membership predicate, each writes a
profile with fields of their own choosing (sharing one value identity),
and both profiles are read back from claims alone.
"""

import logging
from dataclasses import dataclass, field

from .graph import ClaimGraph
from .models import Identity
from .registry import PredicateDefinition, PredicateRegistry, SpecialPredicate

logger = logging.getLogger(__name__)

APP_NAME = "Internet Amigos"
DESCRIPTION = "I <3 Intuition"

PREDICATES = {
    SpecialPredicate.MEMBER: PredicateDefinition("Esteemed Guest", DESCRIPTION),
    SpecialPredicate.PROFILE: PredicateDefinition(
        "Internet Amigos Profile",
        'User Profiles for the "Internet Amigos" application',
    ),
}

USERS = ("My User", "My Other User")


@dataclass
class DemoResult:
    """What the walkthrough found in the graph."""
    members: list[Identity] = field(default_factory=list)
    profiles: dict[str, dict[str, str]] = field(default_factory=dict)


def run_demo(graph: ClaimGraph, other_graph: ClaimGraph | None = None) -> DemoResult:
    """
    Run the walkthrough against ``graph``.

    The second user writes through ``other_graph`` when given, so two
    independent callers (each with its own session) share one backend.
    Every write is get-or-create, so running it twice against one store
    gives the same result.
    """
    if other_graph is None:
        other_graph = graph

    logger.info("Let's build %r on the claim graph!", APP_NAME)

    logger.info("creating users if needed...")
    user1 = graph.get_or_create_identity(USERS[0], DESCRIPTION).record
    user2 = other_graph.get_or_create_identity(USERS[1], DESCRIPTION).record

    registry = PredicateRegistry.resolve(graph, PREDICATES)
    app = graph.get_or_create_identity(APP_NAME, DESCRIPTION).record

    # <user> --> "Esteemed Guest" --> Internet Amigos
    graph.join(user1, app, registry)
    other_graph.join(user2, app, registry)

    members = graph.members(app, registry)
    logger.info("retrieved %d %r users", len(members), APP_NAME)

    logger.info("writing profiles...")
    graph.write_profile(
        user1,
        registry,
        "PROFILE1: My User",
        {"Favorite Ice Cream": "Superman", "Shoe Width": "Fred Flinstone"},
        pointer_description='first profile for "My User"',
        descriptions={
            "Favorite Ice Cream": "What is your top flavor?",
            "Superman": "Man of steel (or delicious combo of blue moon, lemon, and black cherry ice cream)",
            "Shoe Width": "How wide are those tootsies?",
            "Fred Flinstone": "Yabba Dabba Dooooooooooo!",
        },
    )

    # "My Other User" reuses the "Superman" identity instead of fragmenting it
    superman = other_graph.identity_named("Superman")
    other_graph.write_profile(
        user2,
        registry,
        "PROFILE2: My Other User",
        {"Worst Superhero": superman, "Sense of Smell Ranking (global)": "TOP!"},
        pointer_description='first profile for "My Other User"',
        descriptions={
            "Worst Superhero": "We all know who it is (Superman)",
            "Sense of Smell Ranking (global)": "Noses aren't just for picking!",
            "TOP!": "Here we are...",
        },
    )

    profiles = {}
    for user in (user1, user2):
        profiles[user.display_name] = graph.reconstruct_profile(user, registry)
        logger.info("reconstructed profile for %r: %s", user.display_name, profiles[user.display_name])

    return DemoResult(members=members, profiles=profiles)
