"""
Special predicates - identities an application gives fixed meaning to.

The store treats them as ordinary identities. The registry resolves each
SpecialPredicate to its identity once at startup, so membership and
profile logic look predicates up by tag instead of by display name.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from .models import Identity

logger = logging.getLogger(__name__)


class SpecialPredicate(Enum):
    """Relation types with application-level meaning."""
    MEMBER = "member"
    PROFILE = "profile"


@dataclass(frozen=True)
class PredicateDefinition:
    """Display name and description a special predicate is stored under."""
    display_name: str
    description: str = ""


class PredicateRegistry:
    """Typed lookup from SpecialPredicate to resolved identity."""

    def __init__(self, resolved: Mapping[SpecialPredicate, Identity] | None = None):
        self._resolved: dict[SpecialPredicate, Identity] = dict(resolved or {})

    @classmethod
    def resolve(cls, graph, definitions: Mapping[SpecialPredicate, PredicateDefinition | str]) -> "PredicateRegistry":
        """
        Get or create the identity behind every definition.

        Args:
            graph: ClaimGraph used for get-or-create
            definitions: Predicate tag -> definition (or bare display name)

        Returns:
            Registry with every tag resolved
        """
        resolved = {}
        for predicate, definition in definitions.items():
            if isinstance(definition, str):
                definition = PredicateDefinition(definition)
            outcome = graph.get_or_create_identity(definition.display_name, definition.description)
            resolved[predicate] = outcome.record
            logger.info(
                "special predicate %s -> %s (%s)",
                predicate.value,
                outcome.record.identity_id,
                "created" if outcome.created else "existing",
            )
        return cls(resolved)

    def __getitem__(self, predicate: SpecialPredicate) -> Identity:
        try:
            return self._resolved[predicate]
        except KeyError:
            raise KeyError(f"special predicate {predicate.value!r} is not registered") from None

    def __contains__(self, predicate: SpecialPredicate) -> bool:
        return predicate in self._resolved

    def id_of(self, predicate: SpecialPredicate) -> str:
        return self[predicate].identity_id

    def tag_of(self, identity_id: str) -> SpecialPredicate | None:
        """Reverse lookup: which special predicate, if any, an identity is."""
        for predicate, identity in self._resolved.items():
            if identity.identity_id == identity_id:
                return predicate
        return None
