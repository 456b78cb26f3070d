"""
Filter trees for identity and claim queries.

A filter is one of:

- Field      (field, op, value) over a record's stored fields
- InClaim    identities taking a role in some claim whose other
             endpoints satisfy identity sub-filters
- ClaimFilter claims whose endpoint identities satisfy identity filters
- AllOf / AnyOf logical combinators

Every filter renders to the nested-mapping input the remote service
accepts via ``to_input()``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

OPERATORS = ("=", "!=", "contains")

IDENTITY_FIELDS = ("identity_id", "display_name", "description")
CLAIM_FIELDS = ("claim_id", "subject_id", "predicate_id", "object_id", "direction")


@dataclass(frozen=True)
class Field:
    """Compare one stored field against a value."""
    field: str
    op: str
    value: Any

    def __post_init__(self):
        if not isinstance(self.field, str) or not self.field:
            raise ValueError("field must be a non-empty string")
        if self.op not in OPERATORS:
            raise ValueError(f"unsupported operator {self.op!r}, expected one of {OPERATORS}")

    def to_input(self) -> dict:
        return {self.field: {"op": self.op, "value": self.value}}


class Role(Enum):
    """Position an identity takes inside a claim."""
    SUBJECT = "subject"
    PREDICATE = "predicate"
    OBJECT = "object"


@dataclass(frozen=True)
class InClaim:
    """
    Identities that appear in ``role`` of at least one claim whose other
    endpoints satisfy the given identity filters.

    A missing sub-filter matches any identity in that position.
    """
    role: Role
    where_subject: "IdentityFilter | None" = None
    where_predicate: "IdentityFilter | None" = None
    where_object: "IdentityFilter | None" = None

    def __post_init__(self):
        if not isinstance(self.role, Role):
            raise ValueError(f"role must be a Role, got {self.role!r}")
        if self.sub_filter(self.role) is not None:
            raise ValueError(f"an identity in role {self.role.value!r} cannot also filter that role")

    def sub_filter(self, role: Role) -> "IdentityFilter | None":
        return {
            Role.SUBJECT: self.where_subject,
            Role.PREDICATE: self.where_predicate,
            Role.OBJECT: self.where_object,
        }[role]

    def to_input(self) -> dict:
        body = {}
        for role in Role:
            sub = self.sub_filter(role)
            if sub is not None:
                body[f"where_{role.value}"] = sub.to_input()
        return {"in_claim": {f"as_{self.role.value}": body}}


@dataclass(frozen=True)
class AllOf:
    """Every child filter must match."""
    filters: tuple

    def to_input(self) -> dict:
        return {"and": [f.to_input() for f in self.filters]}


@dataclass(frozen=True)
class AnyOf:
    """At least one child filter must match."""
    filters: tuple

    def to_input(self) -> dict:
        return {"or": [f.to_input() for f in self.filters]}


IdentityFilter = Union[Field, InClaim, AllOf, AnyOf]


@dataclass(frozen=True)
class ClaimFilter:
    """
    Claims whose endpoints satisfy identity filters.

    ``where`` optionally constrains the claim's own fields
    (``claim_id``, ``direction``, the endpoint ids).
    """
    with_subject: IdentityFilter | None = None
    with_predicate: IdentityFilter | None = None
    with_object: IdentityFilter | None = None
    where: Field | None = None

    def to_input(self) -> dict:
        body = {}
        if self.with_subject is not None:
            body["with_subject"] = self.with_subject.to_input()
        if self.with_predicate is not None:
            body["with_predicate"] = self.with_predicate.to_input()
        if self.with_object is not None:
            body["with_object"] = self.with_object.to_input()
        if self.where is not None:
            body.update(self.where.to_input())
        return body


# Shorthands

def eq(field: str, value: Any) -> Field:
    return Field(field, "=", value)


def named(display_name: str) -> Field:
    """Identity whose display name is exactly ``display_name``."""
    return Field("display_name", "=", display_name)


def by_id(identity_id: str) -> Field:
    """Identity with the given id."""
    return Field("identity_id", "=", identity_id)


def all_of(*filters) -> AllOf:
    return AllOf(tuple(filters))


def any_of(*filters) -> AnyOf:
    return AnyOf(tuple(filters))


def as_subject(where_predicate=None, where_object=None) -> InClaim:
    return InClaim(Role.SUBJECT, where_predicate=where_predicate, where_object=where_object)


def as_object(where_subject=None, where_predicate=None) -> InClaim:
    return InClaim(Role.OBJECT, where_subject=where_subject, where_predicate=where_predicate)
