"""
Claim graph records: identities, claims, attestations.

Records are immutable. Stores hand out the same frozen objects they keep,
so callers can share them freely.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar


@dataclass(frozen=True)
class Identity:
    """A node in the claim graph."""
    identity_id: str
    display_name: str
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Identity":
        return cls(
            identity_id=str(data["identity_id"]),
            display_name=data["display_name"],
            description=data.get("description") or "",
        )


@dataclass(frozen=True)
class Claim:
    """A directed subject --predicate--> object triple."""
    claim_id: str
    subject_id: str
    predicate_id: str
    object_id: str
    direction: bool = True

    @property
    def triple(self) -> tuple[str, str, str]:
        return (self.subject_id, self.predicate_id, self.object_id)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Claim":
        return cls(
            claim_id=str(data["claim_id"]),
            subject_id=str(data["subject_id"]),
            predicate_id=str(data["predicate_id"]),
            object_id=str(data["object_id"]),
            direction=bool(data.get("direction", True)),
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Attestation:
    """An endorsement event appended to a claim."""
    attestation_id: str
    claim_id: str
    direction: bool
    created_at: datetime = field(default_factory=_utc_now)

    @classmethod
    def from_dict(cls, data: dict) -> "Attestation":
        created_at = data.get("created_at")
        return cls(
            attestation_id=str(data["attestation_id"]),
            claim_id=str(data["claim_id"]),
            direction=bool(data.get("direction", True)),
            created_at=datetime.fromisoformat(created_at) if created_at else _utc_now(),
        )


T = TypeVar("T")


@dataclass(frozen=True)
class Created(Generic[T]):
    """Get-or-create outcome: the record was created by this call."""
    record: T
    created = True


@dataclass(frozen=True)
class Existed(Generic[T]):
    """Get-or-create outcome: the record was already in the store."""
    record: T
    created = False
