"""
Error taxonomy for claim graph operations.

Conflict and NotFound are recoverable (lookup / bounded retry).
DanglingReference and ConsistencyViolation are hard failures.
TransportError covers everything the transport layer can throw and is
never confused with the domain errors above.
"""


class ClaimGraphError(Exception):
    """Base class for all claim graph errors."""


class Conflict(ClaimGraphError):
    """A create collided with an existing record under the uniqueness convention."""

    def __init__(self, kind: str, key: str, existing_id: str | None = None):
        self.kind = kind
        self.key = key
        self.existing_id = existing_id
        super().__init__(f"{kind} already exists: {key}")


class NotFound(ClaimGraphError):
    """A referenced record does not exist (or is not visible yet)."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class DanglingReference(ClaimGraphError):
    """Claim creation referenced identities that do not exist."""

    def __init__(self, missing: dict[str, str]):
        # role -> identity id
        self.missing = dict(missing)
        roles = ", ".join(f"{role}={ident}" for role, ident in self.missing.items())
        super().__init__(f"claim references unknown identities: {roles}")


class ConsistencyViolation(ClaimGraphError):
    """An invariant the application relies on does not hold in the graph."""


class TransportError(ClaimGraphError):
    """The remote store could not be reached or answered unexpectedly."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AuthError(TransportError):
    """The remote store rejected the caller's credentials."""
