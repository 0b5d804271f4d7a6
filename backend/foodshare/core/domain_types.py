"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - DonationId and ActorId wrap ints (store-assigned and token-issued respectively)
    - All valid states encoded as Enums, no raw string matching
    - Actor is immutable once decoded from the bearer token

Design Decisions:
    - str Enums: serialize to JSON and bind to String columns without converters
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

DonationId = NewType("DonationId", int)
ActorId = NewType("ActorId", int)


# ─── Enums ───────────────────────────────────────────────────────

class DonationStatus(str, Enum):
    """Donation lifecycle states — maps to DB `status` column."""
    AVAILABLE = "available"
    RESERVED = "reserved"
    COMPLETED = "completed"


class ActorRole(str, Enum):
    """Role carried in the bearer token."""
    DONOR = "donor"
    ORGANIZATION = "organization"


class Relationship(str, Enum):
    """How the calling actor relates to one specific donation."""
    DONOR = "donor"
    RECIPIENT = "recipient"
    UNRELATED = "unrelated"


class Operation(str, Enum):
    """Lifecycle operations subject to a capability check."""
    CREATE = "create"
    RESERVE = "reserve"
    BUSINESS_DECIDE = "business_decide"
    CONFIRM = "confirm"


class ConfirmationSide(str, Enum):
    """The two independent acknowledgements needed for completion."""
    DONOR = "donor"
    RECIPIENT = "recipient"

    @property
    def flag_field(self) -> str:
        return f"{self.value}_confirmed"

    @property
    def timestamp_field(self) -> str:
        return f"{self.value}_confirmed_at"

    @property
    def other(self) -> "ConfirmationSide":
        if self is ConfirmationSide.DONOR:
            return ConfirmationSide.RECIPIENT
        return ConfirmationSide.DONOR


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Actor:
    """Already-authenticated caller: id + role, nothing else."""
    id: ActorId
    role: ActorRole
