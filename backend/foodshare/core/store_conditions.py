"""Store Conditions — predicates and patches for atomic conditional updates.

Every lifecycle transition is expressed here as an (expected, patch) pair that the
Donation Store applies as ONE statement: the predicate and the write cannot be split.

Invariants:
    - Expected values: literal (None means IS NULL) or NOT_TRUE (NULL or FALSE)
    - Patch values: literal or WhenTrue(flag, value): value only if `flag` is true
      at update time, otherwise the column keeps its current value
    - Builders are PURE: timestamps and codes are passed in
    - After reject_transition the lifecycle columns equal a freshly created donation

Design Decisions:
    - WhenTrue instead of reading the other side's flag in Python: the promotion to
      `completed` is decided by the store while it holds the row
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from foodshare.core.donation_record import CONFIRMATION_FIELDS, RESERVATION_FIELDS
from foodshare.core.domain_types import (
    ActorId, ConfirmationSide, DonationStatus,
)


class _NotTrue:
    """Sentinel predicate: column IS NULL OR column IS FALSE."""

    def __repr__(self) -> str:
        return "NOT_TRUE"


NOT_TRUE = _NotTrue()


@dataclass(frozen=True)
class WhenTrue:
    """Conditional assignment evaluated by the store against the current row."""
    flag: str
    value: Any


Expected = Mapping[str, Any]
Patch = Mapping[str, Any]


@dataclass(frozen=True)
class Transition:
    expected: Expected
    patch: Patch


def reserve_transition(
    actor_id: ActorId,
    pickup_time: str,
    pickup_person_name: str,
    pickup_person_id: str,
    verification_code: str,
    now: datetime,
) -> Transition:
    """available -> reserved, with logistics and a fresh code."""
    return Transition(
        expected={"status": DonationStatus.AVAILABLE},
        patch={
            "status": DonationStatus.RESERVED,
            "reserved_by": actor_id,
            "reserved_at": now,
            "pickup_time": pickup_time,
            "pickup_person_name": pickup_person_name,
            "pickup_person_id": pickup_person_id,
            "verification_code": verification_code,
            "business_confirmed": False,
            "updated_at": now,
        },
    )


def _awaiting_business_decision(donor_id: ActorId) -> dict[str, Any]:
    return {
        "status": DonationStatus.RESERVED,
        "business_confirmed": False,
        "donor_id": donor_id,
    }


def accept_transition(donor_id: ActorId, now: datetime) -> Transition:
    """Donor accepts the proposed pickup. Guarded against double-accept."""
    return Transition(
        expected=_awaiting_business_decision(donor_id),
        patch={
            "business_confirmed": True,
            "business_confirmed_at": now,
            "updated_at": now,
        },
    )


def reject_transition(donor_id: ActorId, now: datetime) -> Transition:
    """Donor rejects the pickup: full revert to the pristine available shape."""
    patch: dict[str, Any] = {name: None for name in RESERVATION_FIELDS}
    patch.update({name: None for name in CONFIRMATION_FIELDS})
    patch["status"] = DonationStatus.AVAILABLE
    patch["updated_at"] = now
    return Transition(
        expected=_awaiting_business_decision(donor_id),
        patch=patch,
    )


def confirm_transition(
    side: ConfirmationSide,
    actor_id: ActorId,
    verification_code: str,
    now: datetime,
) -> Transition:
    """Set one side's flag; promote to completed iff the other flag is already set.

    The predicate pins the actor to the column that made them this side, so a
    side resolved from an older read cannot land on a replaced reservation.
    """
    other_flag = side.other.flag_field
    identity = "donor_id" if side is ConfirmationSide.DONOR else "reserved_by"
    return Transition(
        expected={
            "status": DonationStatus.RESERVED,
            "business_confirmed": True,
            "verification_code": verification_code,
            identity: actor_id,
            side.flag_field: NOT_TRUE,
        },
        patch={
            side.flag_field: True,
            side.timestamp_field: now,
            "status": WhenTrue(other_flag, DonationStatus.COMPLETED),
            "completed_at": WhenTrue(other_flag, now),
            "updated_at": now,
        },
    )


def self_confirm_transition(
    actor_id: ActorId, verification_code: str, now: datetime,
) -> Transition:
    """Donor who reserved their own donation: one confirm fills both sides."""
    expected: dict[str, Any] = {
        "status": DonationStatus.RESERVED,
        "business_confirmed": True,
        "verification_code": verification_code,
        "donor_id": actor_id,
        "reserved_by": actor_id,
    }
    patch: dict[str, Any] = {
        "status": DonationStatus.COMPLETED,
        "completed_at": now,
        "updated_at": now,
    }
    for side in ConfirmationSide:
        expected[side.flag_field] = NOT_TRUE
        patch[side.flag_field] = True
        patch[side.timestamp_field] = now
    return Transition(expected=expected, patch=patch)
