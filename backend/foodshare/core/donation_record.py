"""Donation Record — immutable views of a donation passed between core and shell.

Invariants:
    - NewDonation is already validated (see validate_input.py); no further checks on insert
    - DonationSnapshot mirrors one stored row at one instant; it is never mutated
    - RESERVATION_FIELDS + CONFIRMATION_FIELDS are exactly the columns a reservation touches
"""

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Mapping

from foodshare.core.domain_types import (
    ActorId, ConfirmationSide, DonationId, DonationStatus,
)


RESERVATION_FIELDS = (
    "reserved_by",
    "reserved_at",
    "pickup_time",
    "pickup_person_name",
    "pickup_person_id",
    "verification_code",
)

CONFIRMATION_FIELDS = (
    "business_confirmed",
    "business_confirmed_at",
    "donor_confirmed",
    "donor_confirmed_at",
    "recipient_confirmed",
    "recipient_confirmed_at",
    "completed_at",
)


@dataclass(frozen=True)
class NewDonation:
    """Validated creation payload. Coordinates already rounded to 6 decimals."""
    title: str
    description: str
    category: str
    quantity: int
    pickup_address: str
    pickup_latitude: float
    pickup_longitude: float
    weight: float | None = None
    donation_reason: str | None = None
    contact_info: str | None = None
    expiry_date: str | None = None


@dataclass(frozen=True)
class DonationSnapshot:
    """One stored donation row."""
    id: DonationId
    donor_id: ActorId
    title: str
    category: str
    status: DonationStatus
    description: str | None = None
    quantity: int | None = None
    weight: float | None = None
    donation_reason: str | None = None
    contact_info: str | None = None
    expiry_date: str | None = None
    pickup_address: str | None = None
    pickup_latitude: float | None = None
    pickup_longitude: float | None = None
    reserved_by: ActorId | None = None
    reserved_at: datetime | None = None
    pickup_time: str | None = None
    pickup_person_name: str | None = None
    pickup_person_id: str | None = None
    verification_code: str | None = None
    business_confirmed: bool | None = None
    business_confirmed_at: datetime | None = None
    donor_confirmed: bool | None = None
    donor_confirmed_at: datetime | None = None
    recipient_confirmed: bool | None = None
    recipient_confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "DonationSnapshot":
        """Build from a DB row mapping. Unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in row.items() if k in known}
        values["status"] = DonationStatus(values["status"])
        return cls(**values)

    def is_confirmed_by(self, side: ConfirmationSide) -> bool:
        return bool(getattr(self, side.flag_field))

    def lifecycle_fields(self) -> dict[str, Any]:
        """Status plus every reservation/confirmation column."""
        names = ("status",) + RESERVATION_FIELDS + CONFIRMATION_FIELDS
        return {name: getattr(self, name) for name in names}
