"""Donation Schemas — request bodies and responses for the donation endpoints.

Invariants:
    - Creation fields are loosely typed: numeric strings are accepted and the
      domain validator produces the user-facing message (with batch position)
    - BusinessDecision.accept is a strict boolean: "yes", 1 or "true" are rejected
    - Batch size is NOT limited here; validate_batch owns that rule and message

Design Decisions:
    - model_dump(exclude_none=True) hands plain dicts to the orchestrator:
      core stays free of pydantic
"""

from pydantic import BaseModel, Field, StrictBool

from foodshare.core.domain_types import ConfirmationSide

Number = int | float | str


class DonationCreate(BaseModel):
    """One donation offer. Coordinates under either naming."""
    title: str | None = None
    description: str | None = None
    category: str | None = None
    quantity: Number | None = None
    weight: Number | None = None
    donation_reason: str | None = None
    contact_info: str | None = None
    expiry_date: str | None = None
    pickup_address: str | None = None
    pickup_latitude: Number | None = None
    pickup_longitude: Number | None = None
    latitude: Number | None = None
    longitude: Number | None = None


class DonationBatchCreate(BaseModel):
    donations: list[DonationCreate] = Field(default_factory=list)


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class DonationCreated(BaseModel):
    message: str
    donation_id: int
    coordinates: Coordinates


class DonationBatchCreated(BaseModel):
    message: str
    donation_ids: list[int]
    count: int


class ReservationRequest(BaseModel):
    """Pickup logistics proposed by the reserving organization."""
    pickup_time: str | None = None
    pickup_person_name: str | None = None
    pickup_person_id: str | int | None = None


class ReservationResponse(BaseModel):
    message: str
    verification_code: str
    pickup_time: str
    pickup_person_name: str


class BusinessDecision(BaseModel):
    accept: StrictBool


class BusinessDecisionResponse(BaseModel):
    message: str
    accepted: bool


class ConfirmationRequest(BaseModel):
    verification_code: str | int | None = None


class ConfirmationResponse(BaseModel):
    message: str
    side: ConfirmationSide
    completed: bool
