"""Transition Preconditions — validates donation state before each lifecycle step.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return the typed error on violation, None on success
    - Checks run in a fixed order; first error wins
    - These checks DIAGNOSE; the store predicate is what actually guards the write

Design Decisions:
    - Return errors instead of raising: components call them both before the update
      and after a lost race (count == 0) to explain what changed
"""

from foodshare.core.donation_record import DonationSnapshot
from foodshare.core.domain_types import ConfirmationSide, DonationStatus
from foodshare.core.errors import (
    ConflictError, ErrorContext, FoodShareError, IncorrectVerificationCodeError,
)


def check_reservable(snapshot: DonationSnapshot) -> FoodShareError | None:
    """Only an available donation can be reserved."""
    if snapshot.status is not DonationStatus.AVAILABLE:
        return ConflictError(
            "Donation is not available for reservation",
            "DONATION_NOT_AVAILABLE",
            ErrorContext(donation_id=snapshot.id, operation="reserve"),
        )
    return None


def check_business_decidable(snapshot: DonationSnapshot) -> FoodShareError | None:
    """Donor may accept/reject only a reserved, not-yet-accepted donation."""
    context = ErrorContext(donation_id=snapshot.id, operation="business_decide")
    if snapshot.status is not DonationStatus.RESERVED:
        return ConflictError(
            "Donation must be reserved", "DONATION_NOT_RESERVED", context,
        )
    if snapshot.business_confirmed:
        return ConflictError(
            "Reservation already confirmed", "ALREADY_CONFIRMED", context,
        )
    return None


def check_confirmable(
    snapshot: DonationSnapshot, side: ConfirmationSide, code: str,
) -> FoodShareError | None:
    """Chain: reserved -> business accepted -> code matches -> side not yet confirmed."""
    context = ErrorContext(donation_id=snapshot.id, operation="confirm")
    if snapshot.status is not DonationStatus.RESERVED:
        return ConflictError(
            "Donation must be reserved to confirm",
            "DONATION_NOT_RESERVED", context,
        )
    if not snapshot.business_confirmed:
        return ConflictError(
            "The donor has not accepted the pickup time yet",
            "BUSINESS_NOT_CONFIRMED", context,
        )
    if snapshot.verification_code != code:
        return IncorrectVerificationCodeError(context)
    if snapshot.is_confirmed_by(side):
        return ConflictError(
            "You already confirmed this donation",
            "ALREADY_CONFIRMED", context,
        )
    return None
