"""Lifecycle Messages — user-facing strings for successful transitions.

Invariants:
    - One constant per outcome; error messages live with the errors that carry them
"""

DONATION_CREATED = "Donation created successfully"
RESERVATION_PENDING = (
    "Donation reserved. Waiting for the donor to accept the pickup time."
)
PICKUP_ACCEPTED = (
    "Pickup time accepted. The organization can proceed with the pickup."
)
RESERVATION_REJECTED = "Reservation rejected. The donation is available again."
DONOR_CONFIRMATION_REGISTERED = "Donor confirmation registered"
RECIPIENT_CONFIRMATION_REGISTERED = "Organization confirmation registered"
DONATION_COMPLETED = "Donation completed! Both parties confirmed"


def batch_created(count: int) -> str:
    return f"{count} donations created successfully"
