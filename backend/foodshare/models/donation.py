"""Donation ORM — persists the single lifecycle entity of the service.

Invariants:
    - id is an autoincrement integer primary key (store-assigned, immutable)
    - status in {available, reserved, completed}; defaults to available
    - verification_code is set iff status is reserved or completed
    - business_confirmed is NULL until the first reservation (tri-state)
    - Rows are never deleted

Design Decisions:
    - One wide row instead of a reservations table: every transition is a single
      conditional UPDATE on this row, so no cross-row transaction is needed
    - donor_id / reserved_by are plain integers: actors live in the identity
      service that issues the bearer tokens
    - Indexes match the list filters (status, donor_id, reserved_by) and ordering
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, Float, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from foodshare.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Donation(Base):
    """Surplus-food donation offered by a donor, reservable by an organization."""
    __tablename__ = "donations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('available', 'reserved', 'completed')",
            name="ck_donations_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    donor_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    # Descriptive
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    donation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_info: Mapped[str | None] = mapped_column(String(200), nullable=True)
    expiry_date: Mapped[str | None] = mapped_column(String(32), nullable=True)

    # Location
    pickup_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    pickup_latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    pickup_longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Reservation
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="available", index=True,
    )
    reserved_by: Mapped[int | None] = mapped_column(
        Integer, nullable=True, index=True,
    )
    reserved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    pickup_time: Mapped[str | None] = mapped_column(String(64), nullable=True)
    pickup_person_name: Mapped[str | None] = mapped_column(
        String(120), nullable=True,
    )
    pickup_person_id: Mapped[str | None] = mapped_column(
        String(20), nullable=True,
    )
    verification_code: Mapped[str | None] = mapped_column(
        String(6), nullable=True,
    )

    # Confirmation
    business_confirmed: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True,
    )
    business_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    donor_confirmed: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    donor_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    recipient_confirmed: Mapped[bool | None] = mapped_column(
        Boolean, nullable=True,
    )
    recipient_confirmed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow,
    )
