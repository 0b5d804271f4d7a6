"""Store Conditions — tests for transition predicates and patches.

Tests cover:
    - reserve expects available and writes every reservation column + code
    - accept/reject share the same predicate (reserved, not accepted, same donor)
    - reject clears every reservation and confirmation column
    - confirm guards with NOT_TRUE on the caller's side and promotes via WhenTrue
      on the OTHER side's flag
    - confirm pins the actor to donor_id or reserved_by
    - a self-reserved confirm sets both flags and completes in the same write
"""

from datetime import datetime, timezone

from foodshare.core.donation_record import CONFIRMATION_FIELDS, RESERVATION_FIELDS
from foodshare.core.domain_types import ActorId, ConfirmationSide, DonationStatus
from foodshare.core.store_conditions import (
    NOT_TRUE,
    WhenTrue,
    accept_transition,
    confirm_transition,
    reject_transition,
    reserve_transition,
    self_confirm_transition,
)

NOW = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def test_reserve_transition_predicate_and_patch():
    t = reserve_transition(
        ActorId(2), "2024-01-01T10:00", "Ana Ruiz", "1029384756", "482913", NOW,
    )
    assert t.expected == {"status": DonationStatus.AVAILABLE}
    assert t.patch["status"] is DonationStatus.RESERVED
    assert t.patch["reserved_by"] == 2
    assert t.patch["verification_code"] == "482913"
    assert t.patch["business_confirmed"] is False
    assert set(RESERVATION_FIELDS) <= set(t.patch)


def test_accept_and_reject_share_predicate():
    accept = accept_transition(ActorId(1), NOW)
    reject = reject_transition(ActorId(1), NOW)
    assert accept.expected == reject.expected == {
        "status": DonationStatus.RESERVED,
        "business_confirmed": False,
        "donor_id": 1,
    }


def test_accept_only_touches_business_columns():
    t = accept_transition(ActorId(1), NOW)
    assert t.patch == {
        "business_confirmed": True,
        "business_confirmed_at": NOW,
        "updated_at": NOW,
    }


def test_reject_restores_pristine_shape():
    t = reject_transition(ActorId(1), NOW)
    assert t.patch["status"] is DonationStatus.AVAILABLE
    for name in RESERVATION_FIELDS + CONFIRMATION_FIELDS:
        assert t.patch[name] is None


def test_confirm_transition_for_donor_side():
    t = confirm_transition(ConfirmationSide.DONOR, ActorId(1), "482913", NOW)
    assert t.expected == {
        "status": DonationStatus.RESERVED,
        "business_confirmed": True,
        "verification_code": "482913",
        "donor_id": 1,
        "donor_confirmed": NOT_TRUE,
    }
    assert t.patch["donor_confirmed"] is True
    assert t.patch["donor_confirmed_at"] == NOW
    assert t.patch["status"] == WhenTrue(
        "recipient_confirmed", DonationStatus.COMPLETED,
    )
    assert t.patch["completed_at"] == WhenTrue("recipient_confirmed", NOW)


def test_confirm_transition_for_recipient_side_watches_donor_flag():
    t = confirm_transition(ConfirmationSide.RECIPIENT, ActorId(2), "482913", NOW)
    assert t.expected["recipient_confirmed"] is NOT_TRUE
    assert t.expected["reserved_by"] == 2
    assert "donor_id" not in t.expected
    assert t.patch["status"].flag == "donor_confirmed"
    assert "donor_confirmed" not in t.patch


def test_self_confirm_transition_fills_both_sides_and_completes():
    t = self_confirm_transition(ActorId(9), "482913", NOW)
    assert t.expected == {
        "status": DonationStatus.RESERVED,
        "business_confirmed": True,
        "verification_code": "482913",
        "donor_id": 9,
        "reserved_by": 9,
        "donor_confirmed": NOT_TRUE,
        "recipient_confirmed": NOT_TRUE,
    }
    assert t.patch == {
        "status": DonationStatus.COMPLETED,
        "completed_at": NOW,
        "updated_at": NOW,
        "donor_confirmed": True,
        "donor_confirmed_at": NOW,
        "recipient_confirmed": True,
        "recipient_confirmed_at": NOW,
    }
