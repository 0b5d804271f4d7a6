"""Domain Types — verifies identity wrappers, enum values and confirmation sides.

Tests cover:
    - NewType wrappers compare equal to the wrapped int
    - Status/role enums serialize to their stored strings
    - ConfirmationSide maps to its flag/timestamp columns and to the other side
    - Actor is immutable
"""

import dataclasses

import pytest

from foodshare.core.domain_types import (
    Actor, ActorId, ActorRole, ConfirmationSide, DonationId, DonationStatus,
)


def test_identity_types_wrap_int():
    assert DonationId(7) == 7
    assert ActorId(3) == 3


def test_donation_status_has_three_states():
    assert {s.value for s in DonationStatus} == {
        "available", "reserved", "completed",
    }


def test_actor_role_values_match_token_claims():
    assert ActorRole("donor") is ActorRole.DONOR
    assert ActorRole("organization") is ActorRole.ORGANIZATION


def test_confirmation_side_columns():
    assert ConfirmationSide.DONOR.flag_field == "donor_confirmed"
    assert ConfirmationSide.DONOR.timestamp_field == "donor_confirmed_at"
    assert ConfirmationSide.RECIPIENT.flag_field == "recipient_confirmed"
    assert ConfirmationSide.RECIPIENT.timestamp_field == "recipient_confirmed_at"


def test_confirmation_side_other_is_symmetric():
    for side in ConfirmationSide:
        assert side.other is not side
        assert side.other.other is side


def test_actor_is_frozen():
    actor = Actor(ActorId(1), ActorRole.DONOR)
    with pytest.raises(dataclasses.FrozenInstanceError):
        actor.id = ActorId(2)
