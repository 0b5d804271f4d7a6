"""Donation Store — tests for the SQL repository against a real SQLite file.

Tests cover:
    - create_available stores a pristine available row
    - create_many_available is all-or-nothing
    - conditional_update applies only when every predicate holds (count 0/1)
    - NOT_TRUE matches NULL and FALSE but not TRUE
    - WhenTrue assigns only when the flag is true at update time
    - Listing excludes blank/zero-quantity rows, orders newest first, honors filters
    - list_involving tags rows as given/received
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from foodshare.core.donation_record import NewDonation
from foodshare.core.domain_types import ActorId, DonationStatus
from foodshare.core.repository_protocols import DonationFilters
from foodshare.core.store_conditions import NOT_TRUE, WhenTrue
from foodshare.models.donation import Donation

NOW = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)


def _new(title="Bread", **overrides) -> NewDonation:
    values = dict(
        title=title, description="", category="bakery", quantity=5,
        pickup_address="Lat: 4.810000, Lng: -75.690000",
        pickup_latitude=4.81, pickup_longitude=-75.69,
    )
    values.update(overrides)
    return NewDonation(**values)


async def _count(db) -> int:
    return (await db.execute(select(func.count()).select_from(Donation))).scalar_one()


async def test_create_available_is_pristine(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    snapshot = await repo.get(donation_id)
    assert snapshot.status is DonationStatus.AVAILABLE
    assert snapshot.donor_id == 1
    assert snapshot.verification_code is None
    assert snapshot.business_confirmed is None
    assert snapshot.reserved_by is None


async def test_get_missing_returns_none(repo):
    assert await repo.get(999) is None


async def test_create_many_returns_ids_in_order(repo):
    ids = await repo.create_many_available(
        ActorId(1), [_new("Bread"), _new("Milk")],
    )
    assert len(ids) == 2
    assert (await repo.get(ids[1])).title == "Milk"


async def test_create_many_rolls_back_on_failure(repo, test_db):
    with pytest.raises(IntegrityError):
        await repo.create_many_available(
            ActorId(1), [_new("Bread"), _new(title=None)],
        )
    assert await _count(test_db) == 0


async def test_conditional_update_applies_when_predicate_holds(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    result = await repo.conditional_update(
        donation_id,
        {"status": DonationStatus.AVAILABLE},
        {"status": DonationStatus.RESERVED, "reserved_by": 2},
    )
    assert result.applied
    assert result.count == 1
    assert result.snapshot.status is DonationStatus.RESERVED
    assert result.snapshot.reserved_by == 2


async def test_conditional_update_skips_when_predicate_fails(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    result = await repo.conditional_update(
        donation_id,
        {"status": DonationStatus.RESERVED},
        {"status": DonationStatus.COMPLETED},
    )
    assert not result.applied
    assert result.snapshot is None
    assert (await repo.get(donation_id)).status is DonationStatus.AVAILABLE


async def test_none_predicate_means_is_null(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    result = await repo.conditional_update(
        donation_id, {"reserved_by": None}, {"reserved_by": 2},
    )
    assert result.applied
    again = await repo.conditional_update(
        donation_id, {"reserved_by": None}, {"reserved_by": 3},
    )
    assert not again.applied


async def test_not_true_matches_null_and_false_only(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    assert (await repo.conditional_update(
        donation_id, {"donor_confirmed": NOT_TRUE}, {"donor_confirmed": False},
    )).applied
    assert (await repo.conditional_update(
        donation_id, {"donor_confirmed": NOT_TRUE}, {"donor_confirmed": True},
    )).applied
    assert not (await repo.conditional_update(
        donation_id, {"donor_confirmed": NOT_TRUE}, {"donor_confirmed": False},
    )).applied


async def test_when_true_assigns_only_if_flag_set(repo):
    donation_id = await repo.create_available(ActorId(1), _new())
    unset = await repo.conditional_update(
        donation_id, {},
        {
            "status": WhenTrue("recipient_confirmed", DonationStatus.COMPLETED),
            "completed_at": WhenTrue("recipient_confirmed", NOW),
        },
    )
    assert unset.snapshot.status is DonationStatus.AVAILABLE
    assert unset.snapshot.completed_at is None

    await repo.conditional_update(donation_id, {}, {"recipient_confirmed": True})
    applied = await repo.conditional_update(
        donation_id, {},
        {
            "status": WhenTrue("recipient_confirmed", DonationStatus.COMPLETED),
            "completed_at": WhenTrue("recipient_confirmed", NOW),
        },
    )
    assert applied.snapshot.status is DonationStatus.COMPLETED
    assert applied.snapshot.completed_at is not None


async def test_list_rows_excludes_unusable_and_orders_newest_first(repo, test_db):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    test_db.add_all([
        Donation(donor_id=1, title="Old", category="bakery", quantity=1,
                 created_at=base),
        Donation(donor_id=1, title="New", category="dairy", quantity=1,
                 created_at=base + timedelta(hours=1)),
        Donation(donor_id=1, title="  ", category="bakery", quantity=1,
                 created_at=base),
        Donation(donor_id=1, title="Empty", category="bakery", quantity=0,
                 created_at=base),
    ])
    await test_db.commit()

    rows = await repo.list_rows(DonationFilters(), limit=50)
    assert [row["title"] for row in rows] == ["New", "Old"]

    dairy = await repo.list_rows(DonationFilters(category="Dairy"), limit=50)
    assert [row["title"] for row in dairy] == ["New"]

    limited = await repo.list_rows(DonationFilters(), limit=1)
    assert len(limited) == 1


async def test_list_rows_filters_by_status_and_reserver(repo):
    first = await repo.create_available(ActorId(1), _new("Bread"))
    await repo.create_available(ActorId(1), _new("Milk"))
    await repo.conditional_update(
        first, {}, {"status": DonationStatus.RESERVED, "reserved_by": 2},
    )
    reserved = await repo.list_rows(DonationFilters(status="reserved"), limit=50)
    assert [row["id"] for row in reserved] == [first]
    by_org = await repo.list_rows(DonationFilters(reserved_by=ActorId(2)), limit=50)
    assert [row["id"] for row in by_org] == [first]


async def test_list_involving_tags_donation_type(repo):
    given = await repo.create_available(ActorId(1), _new("Bread"))
    received = await repo.create_available(ActorId(5), _new("Milk"))
    await repo.create_available(ActorId(5), _new("Eggs"))
    await repo.conditional_update(received, {}, {"reserved_by": 1})

    rows = await repo.list_involving(ActorId(1))
    types = {row["id"]: row["donation_type"] for row in rows}
    assert types == {given: "given", received: "received"}
