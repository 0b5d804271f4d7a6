"""Listing & Lookup — tests for GET /donations, /donations/my and /donations/{id}.

Tests cover:
    - Newest first, capped at the configured limit
    - Filters: status, category, reserved_by
    - Rows with bad stored coordinates are served with the jittered fallback
    - Rows with blank title or category are never listed
    - Store failure yields 200 [] instead of an error
    - /my lists given and received donations with donation_type
    - Single lookup returns the normalized donation or 404
"""

from sqlalchemy.exc import OperationalError

from foodshare.core.normalize_donation import (
    FALLBACK_LATITUDE, FALLBACK_LONGITUDE, JITTER,
)
from foodshare.models.donation import Donation
from foodshare.services.donation_store import SqlDonationRepository


async def test_list_newest_first(client, create_donation, bread, donor_headers):
    first = await create_donation(dict(bread, title="First"))
    second = await create_donation(dict(bread, title="Second"))
    res = await client.get("/api/v1/donations", headers=donor_headers)
    assert res.status_code == 200
    assert [d["id"] for d in res.json()] == [second, first]


async def test_list_is_capped_at_fifty(client, donor_headers, bread):
    for chunk in range(3):
        res = await client.post(
            "/api/v1/donations/batch",
            json={"donations": [dict(bread, title=f"B{chunk}-{i}") for i in range(20)]},
            headers=donor_headers,
        )
        assert res.status_code == 201
    res = await client.get("/api/v1/donations", headers=donor_headers)
    assert len(res.json()) == 50


async def test_list_item_shape(client, create_donation, donor_headers):
    await create_donation()
    item = (await client.get("/api/v1/donations", headers=donor_headers)).json()[0]
    assert item["title"] == "Bread"
    assert item["category"] == "bakery"
    assert item["quantity"] == 5
    assert item["status"] == "available"
    assert item["latitude"] == item["pickup_latitude"] == 4.81
    assert item["longitude"] == item["pickup_longitude"] == -75.69
    assert item["business_confirmed"] is None
    assert item["donor_confirmed"] is False


async def test_list_filters(
    client, create_donation, reserve, bread, donor_headers,
):
    reserved = await create_donation()
    dairy = await create_donation(dict(bread, title="Milk", category="Dairy"))
    await reserve(reserved)

    res = await client.get(
        "/api/v1/donations", params={"status": "reserved"}, headers=donor_headers,
    )
    assert [d["id"] for d in res.json()] == [reserved]

    res = await client.get(
        "/api/v1/donations", params={"category": "dairy"}, headers=donor_headers,
    )
    assert [d["id"] for d in res.json()] == [dairy]

    res = await client.get(
        "/api/v1/donations", params={"reserved_by": 2}, headers=donor_headers,
    )
    assert [d["id"] for d in res.json()] == [reserved]


async def test_bad_stored_coordinates_get_fallback(client, test_db, donor_headers):
    test_db.add(Donation(
        donor_id=1, title="Rice", category="grains", quantity=2,
        pickup_latitude=0.0, pickup_longitude=None,
    ))
    await test_db.commit()

    item = (await client.get("/api/v1/donations", headers=donor_headers)).json()[0]
    assert abs(item["latitude"] - FALLBACK_LATITUDE) <= JITTER / 2 + 1e-9
    assert abs(item["longitude"] - FALLBACK_LONGITUDE) <= JITTER / 2 + 1e-9

    stored = await test_db.get(Donation, item["id"])
    assert stored.pickup_latitude == 0.0


async def test_blank_rows_are_not_listed(client, test_db, donor_headers):
    test_db.add_all([
        Donation(donor_id=1, title=" ", category="grains", quantity=2),
        Donation(donor_id=1, title="Rice", category="", quantity=2),
    ])
    await test_db.commit()
    res = await client.get("/api/v1/donations", headers=donor_headers)
    assert res.json() == []


async def test_store_failure_returns_empty_list(
    client, create_donation, donor_headers, monkeypatch,
):
    await create_donation()

    async def broken(self, filters, limit):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    monkeypatch.setattr(SqlDonationRepository, "list_rows", broken)
    res = await client.get("/api/v1/donations", headers=donor_headers)
    assert res.status_code == 200
    assert res.json() == []


async def test_list_requires_token(client):
    res = await client.get("/api/v1/donations")
    assert res.status_code == 401


# ─── /my ─────────────────────────────────────────────────────────

async def test_my_donations_tags_given_and_received(
    client, create_donation, reserve, bread, donor_headers, org_headers,
):
    given = await create_donation()
    await create_donation(dict(bread, title="Other"))
    await reserve(given)

    donor_view = (await client.get("/api/v1/donations/my", headers=donor_headers)).json()
    assert {d["donation_type"] for d in donor_view} == {"given"}
    assert len(donor_view) == 2

    org_view = (await client.get("/api/v1/donations/my", headers=org_headers)).json()
    assert [(d["id"], d["donation_type"]) for d in org_view] == [(given, "received")]


async def test_my_donations_store_failure_returns_empty_list(
    client, donor_headers, monkeypatch,
):
    async def broken(self, actor_id):
        raise OperationalError("SELECT", {}, Exception("database is down"))

    monkeypatch.setattr(SqlDonationRepository, "list_involving", broken)
    res = await client.get("/api/v1/donations/my", headers=donor_headers)
    assert res.status_code == 200
    assert res.json() == []


# ─── /{id} ───────────────────────────────────────────────────────

async def test_get_donation(client, create_donation, reserve, donor_headers):
    donation_id = await create_donation()
    await reserve(donation_id)
    res = await client.get(f"/api/v1/donations/{donation_id}", headers=donor_headers)
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == donation_id
    assert body["status"] == "reserved"
    assert body["reserved_by"] == 2
    assert body["business_confirmed"] is False


async def test_get_unknown_donation_is_404(client, donor_headers):
    res = await client.get("/api/v1/donations/4242", headers=donor_headers)
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"
