"""
Integration tests for the parcel lifecycle.

Tests creation, filtered listing, deletion, rider assignment and delivery.
"""

from datetime import datetime, timedelta, timezone

import pytest

from courier.app.domain.parcels.parcel_lifecycle import sort_by_creation_date
from courier.app.models.parcel import Parcel
from courier.app.models.timestamps import as_aware


# TEST 1: Create Parcel
@pytest.mark.asyncio
async def test_create_parcel_starts_unpaid_and_not_collected(client, user_headers, parcel_data):
    """A new parcel is unpaid and not collected."""
    response = await client.post("/parcels", json=parcel_data())

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    parcel_id = body["insertedId"]

    detail = await client.get(f"/parcels/{parcel_id}", headers=user_headers)
    assert detail.status_code == 200
    parcel = detail.json()["parcel"]
    assert parcel["payment_status"] == "unpaid"
    assert parcel["delivery_status"] == "not_collected"
    assert parcel["senderRegion"] == "Dhaka"
    assert parcel["receiverRegion"] == "Chattogram"
    assert parcel["assignRider_id"] is None


# TEST 2: Required Fields
@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["name", "type", "senderRegion", "receiverRegion"])
async def test_create_parcel_missing_required_field(client, parcel_data, missing):
    """Missing descriptive fields are rejected with 400."""
    payload = parcel_data()
    del payload[missing]

    response = await client.post("/parcels", json=payload)

    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_create_parcel_blank_name_rejected(client, parcel_data):
    response = await client.post("/parcels", json=parcel_data(name="   "))
    assert response.status_code == 400


# TEST 3: Reads Need Identity
@pytest.mark.asyncio
async def test_list_parcels_requires_token(client, parcel_data):
    """Listing without a bearer token is 401."""
    await client.post("/parcels", json=parcel_data())

    response = await client.get("/parcels")

    assert response.status_code == 401
    assert response.json()["success"] is False


# TEST 4: Filter And Order
@pytest.mark.asyncio
async def test_list_parcels_filters_and_orders_newest_first(client, user_headers, parcel_data):
    """Filters combine with AND; results are newest creation date first."""
    await client.post("/parcels", json=parcel_data(name="Old", creation_date="2024-01-05T10:00:00Z"))
    await client.post("/parcels", json=parcel_data(name="New", creation_date="2024-03-05T10:00:00Z"))
    await client.post("/parcels", json=parcel_data(name="Middle", creation_date="2024-02-05T10:00:00Z"))
    await client.post(
        "/parcels",
        json=parcel_data(name="Other owner", user_email="carol@courier.io", creation_date="2024-04-01T00:00:00Z"),
    )

    response = await client.get("/parcels", params={"email": "alice@courier.io"}, headers=user_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 3
    assert [p["name"] for p in body["parcels"]] == ["New", "Middle", "Old"]

    everything = await client.get("/parcels", headers=user_headers)
    assert everything.json()["count"] == 4
    assert everything.json()["parcels"][0]["name"] == "Other owner"

    unpaid = await client.get(
        "/parcels",
        params={"email": "alice@courier.io", "payment_status": "unpaid", "delivery_status": "not_collected"},
        headers=user_headers,
    )
    assert unpaid.json()["count"] == 3

    paid = await client.get("/parcels", params={"payment_status": "paid"}, headers=user_headers)
    assert paid.json()["count"] == 0


@pytest.mark.asyncio
async def test_list_parcels_rejects_unknown_status(client, user_headers):
    response = await client.get("/parcels", params={"delivery_status": "lost"}, headers=user_headers)
    assert response.status_code == 400


# TEST 5: Get Unknown Parcel
@pytest.mark.asyncio
async def test_get_unknown_parcel_is_404(client, user_headers):
    response = await client.get("/parcels/9999", headers=user_headers)

    assert response.status_code == 404
    assert response.json()["message"] == "Parcel not found"


# TEST 6: Delete Parcel
@pytest.mark.asyncio
async def test_delete_parcel(client, user_headers, parcel_data):
    """Delete removes the parcel; a second delete is 404."""
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    first = await client.delete(f"/parcels/{parcel_id}")
    second = await client.delete(f"/parcels/{parcel_id}")

    assert first.status_code == 200
    assert first.json()["success"] is True
    assert second.status_code == 404
    gone = await client.get(f"/parcels/{parcel_id}", headers=user_headers)
    assert gone.status_code == 404


# TEST 7: Assign Rider
@pytest.mark.asyncio
async def test_assign_rider_moves_parcel_in_transit(client, admin_headers, parcel_data):
    """Admin assignment sets the rider fields and in_transit."""
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    response = await client.patch(
        f"/parcels/assign/{parcel_id}",
        json={"riderId": 7, "riderName": "Rahim", "riderContact": "01900000000"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    updated = response.json()["updatedParcel"]
    assert updated["delivery_status"] == "in_transit"
    assert updated["assignRider_id"] == "7"
    assert updated["assignRider_name"] == "Rahim"
    assert updated["assignedAt"]

    detail = await client.get(f"/parcels/{parcel_id}", headers=admin_headers)
    parcel = detail.json()["parcel"]
    assert parcel["delivery_status"] == "in_transit"
    assert parcel["riderContact"] == "01900000000"


@pytest.mark.asyncio
async def test_second_assignment_is_rejected(client, admin_headers, parcel_data):
    """An already assigned parcel keeps its first rider."""
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    await client.patch(f"/parcels/assign/{parcel_id}", json={"riderId": "r1", "riderName": "First"}, headers=admin_headers)
    second = await client.patch(
        f"/parcels/assign/{parcel_id}", json={"riderId": "r2", "riderName": "Second"}, headers=admin_headers
    )

    assert second.status_code == 404
    assert second.json()["message"] == "Parcel not found or already assigned"
    detail = await client.get(f"/parcels/{parcel_id}", headers=admin_headers)
    assert detail.json()["parcel"]["assignRider_id"] == "r1"


@pytest.mark.asyncio
async def test_assign_rider_requires_admin(client, user_headers, parcel_data):
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    response = await client.patch(f"/parcels/assign/{parcel_id}", json={"riderId": "r1"}, headers=user_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_assign_unknown_parcel(client, admin_headers):
    response = await client.patch("/parcels/assign/4040", json={"riderId": "r1"}, headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_assign_without_rider_id(client, admin_headers, parcel_data):
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    response = await client.patch(f"/parcels/assign/{parcel_id}", json={"riderName": "Nobody"}, headers=admin_headers)

    assert response.status_code == 400


# TEST 8: Delivery
@pytest.mark.asyncio
async def test_assigned_rider_marks_parcel_delivered(client, admin_headers, active_rider, parcel_data):
    """The assigned rider sees the parcel and can confirm delivery once."""
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]
    await client.patch(
        f"/parcels/assign/{parcel_id}",
        json={"riderId": str(active_rider["id"]), "riderName": "Rahim"},
        headers=admin_headers,
    )

    mine = await client.get("/riders/me/parcels", headers=active_rider["headers"])
    assert mine.status_code == 200
    assert [p["id"] for p in mine.json()["parcels"]] == [parcel_id]

    delivered = await client.patch(f"/parcels/deliver/{parcel_id}", headers=active_rider["headers"])
    assert delivered.status_code == 200
    assert delivered.json()["delivery_status"] == "delivered"
    assert delivered.json()["deliveredAt"]

    again = await client.patch(f"/parcels/deliver/{parcel_id}", headers=active_rider["headers"])
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_rider_cannot_deliver_unassigned_parcel(client, active_rider, parcel_data):
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    response = await client.patch(f"/parcels/deliver/{parcel_id}", headers=active_rider["headers"])

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deliver_requires_rider_role(client, user_headers, parcel_data):
    created = await client.post("/parcels", json=parcel_data())
    parcel_id = created.json()["insertedId"]

    response = await client.patch(f"/parcels/deliver/{parcel_id}", headers=user_headers)

    assert response.status_code == 403


# TEST 9: Creation Dates Across Offsets
@pytest.mark.asyncio
async def test_creation_dates_with_offsets_sort_by_instant(client, user_headers, parcel_data):
    """A +06:00 date is stored as its UTC instant and ordered by it."""
    await client.post("/parcels", json=parcel_data(name="Dhaka morning", creation_date="2024-01-01T10:00:00+06:00"))
    await client.post("/parcels", json=parcel_data(name="UTC five", creation_date="2024-01-01T05:00:00Z"))

    response = await client.get("/parcels", headers=user_headers)

    parcels = response.json()["parcels"]
    assert [p["name"] for p in parcels] == ["UTC five", "Dhaka morning"]
    assert parcels[1]["creation_date"].startswith("2024-01-01T04:00:00")


def test_sort_by_creation_date_handles_mixed_values():
    """String, naive and aware values are compared as UTC instants."""
    dhaka = timezone(timedelta(hours=6))
    parcels = [
        Parcel(name="naive feb", creation_date=datetime(2024, 2, 1, 12, 0)),
        Parcel(name="string jan", creation_date="2024-01-15T12:00:00+05:00"),
        Parcel(name="aware mar 31", creation_date=datetime(2024, 4, 1, 3, 0, tzinfo=dhaka)),
        Parcel(name="string mar 1", creation_date="2024-03-01T00:00:00Z"),
    ]

    ordered = sort_by_creation_date(parcels)

    assert [p.name for p in ordered] == ["aware mar 31", "string mar 1", "naive feb", "string jan"]


def test_as_aware_converts_offsets_to_utc():
    converted = as_aware("2024-01-01T10:00:00+06:00")

    assert converted == datetime(2024, 1, 1, 4, 0, tzinfo=timezone.utc)
    assert converted.utcoffset().total_seconds() == 0
    assert as_aware(datetime(2024, 1, 1, 4, 0)).tzinfo is timezone.utc
    assert as_aware(None) is None
