"""
Parcel Delivery Backend — Parcel Endpoint Tests
=================================================

What we test:
    ✅ Listing requires a bearer token (401 absent, 403 rejected)
    ✅ Listing filters by creator and sorts latest first
    ✅ New parcels are always unpaid and keep client fields
    ✅ Fetch/delete: 400 for malformed ids, 404 for unknown ones
"""

import pytest

UNKNOWN_ID = "65f0c0ffee0000000000abcd"


async def book(client, **fields):
    payload = {
        "tracking_id": "TRK-0001",
        "created_by": "alice@example.com",
        "parcel_type": "document",
        "sender_region": "Dhaka",
        "receiver_region": "Sylhet",
        "cost": 150,
    }
    payload.update(fields)
    response = await client.post("/parcels", json=payload)
    assert response.status_code == 200, response.text
    return response.json()["insertedId"]


class TestParcelListAuth:

    @pytest.mark.asyncio
    async def test_no_token_is_401(self, test_client, token_verifier):
        response = await test_client.get("/parcels")

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: No token provided"
        assert token_verifier.calls == []

    @pytest.mark.asyncio
    async def test_wrong_scheme_is_401(self, test_client):
        response = await test_client.get("/parcels", headers={"Authorization": "Basic YWxpY2U6cHc="})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_rejected_token_is_403(self, test_client):
        response = await test_client.get("/parcels", headers={"Authorization": "Bearer expired"})

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    @pytest.mark.asyncio
    async def test_unconfigured_verifier_is_500(self, test_client):
        from parcel_api.main import app
        from parcel_api.services.firebase_service import FirebaseTokenVerifier

        app.state.token_verifier = FirebaseTokenVerifier(service_account=None)

        response = await test_client.get("/parcels", headers={"Authorization": "Bearer anything"})

        assert response.status_code == 500
        assert response.json()["error"] == "configuration_error"


class TestParcelList:

    @pytest.mark.asyncio
    async def test_latest_first(self, test_client, alice_headers):
        first = await book(test_client, creation_date="2024-05-01T10:00:00+00:00")
        third = await book(test_client, creation_date="2024-05-03T10:00:00+00:00")
        second = await book(test_client, creation_date="2024-05-02T10:00:00+00:00")

        parcels = (await test_client.get("/parcels", headers=alice_headers)).json()

        assert [p["_id"] for p in parcels] == [third, second, first]

    @pytest.mark.asyncio
    async def test_filter_by_creator(self, test_client, alice_headers):
        mine = await book(test_client, created_by="alice@example.com")
        await book(test_client, created_by="bob@example.com")

        parcels = (await test_client.get(
            "/parcels", params={"email": "alice@example.com"}, headers=alice_headers
        )).json()

        assert [p["_id"] for p in parcels] == [mine]

    @pytest.mark.asyncio
    async def test_without_filter_returns_everyone(self, test_client, bob_headers):
        await book(test_client, created_by="alice@example.com")
        await book(test_client, created_by="bob@example.com")

        parcels = (await test_client.get("/parcels", headers=bob_headers)).json()

        assert len(parcels) == 2


class TestParcelCrud:

    @pytest.mark.asyncio
    async def test_create_returns_acknowledgement(self, test_client):
        response = await test_client.post("/parcels", json={"created_by": "alice@example.com"})

        assert response.status_code == 200
        assert response.json()["acknowledged"] is True
        assert len(response.json()["insertedId"]) == 24

    @pytest.mark.asyncio
    async def test_new_parcel_is_unpaid(self, test_client):
        parcel_id = await book(test_client, payment_status="paid")

        parcel = (await test_client.get(f"/parcels/{parcel_id}")).json()

        assert parcel["_id"] == parcel_id
        assert parcel["payment_status"] == "unpaid"
        assert parcel["delivery_status"] == "not_collected"
        assert parcel["receiver_region"] == "Sylhet"
        assert parcel["cost"] == 150

    @pytest.mark.asyncio
    async def test_get_unknown_is_404(self, test_client):
        response = await test_client.get(f"/parcels/{UNKNOWN_ID}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["123", "zzzzzzzzzzzzzzzzzzzzzzzz", "65f0c0ffee0000000000abcd0"])
    async def test_malformed_id_is_400(self, test_client, bad_id):
        assert (await test_client.get(f"/parcels/{bad_id}")).status_code == 400
        assert (await test_client.delete(f"/parcels/{bad_id}")).status_code == 400

    @pytest.mark.asyncio
    async def test_uppercase_id_is_accepted(self, test_client):
        parcel_id = await book(test_client)

        response = await test_client.get(f"/parcels/{parcel_id.upper()}")

        assert response.status_code == 200
        assert response.json()["_id"] == parcel_id

    @pytest.mark.asyncio
    async def test_delete(self, test_client):
        parcel_id = await book(test_client)

        response = await test_client.delete(f"/parcels/{parcel_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "Parcel deleted successfully.", "deletedCount": 1}
        assert (await test_client.get(f"/parcels/{parcel_id}")).status_code == 404

        again = await test_client.delete(f"/parcels/{parcel_id}")
        assert again.status_code == 404
        assert again.json()["message"] == "Parcel not found."
