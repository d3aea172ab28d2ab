"""
Parcel Delivery Backend — Rider Endpoint Tests
================================================

What we test:
    ✅ Applications start pending regardless of the submitted status
    ✅ Pending/active lists are newest first
    ✅ Accepting a rider promotes the matching user to role "rider"
       (email letter case ignored), and a failed commit writes nothing
    ✅ A body email that contradicts the application is rejected with no writes
    ✅ Id validation (400) and unknown riders (404)
"""

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

UNKNOWN_ID = "65f0c0ffee0000000000abcd"


async def apply(client, **fields):
    response = await client.post("/riders", json=fields)
    assert response.status_code == 201, response.text
    return response.json()["insertedId"]


async def user_role(client, email):
    found = (await client.get("/users/search", params={"email": email})).json()
    return found[0]["role"]


class TestRiderApplications:

    @pytest.mark.asyncio
    async def test_new_application_is_pending(self, test_client):
        rider_id = await apply(
            test_client,
            name="Judy",
            email="judy@example.com",
            status="accepted",
            region="Dhaka",
            bike_registration="DHA-1234",
        )

        pending = (await test_client.get("/riders/pending")).json()

        assert [r["_id"] for r in pending] == [rider_id]
        assert pending[0]["status"] == "pending"
        assert pending[0]["region"] == "Dhaka"
        assert pending[0]["bike_registration"] == "DHA-1234"
        assert (await test_client.get("/riders/active")).json() == []

    @pytest.mark.asyncio
    async def test_pending_list_newest_first(self, test_client):
        older = await apply(test_client, name="Old", email="old@example.com",
                            created_at="2024-03-01T08:00:00+00:00")
        newer = await apply(test_client, name="New", email="new@example.com",
                            created_at="2024-03-02T08:00:00+00:00")

        pending = (await test_client.get("/riders/pending")).json()

        assert [r["_id"] for r in pending] == [newer, older]


class TestRiderStatus:

    @pytest.mark.asyncio
    async def test_accept_promotes_user(self, test_client):
        await test_client.post("/users", json={"email": "kim@example.com"})
        rider_id = await apply(test_client, name="Kim", email="kim@example.com")

        response = await test_client.patch(
            f"/riders/{rider_id}", json={"status": "accepted", "email": "kim@example.com"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["matchedCount"] == 1
        assert body["modifiedCount"] == 1
        assert body["userRoleUpdated"] is True
        assert await user_role(test_client, "kim@example.com") == "rider"

        active = (await test_client.get("/riders/active")).json()
        assert [r["_id"] for r in active] == [rider_id]
        assert (await test_client.get("/riders/pending")).json() == []

    @pytest.mark.asyncio
    async def test_accept_promotes_user_despite_letter_case(self, test_client):
        await test_client.post("/users", json={"email": "kim@example.com"})
        rider_id = await apply(test_client, name="Kim", email="Kim@Example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={"status": "accepted"})

        assert response.status_code == 200
        assert response.json()["userRoleUpdated"] is True
        assert await user_role(test_client, "kim@example.com") == "rider"

    @pytest.mark.asyncio
    async def test_failed_commit_keeps_rider_pending(self, test_client):
        await test_client.post("/users", json={"email": "lee@example.com"})
        rider_id = await apply(test_client, name="Lee", email="lee@example.com")

        with patch.object(AsyncSession, "commit", AsyncMock(side_effect=SQLAlchemyError("commit lost"))):
            response = await test_client.patch(f"/riders/{rider_id}", json={"status": "accepted"})

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert await user_role(test_client, "lee@example.com") == "user"
        pending = (await test_client.get("/riders/pending")).json()
        assert [r["_id"] for r in pending] == [rider_id]

    @pytest.mark.asyncio
    async def test_accept_uses_application_email_when_body_omits_it(self, test_client):
        await test_client.post("/users", json={"email": "leo@example.com"})
        rider_id = await apply(test_client, name="Leo", email="leo@example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={"status": "accepted"})

        assert response.status_code == 200
        assert await user_role(test_client, "leo@example.com") == "rider"

    @pytest.mark.asyncio
    async def test_mismatched_email_is_rejected_without_writes(self, test_client):
        await test_client.post("/users", json={"email": "victim@example.com"})
        rider_id = await apply(test_client, name="Max", email="max@example.com")

        response = await test_client.patch(
            f"/riders/{rider_id}", json={"status": "accepted", "email": "victim@example.com"}
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Email does not match the rider application"
        assert await user_role(test_client, "victim@example.com") == "user"
        pending = (await test_client.get("/riders/pending")).json()
        assert [r["_id"] for r in pending] == [rider_id]

    @pytest.mark.asyncio
    async def test_accept_without_user_account(self, test_client):
        rider_id = await apply(test_client, name="Nia", email="nia@example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={"status": "accepted"})

        assert response.status_code == 200
        assert response.json()["userRoleUpdated"] is False

    @pytest.mark.asyncio
    async def test_reject_leaves_role_alone(self, test_client):
        await test_client.post("/users", json={"email": "oscar@example.com"})
        rider_id = await apply(test_client, name="Oscar", email="oscar@example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={"status": "rejected"})

        assert response.status_code == 200
        assert response.json()["userRoleUpdated"] is False
        assert await user_role(test_client, "oscar@example.com") == "user"

    @pytest.mark.asyncio
    async def test_same_status_reports_no_modification(self, test_client):
        rider_id = await apply(test_client, name="Pat", email="pat@example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={"status": "pending"})

        assert response.status_code == 200
        assert response.json()["modifiedCount"] == 0

    @pytest.mark.asyncio
    async def test_unknown_rider_is_404(self, test_client):
        response = await test_client.patch(f"/riders/{UNKNOWN_ID}", json={"status": "accepted"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, test_client):
        response = await test_client.patch("/riders/xyz", json={"status": "accepted"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid rider ID"

    @pytest.mark.asyncio
    async def test_missing_status_is_400(self, test_client):
        rider_id = await apply(test_client, name="Quinn", email="quinn@example.com")

        response = await test_client.patch(f"/riders/{rider_id}", json={})

        assert response.status_code == 400
