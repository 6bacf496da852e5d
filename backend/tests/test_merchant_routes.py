"""
Rent The Moment Backend — Merchant Route Tests
=============================================

What:  The admin merchant endpoints end to end: auth gates, the listing
       envelope, CRUD and body validation.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from rentmoment.models.merchant import Merchant


async def seed(database, count: int):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    async with database.session() as session:
        for i in range(count):
            created = base + timedelta(minutes=i)
            session.add(
                Merchant(
                    name=f"Merchant {i:02d}",
                    address="12 Silk Street" if i < 3 else "Market Road",
                    created_at=created,
                    updated_at=created,
                )
            )
        await session.commit()


class TestGates:
    @pytest.mark.asyncio
    async def test_anonymous_gets_401(self, client):
        response = await client.get("/api/merchants")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_customer_gets_403(self, client, user_headers):
        response = await client.get("/api/merchants", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Not authorized as an admin"


class TestListing:
    @pytest.mark.asyncio
    async def test_envelope_and_pagination(self, client, database, admin_headers):
        await seed(database, 25)

        response = await client.get("/api/merchants?page=3&limit=10", headers=admin_headers)
        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "25"

        body = response.json()
        assert body["success"] is True
        data = body["data"]
        assert len(data["merchants"]) == 5
        assert data["totalPages"] == 3
        assert data["currentPage"] == 3
        assert data["total"] == 25
        assert data["hasNextPage"] is False
        assert data["hasPrevPage"] is True
        assert set(data["merchants"][0]) >= {"id", "name", "mobilenumber", "address", "createdAt"}

    @pytest.mark.asyncio
    async def test_junk_pagination_is_normalized(self, client, database, admin_headers):
        await seed(database, 12)
        response = await client.get("/api/merchants?page=abc&limit=-5", headers=admin_headers)
        data = response.json()["data"]
        assert response.status_code == 200
        assert data["currentPage"] == 1
        assert len(data["merchants"]) == 10
        assert data["hasNextPage"] is True

    @pytest.mark.asyncio
    async def test_search_matches_address(self, client, database, admin_headers):
        await seed(database, 10)
        response = await client.get("/api/merchants?search=SILK", headers=admin_headers)
        data = response.json()["data"]
        assert data["total"] == 3
        assert {m["address"] for m in data["merchants"]} == {"12 Silk Street"}

    @pytest.mark.asyncio
    async def test_name_filter_ignores_address(self, client, database, admin_headers):
        await seed(database, 10)
        async with database.session() as session:
            session.add(Merchant(name="Silk House", address="Market Road"))
            await session.commit()

        response = await client.get("/api/merchants?name=silk", headers=admin_headers)
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["merchants"][0]["name"] == "Silk House"

    @pytest.mark.asyncio
    async def test_sort_by_name(self, client, database, admin_headers):
        await seed(database, 4)
        response = await client.get("/api/merchants?sort=name", headers=admin_headers)
        names = [m["name"] for m in response.json()["data"]["merchants"]]
        assert names == sorted(names)

    @pytest.mark.asyncio
    async def test_empty_collection(self, client, admin_headers):
        response = await client.get("/api/merchants", headers=admin_headers)
        data = response.json()["data"]
        assert data["merchants"] == []
        assert data["totalPages"] == 0
        assert data["hasNextPage"] is False
        assert data["hasPrevPage"] is False


class TestCrud:
    @pytest.mark.asyncio
    async def test_create_get_update_delete(self, client, admin_headers):
        created = await client.post(
            "/api/merchants",
            json={"name": "  Silk House ", "mobilenumber": 9876543210, "address": "Jaipur"},
            headers=admin_headers,
        )
        assert created.status_code == 201
        merchant = created.json()["data"]["merchant"]
        assert merchant["name"] == "Silk House"
        assert merchant["mobilenumber"] == "9876543210"

        url = f"/api/merchants/{merchant['id']}"
        fetched = await client.get(url, headers=admin_headers)
        assert fetched.json()["data"]["merchant"]["address"] == "Jaipur"

        updated = await client.put(url, json={"address": "Udaipur"}, headers=admin_headers)
        assert updated.status_code == 200
        assert updated.json()["data"]["merchant"]["address"] == "Udaipur"
        assert updated.json()["data"]["merchant"]["name"] == "Silk House"

        deleted = await client.delete(url, headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json()["message"] == "Merchant deleted successfully"

        missing = await client.get(url, headers=admin_headers)
        assert missing.status_code == 404
        assert missing.json()["message"] == "Merchant not found"

    @pytest.mark.asyncio
    async def test_non_numeric_mobile_rejected(self, client, admin_headers):
        response = await client.post(
            "/api/merchants", json={"name": "Silk House", "mobilenumber": "98-76"}, headers=admin_headers
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "mobilenumber"

    @pytest.mark.asyncio
    async def test_short_name_rejected(self, client, admin_headers):
        response = await client.post("/api/merchants", json={"name": "A"}, headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client, admin_headers):
        response = await client.delete(f"/api/merchants/{uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client, admin_headers):
        response = await client.get("/api/merchants/not-a-uuid", headers=admin_headers)
        assert response.status_code == 400
