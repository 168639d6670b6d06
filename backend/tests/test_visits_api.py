"""
OGCS CRM - /api/visits endpoint tests
Tests: create with safe location, listing filters, location / checkout,
met person promotion over HTTP.
Run: cd backend && pytest tests/test_visits_api.py -v
"""

import pytest

from config import db


async def create_visit(client, user, **body):
    body.setdefault("placeName", "Shree Hardware")
    r = await client.post("/api/visits", json=body, headers=user["headers"])
    assert r.status_code == 201, r.text
    return r.json()


class TestCreateVisit:

    @pytest.mark.asyncio
    async def test_valid_location_kept(self, client, sales_user):
        visit = await create_visit(client, sales_user, location={"type": "Point", "coordinates": ["73.79", 19.99]})
        assert visit["location"] == {"type": "Point", "coordinates": [73.79, 19.99]}
        assert visit["siteType"] == "Site"
        assert visit["visitedAt"] is not None
        assert visit["checkOutAt"] is None

    @pytest.mark.asyncio
    async def test_invalid_location_omitted(self, client, sales_user):
        visit = await create_visit(client, sales_user, location={"coordinates": ["east", None]})
        assert "location" not in visit

    @pytest.mark.asyncio
    async def test_place_name_required(self, client, sales_user):
        r = await client.post("/api/visits", json={"placeName": "X"}, headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "placeName is required"

    @pytest.mark.asyncio
    async def test_met_person_lead_must_be_own(self, client, sales_user, other_sales_user):
        r = await client.post("/api/leads/my", json={"name": "Theirs"}, headers=other_sales_user["headers"])
        foreign_id = r.json()["lead"]["id"]

        r = await client.post("/api/visits", json={
            "placeName": "Depot",
            "metPeople": [{"name": "P", "leadType": "Buyer", "leadId": foreign_id}],
        }, headers=sales_user["headers"])
        assert r.status_code == 400


class TestListVisits:

    @pytest.mark.asyncio
    async def test_date_filter_is_utc_day(self, client, sales_user):
        await create_visit(client, sales_user, placeName="Early", visitedAt="2026-02-01T00:30:00Z")
        await create_visit(client, sales_user, placeName="Late", visitedAt="2026-02-01T23:30:00Z")
        await create_visit(client, sales_user, placeName="Next", visitedAt="2026-02-02T00:30:00Z")

        r = await client.get("/api/visits/my?date=2026-02-01", headers=sales_user["headers"])
        data = r.json()
        assert [v["placeName"] for v in data["items"]] == ["Late", "Early"]
        assert data["total"] == 2

    @pytest.mark.asyncio
    async def test_bad_range(self, client, sales_user):
        r = await client.get("/api/visits/my?from=yesterday", headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid from date"

    @pytest.mark.asyncio
    async def test_only_own_visits(self, client, sales_user, other_sales_user):
        await create_visit(client, other_sales_user)
        r = await client.get("/api/visits/my", headers=sales_user["headers"])
        assert r.json()["total"] == 0


class TestLocationAndCheckout:

    @pytest.mark.asyncio
    async def test_update_location(self, client, sales_user):
        visit = await create_visit(client, sales_user)
        r = await client.patch(f"/api/visits/my/{visit['id']}/location",
                               json={"location": {"type": "Point", "coordinates": [72.8, 19.0]}},
                               headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json()["location"]["coordinates"] == [72.8, 19.0]

    @pytest.mark.asyncio
    async def test_update_location_rejects_garbage(self, client, sales_user):
        visit = await create_visit(client, sales_user)
        r = await client.patch(f"/api/visits/my/{visit['id']}/location",
                               json={"location": {"type": "Point", "coordinates": ["x", 19.0]}},
                               headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid coordinates"

    @pytest.mark.asyncio
    async def test_checkout(self, client, sales_user):
        visit = await create_visit(client, sales_user)
        r = await client.patch(f"/api/visits/my/{visit['id']}/checkout",
                               json={"checkOutAt": "2026-02-01T12:00:00Z"},
                               headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json()["visit"]["checkOutAt"] == "2026-02-01T12:00:00+00:00"


class TestPromotion:

    @pytest.mark.asyncio
    async def test_promote_twice_same_lead(self, client, sales_user):
        visit = await create_visit(client, sales_user, metPeople=[{"name": "P", "phone": "5551234567"}])

        r = await client.post(f"/api/visits/{visit['id']}/create-lead", json={"idx": 0},
                              headers=sales_user["headers"])
        assert r.status_code == 200
        first = r.json()
        assert first["message"] == "Lead linked/created successfully"
        assert first["lead"]["source"] == "Visit"

        r = await client.post(f"/api/visits/{visit['id']}/create-lead", json={"metIndex": "0"},
                              headers=sales_user["headers"])
        second = r.json()
        assert second["message"] == "Already linked"
        assert second["lead"]["id"] == first["lead"]["id"]
        assert await db.leads.count_documents({"ownerId": sales_user["id"]}) == 1

    @pytest.mark.asyncio
    async def test_linked_person_carries_lead_summary(self, client, sales_user):
        visit = await create_visit(client, sales_user, metPeople=[{"name": "P", "email": "p@x.com"}])
        await client.post(f"/api/visits/{visit['id']}/create-lead", json={"idx": 0},
                          headers=sales_user["headers"])

        r = await client.get(f"/api/visits/my/{visit['id']}", headers=sales_user["headers"])
        person = r.json()["metPeople"][0]
        assert person["lead"]["email"] == "p@x.com"
        assert person["lead"]["status"] == "New"

    @pytest.mark.asyncio
    async def test_missing_index(self, client, sales_user):
        visit = await create_visit(client, sales_user, metPeople=[{"name": "P"}])
        r = await client.post(f"/api/visits/{visit['id']}/create-lead", json={},
                              headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "idx/metIndex is required and must be a valid number"

    @pytest.mark.asyncio
    async def test_other_users_visit(self, client, sales_user, other_sales_user):
        visit = await create_visit(client, sales_user, metPeople=[{"name": "P"}])
        r = await client.post(f"/api/visits/{visit['id']}/create-lead", json={"idx": 0},
                              headers=other_sales_user["headers"])
        assert r.status_code == 404
