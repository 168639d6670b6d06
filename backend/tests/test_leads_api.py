"""
OGCS CRM - /api/leads/my endpoint tests
Tests: auth, CRUD, dedup conflicts, import, follow-ups through HTTP.
Run: cd backend && pytest tests/test_leads_api.py -v
"""

from datetime import datetime, time, timedelta

import pytest

from config import LOCAL_TZ
from services.dates import local_now


def local_iso(days: int = 0, hour: int = 10) -> str:
    day = local_now().date() + timedelta(days=days)
    return LOCAL_TZ.localize(datetime.combine(day, time(hour, 0))).isoformat()


# ═══════════════════════════════════════════════════════════════
# 1. AUTH
# ═══════════════════════════════════════════════════════════════

class TestAuthRequired:

    @pytest.mark.asyncio
    async def test_no_token(self, client):
        r = await client.get("/api/leads/my")
        assert r.status_code == 401
        assert "message" in r.json()

    @pytest.mark.asyncio
    async def test_bad_token(self, client):
        r = await client.get("/api/leads/my", headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401


# ═══════════════════════════════════════════════════════════════
# 2. CRUD + DEDUP
# ═══════════════════════════════════════════════════════════════

class TestLeadCrud:

    @pytest.mark.asyncio
    async def test_duplicate_phone_per_owner(self, client, sales_user, other_sales_user):
        """Same phone: 409 for the same owner, fine for another owner."""
        r = await client.post("/api/leads/my", json={"name": "A", "phone": "+91 98765-43210"},
                              headers=sales_user["headers"])
        assert r.status_code == 201
        assert r.json()["lead"]["normalizedPhone"] == "9876543210"

        r = await client.post("/api/leads/my", json={"name": "A2", "phone": "9876543210"},
                              headers=sales_user["headers"])
        assert r.status_code == 409
        assert r.json()["message"] == "Lead already exists for this phone/email"

        r = await client.post("/api/leads/my", json={"name": "A", "phone": "9876543210"},
                              headers=other_sales_user["headers"])
        assert r.status_code == 201

    @pytest.mark.asyncio
    async def test_name_required(self, client, sales_user):
        r = await client.post("/api/leads/my", json={"name": "  ", "phone": "9876543210"},
                              headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "Name is required"

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, client, sales_user):
        r = await client.post("/api/leads/my", json={"name": "A", "budget": 100},
                              headers=sales_user["headers"])
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_lead_type(self, client, sales_user):
        r = await client.post("/api/leads/my", json={"name": "A", "leadType": "Astronaut"},
                              headers=sales_user["headers"])
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_update_and_delete(self, client, sales_user):
        r = await client.post("/api/leads/my", json={"name": "A", "email": "a@x.com"},
                              headers=sales_user["headers"])
        lead_id = r.json()["lead"]["id"]

        r = await client.put(f"/api/leads/my/{lead_id}", json={"company": "Acme", "email": "A@X.com"},
                             headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json()["lead"]["company"] == "Acme"

        r = await client.delete(f"/api/leads/my/{lead_id}", headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json() == {"success": True}

        r = await client.delete(f"/api/leads/my/{lead_id}", headers=sales_user["headers"])
        assert r.status_code == 404

    @pytest.mark.asyncio
    async def test_cannot_touch_other_owners_lead(self, client, sales_user, other_sales_user):
        r = await client.post("/api/leads/my", json={"name": "Mine"}, headers=sales_user["headers"])
        lead_id = r.json()["lead"]["id"]

        r = await client.put(f"/api/leads/my/{lead_id}", json={"city": "Pune"},
                             headers=other_sales_user["headers"])
        assert r.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id(self, client, sales_user):
        r = await client.delete("/api/leads/my/12345", headers=sales_user["headers"])
        assert r.status_code == 400

    @pytest.mark.asyncio
    async def test_list_shape(self, client, sales_user):
        for i in range(3):
            await client.post("/api/leads/my", json={"name": f"L{i}"}, headers=sales_user["headers"])

        r = await client.get("/api/leads/my?limit=2&page=2", headers=sales_user["headers"])
        data = r.json()
        assert data["success"] is True
        assert data["total"] == 3
        assert data["pages"] == 2
        assert data["page"] == 2
        assert len(data["items"]) == 1

    @pytest.mark.asyncio
    async def test_limit_clamped(self, client, sales_user):
        r = await client.get("/api/leads/my?limit=500", headers=sales_user["headers"])
        assert r.json()["limit"] == 100


# ═══════════════════════════════════════════════════════════════
# 3. IMPORT
# ═══════════════════════════════════════════════════════════════

class TestImport:

    @pytest.mark.asyncio
    async def test_rows_classified(self, client, sales_user):
        items = [{"name": "X", "phone": "111-222-3333"}, {}, {"name": "X", "phone": "1112223333"}]
        r = await client.post("/api/leads/my/import", json={"items": items}, headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json() == {"success": True, "added": 1, "skippedDuplicate": 1, "skippedInvalid": 1}

    @pytest.mark.asyncio
    async def test_items_must_be_a_list(self, client, sales_user):
        r = await client.post("/api/leads/my/import", json={"items": {"name": "X"}},
                              headers=sales_user["headers"])
        assert r.status_code == 400
        assert r.json()["message"] == "Import must be an array in { items: [...] }"


# ═══════════════════════════════════════════════════════════════
# 4. FOLLOW-UPS
# ═══════════════════════════════════════════════════════════════

class TestFollowUps:

    @pytest.mark.asyncio
    async def test_date_today_sets_status_and_summary(self, client, sales_user):
        r = await client.post("/api/leads/my", json={"name": "F"}, headers=sales_user["headers"])
        lead_id = r.json()["lead"]["id"]

        r = await client.patch(f"/api/leads/my/{lead_id}/followup",
                               json={"followUpDate": local_iso(0, 10)},
                               headers=sales_user["headers"])
        assert r.status_code == 200
        assert r.json()["message"] == "Follow-up updated"
        assert r.json()["lead"]["status"] == "Follow-Up"

        r = await client.get("/api/leads/my/followups/summary", headers=sales_user["headers"])
        assert r.json() == {"success": True, "today": 1, "upcoming": 0, "overdue": 0}

    @pytest.mark.asyncio
    async def test_overdue_not_upcoming(self, client, sales_user):
        await client.post("/api/leads/my", json={"name": "Late", "followUpDate": local_iso(-1, 12)},
                          headers=sales_user["headers"])

        r = await client.get("/api/leads/my/followups?bucket=overdue", headers=sales_user["headers"])
        assert [i["name"] for i in r.json()["items"]] == ["Late"]

        r = await client.get("/api/leads/my/followups?bucket=upcoming", headers=sales_user["headers"])
        assert r.json()["items"] == []

    @pytest.mark.asyncio
    async def test_dates_serialized_with_offset(self, client, sales_user):
        await client.post("/api/leads/my", json={"name": "Soon", "followUpDate": "2030-01-15T10:00:00+05:30"},
                          headers=sales_user["headers"])
        r = await client.get("/api/leads/my/followups", headers=sales_user["headers"])
        assert r.json()["items"][0]["followUpDate"] == "2030-01-15T04:30:00+00:00"

    @pytest.mark.asyncio
    async def test_invalid_bucket(self, client, sales_user):
        r = await client.get("/api/leads/my/followups?bucket=someday", headers=sales_user["headers"])
        assert r.status_code == 400
