"""
OGCS CRM - Follow-up bucket tests
Tests: today / upcoming / overdue windows at the day boundaries, range
precedence, summary counts, follow-up PATCH status rules.
Run: cd backend && pytest tests/test_followups.py -v
"""

from datetime import datetime

import pytest

from config import LOCAL_TZ, db, to_utc
from models import LeadCreate, FollowUpUpdate
from services import followups, lead_registry
from services.dates import day_bounds, week_bounds
from services.errors import ValidationError

OWNER = "11111111-1111-4111-8111-111111111111"

# Tuesday, noon local
NOW = LOCAL_TZ.localize(datetime(2026, 3, 10, 12, 0))


def local(*args):
    return LOCAL_TZ.localize(datetime(*args))


async def lead_due(name, when, status="Follow-Up"):
    return await lead_registry.create_lead(
        OWNER, LeadCreate(name=name, follow_up_date=when, status=status)
    )


async def names(bucket, **kwargs):
    result = await followups.list_followups(OWNER, bucket=bucket, now=NOW, **kwargs)
    return [item["name"] for item in result["items"]]


# ═══════════════════════════════════════════════════════════════
# 1. CALENDAR
# ═══════════════════════════════════════════════════════════════

class TestCalendar:

    def test_day_bounds_are_local_midnights(self):
        start, end = day_bounds(NOW)
        assert start == to_utc(local(2026, 3, 10, 0, 0))
        assert end == to_utc(local(2026, 3, 10, 23, 59, 59, 999000))

    def test_week_starts_monday(self):
        start, end = week_bounds(NOW)
        day_start, _ = day_bounds(local(2026, 3, 9, 8, 0))
        assert start == day_start
        assert (end - start).days == 6

    def test_sunday_belongs_to_previous_monday(self):
        start, _ = week_bounds(local(2026, 3, 15, 22, 0))
        monday, _ = day_bounds(local(2026, 3, 9, 1, 0))
        assert start == monday


# ═══════════════════════════════════════════════════════════════
# 2. BUCKETS
# ═══════════════════════════════════════════════════════════════

class TestBuckets:

    @pytest.mark.asyncio
    async def test_boundaries(self):
        await lead_due("last ms today", local(2026, 3, 10, 23, 59, 59, 999000))
        await lead_due("midnight tomorrow", local(2026, 3, 11, 0, 0))
        await lead_due("midnight today", local(2026, 3, 10, 0, 0))
        await lead_due("last ms yesterday", local(2026, 3, 9, 23, 59, 59, 999000))

        assert sorted(await names("today")) == ["last ms today", "midnight today"]
        assert await names("upcoming") == ["midnight tomorrow"]
        assert await names("overdue") == ["last ms yesterday"]

    @pytest.mark.asyncio
    async def test_all_requires_a_date_and_sorts_ascending(self):
        await lead_due("later", local(2026, 4, 1, 10, 0))
        await lead_due("sooner", local(2026, 3, 1, 10, 0))
        await lead_registry.create_lead(OWNER, LeadCreate(name="no date"))

        assert await names("all") == ["sooner", "later"]

    @pytest.mark.asyncio
    async def test_invalid_bucket(self):
        with pytest.raises(ValidationError):
            await followups.list_followups(OWNER, bucket="someday", now=NOW)

    @pytest.mark.asyncio
    async def test_range_wins_over_bucket(self):
        await lead_due("in march", local(2026, 3, 20, 10, 0))
        await lead_due("in april", local(2026, 4, 20, 10, 0))

        got = await names("today", date_from="2026-03-15", date_to="2026-03-31")
        assert got == ["in march"]

    @pytest.mark.asyncio
    async def test_range_end_includes_whole_day(self):
        await lead_due("late evening", local(2026, 3, 31, 23, 30))
        assert await names("all", date_to="2026-03-31") == ["late evening"]

    @pytest.mark.asyncio
    async def test_bad_range_date(self):
        with pytest.raises(ValidationError):
            await followups.list_followups(OWNER, date_from="31/03/2026", now=NOW)

    @pytest.mark.asyncio
    async def test_default_page_size(self):
        result = await followups.list_followups(OWNER, now=NOW)
        assert result["limit"] == 50
        assert result["pages"] == 1


# ═══════════════════════════════════════════════════════════════
# 3. SUMMARY
# ═══════════════════════════════════════════════════════════════

class TestSummary:

    @pytest.mark.asyncio
    async def test_counts_only_follow_up_status(self):
        await lead_due("today 1", local(2026, 3, 10, 9, 0))
        await lead_due("today 2", local(2026, 3, 10, 18, 0))
        await lead_due("today closed", local(2026, 3, 10, 18, 0), status="Closed")
        await lead_due("next week", local(2026, 3, 17, 9, 0))
        await lead_due("last week", local(2026, 3, 3, 9, 0))

        summary = await followups.followup_summary(OWNER, now=NOW)
        assert summary == {"today": 2, "upcoming": 1, "overdue": 1}


# ═══════════════════════════════════════════════════════════════
# 4. PATCH FOLLOW-UP
# ═══════════════════════════════════════════════════════════════

class TestUpdateFollowUp:

    @pytest.mark.asyncio
    async def test_setting_date_moves_to_follow_up(self):
        doc = await lead_registry.create_lead(OWNER, LeadCreate(name="Fresh"))
        updated = await followups.update_followup(
            OWNER, doc["id"], FollowUpUpdate(follow_up_date=local(2026, 3, 12, 10, 0), follow_up_notes="Call")
        )
        assert updated["status"] == "Follow-Up"
        assert updated["followUpNotes"] == "Call"
        assert updated["followUpDate"] is not None

    @pytest.mark.asyncio
    async def test_explicit_status_wins(self):
        doc = await lead_registry.create_lead(OWNER, LeadCreate(name="Fresh"))
        updated = await followups.update_followup(
            OWNER, doc["id"], FollowUpUpdate(follow_up_date=local(2026, 3, 12, 10, 0), status="Converted")
        )
        assert updated["status"] == "Converted"

    @pytest.mark.asyncio
    async def test_null_clears_date_and_keeps_status(self):
        doc = await lead_due("Due", local(2026, 3, 12, 10, 0))
        updated = await followups.update_followup(
            OWNER, doc["id"], FollowUpUpdate.model_validate({"followUpDate": None})
        )
        assert updated["followUpDate"] is None
        assert updated["status"] == "Follow-Up"

    @pytest.mark.asyncio
    async def test_absent_keys_untouched(self):
        doc = await lead_due("Due", local(2026, 3, 12, 10, 0))
        await followups.update_followup(
            OWNER, doc["id"], FollowUpUpdate.model_validate({"followUpNotes": "left a message"})
        )
        stored = await db.leads.find_one({"id": doc["id"]}, {"_id": 0})
        assert stored["followUpDate"] is not None
        assert stored["followUpNotes"] == "left a message"
