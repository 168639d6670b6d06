"""
OGCS CRM - Admin dashboard figures

Week = Monday 00:00 to Sunday 23:59:59.999, local time.
"Closed" leads are left out of the follow-ups due.
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any

from config import db, isoformat
from models import VALID_LEAD_STATUSES, LeadStatus
from services.dates import day_bounds, week_bounds

logger = logging.getLogger("overview")

TOP_SALES_LIMIT = 5


def _iso_window(start: datetime, end: datetime) -> Dict[str, str]:
    """createdAt/updatedAt are ISO strings, compared as such"""
    return {"$gte": isoformat(start), "$lte": isoformat(end)}


async def _sum_total(match: dict) -> float:
    rows = await db.quotes.aggregate([
        {"$match": match},
        {"$group": {"_id": None, "amount": {"$sum": "$totalAmount"}}},
    ]).to_list(1)
    return rows[0]["amount"] if rows else 0


async def quote_stats(week_start: datetime, today_end: datetime) -> Dict[str, Any]:
    window = _iso_window(week_start, today_end)
    return {
        "pendingQuotes": await db.quotes.count_documents({"status": "pending"}),
        "week": {
            "created": await db.quotes.count_documents({"createdAt": window}),
            "approved": await db.quotes.count_documents({"status": "approved", "updatedAt": window}),
            "rejected": await db.quotes.count_documents({"status": "rejected", "updatedAt": window}),
            "approvedAmount": await _sum_total({"status": "approved", "updatedAt": window}),
        },
    }


async def lead_stats(week_start, week_end, today_start, today_end) -> Dict[str, Any]:
    not_closed = {"$ne": LeadStatus.CLOSED.value}

    rows = await db.leads.aggregate([
        {"$group": {"_id": "$status", "count": {"$sum": 1}}},
    ]).to_list(100)
    breakdown = {status: 0 for status in VALID_LEAD_STATUSES}
    for row in rows:
        if row["_id"] in breakdown:
            breakdown[row["_id"]] = row["count"]

    return {
        "totalLeads": await db.leads.count_documents({}),
        "newLeadsThisWeek": await db.leads.count_documents(
            {"createdAt": _iso_window(week_start, today_end)}
        ),
        "followUpsDueToday": await db.leads.count_documents(
            {"followUpDate": {"$gte": today_start, "$lte": today_end}, "status": not_closed}
        ),
        "followUpsDueThisWeek": await db.leads.count_documents(
            {"followUpDate": {"$gte": week_start, "$lte": week_end}, "status": not_closed}
        ),
        "statusBreakdown": breakdown,
    }


async def top_sales_executives(week_start: datetime, today_end: datetime):
    """Top 5 by quotes created this week"""
    rows = await db.quotes.aggregate([
        {"$match": {"createdAt": _iso_window(week_start, today_end)}},
        {"$group": {
            "_id": "$salesExecutive",
            "created": {"$sum": 1},
            "totalAmount": {"$sum": "$totalAmount"},
        }},
        {"$sort": {"created": -1}},
        {"$limit": TOP_SALES_LIMIT},
    ]).to_list(TOP_SALES_LIMIT)

    user_ids = [r["_id"] for r in rows]
    users = await db.users.find(
        {"id": {"$in": user_ids}}, {"_id": 0, "id": 1, "name": 1, "email": 1}
    ).to_list(TOP_SALES_LIMIT)
    by_id = {u["id"]: u for u in users}

    return [
        {
            "userId": r["_id"],
            "name": by_id.get(r["_id"], {}).get("name"),
            "email": by_id.get(r["_id"], {}).get("email"),
            "created": r["created"],
            "totalAmount": r["totalAmount"],
        }
        for r in rows
    ]


async def admin_overview(now: Optional[datetime] = None) -> Dict[str, Any]:
    today_start, today_end = day_bounds(now)
    week_start, week_end = week_bounds(now)

    return {
        "quotes": await quote_stats(week_start, today_end),
        "leads": await lead_stats(week_start, week_end, today_start, today_end),
        "topSalesExecutivesThisWeek": await top_sales_executives(week_start, today_end),
        "meta": {
            "weekStart": isoformat(week_start),
            "todayStart": isoformat(today_start),
            "todayEnd": isoformat(today_end),
        },
    }
