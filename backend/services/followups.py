"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  FOLLOW-UP SCHEDULER - buckets computed at query time                        ║
║                                                                              ║
║  today    = [local 00:00:00.000, local 23:59:59.999]                         ║
║  upcoming = followUpDate > end of today                                      ║
║  overdue  = followUpDate < start of today                                    ║
║  all      = any non-null followUpDate                                        ║
║                                                                              ║
║  "local" = APP_TIMEZONE. Nothing is stored per bucket: a lead moves from     ║
║  upcoming to today to overdue as the clock moves.                            ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from datetime import datetime
from typing import Optional, Dict, Any

from config import db, now_iso, to_utc, search_filter, fetch_page
from models import FollowUpUpdate, LeadStatus
from services.dates import day_bounds, parse_date_param
from services.errors import ValidationError
from services.lead_registry import SEARCH_FIELDS, get_owned_lead

logger = logging.getLogger("followups")

BUCKETS = ["today", "upcoming", "overdue", "all"]


def bucket_window(bucket: str, now: Optional[datetime] = None) -> Dict[str, Any]:
    """followUpDate filter for a bucket, relative to now"""
    if bucket not in BUCKETS:
        raise ValidationError(f"Invalid bucket: {bucket}. Valid: {BUCKETS}")

    start, end = day_bounds(now)
    if bucket == "today":
        return {"$gte": start, "$lte": end}
    if bucket == "upcoming":
        return {"$gt": end}
    if bucket == "overdue":
        return {"$lt": start, "$ne": None}
    return {"$ne": None}


async def list_followups(
    owner_id: str,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    bucket: Optional[str] = None,
    search: Optional[str] = None,
    page=1,
    limit=50,
    now: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Owner's leads that have a follow-up date, soonest first.

    An explicit from/to range wins over the bucket; the bucket only
    applies when neither bound is given.
    """
    start = parse_date_param(date_from, "from")
    end = parse_date_param(date_to, "to", end_of_day=True)

    if start or end:
        window = {"$ne": None}
        if start:
            window["$gte"] = start
        if end:
            window["$lte"] = end
    else:
        window = bucket_window(bucket or "all", now)

    query = {"ownerId": owner_id, "followUpDate": window}
    text = search_filter(search, SEARCH_FIELDS)
    if text:
        query.update(text)

    return await fetch_page(db.leads, query, [("followUpDate", 1)], page, limit, default_limit=50)


async def followup_summary(owner_id: str, now: Optional[datetime] = None) -> Dict[str, int]:
    """Counts of Follow-Up leads per bucket"""
    counts = {}
    for bucket in ("today", "upcoming", "overdue"):
        counts[bucket] = await db.leads.count_documents({
            "ownerId": owner_id,
            "status": LeadStatus.FOLLOW_UP.value,
            "followUpDate": bucket_window(bucket, now),
        })
    return counts


async def update_followup(owner_id: str, lead_id: str, data: FollowUpUpdate) -> Dict[str, Any]:
    """
    Keys absent from the body are untouched; followUpDate null clears it.
    An explicit status wins, otherwise setting a date moves the lead to Follow-Up.
    """
    lead = await get_owned_lead(owner_id, lead_id)
    changes = data.to_doc()

    update = {"updatedAt": now_iso()}
    if "followUpDate" in changes:
        update["followUpDate"] = to_utc(changes["followUpDate"])
    if "followUpNotes" in changes:
        update["followUpNotes"] = changes["followUpNotes"]

    if changes.get("status"):
        update["status"] = changes["status"]
    elif update.get("followUpDate"):
        update["status"] = LeadStatus.FOLLOW_UP.value

    await db.leads.update_one({"id": lead["id"], "ownerId": owner_id}, {"$set": update})
    logger.info(f"Follow-up updated on lead {lead['id'][:8]}... status={update.get('status', lead.get('status'))}")
    return await db.leads.find_one({"id": lead["id"]}, {"_id": 0})
