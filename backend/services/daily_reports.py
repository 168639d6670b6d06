"""
OGCS CRM - Daily activity reports
"""

import uuid
from typing import Optional, Dict, Any

from config import db, now_iso, search_filter, fetch_page
from models import DailyReportCreate
from models.daily_report import count_words
from services.dates import utc_day_bounds


async def create_report(user: dict, data: DailyReportCreate) -> Dict[str, Any]:
    now = now_iso()
    doc = {
        "id": str(uuid.uuid4()),
        "reportDate": data.report_date,
        "memberName": data.member_name,
        "reportText": data.report_text,
        "wordCount": count_words(data.report_text),
        "createdBy": user["id"],
        "createdAt": now,
        "updatedAt": now,
    }
    await db.daily_reports.insert_one(doc)
    doc.pop("_id", None)
    return doc


async def list_reports(
    search: Optional[str] = None,
    date: Optional[str] = None,
    user_id: Optional[str] = None,
    page=1,
    limit=20
) -> Dict[str, Any]:
    """Newest first. date is the report's own YYYY-MM-DD."""
    query = {}
    if date:
        utc_day_bounds(date)  # raises on a malformed date
        query["reportDate"] = date.strip()
    if user_id:
        query["createdBy"] = user_id
    text = search_filter(search, ["memberName", "reportText"])
    if text:
        query.update(text)
    return await fetch_page(db.daily_reports, query, [("createdAt", -1)], page, limit, default_limit=20)
