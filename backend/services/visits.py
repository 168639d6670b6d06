"""
OGCS CRM - Site visits

Field visits logged by sales executives, with the people met on site.
"""

import logging
import math
import uuid
from typing import Optional, Dict, Any, List

from config import db, now_iso, utc_now, to_utc, normalize_email, fetch_page
from models import VisitCreate
from services.dates import parse_date_param, utc_day_bounds
from services.errors import ValidationError, NotFound
from services.lead_registry import validate_id

logger = logging.getLogger("visits")

LEAD_SUMMARY_FIELDS = {"_id": 0, "id": 1, "leadType": 1, "name": 1, "company": 1,
                       "phone": 1, "email": 1, "status": 1}


def _finite_pair(coords) -> Optional[List[float]]:
    if not isinstance(coords, (list, tuple)) or len(coords) != 2:
        return None
    try:
        lng, lat = float(coords[0]), float(coords[1])
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lng) and math.isfinite(lat)):
        return None
    return [lng, lat]


def build_safe_location(location) -> Optional[Dict[str, Any]]:
    """GeoJSON Point when both coordinates are finite numbers, else None"""
    if not isinstance(location, dict):
        return None
    pair = _finite_pair(location.get("coordinates"))
    if pair is None:
        return None
    return {"type": "Point", "coordinates": pair}


async def _check_lead_links(user_id: str, met_people: List[Dict[str, Any]]):
    """A met person may only point at one of the user's own leads"""
    lead_ids = {p["leadId"] for p in met_people if p.get("leadId")}
    if not lead_ids:
        return
    owned = await db.leads.count_documents({"id": {"$in": list(lead_ids)}, "ownerId": user_id})
    if owned != len(lead_ids):
        raise ValidationError("Met person leadId must reference one of your leads")


async def create_visit(user_id: str, data: VisitCreate) -> Dict[str, Any]:
    met_people = []
    for person in data.met_people:
        entry = person.model_dump(by_alias=True)
        entry["email"] = normalize_email(entry["email"])
        entry["followUpDate"] = to_utc(person.follow_up_date)
        met_people.append(entry)
    await _check_lead_links(user_id, met_people)

    now = utc_now()
    doc = {
        "id": str(uuid.uuid4()),
        "userId": user_id,
        "placeName": data.place_name,
        "siteType": data.site_type,
        "address": data.address,
        "city": data.city,
        "visitedAt": to_utc(data.visited_at) or now,
        "checkInAt": to_utc(data.check_in_at) or now,
        "checkOutAt": to_utc(data.check_out_at),
        "metPeople": met_people,
        "tags": data.tags,
        "createdAt": now_iso(),
        "updatedAt": now_iso(),
    }
    location = build_safe_location(data.location)
    if location:
        doc["location"] = location

    await db.visits.insert_one(doc)
    doc.pop("_id", None)
    logger.info(f"Visit {doc['id'][:8]}... logged by {user_id[:8]}... ({len(met_people)} met)")
    return doc


async def get_owned_visit(user_id: str, visit_id: str, label: str = "visit") -> Dict[str, Any]:
    visit_id = validate_id(visit_id, label)
    visit = await db.visits.find_one({"id": visit_id, "userId": user_id}, {"_id": 0})
    if not visit:
        raise NotFound("Visit not found")
    return visit


async def populate_met_leads(visits: List[Dict[str, Any]]):
    """Attach a lead summary to every met person carrying a leadId"""
    lead_ids = {p["leadId"] for v in visits for p in v.get("metPeople", []) if p.get("leadId")}
    if not lead_ids:
        return
    leads = await db.leads.find({"id": {"$in": list(lead_ids)}}, LEAD_SUMMARY_FIELDS).to_list(len(lead_ids))
    by_id = {l["id"]: l for l in leads}
    for visit in visits:
        for person in visit.get("metPeople", []):
            if person.get("leadId"):
                person["lead"] = by_id.get(person["leadId"])


async def list_visits(
    user_id: str,
    date: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    page=1,
    limit=20
) -> Dict[str, Any]:
    """
    ?date= is a UTC calendar day; from/to override it when given.
    Newest visit first.
    """
    query = {"userId": user_id}

    if date:
        start, end = utc_day_bounds(date)
        query["visitedAt"] = {"$gte": start, "$lte": end}

    if date_from or date_to:
        window = {}
        start = parse_date_param(date_from, "from")
        end = parse_date_param(date_to, "to", end_of_day=True)
        if start:
            window["$gte"] = start
        if end:
            window["$lte"] = end
        query["visitedAt"] = window

    result = await fetch_page(
        db.visits, query, [("visitedAt", -1), ("createdAt", -1)], page, limit, default_limit=20
    )
    await populate_met_leads(result["items"])
    return result


async def get_visit(user_id: str, visit_id: str) -> Dict[str, Any]:
    visit = await get_owned_visit(user_id, visit_id)
    await populate_met_leads([visit])
    return visit


async def update_location(user_id: str, visit_id: str, location) -> Dict[str, Any]:
    """Replace the visit location. Unlike create, a bad location is an error."""
    validate_id(visit_id, "visit")
    if not isinstance(location, dict) or location.get("type") != "Point" \
            or not isinstance(location.get("coordinates"), (list, tuple)):
        raise ValidationError("Invalid location")

    safe = build_safe_location(location)
    if safe is None:
        raise ValidationError("Invalid coordinates")

    visit = await get_owned_visit(user_id, visit_id)
    await db.visits.update_one(
        {"id": visit["id"]},
        {"$set": {"location": safe, "updatedAt": now_iso()}}
    )
    return {"visitId": visit["id"], "location": safe}


async def checkout(user_id: str, visit_id: str, check_out_at=None) -> Dict[str, Any]:
    visit = await get_owned_visit(user_id, visit_id)
    when = to_utc(check_out_at) or utc_now()
    await db.visits.update_one(
        {"id": visit["id"]},
        {"$set": {"checkOutAt": when, "updatedAt": now_iso()}}
    )
    visit["checkOutAt"] = when
    return visit
