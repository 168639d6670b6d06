"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEAD REGISTRY - per-owner leads with duplicate prevention                   ║
║                                                                              ║
║  Detection rules:                                                            ║
║  - Phone: digits only, last 10 kept (normalizedPhone)                        ║
║  - Email: trimmed, lower-cased                                               ║
║  - Same owner + (same normalizedPhone OR same email) = duplicate             ║
║  - No phone AND no email = never a duplicate                                 ║
║                                                                              ║
║  The pre-check only gives a clean 409. The partial unique indexes on         ║
║  (ownerId, normalizedPhone) and (ownerId, email) are what actually holds     ║
║  under concurrent writes; DuplicateKeyError is reported as 409 too.          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import uuid
from typing import Optional, Dict, Any, List

from pydantic import ValidationError as SchemaError
from pymongo.errors import DuplicateKeyError

from config import (
    db,
    now_iso,
    to_utc,
    normalize_phone,
    normalize_email,
    search_filter,
    fetch_page,
)
from models import LeadCreate, LeadImportRow, LeadUpdate, VALID_LEAD_STATUSES, VALID_LEAD_TYPES
from services.errors import Conflict, NotFound, ValidationError

logger = logging.getLogger("lead_registry")

SEARCH_FIELDS = ["name", "company", "phone", "email", "city"]

DUPLICATE_MESSAGE = "Lead already exists for this phone/email"
DUPLICATE_UPDATE_MESSAGE = "Another lead already exists for this phone/email"
DUPLICATE_STORAGE_MESSAGE = "Duplicate lead already exists (phone/email)"


def validate_id(value, label: str = "lead") -> str:
    """Record ids are uuid4 strings"""
    try:
        uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {label} id")
    return str(value)


# ==================== DUPLICATE CHECK ====================

def duplicate_query(
    owner_id: str,
    normalized_phone: str = "",
    email: str = "",
    exclude_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Mongo filter for check_duplicate, None when there is nothing to compare"""
    clauses = []
    if normalized_phone:
        clauses.append({"normalizedPhone": normalized_phone})
    if email:
        clauses.append({"email": email})
    if not clauses:
        return None

    query = {"ownerId": owner_id, "$or": clauses}
    if exclude_id:
        query["id"] = {"$ne": exclude_id}
    return query


async def check_duplicate(
    owner_id: str,
    normalized_phone: str = "",
    email: str = "",
    exclude_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    First lead of the same owner sharing the phone or the email.

    Args:
        owner_id: scope of the uniqueness rule
        normalized_phone: output of normalize_phone ("" = no phone)
        email: output of normalize_email ("" = no email)
        exclude_id: the lead being updated, never matches itself

    Returns:
        the existing lead document, or None
    """
    query = duplicate_query(owner_id, normalized_phone, email, exclude_id)
    if query is None:
        return None
    return await db.leads.find_one(query, {"_id": 0})


# ==================== CREATE ====================

def build_lead_doc(owner_id: str, data: LeadCreate, default_source: str = "Manual") -> Dict[str, Any]:
    normalized_phone = normalize_phone(data.phone)
    now = now_iso()
    return {
        "id": str(uuid.uuid4()),
        "ownerId": owner_id,
        "leadType": data.lead_type,
        "name": data.name,
        "company": data.company,
        # Display form kept only if it carries digits
        "phone": data.phone if normalized_phone else "",
        "normalizedPhone": normalized_phone,
        "email": normalize_email(data.email),
        "city": data.city,
        "address": data.address,
        "description": data.description,
        "source": data.source or default_source,
        "status": data.status,
        "followUpDate": to_utc(data.follow_up_date),
        "followUpNotes": data.follow_up_notes or "",
        "lastVisitId": data.last_visit_id,
        "createdAt": now,
        "updatedAt": now,
    }


async def insert_lead(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Insert, turning a unique-index rejection into Conflict"""
    try:
        await db.leads.insert_one(doc)
    except DuplicateKeyError:
        logger.warning(f"Unique index rejected lead for owner {doc['ownerId'][:8]}... (concurrent create)")
        raise Conflict(DUPLICATE_STORAGE_MESSAGE)
    doc.pop("_id", None)
    return doc


async def create_lead(owner_id: str, data: LeadCreate) -> Dict[str, Any]:
    doc = build_lead_doc(owner_id, data)

    duplicate = await check_duplicate(owner_id, doc["normalizedPhone"], doc["email"])
    if duplicate:
        logger.info(f"Duplicate lead refused for owner {owner_id[:8]}... existing: {duplicate['id'][:8]}...")
        raise Conflict(DUPLICATE_MESSAGE)

    return await insert_lead(doc)


# ==================== READ / UPDATE / DELETE ====================

async def get_owned_lead(owner_id: str, lead_id: str) -> Dict[str, Any]:
    lead_id = validate_id(lead_id)
    lead = await db.leads.find_one({"id": lead_id, "ownerId": owner_id}, {"_id": 0})
    if not lead:
        raise NotFound("Lead not found")
    return lead


async def update_lead(owner_id: str, lead_id: str, data: LeadUpdate) -> Dict[str, Any]:
    """
    Partial update. If the phone or email changes, the duplicate check
    runs again with the lead itself excluded.
    """
    lead = await get_owned_lead(owner_id, lead_id)
    changes = data.to_doc()

    if "phone" in changes:
        normalized_phone = normalize_phone(changes["phone"])
    else:
        normalized_phone = lead.get("normalizedPhone", "")
    email = normalize_email(changes["email"]) if "email" in changes else lead.get("email", "")

    phone_changed = normalized_phone and normalized_phone != lead.get("normalizedPhone")
    email_changed = email and email != lead.get("email")
    if phone_changed or email_changed:
        duplicate = await check_duplicate(owner_id, normalized_phone, email, exclude_id=lead["id"])
        if duplicate:
            logger.info(f"Duplicate on update of {lead['id'][:8]}... clashes with {duplicate['id'][:8]}...")
            raise Conflict(DUPLICATE_UPDATE_MESSAGE)

    update = {}
    for key, value in changes.items():
        if key in ("phone", "email", "followUpDate"):
            continue
        # null on a non-nullable field means "leave as is"
        if value is None:
            continue
        update[key] = value

    if "phone" in changes:
        update["phone"] = changes["phone"] if normalized_phone else ""
        update["normalizedPhone"] = normalized_phone
    if "email" in changes:
        update["email"] = email
    if "followUpDate" in changes:
        update["followUpDate"] = to_utc(changes["followUpDate"])

    update["updatedAt"] = now_iso()

    try:
        await db.leads.update_one({"id": lead["id"], "ownerId": owner_id}, {"$set": update})
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_STORAGE_MESSAGE)

    return await db.leads.find_one({"id": lead["id"]}, {"_id": 0})


async def delete_lead(owner_id: str, lead_id: str) -> Dict[str, Any]:
    lead = await get_owned_lead(owner_id, lead_id)
    await db.leads.delete_one({"id": lead["id"], "ownerId": owner_id})
    return lead


def _enum_filter(query: dict, key: str, value: Optional[str], valid: List[str], label: str):
    if not value or value == "All":
        return
    if value not in valid:
        raise ValidationError(f"Invalid {label}")
    query[key] = value


async def list_leads(
    owner_id: str,
    status: Optional[str] = None,
    lead_type: Optional[str] = None,
    search: Optional[str] = None,
    page=1,
    limit=20
) -> Dict[str, Any]:
    """Owner's leads, newest first"""
    query = {"ownerId": owner_id}
    _enum_filter(query, "status", status, VALID_LEAD_STATUSES, "status")
    _enum_filter(query, "leadType", lead_type, VALID_LEAD_TYPES, "lead type")

    text = search_filter(search, SEARCH_FIELDS)
    if text:
        query.update(text)

    return await fetch_page(db.leads, query, [("createdAt", -1)], page, limit, default_limit=20)


# ==================== BULK IMPORT ====================

async def import_leads(owner_id: str, items: List[Any]) -> Dict[str, int]:
    """
    Rows are handled one at a time, in order, so each duplicate check
    sees the rows added before it.

    Every row lands in exactly one counter:
      added + skippedDuplicate + skippedInvalid == len(items)

    Storage errors other than duplicates abort the batch.
    """
    counts = {"added": 0, "skippedDuplicate": 0, "skippedInvalid": 0}

    for row in items:
        if not isinstance(row, dict) or not str(row.get("name") or "").strip():
            counts["skippedInvalid"] += 1
            continue

        try:
            data = LeadImportRow.model_validate(row)
        except SchemaError:
            counts["skippedInvalid"] += 1
            continue

        doc = build_lead_doc(owner_id, data, default_source="Import")

        if await check_duplicate(owner_id, doc["normalizedPhone"], doc["email"]):
            counts["skippedDuplicate"] += 1
            continue

        try:
            await db.leads.insert_one(doc)
        except DuplicateKeyError:
            counts["skippedDuplicate"] += 1
            continue

        counts["added"] += 1

    logger.info(
        f"Import for owner {owner_id[:8]}...: rows={len(items)} added={counts['added']} "
        f"duplicates={counts['skippedDuplicate']} invalid={counts['skippedInvalid']}"
    )
    return counts


# ==================== ADMIN ====================

async def admin_list_leads(
    status: Optional[str] = None,
    lead_type: Optional[str] = None,
    owner_id: Optional[str] = None,
    search: Optional[str] = None,
    page=1,
    limit=20
) -> Dict[str, Any]:
    """All owners. Search also matches the digits of a phone query."""
    query = {}
    _enum_filter(query, "status", status, VALID_LEAD_STATUSES, "status")
    _enum_filter(query, "leadType", lead_type, VALID_LEAD_TYPES, "lead type")
    if owner_id:
        query["ownerId"] = owner_id

    text = search_filter(search, ["name", "company", "city", "email"])
    if text:
        digits = normalize_phone(search)
        if digits:
            text["$or"].append({"normalizedPhone": {"$regex": digits}})
        query.update(text)

    result = await fetch_page(db.leads, query, [("createdAt", -1)], page, limit, default_limit=20)
    await attach_owners(result["items"])
    return result


async def attach_owners(leads: List[Dict[str, Any]]):
    """Add an owner {id, name, email, role} summary to each lead"""
    owner_ids = list({l["ownerId"] for l in leads if l.get("ownerId")})
    if not owner_ids:
        return
    users = await db.users.find(
        {"id": {"$in": owner_ids}},
        {"_id": 0, "id": 1, "name": 1, "email": 1, "role": 1}
    ).to_list(len(owner_ids))
    by_id = {u["id"]: u for u in users}
    for lead in leads:
        lead["owner"] = by_id.get(lead.get("ownerId"))


async def admin_get_lead(lead_id: str) -> Dict[str, Any]:
    lead_id = validate_id(lead_id)
    lead = await db.leads.find_one({"id": lead_id}, {"_id": 0})
    if not lead:
        raise NotFound("Lead not found")
    await attach_owners([lead])
    return lead


async def admin_delete_lead(lead_id: str) -> Dict[str, Any]:
    lead = await admin_get_lead(lead_id)
    await db.leads.delete_one({"id": lead["id"]})
    return lead


async def assign_lead(lead_id: str, new_owner_id: str) -> Dict[str, Any]:
    """
    Move a lead to another sales executive.
    The new owner's own leads are checked first: uniqueness is per owner.
    """
    lead = await admin_get_lead(lead_id)

    owner = await db.users.find_one({"id": new_owner_id}, {"_id": 0, "password": 0})
    if not owner:
        raise NotFound("User not found")
    if lead["ownerId"] == new_owner_id:
        return lead

    duplicate = await check_duplicate(
        new_owner_id, lead.get("normalizedPhone", ""), lead.get("email", ""), exclude_id=lead["id"]
    )
    if duplicate:
        raise Conflict("Target user already has a lead with this phone/email")

    try:
        await db.leads.update_one(
            {"id": lead["id"]},
            {"$set": {"ownerId": new_owner_id, "updatedAt": now_iso()}}
        )
    except DuplicateKeyError:
        raise Conflict(DUPLICATE_STORAGE_MESSAGE)

    logger.info(f"Lead {lead['id'][:8]}... reassigned {lead['ownerId'][:8]}... -> {new_owner_id[:8]}...")
    return await admin_get_lead(lead["id"])
