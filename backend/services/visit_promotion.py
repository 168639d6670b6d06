"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  VISIT -> LEAD PROMOTION                                                     ║
║                                                                              ║
║  A person met on a visit becomes a lead of the visit's user, reusing the     ║
║  lead dedup rule:                                                            ║
║  1. already linked to an existing lead -> returned as is, no writes          ║
║  2. same phone/email already a lead    -> reused, lastVisitId updated        ║
║  3. otherwise                          -> new lead, source "Visit"           ║
║  then metPeople[i].leadId is written on the visit.                           ║
║                                                                              ║
║  The lead write and the visit write are not atomic. Running the promotion    ║
║  again repairs a half-done link: step 2 finds the lead created the first     ║
║  time.                                                                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
import re
from typing import Dict, Any, Optional, Tuple

from pymongo.errors import DuplicateKeyError

from config import db, now_iso, normalize_phone, normalize_email
from models import LeadCreate, LeadStatus
from services.errors import ValidationError
from services.lead_registry import build_lead_doc, check_duplicate, validate_id
from services.visits import get_owned_visit

logger = logging.getLogger("visit_promotion")

ALREADY_LINKED = "Already linked"
LINKED = "Lead linked/created successfully"

INDEX_PATTERN = re.compile(r"^[0-9]+$")


def parse_met_index(raw) -> int:
    """idx/metIndex from the body: a JSON integer or a string of ASCII digits"""
    if isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
        return raw
    if isinstance(raw, str) and INDEX_PATTERN.match(raw.strip()):
        return int(raw.strip())
    raise ValidationError("idx/metIndex is required and must be a valid number")


async def _reuse(lead: Dict[str, Any], visit_id: str) -> Dict[str, Any]:
    await db.leads.update_one(
        {"id": lead["id"]},
        {"$set": {"lastVisitId": visit_id, "updatedAt": now_iso()}}
    )
    return await db.leads.find_one({"id": lead["id"]}, {"_id": 0})


async def _find_or_create_lead(user_id: str, visit: Dict[str, Any], person: Dict[str, Any]) -> Tuple[Dict[str, Any], bool]:
    normalized_phone = normalize_phone(person.get("phone"))
    email = normalize_email(person.get("email"))

    existing = await check_duplicate(user_id, normalized_phone, email)
    if existing:
        logger.info(f"Met person matches lead {existing['id'][:8]}..., reusing it")
        return await _reuse(existing, visit["id"]), False

    data = LeadCreate(
        lead_type=person.get("leadType") or "Buyer",
        name=person.get("name") or "",
        company=person.get("company") or "",
        phone=person.get("phone") or "",
        email=email,
        city=visit.get("city") or "",
        address=visit.get("address") or "",
        description=person.get("conversationNotes") or "",
        source="Visit",
        status=LeadStatus.NEW,
        last_visit_id=visit["id"],
    )
    doc = build_lead_doc(user_id, data, default_source="Visit")

    try:
        await db.leads.insert_one(doc)
    except DuplicateKeyError:
        # Lost a race with another write of the same contact
        logger.warning(f"Unique index hit while promoting on visit {visit['id'][:8]}..., reusing winner")
        existing = await check_duplicate(user_id, normalized_phone, email)
        if not existing:
            raise
        return await _reuse(existing, visit["id"]), False

    doc.pop("_id", None)
    return doc, True


async def promote(user_id: str, visit_id: str, raw_index) -> Dict[str, Optional[Any]]:
    """
    Link visit.metPeople[index] to a lead of user_id.

    Returns:
        {"lead": lead document, "message": ALREADY_LINKED | LINKED,
         "created": True when a new lead was inserted}
    """
    try:
        validate_id(visit_id, "visit")
    except ValidationError:
        raise ValidationError("Invalid visitId")
    index = parse_met_index(raw_index)

    visit = await get_owned_visit(user_id, visit_id)
    met_people = visit.get("metPeople") or []
    if index >= len(met_people):
        raise ValidationError("Invalid met person index")
    person = met_people[index]

    if person.get("leadId"):
        linked = await db.leads.find_one({"id": person["leadId"], "ownerId": user_id}, {"_id": 0})
        if linked:
            return {"lead": linked, "message": ALREADY_LINKED, "created": False}
        logger.info(f"Linked lead {person['leadId'][:8]}... is gone, promoting again")

    lead, created = await _find_or_create_lead(user_id, visit, person)

    await db.visits.update_one(
        {"id": visit["id"], "userId": user_id},
        {"$set": {f"metPeople.{index}.leadId": lead["id"], "updatedAt": now_iso()}}
    )

    logger.info(f"Met person #{index} of visit {visit['id'][:8]}... -> lead {lead['id'][:8]}...")
    return {"lead": lead, "message": LINKED, "created": created}
