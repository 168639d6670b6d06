"""
OGCS CRM - Routes Leads
A sales executive's own leads: CRUD, bulk import, follow-ups.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from models import LeadCreate, LeadUpdate, LeadImport, FollowUpUpdate
from config import serialize_doc
from routes.auth import get_current_user
from services.activity_logger import log_activity, ActivityAction, EntityType
from services import lead_registry, followups

router = APIRouter(prefix="/leads/my", tags=["Leads"])


# ==================== FOLLOW-UPS ====================
# Declared before /{lead_id} so "followups" is never read as an id

@router.get("/followups")
async def list_followups(
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
    bucket: str = "all",
    q: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "50",
    user: dict = Depends(get_current_user)
):
    """
    Leads with a follow-up date, soonest first.
    bucket: today | upcoming | overdue | all (ignored when from/to given)
    """
    result = await followups.list_followups(
        user["id"], date_from=from_, date_to=to, bucket=bucket, search=q, page=page, limit=limit
    )
    return {"success": True, **serialize_doc(result)}


@router.get("/followups/summary")
async def followup_summary(user: dict = Depends(get_current_user)):
    counts = await followups.followup_summary(user["id"])
    return {"success": True, **counts}


# ==================== CRUD ====================

@router.get("")
async def list_my_leads(
    status: Optional[str] = None,
    leadType: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "20",
    user: dict = Depends(get_current_user)
):
    result = await lead_registry.list_leads(
        user["id"], status=status, lead_type=leadType, search=search, page=page, limit=limit
    )
    return {"success": True, **serialize_doc(result)}


@router.post("", status_code=201)
async def create_my_lead(data: LeadCreate, user: dict = Depends(get_current_user)):
    lead = await lead_registry.create_lead(user["id"], data)

    await log_activity(
        user=user,
        action=ActivityAction.CREATE,
        entity_type=EntityType.LEAD,
        entity_id=lead["id"],
        entity_name=lead["name"]
    )
    return {"success": True, "lead": serialize_doc(lead)}


@router.post("/import")
async def import_my_leads(data: LeadImport, user: dict = Depends(get_current_user)):
    """Body: { items: [ {name, phone, email, ...}, ... ] }"""
    counts = await lead_registry.import_leads(user["id"], data.items)

    await log_activity(
        user=user,
        action=ActivityAction.IMPORT,
        entity_type=EntityType.LEAD,
        details={"rows": len(data.items), **counts}
    )
    return {"success": True, **counts}


@router.put("/{lead_id}")
async def update_my_lead(lead_id: str, data: LeadUpdate, user: dict = Depends(get_current_user)):
    lead = await lead_registry.update_lead(user["id"], lead_id, data)
    return {"success": True, "lead": serialize_doc(lead)}


@router.delete("/{lead_id}")
async def delete_my_lead(lead_id: str, user: dict = Depends(get_current_user)):
    lead = await lead_registry.delete_lead(user["id"], lead_id)

    await log_activity(
        user=user,
        action=ActivityAction.DELETE,
        entity_type=EntityType.LEAD,
        entity_id=lead["id"],
        entity_name=lead.get("name")
    )
    return {"success": True}


@router.patch("/{lead_id}/followup")
async def update_followup(lead_id: str, data: FollowUpUpdate, user: dict = Depends(get_current_user)):
    lead = await followups.update_followup(user["id"], lead_id, data)
    return {"success": True, "message": "Follow-up updated", "lead": serialize_doc(lead)}
