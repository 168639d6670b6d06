"""
OGCS CRM - Routes Admin
Dashboard overview, every owner's leads, daily reports, activity journal.
"""

from fastapi import APIRouter, Depends
from typing import Optional

from models import LeadAssign
from config import serialize_doc
from routes.auth import require_admin
from services.activity_logger import log_activity, get_activity_logs, ActivityAction, EntityType
from services import lead_registry, daily_reports
from services.overview import admin_overview

router = APIRouter(prefix="/admin", tags=["Admin"])


# ==================== OVERVIEW ====================

@router.get("/overview")
async def get_overview(user: dict = Depends(require_admin)):
    return await admin_overview()


# ==================== LEADS ====================

@router.get("/leads")
async def list_leads(
    status: Optional[str] = None,
    leadType: Optional[str] = None,
    ownerId: Optional[str] = None,
    search: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "20",
    user: dict = Depends(require_admin)
):
    result = await lead_registry.admin_list_leads(
        status=status, lead_type=leadType, owner_id=ownerId, search=search, page=page, limit=limit
    )
    return {"success": True, **serialize_doc(result)}


@router.get("/leads/{lead_id}")
async def get_lead(lead_id: str, user: dict = Depends(require_admin)):
    lead = await lead_registry.admin_get_lead(lead_id)
    return {"success": True, "lead": serialize_doc(lead)}


@router.put("/leads/{lead_id}/assign")
async def assign_lead(lead_id: str, data: LeadAssign, user: dict = Depends(require_admin)):
    """Transfer to another owner, refused if that owner already has the contact."""
    lead = await lead_registry.assign_lead(lead_id, data.owner_id)

    await log_activity(
        user=user,
        action=ActivityAction.ASSIGN,
        entity_type=EntityType.LEAD,
        entity_id=lead["id"],
        entity_name=lead.get("name"),
        details={"ownerId": data.owner_id}
    )
    return {"success": True, "lead": serialize_doc(lead)}


@router.delete("/leads/{lead_id}")
async def delete_lead(lead_id: str, user: dict = Depends(require_admin)):
    lead = await lead_registry.admin_delete_lead(lead_id)

    await log_activity(
        user=user,
        action=ActivityAction.DELETE,
        entity_type=EntityType.LEAD,
        entity_id=lead["id"],
        entity_name=lead.get("name"),
        details={"ownerId": lead.get("ownerId")}
    )
    return {"success": True}


# ==================== DAILY REPORTS ====================

@router.get("/daily-reports")
async def list_daily_reports(
    q: Optional[str] = None,
    date: Optional[str] = None,
    userId: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "20",
    user: dict = Depends(require_admin)
):
    result = await daily_reports.list_reports(search=q, date=date, user_id=userId, page=page, limit=limit)
    return {"success": True, **serialize_doc(result)}


# ==================== ACTIVITY LOG ====================

@router.get("/activity-logs")
async def list_activity_logs(
    userId: Optional[str] = None,
    entityType: Optional[str] = None,
    action: Optional[str] = None,
    leadId: Optional[str] = None,
    visitId: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "50",
    user: dict = Depends(require_admin)
):
    return await get_activity_logs(
        user_id=userId, entity_type=entityType, action=action,
        lead_id=leadId, visit_id=visitId, page=page, limit=limit
    )


@router.get("/leads/{lead_id}/activity")
async def get_lead_activity(lead_id: str, page: Optional[str] = "1", user: dict = Depends(require_admin)):
    """Everything recorded against one lead, promotions included."""
    lead = await lead_registry.admin_get_lead(lead_id)
    return await get_activity_logs(lead_id=lead["id"], page=page)
