"""
OGCS CRM - Routes Visits
Site visits of the logged-in sales executive, and met person -> lead promotion.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from models import VisitCreate, LocationUpdate, VisitCheckout, PromoteRequest
from config import serialize_doc
from routes.auth import get_current_user
from services.activity_logger import log_activity, ActivityAction, EntityType
from services import visits
from services.visit_promotion import promote, ALREADY_LINKED

router = APIRouter(prefix="/visits", tags=["Visits"])


@router.post("", status_code=201)
async def create_visit(data: VisitCreate, user: dict = Depends(get_current_user)):
    """Returns the visit document itself."""
    visit = await visits.create_visit(user["id"], data)
    return serialize_doc(visit)


@router.get("/my")
async def list_my_visits(
    date: Optional[str] = None,
    from_: Optional[str] = Query(None, alias="from"),
    to: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "20",
    user: dict = Depends(get_current_user)
):
    """
    date=YYYY-MM-DD is a UTC day; from/to override it.
    Linked met people carry a `lead` summary.
    """
    result = await visits.list_visits(
        user["id"], date=date, date_from=from_, date_to=to, page=page, limit=limit
    )
    return serialize_doc(result)


@router.get("/my/{visit_id}")
async def get_my_visit(visit_id: str, user: dict = Depends(get_current_user)):
    visit = await visits.get_visit(user["id"], visit_id)
    return serialize_doc(visit)


@router.patch("/my/{visit_id}/location")
async def update_visit_location(visit_id: str, data: LocationUpdate, user: dict = Depends(get_current_user)):
    result = await visits.update_location(user["id"], visit_id, data.location)
    return {"success": True, **result}


@router.patch("/my/{visit_id}/checkout")
async def checkout_visit(visit_id: str, data: VisitCheckout, user: dict = Depends(get_current_user)):
    visit = await visits.checkout(user["id"], visit_id, data.check_out_at)
    return {"success": True, "visit": serialize_doc(visit)}


@router.post("/{visit_id}/create-lead")
async def create_lead_from_met_person(visit_id: str, data: PromoteRequest, user: dict = Depends(get_current_user)):
    """Body: { idx } or { metIndex }. Returns { lead, message }."""
    result = await promote(user["id"], visit_id, data.raw_index)

    if result["message"] != ALREADY_LINKED:
        await log_activity(
            user=user,
            action=ActivityAction.PROMOTE,
            entity_type=EntityType.LEAD,
            entity_id=result["lead"]["id"],
            entity_name=result["lead"].get("name"),
            details={"created": result["created"]},
            visit_id=visit_id
        )
    return {"lead": serialize_doc(result["lead"]), "message": result["message"]}
