"""
OGCS CRM - Routes Quotes
Quotations / invoices: sales executives create, admins approve or reject.
"""

from fastapi import APIRouter, Depends
from typing import Optional

from models import QuoteCreate, QuoteStatusUpdate
from config import serialize_doc
from routes.auth import get_current_user, require_admin
from services.activity_logger import log_activity, ActivityAction, EntityType
from services import quotes

router = APIRouter(prefix="/quotes", tags=["Quotes"])


@router.post("", status_code=201)
async def create_quote(data: QuoteCreate, user: dict = Depends(get_current_user)):
    quote = await quotes.create_quote(user["id"], data)
    return {"success": True, "data": serialize_doc(quote)}


@router.get("/my")
async def list_my_quotes(type: Optional[str] = None, user: dict = Depends(get_current_user)):
    items = await quotes.list_my_quotes(user["id"], type)
    return {"success": True, "data": serialize_doc(items)}


@router.get("")
async def list_all_quotes(
    status: Optional[str] = None,
    type: Optional[str] = None,
    user: dict = Depends(require_admin)
):
    items = await quotes.list_all_quotes(status, type)
    return {"success": True, "data": serialize_doc(items)}


@router.patch("/{quote_id}/status")
async def update_quote_status(quote_id: str, data: QuoteStatusUpdate, user: dict = Depends(require_admin)):
    quote = await quotes.update_quote_status(user["id"], quote_id, data.status)

    await log_activity(
        user=user,
        action=ActivityAction.QUOTE_STATUS,
        entity_type=EntityType.QUOTE,
        entity_id=quote["id"],
        entity_name=quote.get("customerName"),
        details={"status": data.status, "type": quote.get("type"), "totalAmount": quote.get("totalAmount")}
    )
    return {"success": True, "data": serialize_doc(quote)}
