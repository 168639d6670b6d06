"""
OGCS CRM - Quotations & invoices

Sales executives raise them, admins approve or reject.
"""

import logging
import uuid
from typing import Optional, Dict, Any, List

from config import db, now_iso
from models import QuoteCreate, VALID_QUOTE_TYPES, VALID_QUOTE_STATUSES
from models.quote import to_number
from services.errors import ValidationError, NotFound
from services.lead_registry import validate_id

logger = logging.getLogger("quotes")

DECISIONS = ["approved", "rejected"]


def clean_items(items) -> List[Dict[str, Any]]:
    """lineTotal = quantity * unitPrice; rows without description or qty <= 0 dropped"""
    cleaned = []
    for item in items:
        quantity = to_number(item.quantity)
        unit_price = to_number(item.unit_price)
        if not item.description or quantity <= 0:
            continue
        cleaned.append({
            "description": item.description,
            "quantity": quantity,
            "unitPrice": unit_price,
            "lineTotal": quantity * unit_price,
        })
    return cleaned


async def create_quote(user_id: str, data: QuoteCreate) -> Dict[str, Any]:
    if data.type not in VALID_QUOTE_TYPES:
        raise ValidationError("Type must be 'quotation' or 'invoice'.")
    if not data.customer_name:
        raise ValidationError("Customer name is required.")
    if not data.items:
        raise ValidationError("At least one line item is required.")

    items = clean_items(data.items)
    if not items:
        raise ValidationError("All items invalid. Fill description, qty, price.")

    tax_percent = to_number(data.tax_percent)
    subtotal = sum(it["lineTotal"] for it in items)
    now = now_iso()

    doc = {
        "id": str(uuid.uuid4()),
        "type": data.type,
        "customerName": data.customer_name,
        "companyName": data.company_name,
        "customerEmail": data.customer_email,
        "customerPhone": data.customer_phone,
        "projectName": data.project_name,
        "items": items,
        "taxPercent": tax_percent,
        "notes": data.notes,
        "subtotal": subtotal,
        "totalAmount": subtotal + (tax_percent / 100) * subtotal,
        "salesExecutive": user_id,
        "status": "pending",
        "approvedBy": None,
        "approvedAt": None,
        "createdAt": now,
        "updatedAt": now,
    }
    await db.quotes.insert_one(doc)
    doc.pop("_id", None)
    logger.info(f"{data.type} {doc['id'][:8]}... created by {user_id[:8]}... total={doc['totalAmount']}")
    return doc


def _type_status_filter(query: dict, quote_type: Optional[str], status: Optional[str] = None):
    if quote_type:
        if quote_type not in VALID_QUOTE_TYPES:
            raise ValidationError(f"Invalid type: {quote_type}")
        query["type"] = quote_type
    if status:
        if status not in VALID_QUOTE_STATUSES:
            raise ValidationError(f"Invalid status: {status}")
        query["status"] = status


async def list_my_quotes(user_id: str, quote_type: Optional[str] = None) -> List[Dict[str, Any]]:
    query = {"salesExecutive": user_id}
    _type_status_filter(query, quote_type)
    return await db.quotes.find(query, {"_id": 0}).sort("createdAt", -1).to_list(1000)


async def list_all_quotes(status: Optional[str] = None, quote_type: Optional[str] = None) -> List[Dict[str, Any]]:
    """Admin approval queue, with a {id, name, email} salesExecutive summary"""
    query = {}
    _type_status_filter(query, quote_type, status)
    quotes = await db.quotes.find(query, {"_id": 0}).sort("createdAt", -1).to_list(1000)

    user_ids = list({q["salesExecutive"] for q in quotes})
    users = await db.users.find(
        {"id": {"$in": user_ids}}, {"_id": 0, "id": 1, "name": 1, "email": 1}
    ).to_list(len(user_ids) or 1)
    by_id = {u["id"]: u for u in users}
    for quote in quotes:
        quote["salesExecutive"] = by_id.get(quote["salesExecutive"], {"id": quote["salesExecutive"]})
    return quotes


async def update_quote_status(admin_id: str, quote_id: str, status: str) -> Dict[str, Any]:
    if status not in DECISIONS:
        raise ValidationError("Status must be 'approved' or 'rejected'.")
    quote_id = validate_id(quote_id, "quote")

    quote = await db.quotes.find_one({"id": quote_id}, {"_id": 0})
    if not quote:
        raise NotFound("Quotation not found.")

    now = now_iso()
    update = {"status": status, "approvedBy": admin_id, "approvedAt": now, "updatedAt": now}
    await db.quotes.update_one({"id": quote_id}, {"$set": update})
    quote.update(update)

    logger.info(f"Quote {quote_id[:8]}... {status} by {admin_id[:8]}...")
    return quote
