"""
OGCS CRM - Activity journal

One entry per write a user makes. Lead and visit references are stored as
their own fields (leadId, visitId) so an admin can pull the full history
of a lead, promotions from visits included.
"""

import logging
import uuid
from enum import Enum
from typing import Optional, Dict, Any

from config import db, now_iso, fetch_page
from services.errors import ValidationError

logger = logging.getLogger("activity")


class ActivityAction(str, Enum):
    LOGIN = "login"
    CREATE = "create"
    IMPORT = "import"
    DELETE = "delete"
    ASSIGN = "assign"
    PROMOTE = "promote"
    QUOTE_STATUS = "quote_status"
    CREATE_USER = "create_user"
    ACTIVATE_USER = "activate_user"
    DEACTIVATE_USER = "deactivate_user"


class EntityType(str, Enum):
    USER = "user"
    LEAD = "lead"
    VISIT = "visit"
    QUOTE = "quote"


VALID_ACTIONS = [a.value for a in ActivityAction]
VALID_ENTITY_TYPES = [e.value for e in EntityType]


async def log_activity(
    user: dict,
    action: ActivityAction,
    entity_type: EntityType,
    entity_id: str = None,
    entity_name: str = None,
    details: dict = None,
    visit_id: str = None,
    ip_address: str = None
) -> Dict[str, Any]:
    """
    Record one entry. A lead entry carries leadId, a promotion also
    carries the visitId it came from.
    """
    action = ActivityAction(action)
    entity_type = EntityType(entity_type)

    entry = {
        "id": str(uuid.uuid4()),
        "userId": user.get("id"),
        "userName": user.get("name"),
        "userRole": user.get("role"),
        "action": action.value,
        "entityType": entity_type.value,
        "entityId": entity_id,
        "entityName": entity_name,
        "leadId": entity_id if entity_type == EntityType.LEAD else None,
        "visitId": entity_id if entity_type == EntityType.VISIT else visit_id,
        "details": details or {},
        "ipAddress": ip_address,
        "createdAt": now_iso()
    }

    await db.activity_logs.insert_one(entry)
    entry.pop("_id", None)
    logger.debug(f"{entry['action']} {entry['entityType']} by {str(entry['userId'])[:8]}...")
    return entry


async def get_activity_logs(
    user_id: Optional[str] = None,
    entity_type: Optional[str] = None,
    action: Optional[str] = None,
    lead_id: Optional[str] = None,
    visit_id: Optional[str] = None,
    page=1,
    limit=50
) -> Dict[str, Any]:
    """Newest first: {logs, page, pages, total, limit}"""
    query = {}
    if user_id:
        query["userId"] = user_id
    if entity_type:
        if entity_type not in VALID_ENTITY_TYPES:
            raise ValidationError("Invalid entityType")
        query["entityType"] = entity_type
    if action:
        if action not in VALID_ACTIONS:
            raise ValidationError("Invalid action")
        query["action"] = action
    if lead_id:
        query["leadId"] = lead_id
    if visit_id:
        query["visitId"] = visit_id

    result = await fetch_page(db.activity_logs, query, [("createdAt", -1)], page, limit, default_limit=50)
    return {"logs": result.pop("items"), **result}
