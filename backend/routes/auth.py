"""
OGCS CRM - Routes Auth
Login / Logout / Session / User management (admin).
"""

from fastapi import APIRouter, HTTPException, Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import datetime, timezone, timedelta
import uuid

from models.auth import UserLogin, UserCreate, UserActiveUpdate
from config import db, hash_password, generate_token, now_iso, SESSION_DAYS
from services.activity_logger import log_activity, ActivityAction, EntityType

router = APIRouter(prefix="/auth", tags=["Auth"])
security = HTTPBearer(auto_error=False)


# ==================== HELPERS ====================

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """Resolve the logged-in user from the bearer token."""
    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = credentials.credentials
    session = await db.sessions.find_one({
        "token": token,
        "expiresAt": {"$gt": now_iso()}
    })

    if not session:
        raise HTTPException(status_code=401, detail="Session expired")

    user = await db.users.find_one(
        {"id": session["userId"]},
        {"_id": 0, "password": 0}
    )

    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    if not user.get("isActive", True):
        raise HTTPException(status_code=403, detail="Account disabled")

    return user


async def require_admin(user: dict = Depends(get_current_user)):
    """Admin access only."""
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


# ==================== LOGIN / LOGOUT ====================

@router.post("/login")
async def login(data: UserLogin, request: Request):
    user = await db.users.find_one(
        {"email": data.email.lower().strip()},
        {"_id": 0}
    )

    if not user or user.get("password") != hash_password(data.password):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.get("isActive", True):
        raise HTTPException(status_code=403, detail="Account disabled")

    token = generate_token()
    expires_at = (datetime.now(timezone.utc) + timedelta(days=SESSION_DAYS)).isoformat()

    await db.sessions.insert_one({
        "token": token,
        "userId": user["id"],
        "createdAt": now_iso(),
        "expiresAt": expires_at
    })

    await log_activity(
        user=user,
        action=ActivityAction.LOGIN,
        entity_type=EntityType.USER,
        entity_id=user["id"],
        ip_address=request.client.host if request.client else None
    )

    return {
        "token": token,
        "user": {
            "id": user["id"],
            "name": user.get("name", ""),
            "email": user["email"],
            "role": user.get("role", "sales"),
            "phone": user.get("phone", ""),
        }
    }


@router.post("/logout")
async def logout(
    user: dict = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials = Depends(security)
):
    if credentials:
        await db.sessions.delete_one({"token": credentials.credentials})
    return {"success": True}


@router.get("/me")
async def get_me(user: dict = Depends(get_current_user)):
    return user


# ==================== USERS (admin) ====================

@router.get("/users")
async def list_users(role: str = None, user: dict = Depends(require_admin)):
    query = {"role": role} if role else {}
    users = await db.users.find(query, {"_id": 0, "password": 0}).sort("name", 1).to_list(500)
    return {"users": users}


@router.post("/users", status_code=201)
async def create_user(data: UserCreate, user: dict = Depends(require_admin)):
    """Create a sales executive (or another admin)."""
    existing = await db.users.find_one({"email": data.email})
    if existing:
        raise HTTPException(status_code=400, detail="User already exists")

    new_user = {
        "id": str(uuid.uuid4()),
        "name": data.name,
        "email": data.email,
        "password": hash_password(data.password),
        "phone": data.phone,
        "role": data.role,
        "isActive": True,
        "createdAt": now_iso(),
        "createdBy": user.get("id")
    }

    await db.users.insert_one(new_user)

    await log_activity(
        user=user,
        action=ActivityAction.CREATE_USER,
        entity_type=EntityType.USER,
        entity_id=new_user["id"],
        entity_name=new_user["email"],
        details={"role": data.role}
    )

    new_user.pop("password", None)
    new_user.pop("_id", None)
    return {"success": True, "user": new_user}


@router.patch("/users/{user_id}/active")
async def set_user_active(user_id: str, data: UserActiveUpdate, user: dict = Depends(require_admin)):
    """Activate / deactivate an account. Deactivation ends its sessions."""
    target = await db.users.find_one({"id": user_id})
    if not target:
        raise HTTPException(status_code=404, detail="User not found")

    if user_id == user.get("id") and not data.is_active:
        raise HTTPException(status_code=400, detail="Cannot deactivate your own account")

    await db.users.update_one(
        {"id": user_id},
        {"$set": {"isActive": data.is_active, "updatedAt": now_iso()}}
    )
    if not data.is_active:
        await db.sessions.delete_many({"userId": user_id})

    await log_activity(
        user=user,
        action=ActivityAction.ACTIVATE_USER if data.is_active else ActivityAction.DEACTIVATE_USER,
        entity_type=EntityType.USER,
        entity_id=user_id,
        entity_name=target.get("email")
    )

    updated = await db.users.find_one({"id": user_id}, {"_id": 0, "password": 0})
    return {"success": True, "user": updated}
