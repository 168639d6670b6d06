"""
OGCS CRM - Test fixtures
MongoDB is replaced by mongomock-motor before config is imported, so the
module-level `db` handle in config points at an in-memory database.
Run: cd backend && pytest tests -v
"""

import uuid
from datetime import datetime, timezone, timedelta

import httpx
import motor.motor_asyncio
import pytest
from mongomock_motor import AsyncMongoMockClient

motor.motor_asyncio.AsyncIOMotorClient = AsyncMongoMockClient

from config import db, hash_password, generate_token, now_iso  # noqa: E402
from server import app, create_indexes  # noqa: E402

PASSWORD = "OgcsTest2026!"

COLLECTIONS = ["users", "sessions", "leads", "visits", "quotes", "daily_reports", "activity_logs"]


@pytest.fixture(autouse=True)
async def clean_db():
    for name in COLLECTIONS:
        await db[name].delete_many({})
    await create_indexes()
    yield


async def make_user(name: str, email: str, role: str = "sales", active: bool = True) -> dict:
    """Insert a user and an open session; returns the user with its auth headers"""
    user = {
        "id": str(uuid.uuid4()),
        "name": name,
        "email": email,
        "password": hash_password(PASSWORD),
        "phone": "",
        "role": role,
        "isActive": active,
        "createdAt": now_iso(),
    }
    await db.users.insert_one(user)
    user.pop("_id", None)

    token = generate_token()
    await db.sessions.insert_one({
        "token": token,
        "userId": user["id"],
        "createdAt": now_iso(),
        "expiresAt": (datetime.now(timezone.utc) + timedelta(days=1)).isoformat(),
    })
    user["headers"] = {"Authorization": f"Bearer {token}"}
    return user


@pytest.fixture
async def sales_user():
    return await make_user("Ravi Sales", "ravi@ogcs.test")


@pytest.fixture
async def other_sales_user():
    return await make_user("Meena Sales", "meena@ogcs.test")


@pytest.fixture
async def admin_user():
    return await make_user("Office Admin", "admin@ogcs.test", role="admin")


@pytest.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
