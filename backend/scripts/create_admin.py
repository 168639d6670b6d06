"""
OGCS CRM - Create (or reset) the admin account.
Credentials come from ADMIN_EMAIL / ADMIN_PASSWORD / ADMIN_NAME.
Run: cd backend && python3 scripts/create_admin.py
"""

import asyncio
import os
import sys
import uuid
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import client, db, hash_password, now_iso


async def create_admin(email: str, password: str, name: str = "Admin"):
    email = email.strip().lower()
    existing = await db.users.find_one({"email": email}, {"_id": 0})

    if existing:
        await db.users.update_one(
            {"email": email},
            {"$set": {
                "password": hash_password(password),
                "role": "admin",
                "isActive": True,
                "updatedAt": now_iso(),
            }}
        )
        print(f"Admin reset: {email}")
        return existing["id"]

    user_id = str(uuid.uuid4())
    await db.users.insert_one({
        "id": user_id,
        "name": name,
        "email": email,
        "password": hash_password(password),
        "phone": "",
        "role": "admin",
        "isActive": True,
        "createdAt": now_iso(),
    })
    print(f"Admin created: {email}")
    return user_id


if __name__ == "__main__":
    admin_email = os.environ.get("ADMIN_EMAIL")
    admin_password = os.environ.get("ADMIN_PASSWORD")
    if not admin_email or not admin_password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set")
        sys.exit(1)
    if len(admin_password) < 6:
        print("ADMIN_PASSWORD must be at least 6 characters")
        sys.exit(1)

    try:
        asyncio.run(create_admin(admin_email, admin_password, os.environ.get("ADMIN_NAME", "Admin")))
    finally:
        client.close()
