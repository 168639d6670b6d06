"""
OGCS CRM - Migration: backfill normalizedPhone / email on existing leads.
Reports collisions that would break the per-owner unique indexes.
Run: cd backend && python3 scripts/migrate_normalize_phones.py
"""

import asyncio
import sys
from collections import defaultdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config import client, db, normalize_phone, normalize_email


def find_collisions(leads):
    """(ownerId, key, value) seen on more than one lead -> list of lead ids"""
    seen = defaultdict(list)
    for lead in leads:
        if lead.get("normalizedPhone"):
            seen[(lead["ownerId"], "phone", lead["normalizedPhone"])].append(lead["id"])
        if lead.get("email"):
            seen[(lead["ownerId"], "email", lead["email"])].append(lead["id"])
    return {key: ids for key, ids in seen.items() if len(ids) > 1}


async def migrate():
    total = await db.leads.count_documents({})
    print(f"Total leads in DB: {total}")

    modified = 0
    already_ok = 0
    normalized_leads = []

    cursor = db.leads.find({}, {"_id": 0, "id": 1, "ownerId": 1, "phone": 1,
                                "normalizedPhone": 1, "email": 1})

    async for lead in cursor:
        normalized_phone = normalize_phone(lead.get("phone"))
        email = normalize_email(lead.get("email"))

        update = {}
        if lead.get("normalizedPhone", None) != normalized_phone:
            update["normalizedPhone"] = normalized_phone
        if not normalized_phone and lead.get("phone"):
            update["phone"] = ""
        if lead.get("email", None) != email:
            update["email"] = email

        if update:
            await db.leads.update_one({"id": lead["id"]}, {"$set": update})
            modified += 1
        else:
            already_ok += 1

        normalized_leads.append({
            "id": lead["id"],
            "ownerId": lead.get("ownerId"),
            "normalizedPhone": normalized_phone,
            "email": email,
        })

    collisions = find_collisions(normalized_leads)

    print("\n════════════════════════════════════")
    print("  MIGRATION REPORT")
    print("════════════════════════════════════")
    print(f"  Total leads:      {total}")
    print(f"  Leads modified:   {modified}")
    print(f"  Already OK:       {already_ok}")
    print(f"  Collisions:       {len(collisions)}")
    print("════════════════════════════════════")

    if collisions:
        print("\nDuplicates to merge before creating the unique indexes:")
        for (owner_id, key, value), ids in list(collisions.items())[:20]:
            print(f"  owner={owner_id[:8]}... {key}={value} leads={[i[:8] for i in ids]}")

    return {
        "total": total,
        "modified": modified,
        "already_ok": already_ok,
        "collisions": len(collisions),
    }


if __name__ == "__main__":
    try:
        asyncio.run(migrate())
    finally:
        client.close()
