"""
Configuration and shared helpers (OGCS CRM)
"""

import os
import re
import hashlib
import secrets
from math import ceil
from datetime import datetime, timezone
from typing import Optional, Tuple

import pytz
from motor.motor_asyncio import AsyncIOMotorClient
from dotenv import load_dotenv
from pathlib import Path

# Load .env
ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')

# MongoDB
MONGO_URL = os.environ.get('MONGO_URL', 'mongodb://localhost:27017')
DB_NAME = os.environ.get('DB_NAME', 'ogcs_crm')

client = AsyncIOMotorClient(MONGO_URL)
db = client[DB_NAME]

# Business day boundaries (follow-up buckets, admin week stats)
APP_TIMEZONE = os.environ.get('APP_TIMEZONE', 'Asia/Kolkata')
LOCAL_TZ = pytz.timezone(APP_TIMEZONE)

SESSION_DAYS = int(os.environ.get('SESSION_DAYS', '7'))
CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

PHONE_DIGITS = 10
MAX_PAGE_SIZE = 100


# ==================== HELPERS ====================

def hash_password(password: str) -> str:
    """Hash a password with SHA256"""
    return hashlib.sha256(password.encode()).hexdigest()


def generate_token() -> str:
    """Secure session token"""
    return secrets.token_urlsafe(32)


def now_iso() -> str:
    """Current UTC time as ISO string"""
    return datetime.now(timezone.utc).isoformat()


def utc_now() -> datetime:
    """Current UTC time, naive, as stored by MongoDB"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to naive UTC for storage.
    Naive input is read as business-local time.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = LOCAL_TZ.localize(value)
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def isoformat(value) -> Optional[str]:
    """Serialize a stored (naive UTC) datetime; strings pass through."""
    if value is None or isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


# ==================== CONTACT NORMALIZATION ====================

def normalize_phone(phone) -> str:
    """
    ASCII digits only, last 10 kept.
    "+91 98765-43210" -> "9876543210", "" when nothing remains.
    """
    digits = re.sub(r"[^0-9]", "", str(phone or ""))
    return digits[-PHONE_DIGITS:]


def normalize_email(email) -> str:
    return str(email or "").strip().lower()


def escape_search(term: str) -> str:
    """Regex-escape a free-text search term for a $regex filter"""
    return re.escape(term.strip())


def search_filter(term: Optional[str], fields) -> Optional[dict]:
    """Case-insensitive substring match across fields, None if term empty"""
    if not term or not term.strip():
        return None
    pattern = escape_search(term)
    return {"$or": [{f: {"$regex": pattern, "$options": "i"}} for f in fields]}


# ==================== PAGINATION ====================

def paginate(page, limit, default_limit: int = 20) -> Tuple[int, int, int]:
    """
    Clamp page/limit: page >= 1, 1 <= limit <= 100.
    Returns (page, limit, skip).
    """
    try:
        p = int(page)
    except (TypeError, ValueError):
        p = 1
    try:
        lim = int(limit)
    except (TypeError, ValueError):
        lim = default_limit
    if not lim:
        lim = default_limit
    p = max(1, p)
    lim = min(MAX_PAGE_SIZE, max(1, lim))
    return p, lim, (p - 1) * lim


def page_count(total: int, limit: int) -> int:
    return max(1, ceil(total / limit))


def serialize_doc(doc):
    """Stored document -> JSON-ready dict (dates as ISO with UTC offset)"""
    if doc is None:
        return None
    if isinstance(doc, dict):
        return {k: serialize_doc(v) for k, v in doc.items() if k != "_id"}
    if isinstance(doc, list):
        return [serialize_doc(v) for v in doc]
    if isinstance(doc, datetime):
        return isoformat(doc)
    return doc


async def fetch_page(collection, query: dict, sort, page, limit, default_limit: int = 20) -> dict:
    """One page of documents plus {page, pages, total, limit}"""
    p, lim, skip = paginate(page, limit, default_limit)
    items = await collection.find(query, {"_id": 0}).sort(sort).skip(skip).limit(lim).to_list(lim)
    total = await collection.count_documents(query)
    return {"items": items, "page": p, "pages": page_count(total, lim), "total": total, "limit": lim}
