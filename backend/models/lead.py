"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OGCS CRM - Lead model                                                       ║
║                                                                              ║
║  RULES:                                                                      ║
║  1. A lead belongs to exactly one owner (ownerId)                            ║
║  2. Per owner: one lead per normalized phone, one lead per email             ║
║  3. Leads without phone AND email are never considered duplicates            ║
║  4. Statuses: New, Follow-Up, Closed, Converted                              ║
║  5. Follow-up buckets (today/upcoming/overdue) are computed on read          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import ApiModel, blank_to_empty, blank_to_none


class LeadType(str, Enum):
    BUYER = "Buyer"
    CONTRACTOR = "Contractor"
    SELLER = "Seller"
    MANUFACTURER = "Manufacturer"


class LeadStatus(str, Enum):
    NEW = "New"
    FOLLOW_UP = "Follow-Up"
    CLOSED = "Closed"
    CONVERTED = "Converted"


VALID_LEAD_TYPES = [t.value for t in LeadType]
VALID_LEAD_STATUSES = [s.value for s in LeadStatus]

TEXT_FIELDS = ("name", "company", "phone", "email", "city", "address", "description", "source")


class LeadCreate(ApiModel):
    """Lead entered by its owner"""
    lead_type: LeadType = LeadType.BUYER
    name: str = Field("", validate_default=True)
    company: str = ""
    phone: str = ""
    email: str = ""
    city: str = ""
    address: str = ""
    description: str = ""
    source: str = "Manual"
    status: LeadStatus = LeadStatus.NEW
    follow_up_date: Optional[datetime] = None
    follow_up_notes: Optional[str] = None
    last_visit_id: Optional[str] = None

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)

    @field_validator("follow_up_date", "last_visit_id", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)

    @field_validator("name")
    @classmethod
    def require_name(cls, v):
        if not v:
            raise ValueError("Name is required")
        return v


class LeadImportRow(LeadCreate):
    """One spreadsheet row; extra columns are ignored"""
    model_config = ConfigDict(extra="ignore")

    source: str = "Import"


class LeadUpdate(ApiModel):
    """Owner edit. Keys left out of the body are left untouched."""
    lead_type: Optional[LeadType] = None
    name: Optional[str] = None
    company: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    follow_up_date: Optional[datetime] = None
    follow_up_notes: Optional[str] = None

    @field_validator("company", "phone", "email", "city", "address", "description", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)

    @field_validator("follow_up_date", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if v is not None and not v:
            raise ValueError("Name cannot be empty")
        return v


class FollowUpUpdate(ApiModel):
    """
    PATCH body for a follow-up.
    followUpDate: null (or "") clears the date.
    """
    follow_up_date: Optional[datetime] = None
    follow_up_notes: Optional[str] = None
    status: Optional[LeadStatus] = None

    @field_validator("follow_up_date", "status", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)

    @field_validator("follow_up_notes", mode="before")
    @classmethod
    def coerce_notes(cls, v):
        return blank_to_empty(v)


class LeadImport(ApiModel):
    """{ items: [...] } - rows are validated one by one during import"""
    items: Any = Field(None, validate_default=True)

    @field_validator("items")
    @classmethod
    def require_list(cls, v):
        if not isinstance(v, list):
            raise ValueError("Import must be an array in { items: [...] }")
        return v


class LeadAssign(ApiModel):
    """Admin transfer of a lead to another sales executive"""
    owner_id: str

    @field_validator("owner_id")
    @classmethod
    def require_owner(cls, v):
        if not v:
            raise ValueError("ownerId is required")
        return v
