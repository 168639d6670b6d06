"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OGCS CRM - Site visit model                                                 ║
║                                                                              ║
║  - location stored ONLY when both coordinates are finite numbers             ║
║  - metPeople[i].leadId, once set, points at a lead of the same user          ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator

from .base import ApiModel, blank_to_empty, blank_to_none
from .lead import LeadType


class SiteType(str, Enum):
    SITE = "Site"
    OFFICE = "Office"
    STORE = "Store"
    FACTORY = "Factory"
    OTHER = "Other"


class MeetingOutcome(str, Enum):
    INTERESTED = "Interested"
    NOT_INTERESTED = "Not Interested"
    CALL_BACK = "Call Back"
    QUOTATION_ASKED = "Quotation Asked"
    MEETING_FIXED = "Meeting Fixed"


class MetPerson(ApiModel):
    """Someone met during a visit, promotable to a lead"""
    lead_id: Optional[str] = None
    lead_type: LeadType = LeadType.BUYER
    name: str
    company: str = ""
    phone: str = ""
    email: str = ""
    conversation_notes: str = ""
    outcome: MeetingOutcome = MeetingOutcome.INTERESTED
    follow_up_date: Optional[datetime] = None

    @field_validator("company", "phone", "email", "conversation_notes", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)

    @field_validator("lead_id", "follow_up_date", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)

    @field_validator("name")
    @classmethod
    def require_name(cls, v):
        if not v:
            raise ValueError("Met person name is required")
        return v


class VisitCreate(ApiModel):
    place_name: str = Field("", validate_default=True)
    site_type: SiteType = SiteType.SITE
    address: str = ""
    city: str = ""
    # Free-form on input, see services.visits.build_safe_location
    location: Optional[Any] = None
    visited_at: Optional[datetime] = None
    check_in_at: Optional[datetime] = None
    check_out_at: Optional[datetime] = None
    met_people: List[MetPerson] = []
    tags: List[str] = []

    @field_validator("place_name", "address", "city", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)

    @field_validator("visited_at", "check_in_at", "check_out_at", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)

    @field_validator("place_name")
    @classmethod
    def require_place(cls, v):
        if len(v) < 2:
            raise ValueError("placeName is required")
        return v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v):
        return [t.strip() for t in v if t and t.strip()]


class LocationUpdate(ApiModel):
    location: Optional[Any] = None


class VisitCheckout(ApiModel):
    check_out_at: Optional[datetime] = None

    @field_validator("check_out_at", mode="before")
    @classmethod
    def coerce_blank(cls, v):
        return blank_to_none(v)


class PromoteRequest(ApiModel):
    """Frontend sends idx, older clients metIndex"""
    idx: Optional[Any] = None
    met_index: Optional[Any] = None

    @property
    def raw_index(self):
        return self.idx if self.idx is not None else self.met_index
