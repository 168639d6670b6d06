"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OGCS CRM - Models package                                                   ║
║                                                                              ║
║  Request schemas for every route                                             ║
║  from models import LeadCreate, VisitCreate, QuoteCreate, etc.               ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from .base import ApiModel

# Auth
from .auth import (
    VALID_ROLES,
    UserLogin,
    UserCreate,
    UserActiveUpdate,
)

# Lead
from .lead import (
    LeadType,
    LeadStatus,
    VALID_LEAD_TYPES,
    VALID_LEAD_STATUSES,
    LeadCreate,
    LeadImportRow,
    LeadUpdate,
    FollowUpUpdate,
    LeadImport,
    LeadAssign,
)

# Visit
from .visit import (
    SiteType,
    MeetingOutcome,
    MetPerson,
    VisitCreate,
    LocationUpdate,
    VisitCheckout,
    PromoteRequest,
)

# Quote
from .quote import (
    VALID_QUOTE_TYPES,
    VALID_QUOTE_STATUSES,
    QuoteItem,
    QuoteCreate,
    QuoteStatusUpdate,
)

# Daily report
from .daily_report import (
    MIN_WORDS,
    DailyReportCreate,
)

__all__ = [
    "ApiModel",
    # Auth
    "VALID_ROLES",
    "UserLogin",
    "UserCreate",
    "UserActiveUpdate",
    # Lead
    "LeadType",
    "LeadStatus",
    "VALID_LEAD_TYPES",
    "VALID_LEAD_STATUSES",
    "LeadCreate",
    "LeadImportRow",
    "LeadUpdate",
    "FollowUpUpdate",
    "LeadImport",
    "LeadAssign",
    # Visit
    "SiteType",
    "MeetingOutcome",
    "MetPerson",
    "VisitCreate",
    "LocationUpdate",
    "VisitCheckout",
    "PromoteRequest",
    # Quote
    "VALID_QUOTE_TYPES",
    "VALID_QUOTE_STATUSES",
    "QuoteItem",
    "QuoteCreate",
    "QuoteStatusUpdate",
    # Daily report
    "MIN_WORDS",
    "DailyReportCreate",
]
