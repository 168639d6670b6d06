"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OGCS CRM - Quotation / invoice model                                        ║
║                                                                              ║
║  - lineTotal = quantity * unitPrice                                          ║
║  - totalAmount = subtotal + taxPercent% of subtotal                          ║
║  - status: pending -> approved | rejected (admin only)                       ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

from typing import Any, List

from pydantic import field_validator

from .base import ApiModel, blank_to_empty


VALID_QUOTE_TYPES = ["quotation", "invoice"]
VALID_QUOTE_STATUSES = ["pending", "approved", "rejected"]


def to_number(value) -> float:
    """Lenient numeric coercion, anything unparseable counts as 0"""
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if n != n else n


class QuoteItem(ApiModel):
    description: str = ""
    quantity: Any = 0
    unit_price: Any = 0

    @field_validator("description", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)


class QuoteCreate(ApiModel):
    type: str = ""
    customer_name: str = ""
    company_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    project_name: str = ""
    items: List[QuoteItem] = []
    tax_percent: Any = 0
    notes: str = ""

    @field_validator("customer_name", "company_name", "customer_email",
                     "customer_phone", "project_name", "notes", mode="before")
    @classmethod
    def coerce_text(cls, v):
        return blank_to_empty(v)


class QuoteStatusUpdate(ApiModel):
    status: str = ""
