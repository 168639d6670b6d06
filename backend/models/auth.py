"""
OGCS CRM - Auth & user models
Two roles: admin (back office) and sales (field executives).
"""

from pydantic import field_validator

from .base import ApiModel, blank_to_empty


VALID_ROLES = ["admin", "sales"]


class UserLogin(ApiModel):
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def required(cls, v):
        if not v:
            raise ValueError("Email and password required")
        return v


class UserCreate(ApiModel):
    """Admin creates a sales executive (or another admin)"""
    name: str
    email: str
    password: str
    phone: str = ""
    role: str = "sales"

    @field_validator("phone", mode="before")
    @classmethod
    def coerce_phone(cls, v):
        return blank_to_empty(v)

    @field_validator("name", "email")
    @classmethod
    def required(cls, v):
        if not v:
            raise ValueError("All fields are required")
        return v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v):
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in VALID_ROLES:
            raise ValueError(f"Invalid role: {v}. Valid: {VALID_ROLES}")
        return v


class UserActiveUpdate(ApiModel):
    is_active: bool

