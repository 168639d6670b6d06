"""
OGCS CRM - Daily activity report
"""

from datetime import datetime

from pydantic import Field, field_validator

from .base import ApiModel


MIN_WORDS = 20
MAX_MEMBER_NAME = 120
MAX_REPORT_TEXT = 5000


def count_words(text: str = "") -> int:
    return len(str(text or "").split())


class DailyReportCreate(ApiModel):
    report_date: str = Field("", validate_default=True)
    member_name: str = Field("", validate_default=True)
    report_text: str = Field("", validate_default=True)

    @field_validator("report_date")
    @classmethod
    def validate_date(cls, v):
        if not v:
            raise ValueError("reportDate, memberName, reportText are required.")
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise ValueError("reportDate must be YYYY-MM-DD")
        return v

    @field_validator("member_name")
    @classmethod
    def validate_member(cls, v):
        if not v:
            raise ValueError("reportDate, memberName, reportText are required.")
        if len(v) > MAX_MEMBER_NAME:
            raise ValueError(f"memberName must be at most {MAX_MEMBER_NAME} characters")
        return v

    @field_validator("report_text")
    @classmethod
    def validate_text(cls, v):
        if not v:
            raise ValueError("reportDate, memberName, reportText are required.")
        if len(v) > MAX_REPORT_TEXT:
            raise ValueError(f"reportText must be at most {MAX_REPORT_TEXT} characters")
        if count_words(v) < MIN_WORDS:
            raise ValueError(f"Daily report must be at least {MIN_WORDS} words.")
        return v
