"""
OGCS CRM - Routes Daily reports
"""

from fastapi import APIRouter, Depends
from typing import Optional

from models import DailyReportCreate
from config import serialize_doc
from routes.auth import get_current_user
from services import daily_reports

router = APIRouter(prefix="/team-reports", tags=["Daily reports"])


@router.post("", status_code=201)
async def create_daily_report(data: DailyReportCreate, user: dict = Depends(get_current_user)):
    report = await daily_reports.create_report(user, data)
    return {"success": True, "message": "Daily report saved", "data": serialize_doc(report)}


@router.get("")
async def list_daily_reports(
    q: Optional[str] = None,
    date: Optional[str] = None,
    page: Optional[str] = "1",
    limit: Optional[str] = "20",
    user: dict = Depends(get_current_user)
):
    result = await daily_reports.list_reports(search=q, date=date, page=page, limit=limit)
    return {"success": True, **serialize_doc(result)}
