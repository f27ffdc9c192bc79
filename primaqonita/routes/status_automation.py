"""
API endpoint for schedule status automation and analytics
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Schedule, User
from ..services.status_automation import update_schedule_statuses

router = APIRouter(prefix="/status", tags=["status"])


class StatusSummary(BaseModel):
    active: int
    holiday: int
    inactive: int


class AutomationResult(BaseModel):
    checked: int
    holiday_started: int
    holiday_ended: int
    failed: int
    total_updated: int


@router.get("/analytics", response_model=StatusSummary)
async def get_status_analytics(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Count schedules by status"""
    status_counts = (
        db.query(Schedule.status, func.count(Schedule.id).label("count"))
        .group_by(Schedule.status)
        .all()
    )

    summary = {"active": 0, "holiday": 0, "inactive": 0}
    for status, count in status_counts:
        if status in summary:
            summary[status] = count

    return StatusSummary(**summary)


@router.post("/automation/run", response_model=AutomationResult)
async def run_status_automation(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Manually trigger the holiday transition scan
    (the worker runs the same scan every minute)
    """
    result = update_schedule_statuses(db)
    return AutomationResult(**result)
