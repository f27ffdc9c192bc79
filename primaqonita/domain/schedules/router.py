"""Schedule router - FastAPI endpoints for practice schedules and holidays"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Schedule, User
from ...services.status_automation import is_holiday_expired, remaining_holiday_days
from ...shared import dates
from .schemas import HolidayRequest, ScheduleCreate, ScheduleResponse, ScheduleUpdate
from .service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


def to_response(schedule: Schedule) -> ScheduleResponse:
    now = dates.now_local()
    return ScheduleResponse(
        id=schedule.id,
        doctorId=schedule.doctor_id,
        doctorName=schedule.doctor_name,
        poly=schedule.poly,
        days=schedule.days or [],
        shifts=schedule.shifts or [],
        status=schedule.status,
        holidayReason=schedule.holiday_reason,
        holidayStartDate=schedule.holiday_start_date,
        holidayEndDate=schedule.holiday_end_date,
        remainingHolidayDays=remaining_holiday_days(schedule, now.date()),
        holidayExpired=is_holiday_expired(schedule, now),
        createdAt=schedule.created_at,
        lastUpdated=schedule.last_updated,
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ScheduleResponse])
async def get_schedules(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    poly: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    """List schedules after removing orphans and applying due holiday transitions"""
    return [to_response(s) for s in service.get_schedules(search, status, poly)]


@router.get("/polys")
async def get_polys(
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Distinct poly labels for the filter dropdown"""
    return {"polys": service.get_polys()}


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return to_response(service.get_schedule(schedule_id))


@router.post("", response_model=ScheduleResponse, status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return to_response(service.create_schedule(data))


@router.put("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: str,
    data: ScheduleUpdate,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return to_response(service.update_schedule(schedule_id, data))


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.delete_schedule(schedule_id)


# ============================================================================
# HOLIDAYS
# ============================================================================


@router.post("/{schedule_id}/holiday", response_model=ScheduleResponse)
async def set_holiday(
    schedule_id: str,
    data: HolidayRequest,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Put a schedule on holiday for a date range"""
    return to_response(service.set_holiday(schedule_id, data))


@router.post("/{schedule_id}/holiday/cancel", response_model=ScheduleResponse)
async def cancel_holiday(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    return to_response(service.cancel_holiday(schedule_id))


@router.post("/{schedule_id}/activate", response_model=ScheduleResponse)
async def activate_schedule(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Manually end an expired holiday"""
    return to_response(service.activate_schedule(schedule_id))
