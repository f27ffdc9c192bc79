"""Follow-up router - FastAPI endpoints for control appointments"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import FollowUpAppointment, User
from .schemas import (
    STATUS_LABELS,
    FollowUpCreate,
    FollowUpResponse,
    FollowUpStatusUpdate,
    FollowUpSummary,
    FollowUpUpdate,
)
from .service import FollowUpService

router = APIRouter(prefix="/follow-ups", tags=["Follow-Up Appointments"])


def get_follow_up_service(db: Session = Depends(get_db)) -> FollowUpService:
    """Dependency injection for FollowUpService"""
    return FollowUpService(db)


def to_response(appointment: FollowUpAppointment) -> FollowUpResponse:
    status = appointment.status or "scheduled"
    return FollowUpResponse(
        id=appointment.id,
        patientId=appointment.patient_id,
        patientName=appointment.patient_name,
        doctorName=appointment.doctor_name,
        appointmentDate=appointment.appointment_date,
        appointmentTime=appointment.appointment_time,
        notes=appointment.notes,
        status=status,
        statusLabel=STATUS_LABELS.get(status, status),
        createdAt=appointment.created_at,
        updatedAt=appointment.updated_at,
    )


@router.get("", response_model=list[FollowUpResponse])
async def get_appointments(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    date_filter: str = Query("all"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    """List control appointments sorted by date and time"""
    appointments = service.get_appointments(search, status, date_filter, date_from, date_to)
    return [to_response(a) for a in appointments]


@router.get("/summary", response_model=FollowUpSummary)
async def get_summary(
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    return service.get_summary()


@router.get("/export")
async def export_appointments(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    date_filter: str = Query("all"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    """Export the filtered appointments as an .xlsx file"""
    return service.export_appointments(search, status, date_filter, date_from, date_to)


@router.get("/{appointment_id}", response_model=FollowUpResponse)
async def get_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    return to_response(service.get_appointment(appointment_id))


@router.post("", response_model=FollowUpResponse, status_code=201)
async def create_appointment(
    data: FollowUpCreate,
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    """Book a control visit for a registered patient"""
    return to_response(service.create_appointment(data))


@router.put("/{appointment_id}", response_model=FollowUpResponse)
async def update_appointment(
    appointment_id: str,
    data: FollowUpUpdate,
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    return to_response(service.update_appointment(appointment_id, data))


@router.patch("/{appointment_id}/status", response_model=FollowUpResponse)
async def update_appointment_status(
    appointment_id: str,
    data: FollowUpStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    return to_response(service.update_status(appointment_id, data.status))


@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: FollowUpService = Depends(get_follow_up_service),
):
    return service.delete_appointment(appointment_id)
