"""Doctor router - FastAPI endpoints for doctor operations"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Doctor, User
from .schemas import DoctorCreate, DoctorResponse, DoctorUpdate
from .service import DoctorService

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def get_doctor_service(db: Session = Depends(get_db)) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db)


def to_response(doctor: Doctor) -> DoctorResponse:
    return DoctorResponse(
        id=doctor.id,
        name=doctor.name,
        specialization=doctor.specialization,
        status=doctor.status,
        createdAt=doctor.created_at,
        lastUpdated=doctor.last_updated,
    )


@router.get("", response_model=list[DoctorResponse])
async def get_doctors(
    search: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """List doctors, optionally filtered by name or specialization"""
    return [to_response(d) for d in service.get_doctors(search)]


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def get_doctor(
    doctor_id: str,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    return to_response(service.get_doctor(doctor_id))


@router.post("", response_model=DoctorResponse, status_code=201)
async def create_doctor(
    data: DoctorCreate,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    return to_response(service.create_doctor(data))


@router.put("/{doctor_id}", response_model=DoctorResponse)
async def update_doctor(
    doctor_id: str,
    data: DoctorUpdate,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    return to_response(service.update_doctor(doctor_id, data))


@router.delete("/{doctor_id}")
async def delete_doctor(
    doctor_id: str,
    current_user: User = Depends(get_current_user),
    service: DoctorService = Depends(get_doctor_service),
):
    """Delete a doctor (their schedules are cleaned up on the next schedule list load)"""
    return service.delete_doctor(doctor_id)
