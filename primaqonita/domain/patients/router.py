"""Patient router - FastAPI endpoints for patient registrations"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Patient, User
from .schemas import PatientResponse, PatientStatusUpdate, normalize_status, status_label
from .service import PatientService

router = APIRouter(prefix="/patients", tags=["Patients"])

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def get_patient_service(db: Session = Depends(get_db)) -> PatientService:
    """Dependency injection for PatientService"""
    return PatientService(db)


def to_response(patient: Patient) -> PatientResponse:
    return PatientResponse(
        id=patient.id,
        nama=patient.nama,
        nik=patient.nik or "",
        telepon=patient.telepon or "",
        jenis_kelamin=patient.jenis_kelamin,
        alamat=patient.alamat,
        layanan=patient.layanan,
        spesialisasi_dokter=patient.spesialisasi_dokter,
        dokter=patient.dokter,
        tanggal=patient.tanggal,
        estimated_time=patient.estimated_time,
        status=normalize_status(patient.status) or patient.status,
        status_label=status_label(patient.status),
        queue_status=patient.queue_status,
        queue_number=patient.queue_number,
        keluhan=patient.keluhan,
        booking_source=patient.booking_source,
        tanggal_daftar=patient.tanggal_daftar,
        updated_at=patient.updated_at,
    )


@router.get("")
async def get_patients(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    layanan: Optional[str] = Query(None),
    date_filter: str = Query("all"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    group_by_date: bool = Query(False),
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """List registrations sorted by visit date and queue number, optionally grouped by date"""
    patients = service.get_patients(search, status, layanan, date_filter, date_from, date_to, month)
    if not group_by_date:
        return [to_response(p) for p in patients]
    return [
        {
            "date": visit.isoformat() if visit else None,
            "patients": [to_response(p) for p in group],
        }
        for visit, group in service.group_by_date(patients)
    ]


@router.get("/layanan")
async def get_layanan_options(
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return {"layanan": service.get_layanan_options()}


@router.get("/export")
async def export_patients(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    layanan: Optional[str] = Query(None),
    date_filter: str = Query("all"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    """Export the filtered registrations as an .xlsx file"""
    return service.export_patients(search, status, layanan, date_filter, date_from, date_to, month)


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return to_response(service.get_patient(patient_id))


@router.patch("/{patient_id}/status", response_model=PatientResponse)
async def update_patient_status(
    patient_id: str,
    data: PatientStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: PatientService = Depends(get_patient_service),
):
    return to_response(service.update_status(patient_id, data.status))
