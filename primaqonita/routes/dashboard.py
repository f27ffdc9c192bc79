"""Dashboard overview counts"""

from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..domain.patients.router import to_response as patient_response
from ..models import Doctor, Patient, Schedule, User
from ..services.status_automation import STATUS_HOLIDAY
from ..shared import dates


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

RECENT_PATIENTS_LIMIT = 8


def registration_time(patient: Patient) -> datetime:
    """Parse tanggal_daftar; unreadable values sort as oldest"""
    try:
        return datetime.fromisoformat(patient.tanggal_daftar).replace(tzinfo=None)
    except (TypeError, ValueError):
        return datetime.min


@router.get("/stats")
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Totals for the overview cards plus the latest registrations"""
    patients = db.query(Patient).all()
    today = dates.today_local()

    recent = sorted(patients, key=registration_time, reverse=True)[:RECENT_PATIENTS_LIMIT]

    return {
        "totalPatients": len(patients),
        "todayPatients": sum(1 for p in patients if dates.normalize_date(p.tanggal) == today),
        "totalDoctors": db.query(Doctor).count(),
        "activeSchedules": db.query(Schedule).filter(Schedule.status != STATUS_HOLIDAY).count(),
        "recentPatients": [patient_response(p) for p in recent],
    }
