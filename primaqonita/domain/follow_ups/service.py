"""Follow-up service - Business logic for patient control appointments"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...models import FollowUpAppointment
from ...shared import dates
from ...shared.spreadsheet import build_workbook, xlsx_response
from .repository import FollowUpRepository
from .schemas import STATUS_LABELS, FollowUpCreate, FollowUpUpdate

logger = logging.getLogger(__name__)

DATE_FILTERS = ("all", "today", "tomorrow", "this_week", "custom")
UPCOMING_DAYS = 7

EXPORT_COLUMNS = [
    ("No", 5),
    ("ID Jadwal", 20),
    ("Nama Pasien", 25),
    ("Dokter", 25),
    ("Tanggal Kontrol", 15),
    ("Waktu Kontrol", 12),
    ("Status", 15),
    ("Catatan", 30),
    ("Tanggal Dibuat", 15),
    ("Terakhir Update", 15),
]


def appointment_datetime(appointment_date: date, appointment_time: str) -> datetime:
    return datetime.combine(appointment_date, datetime.strptime(appointment_time, "%H:%M").time())


def is_open(appointment: FollowUpAppointment) -> bool:
    return (appointment.status or "scheduled") == "scheduled"


def format_day(value: Optional[datetime]) -> str:
    return value.strftime("%d/%m/%Y") if value else "-"


class FollowUpService:
    """Service layer for follow-up appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = FollowUpRepository()

    def get_appointments(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        date_filter: str = "all",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[FollowUpAppointment]:
        """Filter appointments and sort them by date, then time"""
        if date_filter not in DATE_FILTERS:
            raise HTTPException(status_code=400, detail=f"Filter tanggal tidak dikenal: {date_filter}")

        appointments = self.repo.get_appointments(self.db)

        if search:
            term = search.strip().lower()
            appointments = [
                a for a in appointments
                if term in (a.patient_name or "").lower()
                or term in (a.doctor_name or "").lower()
                or term in a.id.lower()
            ]

        if status and status != "all":
            appointments = [a for a in appointments if a.status == status]

        today = dates.today_local()
        if date_filter == "today":
            appointments = [a for a in appointments if a.appointment_date == today]
        elif date_filter == "tomorrow":
            tomorrow = today + timedelta(days=1)
            appointments = [a for a in appointments if a.appointment_date == tomorrow]
        elif date_filter == "this_week":
            week_start, week_end = dates.week_bounds(today)
            appointments = [a for a in appointments if week_start <= a.appointment_date <= week_end]
        elif date_filter == "custom" and date_from and date_to:
            appointments = [a for a in appointments if date_from <= a.appointment_date <= date_to]

        return sorted(appointments, key=lambda a: (a.appointment_date, a.appointment_time))

    def get_summary(self) -> dict:
        """Counts shown on the dashboard cards"""
        appointments = self.repo.get_appointments(self.db)
        today = dates.today_local()
        horizon = today + timedelta(days=UPCOMING_DAYS)
        return {
            "total": len(appointments),
            "today": sum(1 for a in appointments if a.appointment_date == today and is_open(a)),
            "upcoming": sum(1 for a in appointments if today <= a.appointment_date <= horizon and is_open(a)),
            "completed": sum(1 for a in appointments if a.status == "completed"),
        }

    def get_appointment(self, appointment_id: str) -> FollowUpAppointment:
        appointment = self.repo.get_appointment_by_id(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Jadwal kontrol tidak ditemukan")
        return appointment

    def create_appointment(self, data: FollowUpCreate) -> FollowUpAppointment:
        patient = self.repo.get_patient_by_id(self.db, data.patientId)
        if not patient:
            raise HTTPException(status_code=404, detail="Pasien tidak ditemukan")

        now = dates.now_local()
        if data.appointmentDate <= now.date():
            raise HTTPException(status_code=400, detail="Tanggal kontrol paling cepat besok")

        logger.info(f"📥 Booking control visit for {patient.nama} on {data.appointmentDate}")
        try:
            return self.repo.create_appointment(
                self.db,
                patient_id=patient.id,
                patient_name=patient.nama,
                doctor_name=patient.dokter,
                appointment_date=data.appointmentDate,
                appointment_time=data.appointmentTime,
                notes=data.notes,
                status="scheduled",
                created_at=now,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error saving follow-up appointment: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menyimpan jadwal kontrol") from e

    def update_appointment(self, appointment_id: str, data: FollowUpUpdate) -> FollowUpAppointment:
        appointment = self.get_appointment(appointment_id)

        new_date = data.appointmentDate or appointment.appointment_date
        new_time = data.appointmentTime or appointment.appointment_time
        new_status = data.status or appointment.status
        now = dates.now_local()

        # Completed visits may be recorded after the fact
        if new_status != "completed" and appointment_datetime(new_date, new_time) < now:
            raise HTTPException(status_code=400, detail="Jadwal kontrol tidak boleh di masa lalu")

        try:
            return self.repo.update_appointment(
                self.db,
                appointment,
                appointment_date=new_date,
                appointment_time=new_time,
                notes=data.notes,
                status=new_status,
                updated_at=now,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating follow-up appointment {appointment_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal mengupdate jadwal kontrol") from e

    def update_status(self, appointment_id: str, status: str) -> FollowUpAppointment:
        appointment = self.get_appointment(appointment_id)
        try:
            return self.repo.update_appointment(
                self.db, appointment, status=status, updated_at=dates.now_local()
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating follow-up status {appointment_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal mengupdate status") from e

    def delete_appointment(self, appointment_id: str) -> dict:
        appointment = self.get_appointment(appointment_id)
        try:
            self.repo.delete_appointment(self.db, appointment)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting follow-up appointment {appointment_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menghapus jadwal kontrol") from e
        return {"message": "Jadwal kontrol berhasil dihapus"}

    def export_appointments(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        date_filter: str = "all",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> StreamingResponse:
        """Export the currently filtered appointments as an .xlsx download"""
        appointments = self.get_appointments(search, status, date_filter, date_from, date_to)
        logger.info(f"📊 Follow-up export requested: {len(appointments)} rows (filter={date_filter})")

        rows = [
            {
                "No": index,
                "ID Jadwal": a.id,
                "Nama Pasien": a.patient_name,
                "Dokter": a.doctor_name,
                "Tanggal Kontrol": a.appointment_date.isoformat(),
                "Waktu Kontrol": a.appointment_time,
                "Status": STATUS_LABELS.get(a.status or "scheduled", "Terjadwal"),
                "Catatan": a.notes or "-",
                "Tanggal Dibuat": format_day(a.created_at),
                "Terakhir Update": format_day(a.updated_at),
            }
            for index, a in enumerate(appointments, start=1)
        ]

        content = build_workbook(rows, EXPORT_COLUMNS, "Jadwal Kontrol")
        return xlsx_response(content, f"Jadwal_Kontrol_{dates.today_local().isoformat()}.xlsx")
