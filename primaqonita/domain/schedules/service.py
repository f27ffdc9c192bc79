"""Schedule service - Business logic for practice schedules and holidays"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Doctor, Schedule, generate_id
from ...services.notification_service import (
    HOLIDAY_CANCELLED,
    HOLIDAY_ENDED,
    SCHEDULE_CREATED,
    SCHEDULE_DELETED,
    SCHEDULE_UPDATED,
    create_notification,
    schedule_snapshot,
)
from ...services.status_automation import (
    STATUS_ACTIVE,
    STATUS_HOLIDAY,
    STATUS_INACTIVE,
    clear_holiday,
    end_holiday,
    is_holiday_expired,
    stage_holiday,
    update_doctor_status,
    update_schedule_statuses,
)
from ...shared import dates
from .repository import ScheduleRepository
from .schemas import DEFAULT_MAX_PATIENTS, HolidayRequest, ScheduleCreate

logger = logging.getLogger(__name__)

LEGACY_SHIFT_NAME = "Praktek"


def build_shifts(data: ScheduleCreate) -> list[dict]:
    """
    Turn the submitted shifts into their stored form, sorted by start time.

    A payload without shifts but with a flat startTime/endTime is migrated
    into a single shift named "Praktek".

    Raises:
        HTTPException: 400 if there is no shift, a shift ends before it starts,
            or two shifts overlap
    """
    shifts = [
        {
            "id": shift.id or generate_id(),
            "name": shift.name,
            "startTime": shift.startTime,
            "endTime": shift.endTime,
            "maxPatients": shift.maxPatients,
        }
        for shift in data.shifts
    ]

    if not shifts and data.startTime and data.endTime:
        shifts = [
            {
                "id": generate_id(),
                "name": LEGACY_SHIFT_NAME,
                "startTime": data.startTime,
                "endTime": data.endTime,
                "maxPatients": DEFAULT_MAX_PATIENTS,
            }
        ]

    if not shifts:
        raise HTTPException(status_code=400, detail="Tambahkan minimal satu shift")

    # HH:MM strings compare in clock order
    for shift in shifts:
        if shift["startTime"] >= shift["endTime"]:
            raise HTTPException(
                status_code=400,
                detail=f"Shift {shift['name']}: jam mulai harus lebih awal dari jam selesai",
            )

    for i, first in enumerate(shifts):
        for second in shifts[i + 1:]:
            if first["startTime"] < second["endTime"] and second["startTime"] < first["endTime"]:
                raise HTTPException(status_code=400, detail="Waktu shift tidak boleh bertumpang tindih")

    return sorted(shifts, key=lambda s: s["startTime"])


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()

    def remove_orphans(self, schedules: list[Schedule]) -> list[Schedule]:
        """Delete schedules whose doctor no longer exists and return the rest"""
        doctor_ids = self.repo.get_doctor_ids(self.db)
        valid = []
        for schedule in schedules:
            if schedule.doctor_id in doctor_ids:
                valid.append(schedule)
                continue
            schedule_id, doctor_id = schedule.id, schedule.doctor_id
            try:
                self.repo.delete_schedule(self.db, schedule)
                logger.info(f"🧹 Removed orphaned schedule {schedule_id} (doctor {doctor_id} not found)")
            except Exception as e:
                self.db.rollback()
                logger.error(f"❌ Error removing orphaned schedule {schedule_id}: {str(e)}")
        return valid

    def get_schedules(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        poly: Optional[str] = None,
    ) -> list[Schedule]:
        """
        Load schedules for the dashboard.
        Orphans are removed and due holiday transitions applied before filtering,
        so the returned rows always reflect the current state.
        """
        schedules = self.remove_orphans(self.repo.get_schedules(self.db))
        update_schedule_statuses(self.db, schedules)

        if search:
            term = search.strip().lower()
            schedules = [
                s for s in schedules
                if term in (s.doctor_name or "").lower() or term in (s.poly or "").lower()
            ]
        if status and status != "all":
            schedules = [s for s in schedules if s.status == status]
        if poly and poly != "all":
            schedules = [s for s in schedules if s.poly == poly]
        return schedules

    def get_polys(self) -> list[str]:
        """Distinct poly names, ignoring schedules whose doctor is gone"""
        doctor_ids = self.repo.get_doctor_ids(self.db)
        return sorted({
            s.poly for s in self.repo.get_schedules(self.db)
            if s.poly and s.doctor_id in doctor_ids
        })

    def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule:
            raise HTTPException(status_code=404, detail="Jadwal tidak ditemukan")
        return schedule

    def _get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            raise HTTPException(status_code=400, detail="Dokter tidak ditemukan")
        return doctor

    def create_schedule(self, data: ScheduleCreate) -> Schedule:
        doctor = self._get_doctor(data.doctorId)
        shifts = build_shifts(data)
        now = dates.now_local()

        logger.info(f"📥 Creating schedule for {doctor.name}")
        try:
            schedule = self.repo.create_schedule(
                self.db,
                doctor_id=doctor.id,
                doctor_name=doctor.name,
                poly=data.poly or doctor.specialization,
                days=data.days,
                shifts=shifts,
                status=data.status or STATUS_ACTIVE,
                last_updated=now,
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error creating schedule: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menyimpan jadwal") from e

        update_doctor_status(self.db, schedule.doctor_id, schedule.status)
        create_notification(self.db, SCHEDULE_CREATED, schedule_snapshot(schedule))
        return schedule

    def update_schedule(self, schedule_id: str, data: ScheduleCreate) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        doctor = self._get_doctor(data.doctorId)
        shifts = build_shifts(data)

        updates = {
            "doctor_id": doctor.id,
            "doctor_name": doctor.name,
            "poly": data.poly or doctor.specialization,
            "days": data.days,
            "shifts": shifts,
            "last_updated": dates.now_local(),
        }
        if data.status and data.status != schedule.status:
            updates["status"] = data.status
            # Leaving holiday by edit drops the holiday window
            if schedule.status == STATUS_HOLIDAY:
                clear_holiday(schedule)

        try:
            schedule = self.repo.update_schedule(self.db, schedule, **updates)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating schedule {schedule_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menyimpan jadwal") from e

        update_doctor_status(self.db, schedule.doctor_id, schedule.status)
        create_notification(self.db, SCHEDULE_UPDATED, schedule_snapshot(schedule))
        return schedule

    def delete_schedule(self, schedule_id: str) -> dict:
        schedule = self.get_schedule(schedule_id)
        snapshot = schedule_snapshot(schedule)
        has_other_schedules = self.repo.count_doctor_schedules(
            self.db, schedule.doctor_id, exclude_id=schedule.id
        ) > 0

        try:
            self.repo.delete_schedule(self.db, schedule)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting schedule {schedule_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menghapus jadwal") from e

        logger.info(f"🗑️ Schedule deleted: {schedule_id}")
        if not has_other_schedules:
            update_doctor_status(self.db, snapshot["doctor_id"], STATUS_INACTIVE)
        create_notification(self.db, SCHEDULE_DELETED, snapshot)
        return {"message": "Jadwal berhasil dihapus"}

    def set_holiday(self, schedule_id: str, data: HolidayRequest) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        if schedule.status != STATUS_ACTIVE:
            raise HTTPException(status_code=400, detail="Libur hanya dapat diatur untuk jadwal aktif")
        if data.startDate < dates.today_local():
            raise HTTPException(status_code=400, detail="Tanggal mulai libur tidak boleh di masa lalu")

        try:
            return stage_holiday(self.db, schedule, data.reason, data.startDate, data.endDate)
        except Exception as e:
            raise HTTPException(status_code=500, detail="Gagal mengatur libur") from e

    def cancel_holiday(self, schedule_id: str) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        # A staged holiday on an active schedule can be withdrawn before it starts
        staged = schedule.status == STATUS_ACTIVE and schedule.holiday_start_date is not None
        if schedule.status != STATUS_HOLIDAY and not staged:
            raise HTTPException(status_code=400, detail="Jadwal tidak sedang libur")
        try:
            return end_holiday(self.db, schedule, HOLIDAY_CANCELLED)
        except Exception as e:
            raise HTTPException(status_code=500, detail="Gagal membatalkan libur") from e

    def activate_schedule(self, schedule_id: str) -> Schedule:
        """Bring a schedule back from holiday by hand, as the automatic end-of-holiday rule would"""
        schedule = self.get_schedule(schedule_id)
        if not is_holiday_expired(schedule, dates.now_local()):
            raise HTTPException(status_code=400, detail="Libur belum berakhir, gunakan batal libur")
        try:
            return end_holiday(self.db, schedule, HOLIDAY_ENDED)
        except Exception as e:
            raise HTTPException(status_code=500, detail="Gagal mengaktifkan jadwal") from e
