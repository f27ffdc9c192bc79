"""Doctor service - Business logic for doctor operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Doctor
from ...shared import dates
from .repository import DoctorRepository
from .schemas import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)


class DoctorService:
    """Service layer for doctor business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DoctorRepository()

    def get_doctors(self, search: Optional[str] = None) -> list[Doctor]:
        """List doctors, optionally matching name or specialization"""
        doctors = self.repo.get_doctors(self.db)
        if search:
            term = search.strip().lower()
            doctors = [
                d for d in doctors
                if term in (d.name or "").lower() or term in (d.specialization or "").lower()
            ]
        return doctors

    def get_doctor(self, doctor_id: str) -> Doctor:
        doctor = self.repo.get_doctor_by_id(self.db, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Dokter tidak ditemukan")
        return doctor

    def create_doctor(self, data: DoctorCreate) -> Doctor:
        logger.info(f"📥 Registering doctor: {data.name} ({data.specialization})")
        try:
            return self.repo.create_doctor(
                self.db,
                name=data.name,
                specialization=data.specialization,
                last_updated=dates.now_local(),
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error creating doctor: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menambahkan dokter") from e

    def update_doctor(self, doctor_id: str, data: DoctorUpdate) -> Doctor:
        doctor = self.get_doctor(doctor_id)
        try:
            return self.repo.update_doctor(
                self.db,
                doctor,
                name=data.name,
                specialization=data.specialization,
                last_updated=dates.now_local(),
            )
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating doctor {doctor_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal memperbarui dokter") from e

    def delete_doctor(self, doctor_id: str) -> dict:
        """
        Delete a doctor. Their schedules are left in place and removed
        as orphans the next time the schedule list is loaded.
        """
        doctor = self.get_doctor(doctor_id)
        try:
            self.repo.delete_doctor(self.db, doctor)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error deleting doctor {doctor_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal menghapus dokter") from e

        logger.info(f"🗑️ Doctor deleted: {doctor_id}")
        return {"message": "Dokter berhasil dihapus"}
