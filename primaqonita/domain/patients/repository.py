"""Patient repository - Database operations for patient registrations"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Patient


class PatientRepository:
    """Repository for patient database operations"""

    @staticmethod
    def get_patients(db: Session) -> list[Patient]:
        return db.query(Patient).all()

    @staticmethod
    def get_patient_by_id(db: Session, patient_id: str) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def update_status(db: Session, patient: Patient, status: str, updated_at) -> Patient:
        patient.status = status
        patient.updated_at = updated_at
        db.commit()
        db.refresh(patient)
        return patient
