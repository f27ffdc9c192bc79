"""Follow-up repository - Database operations for control appointments"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import FollowUpAppointment, Patient


class FollowUpRepository:
    """Repository for follow-up appointment database operations"""

    @staticmethod
    def get_appointments(db: Session) -> list[FollowUpAppointment]:
        return db.query(FollowUpAppointment).all()

    @staticmethod
    def get_appointment_by_id(db: Session, appointment_id: str) -> Optional[FollowUpAppointment]:
        return db.query(FollowUpAppointment).filter(FollowUpAppointment.id == appointment_id).first()

    @staticmethod
    def get_patient_by_id(db: Session, patient_id: str) -> Optional[Patient]:
        return db.query(Patient).filter(Patient.id == patient_id).first()

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> FollowUpAppointment:
        appointment = FollowUpAppointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_appointment(db: Session, appointment: FollowUpAppointment, **updates) -> FollowUpAppointment:
        """Update an appointment with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(appointment, key):
                setattr(appointment, key, value)

        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: FollowUpAppointment) -> None:
        db.delete(appointment)
        db.commit()
