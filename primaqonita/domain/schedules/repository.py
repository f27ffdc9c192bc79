"""Schedule repository - Database operations for practice schedules"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Doctor, Schedule


class ScheduleRepository:
    """Repository for schedule database operations"""

    @staticmethod
    def get_schedules(db: Session) -> list[Schedule]:
        return db.query(Schedule).order_by(Schedule.doctor_name, Schedule.poly).all()

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: str) -> Optional[Schedule]:
        return db.query(Schedule).filter(Schedule.id == schedule_id).first()

    @staticmethod
    def count_doctor_schedules(db: Session, doctor_id: str, exclude_id: Optional[str] = None) -> int:
        """Count a doctor's schedules, optionally ignoring one of them"""
        query = db.query(Schedule).filter(Schedule.doctor_id == doctor_id)
        if exclude_id:
            query = query.filter(Schedule.id != exclude_id)
        return query.count()

    @staticmethod
    def get_doctor_ids(db: Session) -> set[str]:
        return {row.id for row in db.query(Doctor.id).all()}

    @staticmethod
    def create_schedule(db: Session, **schedule_data) -> Schedule:
        schedule = Schedule(**schedule_data)
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def update_schedule(db: Session, schedule: Schedule, **updates) -> Schedule:
        """Apply updates; None is a real value here (clears holiday fields)"""
        for key, value in updates.items():
            if hasattr(schedule, key):
                setattr(schedule, key, value)

        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def delete_schedule(db: Session, schedule: Schedule) -> None:
        db.delete(schedule)
        db.commit()
