"""
Automated status transitions for doctor practice schedules
Handles holiday → active when a holiday window has ended
Handles active → holiday when a staged holiday window starts

Every transition is followed by two best-effort cascades: the linked doctor's
status mirrors the schedule, and a notification is appended. The three writes
are separate commits; a failed cascade is logged and left for the operator.
"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Doctor, Schedule
from ..shared import dates
from .notification_service import (
    HOLIDAY_CANCELLED,
    HOLIDAY_ENDED,
    HOLIDAY_SET,
    create_notification,
    schedule_snapshot,
)

logger = logging.getLogger(__name__)

STATUS_ACTIVE = "active"
STATUS_HOLIDAY = "holiday"
STATUS_INACTIVE = "inactive"


def is_holiday_expired(schedule: Schedule, now: datetime) -> bool:
    """A holiday ends once the last millisecond of its end date has passed"""
    if schedule.status != STATUS_HOLIDAY or not schedule.holiday_end_date:
        return False
    return now > dates.end_of_day(schedule.holiday_end_date)


def should_holiday_start(schedule: Schedule, now: datetime) -> bool:
    """A staged holiday starts at midnight of its start date, provided an end date is set"""
    if schedule.status != STATUS_ACTIVE or not schedule.holiday_start_date:
        return False
    if not schedule.holiday_end_date:
        return False
    return now >= dates.start_of_day(schedule.holiday_start_date)


def remaining_holiday_days(schedule: Schedule, today: date) -> int:
    """Whole days from today to the holiday end date, never negative"""
    if schedule.status != STATUS_HOLIDAY or not schedule.holiday_end_date:
        return 0
    return max(0, (schedule.holiday_end_date - today).days)


def evaluate_schedule(schedule: Schedule, now: datetime) -> Optional[str]:
    """
    Decide which transition, if any, applies to a schedule at ``now``.

    Returns:
        HOLIDAY_ENDED, HOLIDAY_SET or None. The end-of-holiday rule is checked
        first, so a schedule can never flip twice in one pass.
    """
    if is_holiday_expired(schedule, now):
        return HOLIDAY_ENDED
    elif should_holiday_start(schedule, now):
        return HOLIDAY_SET
    return None


def clear_holiday(schedule: Schedule) -> None:
    schedule.holiday_reason = None
    schedule.holiday_start_date = None
    schedule.holiday_end_date = None


def update_doctor_status(db: Session, doctor_id: Optional[str], status: str) -> bool:
    """
    Mirror a schedule status onto its doctor (last write wins across a doctor's schedules).

    Returns:
        bool: True if the doctor row was updated
    """
    if not doctor_id:
        return False

    try:
        doctor = db.query(Doctor).filter(Doctor.id == doctor_id).first()
        if not doctor:
            logger.warning(f"⚠️ Doctor {doctor_id} not found, status {status} not propagated")
            return False

        doctor.status = status
        doctor.last_updated = dates.now_local()
        db.commit()
        logger.info(f"✅ Doctor status updated: {doctor_id} -> {status}")
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error updating doctor status for {doctor_id}: {str(e)}")
        return False


def apply_transition(db: Session, schedule: Schedule, transition: str, now: datetime) -> bool:
    """
    Persist one automatic transition and run its cascades.

    Returns:
        bool: False if the schedule write itself failed (it will be retried next tick)
    """
    new_status = STATUS_ACTIVE if transition == HOLIDAY_ENDED else STATUS_HOLIDAY

    try:
        schedule.status = new_status
        if new_status == STATUS_ACTIVE:
            clear_holiday(schedule)
        schedule.last_updated = now
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error updating schedule {schedule.id}: {str(e)}")
        return False

    logger.info(f"✅ Schedule {schedule.id} ({schedule.doctor_name}) transitioned -> {new_status}")

    update_doctor_status(db, schedule.doctor_id, new_status)
    create_notification(db, transition, schedule_snapshot(schedule))
    return True


def update_schedule_statuses(
    db: Session,
    schedules: Optional[list[Schedule]] = None,
    now: Optional[datetime] = None,
) -> dict:
    """
    Scan schedules and apply holiday transitions that are due.
    Runs on every schedule list load and once a minute in the background worker.

    Args:
        db: Database session
        schedules: Already loaded schedules; all schedules when omitted
        now: Clinic-local time to evaluate against; the current time when omitted

    Returns:
        dict: Summary of status changes made
    """
    now = now or dates.now_local()
    if schedules is None:
        schedules = db.query(Schedule).all()

    summary = {
        "checked": len(schedules),
        "holiday_started": 0,
        "holiday_ended": 0,
        "failed": 0,
        "total_updated": 0,
    }

    for schedule in schedules:
        transition = evaluate_schedule(schedule, now)
        if not transition:
            continue

        if apply_transition(db, schedule, transition, now):
            if transition == HOLIDAY_ENDED:
                summary["holiday_ended"] += 1
            else:
                summary["holiday_started"] += 1
        else:
            summary["failed"] += 1

    summary["total_updated"] = summary["holiday_started"] + summary["holiday_ended"]
    if summary["total_updated"] or summary["failed"]:
        logger.info(f"📊 Status automation summary: {summary}")
    else:
        logger.debug("ℹ️ No schedule status updates needed")

    return summary


def stage_holiday(db: Session, schedule: Schedule, reason: str, start: date, end: date) -> Schedule:
    """
    Put a schedule on holiday at an operator's request.

    Raises:
        Exception: If the schedule write fails (cascades are best-effort)
    """
    try:
        schedule.status = STATUS_HOLIDAY
        schedule.holiday_reason = reason
        schedule.holiday_start_date = start
        schedule.holiday_end_date = end
        schedule.last_updated = dates.now_local()
        db.commit()
        db.refresh(schedule)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error setting holiday for schedule {schedule.id}: {str(e)}")
        raise

    logger.info(f"🏖️ Holiday set for {schedule.doctor_name}: {start} - {end}")
    update_doctor_status(db, schedule.doctor_id, STATUS_HOLIDAY)
    create_notification(db, HOLIDAY_SET, schedule_snapshot(schedule))
    return schedule


def end_holiday(db: Session, schedule: Schedule, notification_type: str = HOLIDAY_CANCELLED) -> Schedule:
    """
    Return a schedule to active and clear its holiday window at an operator's request.
    Used both for early cancellation and for activating an expired holiday by hand.

    Raises:
        Exception: If the schedule write fails (cascades are best-effort)
    """
    try:
        schedule.status = STATUS_ACTIVE
        clear_holiday(schedule)
        schedule.last_updated = dates.now_local()
        db.commit()
        db.refresh(schedule)
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error ending holiday for schedule {schedule.id}: {str(e)}")
        raise

    logger.info(f"✅ Holiday ended for {schedule.doctor_name} ({notification_type})")
    update_doctor_status(db, schedule.doctor_id, STATUS_ACTIVE)
    create_notification(db, notification_type, schedule_snapshot(schedule))
    return schedule
