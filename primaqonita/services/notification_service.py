"""
Notification log for schedule and doctor state changes
Every schedule operation appends one record; records are never edited except for the read flag
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Notification, Schedule
from ..shared import dates

logger = logging.getLogger(__name__)

HOLIDAY_SET = "holiday_set"
HOLIDAY_ENDED = "holiday_ended"
HOLIDAY_CANCELLED = "holiday_cancelled"
SCHEDULE_CREATED = "schedule_created"
SCHEDULE_UPDATED = "schedule_updated"
SCHEDULE_DELETED = "schedule_deleted"

NOTIFICATION_MESSAGES = {
    HOLIDAY_SET: "Dokter {doctor_name} di Poli {poly} libur dari {start} hingga {end} karena {reason}.",
    HOLIDAY_ENDED: "Dokter {doctor_name} di Poli {poly} telah selesai libur dan kembali aktif.",
    HOLIDAY_CANCELLED: "Libur dokter {doctor_name} di Poli {poly} telah dibatalkan dan kembali aktif.",
    SCHEDULE_UPDATED: "Jadwal praktek dokter {doctor_name} di Poli {poly} telah diperbarui.",
    SCHEDULE_CREATED: "Jadwal praktek baru untuk dokter {doctor_name} di Poli {poly} telah dibuat.",
    SCHEDULE_DELETED: "Jadwal praktek dokter {doctor_name} di Poli {poly} telah dihapus.",
}


def schedule_snapshot(schedule: Schedule) -> dict:
    """Copy the fields a notification needs, so it can be written after the schedule is gone"""
    return {
        "schedule_id": schedule.id,
        "doctor_id": schedule.doctor_id,
        "doctor_name": schedule.doctor_name,
        "poly": schedule.poly,
        "reason": schedule.holiday_reason or "",
        "start": schedule.holiday_start_date.isoformat() if schedule.holiday_start_date else "",
        "end": schedule.holiday_end_date.isoformat() if schedule.holiday_end_date else "",
    }


def build_message(notification_type: str, snapshot: dict) -> str:
    return NOTIFICATION_MESSAGES[notification_type].format(**snapshot)


def create_notification(
    db: Session,
    notification_type: str,
    snapshot: dict,
    custom_message: Optional[str] = None,
) -> Optional[Notification]:
    """
    Append a notification record.

    Failures are logged and rolled back, never raised: the schedule write
    that triggered the notification has already been committed.
    """
    try:
        notification = Notification(
            type=notification_type,
            message=custom_message or build_message(notification_type, snapshot),
            doctor_id=snapshot.get("doctor_id") or "",
            doctor_name=snapshot.get("doctor_name"),
            poly=snapshot.get("poly"),
            schedule_id=snapshot.get("schedule_id"),
            read=False,
            timestamp=dates.now_local(),
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        logger.info(f"🔔 Notification created: {notification_type} (schedule {snapshot.get('schedule_id')})")
        return notification
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Error creating {notification_type} notification: {str(e)}")
        return None
