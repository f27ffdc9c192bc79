from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Notification, User

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationResponse(BaseModel):
    id: str
    type: str
    message: str
    doctorId: Optional[str] = None
    doctorName: Optional[str] = None
    poly: Optional[str] = None
    scheduleId: Optional[str] = None
    read: bool
    timestamp: datetime


def to_response(notification: Notification) -> NotificationResponse:
    return NotificationResponse(
        id=notification.id,
        type=notification.type,
        message=notification.message,
        doctorId=notification.doctor_id,
        doctorName=notification.doctor_name,
        poly=notification.poly,
        scheduleId=notification.schedule_id,
        read=notification.read,
        timestamp=notification.timestamp,
    )


@router.get("", response_model=list[NotificationResponse])
async def get_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get schedule notifications, newest first"""
    query = db.query(Notification)
    if unread_only:
        query = query.filter(Notification.read.is_(False))
    notifications = query.order_by(Notification.timestamp.desc()).limit(limit).all()
    return [to_response(n) for n in notifications]


@router.get("/unread-count")
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    count = db.query(Notification).filter(Notification.read.is_(False)).count()
    return {"unread_count": count}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark a single notification as read"""
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notifikasi tidak ditemukan")

    notification.read = True
    db.commit()
    db.refresh(notification)
    return to_response(notification)


@router.post("/mark-all-read")
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mark every unread notification as read"""
    updated = (
        db.query(Notification)
        .filter(Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    return {"message": "Semua notifikasi ditandai sudah dibaca", "updated": updated}
