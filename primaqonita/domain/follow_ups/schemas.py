"""Follow-up appointment schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_clock_time, validate_not_blank

STATUS_LABELS = {
    "scheduled": "Terjadwal",
    "completed": "Selesai",
    "cancelled": "Dibatalkan",
    "rescheduled": "Dijadwal Ulang",
}


def validate_follow_up_status(value: str) -> str:
    if value not in STATUS_LABELS:
        raise ValueError("Status jadwal kontrol tidak valid")
    return value


class FollowUpCreate(BaseModel):
    """Schema for booking a control visit for a registered patient"""

    patientId: str
    appointmentDate: date
    appointmentTime: str
    notes: Optional[str] = None

    @field_validator("patientId")
    @classmethod
    def validate_patient(cls, v):
        return validate_not_blank(v, "Pasien wajib dipilih")

    @field_validator("appointmentTime")
    @classmethod
    def validate_time(cls, v):
        return validate_clock_time(v, "Waktu kontrol harus diisi dengan format HH:MM")

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return v.strip() if v else v


class FollowUpUpdate(BaseModel):
    """Schema for editing a control visit; omitted fields keep their value"""

    appointmentDate: Optional[date] = None
    appointmentTime: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @field_validator("appointmentTime")
    @classmethod
    def validate_time(cls, v):
        if v is not None:
            return validate_clock_time(v, "Waktu kontrol harus diisi dengan format HH:MM")
        return v

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return v.strip() if v is not None else v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None:
            return validate_follow_up_status(v)
        return v


class FollowUpStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_follow_up_status(v)


class FollowUpResponse(BaseModel):
    id: str
    patientId: str
    patientName: str
    doctorName: Optional[str] = None
    appointmentDate: date
    appointmentTime: str
    notes: Optional[str] = None
    status: str
    statusLabel: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class FollowUpSummary(BaseModel):
    total: int
    today: int
    upcoming: int
    completed: int
