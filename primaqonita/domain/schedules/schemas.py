"""Schedule domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ValidationInfo, field_validator

from ...shared.validators import validate_clock_time, validate_not_blank, validate_weekdays

# Statuses an operator may set directly; holiday goes through the holiday endpoints
EDITABLE_STATUSES = ("active", "inactive")
DEFAULT_MAX_PATIENTS = 20


class ShiftInput(BaseModel):
    """One practice session within a schedule day"""

    id: Optional[str] = None
    name: str
    startTime: str
    endTime: str
    maxPatients: int = DEFAULT_MAX_PATIENTS

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_not_blank(v, "Nama shift wajib diisi")

    @field_validator("startTime")
    @classmethod
    def validate_start(cls, v):
        return validate_clock_time(v, "Jam mulai wajib diisi dengan format HH:MM")

    @field_validator("endTime")
    @classmethod
    def validate_end(cls, v):
        return validate_clock_time(v, "Jam selesai wajib diisi dengan format HH:MM")

    @field_validator("maxPatients")
    @classmethod
    def validate_max_patients(cls, v):
        if v < 1:
            raise ValueError("Kuota pasien minimal 1")
        return v


class ScheduleCreate(BaseModel):
    """
    Schema for creating a practice schedule.
    Older clients send a single flat startTime/endTime instead of shifts;
    the service migrates that into one shift.
    """

    doctorId: str
    poly: Optional[str] = None
    days: list[str]
    shifts: list[ShiftInput] = []
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    status: Optional[str] = None

    @field_validator("doctorId")
    @classmethod
    def validate_doctor(cls, v):
        return validate_not_blank(v, "Pilih dokter")

    @field_validator("poly")
    @classmethod
    def validate_poly(cls, v):
        if v is not None:
            return validate_not_blank(v, "Poli wajib diisi")
        return v

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        if not v:
            raise ValueError("Pilih minimal satu hari")
        return validate_weekdays(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_legacy_time(cls, v):
        if v:
            return validate_clock_time(v)
        return None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in EDITABLE_STATUSES:
            raise ValueError("Status jadwal harus active atau inactive")
        return v


class ScheduleUpdate(ScheduleCreate):
    """Schema for replacing a schedule's days, shifts, poly and status"""


class HolidayRequest(BaseModel):
    """Schema for putting a schedule on holiday"""

    reason: str
    startDate: date
    endDate: date

    @field_validator("reason")
    @classmethod
    def validate_reason(cls, v):
        return validate_not_blank(v, "Alasan libur wajib diisi")

    @field_validator("endDate")
    @classmethod
    def validate_end_date(cls, v, info: ValidationInfo):
        start = info.data.get("startDate")
        if start and v < start:
            raise ValueError("Tanggal selesai tidak boleh sebelum tanggal mulai")
        return v


class ScheduleResponse(BaseModel):
    id: str
    doctorId: str
    doctorName: str
    poly: str
    days: list[str]
    shifts: list[dict]
    status: str
    holidayReason: Optional[str] = None
    holidayStartDate: Optional[date] = None
    holidayEndDate: Optional[date] = None
    remainingHolidayDays: int = 0
    holidayExpired: bool = False
    createdAt: Optional[datetime] = None
    lastUpdated: Optional[datetime] = None
