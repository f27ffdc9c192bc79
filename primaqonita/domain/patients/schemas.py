"""Patient domain schemas - Pydantic models and the registration status vocabulary"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

STATUS_SCHEDULED = "scheduled"
STATUS_QUEUED = "queued"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

STATUS_LABELS = {
    STATUS_SCHEDULED: "Terjadwal",
    STATUS_QUEUED: "Dalam Antrian",
    STATUS_COMPLETED: "Selesai",
    STATUS_CANCELLED: "Dibatalkan",
}

# Both vocabularies the booking channel has written over time
LEGACY_STATUSES = {
    "pending": STATUS_SCHEDULED,
    "terjadwal": STATUS_SCHEDULED,
    "confirmed": STATUS_QUEUED,
    "dalam antrian": STATUS_QUEUED,
    "completed": STATUS_COMPLETED,
    "selesai": STATUS_COMPLETED,
    "cancelled": STATUS_CANCELLED,
    "dibatalkan": STATUS_CANCELLED,
}

QUEUE_STATUS_LABELS = {
    "waiting": "Menunggu",
    "in_progress": "Sedang Dilayani",
    "completed": "Selesai",
    "skipped": "Dilewati",
}


def normalize_status(value: Optional[str]) -> Optional[str]:
    """Map a canonical or legacy status literal to the canonical enum, None if unknown"""
    if not value:
        return None
    key = value.strip().lower()
    if key in STATUS_LABELS:
        return key
    return LEGACY_STATUSES.get(key)


def status_label(value: Optional[str]) -> str:
    canonical = normalize_status(value)
    return STATUS_LABELS[canonical] if canonical else (value or "")


class PatientStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        canonical = normalize_status(v)
        if not canonical:
            raise ValueError("Status pasien tidak valid")
        return canonical


class PatientResponse(BaseModel):
    """Registration as written by the booking channel, with status normalized"""

    id: str
    nama: str
    nik: str
    telepon: str
    jenis_kelamin: Optional[str] = None
    alamat: Optional[str] = None
    layanan: Optional[str] = None
    spesialisasi_dokter: Optional[str] = None
    dokter: Optional[str] = None
    tanggal: str
    estimated_time: Optional[str] = None
    status: Optional[str] = None
    status_label: str = ""
    queue_status: Optional[str] = None
    queue_number: Optional[int] = None
    keluhan: Optional[str] = None
    booking_source: Optional[str] = None
    tanggal_daftar: Optional[str] = None
    updated_at: Optional[datetime] = None
