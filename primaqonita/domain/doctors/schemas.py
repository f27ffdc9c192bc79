"""Doctor domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_not_blank


class DoctorCreate(BaseModel):
    """Schema for registering a doctor"""

    name: str
    specialization: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return validate_not_blank(v, "Nama dokter wajib diisi")

    @field_validator("specialization")
    @classmethod
    def validate_specialization(cls, v):
        return validate_not_blank(v, "Spesialisasi wajib diisi")


class DoctorUpdate(BaseModel):
    """Schema for editing a doctor"""

    name: Optional[str] = None
    specialization: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if v is not None:
            return validate_not_blank(v, "Nama dokter wajib diisi")
        return v

    @field_validator("specialization")
    @classmethod
    def validate_specialization(cls, v):
        if v is not None:
            return validate_not_blank(v, "Spesialisasi wajib diisi")
        return v


class DoctorResponse(BaseModel):
    id: str
    name: str
    specialization: str
    status: Optional[str] = None
    createdAt: Optional[datetime] = None
    lastUpdated: Optional[datetime] = None
