import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text
from sqlalchemy.sql import func

from .database import Base


def generate_id():
    """Generate an opaque record ID"""
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_id)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Patient(Base):
    """Registration written by the external booking channel"""

    __tablename__ = "patients"

    id = Column(String(32), primary_key=True, default=generate_id)
    nama = Column(String(255), nullable=False)
    nik = Column(String(32), nullable=False, default="")
    telepon = Column(String(32), nullable=False, default="")
    jenis_kelamin = Column(String(20), nullable=True)
    alamat = Column(String(500), nullable=True)
    layanan = Column(String(100), nullable=True)  # service line, e.g. "Poli Anak"
    spesialisasi_dokter = Column(String(100), nullable=True)
    dokter = Column(String(255), nullable=True)
    tanggal = Column(String(20), nullable=False)  # YYYY-MM-DD or DD/MM/YYYY, as booked
    estimated_time = Column(String(20), nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, queued, completed, cancelled
    queue_status = Column(String(20), nullable=True)  # waiting, in_progress, completed, skipped
    queue_number = Column(Integer, nullable=True)
    keluhan = Column(Text, nullable=True)
    booking_source = Column(String(50), nullable=True)
    tanggal_daftar = Column(String(40), nullable=True)  # registration timestamp text
    updated_at = Column(DateTime, nullable=True)


class Doctor(Base):
    __tablename__ = "doctors"

    id = Column(String(32), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    specialization = Column(String(100), nullable=False)
    # active, holiday, inactive - null until a schedule has touched this doctor
    status = Column(String(20), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    last_updated = Column(DateTime, nullable=True)


class Schedule(Base):
    __tablename__ = "schedules"

    id = Column(String(32), primary_key=True, default=generate_id)
    # No foreign key: orphaned schedules are cleaned up when the list is loaded
    doctor_id = Column(String(32), nullable=False, index=True)
    doctor_name = Column(String(255), nullable=False)
    poly = Column(String(100), nullable=False)
    days = Column(JSON, nullable=False, default=list)  # ["monday", "wednesday", ...]
    shifts = Column(JSON, nullable=False, default=list)  # [{id, name, startTime, endTime, maxPatients}]
    status = Column(String(20), nullable=False, default="active")  # active, holiday, inactive
    holiday_reason = Column(String(500), nullable=True)
    holiday_start_date = Column(Date, nullable=True)
    holiday_end_date = Column(Date, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    last_updated = Column(DateTime, nullable=True)


class FollowUpAppointment(Base):
    __tablename__ = "follow_up_appointments"

    id = Column(String(32), primary_key=True, default=generate_id)
    patient_id = Column(String(32), nullable=False, index=True)
    patient_name = Column(String(255), nullable=False)
    doctor_name = Column(String(255), nullable=True)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(String(5), nullable=False)  # HH:MM
    notes = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, completed, cancelled, rescheduled
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, nullable=True)


class Notification(Base):
    """Append-only log of schedule and doctor state changes"""

    __tablename__ = "notifications"

    id = Column(String(32), primary_key=True, default=generate_id)
    type = Column(String(50), nullable=False, index=True)
    message = Column(Text, nullable=False)
    doctor_id = Column(String(32), nullable=True)
    doctor_name = Column(String(255), nullable=True)
    poly = Column(String(100), nullable=True)
    schedule_id = Column(String(32), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    timestamp = Column(DateTime, nullable=False)
