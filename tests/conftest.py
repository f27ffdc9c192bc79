import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("FIREBASE_PROJECT_ID", "primaqonita-test")
os.environ.setdefault("CLINIC_TIMEZONE", "Asia/Jakarta")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from primaqonita.auth import get_current_user
from primaqonita.database import Base, get_db
from primaqonita.main import app
from primaqonita.models import Doctor, Patient, Schedule, User
from primaqonita.shared import dates

# In-memory database shared by every session through a single connection
engine = create_engine(
    "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Wednesday; the Sunday-start week around it runs 2025-01-05 .. 2025-01-11
FIXED_NOW = datetime(2025, 1, 8, 9, 30)

DEFAULT_SHIFTS = [
    {"id": "pagi", "name": "Pagi", "startTime": "08:00", "endTime": "12:00", "maxPatients": 20}
]


class Clock:
    def __init__(self, now):
        self.now = now


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    """Pin clinic-local time; a test moves it by assigning clock.now"""
    pinned = Clock(FIXED_NOW)
    monkeypatch.setattr(dates, "now_local", lambda: pinned.now)
    return pinned


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def override_db(session):
    def _get_db():
        yield session

    return _get_db


@pytest.fixture
def client(db):
    admin = User(id="admin", firebase_uid="firebase-admin", email="admin@primaqonita.id", full_name="Admin")
    app.dependency_overrides[get_db] = override_db(db)
    app.dependency_overrides[get_current_user] = lambda: admin
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db):
    app.dependency_overrides[get_db] = override_db(db)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_doctor(db):
    def _make(name="dr. Sari", specialization="Anak", status=None):
        doctor = Doctor(name=name, specialization=specialization, status=status)
        db.add(doctor)
        db.commit()
        db.refresh(doctor)
        return doctor

    return _make


@pytest.fixture
def make_schedule(db):
    def _make(doctor=None, doctor_id=None, poly="Poli Anak", status="active", **fields):
        schedule = Schedule(
            doctor_id=doctor.id if doctor else doctor_id,
            doctor_name=doctor.name if doctor else "dr. Hilang",
            poly=poly,
            days=fields.pop("days", ["monday", "wednesday"]),
            shifts=fields.pop("shifts", DEFAULT_SHIFTS),
            status=status,
            **fields,
        )
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    return _make


@pytest.fixture
def make_patient(db):
    def _make(nama="Ayu Lestari", tanggal="2025-01-08", **fields):
        patient = Patient(
            nama=nama,
            nik=fields.pop("nik", "3201010101010001"),
            telepon=fields.pop("telepon", "081234567890"),
            tanggal=tanggal,
            **fields,
        )
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    return _make


@pytest.fixture
def session_factory(db):
    """Sessionmaker bound to the test database, for code that opens its own sessions"""
    return TestingSessionLocal
