"""Patient service - Filtering, status updates and export for registrations"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from ...models import Patient
from ...shared import dates
from ...shared.spreadsheet import build_workbook, xlsx_response
from .repository import PatientRepository
from .schemas import QUEUE_STATUS_LABELS, normalize_status, status_label

logger = logging.getLogger(__name__)

DATE_FILTERS = ("all", "today", "yesterday", "this_week", "this_month", "custom_date", "custom_month")

EXPORT_COLUMNS = [
    ("No", 5),
    ("ID Registrasi", 20),
    ("Nomor Antrian", 12),
    ("Nama Pasien", 20),
    ("NIK", 20),
    ("Jenis Kelamin", 15),
    ("No. Telepon", 15),
    ("Alamat", 30),
    ("Layanan", 15),
    ("Spesialisasi", 20),
    ("Dokter", 20),
    ("Tanggal Periksa", 15),
    ("Estimasi Waktu", 12),
    ("Hari", 10),
    ("Status", 15),
    ("Status Antrian", 15),
    ("Keluhan", 30),
    ("Sumber Booking", 15),
    ("Tanggal Daftar", 20),
]


def sort_key(patient: Patient) -> tuple:
    """Visit date first (unreadable dates last), then queue number (missing counts as 0)"""
    return dates.normalize_date(patient.tanggal) or date.max, patient.queue_number or 0


def matches_date_filter(
    visit: Optional[date],
    date_filter: str,
    today: date,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    month: Optional[str] = None,
) -> bool:
    if date_filter == "all":
        return True
    # An incomplete custom range or month leaves the list unfiltered
    if date_filter == "custom_date" and not (date_from and date_to):
        return True
    if date_filter == "custom_month" and not month:
        return True
    if visit is None:
        return False

    if date_filter == "today":
        return visit == today
    if date_filter == "yesterday":
        return visit == today - timedelta(days=1)
    if date_filter == "this_week":
        week_start, week_end = dates.week_bounds(today)
        return week_start <= visit <= week_end
    if date_filter == "this_month":
        month_start, month_end = dates.month_bounds(today)
        return month_start <= visit <= month_end
    if date_filter == "custom_date":
        return date_from <= visit <= date_to
    year, month_number = dates.parse_month(month)
    return visit.year == year and visit.month == month_number


def export_filename(
    date_filter: str,
    today: date,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    month: Optional[str] = None,
) -> str:
    if date_filter == "custom_date" and date_from and date_to:
        suffix = f"{date_from.isoformat()}_sampai_{date_to.isoformat()}"
    elif date_filter == "custom_month" and month:
        year, month_number = dates.parse_month(month)
        suffix = f"{dates.month_name(month_number)}_{year}"
    elif date_filter == "today":
        suffix = f"Hari_Ini_{today.isoformat()}"
    elif date_filter == "this_week":
        suffix = "Minggu_Ini"
    elif date_filter == "this_month":
        suffix = "Bulan_Ini"
    else:
        suffix = f"Semua_Data_{today.isoformat()}"
    return f"Data_Pasien_{suffix}.xlsx"


class PatientService:
    """Service layer for patient registrations"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PatientRepository()

    def get_patients(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        layanan: Optional[str] = None,
        date_filter: str = "all",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        month: Optional[str] = None,
    ) -> list[Patient]:
        """
        Filter registrations the way the dashboard list does.

        Args:
            search: Case-insensitive name match, or substring of NIK, phone or ID
            status: Canonical or legacy status literal
            layanan: Exact service line
            date_filter: One of DATE_FILTERS, evaluated against the clinic-local date
            date_from, date_to: Inclusive range for custom_date
            month: YYYY-MM for custom_month

        Returns:
            Patients sorted by visit date, then queue number
        """
        if date_filter not in DATE_FILTERS:
            raise HTTPException(status_code=400, detail=f"Filter tanggal tidak dikenal: {date_filter}")

        patients = self.repo.get_patients(self.db)

        if search:
            term = search.strip()
            lowered = term.lower()
            patients = [
                p for p in patients
                if lowered in (p.nama or "").lower()
                or term in (p.nik or "")
                or term in (p.telepon or "")
                or term in p.id
            ]

        if status and status != "all":
            wanted = normalize_status(status)
            patients = [p for p in patients if normalize_status(p.status) == wanted]

        if layanan and layanan != "all":
            patients = [p for p in patients if p.layanan == layanan]

        today = dates.today_local()
        patients = [
            p for p in patients
            if matches_date_filter(dates.normalize_date(p.tanggal), date_filter, today, date_from, date_to, month)
        ]

        return sorted(patients, key=sort_key)

    @staticmethod
    def group_by_date(patients: list[Patient]) -> list[tuple[Optional[date], list[Patient]]]:
        """Group already sorted patients by visit date, ascending"""
        groups: dict[Optional[date], list[Patient]] = {}
        for patient in patients:
            groups.setdefault(dates.normalize_date(patient.tanggal), []).append(patient)
        return sorted(groups.items(), key=lambda item: item[0] or date.max)

    def get_layanan_options(self) -> list[str]:
        return sorted({p.layanan for p in self.repo.get_patients(self.db) if p.layanan})

    def get_patient(self, patient_id: str) -> Patient:
        patient = self.repo.get_patient_by_id(self.db, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Pasien tidak ditemukan")
        return patient

    def update_status(self, patient_id: str, new_status: str) -> Patient:
        patient = self.get_patient(patient_id)
        if normalize_status(patient.status) == new_status:
            raise HTTPException(status_code=400, detail="Status pasien tidak berubah")

        old_status = patient.status
        try:
            patient = self.repo.update_status(self.db, patient, new_status, dates.now_local())
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating status for patient {patient_id}: {str(e)}")
            raise HTTPException(status_code=500, detail="Gagal memperbarui status pasien") from e

        logger.info(f"✅ Patient {patient_id} status: {old_status} -> {new_status}")
        return patient

    def export_patients(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        layanan: Optional[str] = None,
        date_filter: str = "all",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        month: Optional[str] = None,
    ) -> StreamingResponse:
        """Export the currently filtered list as an .xlsx download"""
        patients = self.get_patients(search, status, layanan, date_filter, date_from, date_to, month)
        logger.info(f"📊 Patient export requested: {len(patients)} rows (filter={date_filter})")

        rows = [
            {
                "No": index,
                "ID Registrasi": p.id or "-",
                "Nomor Antrian": p.queue_number or "-",
                "Nama Pasien": p.nama,
                "NIK": p.nik,
                "Jenis Kelamin": p.jenis_kelamin,
                "No. Telepon": p.telepon,
                "Alamat": p.alamat,
                "Layanan": p.layanan,
                "Spesialisasi": p.spesialisasi_dokter,
                "Dokter": p.dokter,
                "Tanggal Periksa": p.tanggal,
                "Estimasi Waktu": p.estimated_time,
                "Hari": dates.day_name(p.tanggal),
                "Status": status_label(p.status),
                "Status Antrian": QUEUE_STATUS_LABELS.get(p.queue_status, p.queue_status),
                "Keluhan": p.keluhan,
                "Sumber Booking": p.booking_source,
                "Tanggal Daftar": p.tanggal_daftar,
            }
            for index, p in enumerate(patients, start=1)
        ]

        content = build_workbook(rows, EXPORT_COLUMNS, "Data Pasien")
        filename = export_filename(date_filter, dates.today_local(), date_from, date_to, month)
        return xlsx_response(content, filename)
