"""Clinic-local date and time helpers"""

from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ..config import CLINIC_TIMEZONE

DAY_NAMES = ["Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu"]

MONTH_NAMES = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]

# Millisecond precision, matching the dashboard's "end of day"
END_OF_DAY = time(23, 59, 59, 999000)


def now_local() -> datetime:
    """Current wall-clock time in the clinic's timezone, as a naive datetime"""
    return datetime.now(ZoneInfo(CLINIC_TIMEZONE)).replace(tzinfo=None)


def today_local() -> date:
    return now_local().date()


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, END_OF_DAY)


def normalize_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a booking date written either as DD/MM/YYYY or as ISO (date or datetime).
    Returns None when the value cannot be read.
    """
    if not value:
        return None
    value = value.strip()
    try:
        if "/" in value:
            day, month, year = value.split("/")
            return date(int(year), int(month), int(day))
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def week_bounds(today: date) -> tuple[date, date]:
    """Sunday-to-Saturday week containing ``today``"""
    week_start = today - timedelta(days=(today.weekday() + 1) % 7)
    return week_start, week_start + timedelta(days=6)


def month_bounds(today: date) -> tuple[date, date]:
    month_start = today.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)
    return month_start, next_month - timedelta(days=1)


def parse_month(value: str) -> tuple[int, int]:
    """Parse YYYY-MM into (year, month)"""
    year, month = value.split("-")
    return int(year), int(month)


def day_name(value: Optional[str]) -> str:
    parsed = normalize_date(value)
    return DAY_NAMES[parsed.weekday()] if parsed else ""


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]
