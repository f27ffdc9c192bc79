"""Shared validation utilities"""

import re
from datetime import datetime
from typing import Optional

WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def validate_not_blank(value: Optional[str], message: str) -> str:
    """
    Trim a required text field.

    Args:
        value: Raw input
        message: Localized error shown when the field is empty

    Returns:
        The stripped value

    Raises:
        ValueError: If the value is missing or only whitespace
    """
    if value is None or not value.strip():
        raise ValueError(message)
    return value.strip()


def validate_clock_time(value: Optional[str], message: str = "Format jam harus HH:MM") -> str:
    """Validate a HH:MM wall-clock time"""
    if not value or not re.match(r"^\d{2}:\d{2}$", value):
        raise ValueError(message)
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError as e:
        raise ValueError(message) from e
    return value


def validate_weekdays(days: list[str]) -> list[str]:
    """Lowercase weekday codes, dropping duplicates and keeping Monday-first order"""
    normalized = {d.strip().lower() for d in days}
    unknown = normalized - set(WEEKDAYS)
    if unknown:
        raise ValueError(f"Hari tidak dikenal: {', '.join(sorted(unknown))}")
    return [d for d in WEEKDAYS if d in normalized]
