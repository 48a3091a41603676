# sams/validators.py
"""Format checks shared by the booking and staff modules."""

import re
from datetime import datetime
from typing import Optional

from .errors import ValidationError

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def validate_date(value: str) -> str:
    # Format only. "2024-02-30" passes.
    if not isinstance(value, str) or not DATE_RE.match(value):
        raise ValidationError("Invalid date format. Use YYYY-MM-DD")
    return value


def validate_time(value: str) -> str:
    if not isinstance(value, str) or not TIME_RE.match(value):
        raise ValidationError("Invalid time format. Use HH:MM")
    return value


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def parse_slot(date_value: str, time_value: str) -> Optional[datetime]:
    """Combine a validated date and time; None when the date is not a real calendar day."""
    hours, minutes = time_value.split(":")
    try:
        return datetime.strptime(f"{date_value} {int(hours):02d}:{minutes}", "%Y-%m-%d %H:%M")
    except ValueError:
        return None


def validate_working_hours(start: Optional[str], end: Optional[str]):
    if start:
        validate_time(start)
    if end:
        validate_time(end)
    if start and end and time_to_minutes(end) <= time_to_minutes(start):
        raise ValidationError("Working hours end must be after start")


def validate_staff_preferences(preferences, limit: int) -> Optional[list]:
    if preferences is None:
        return None
    preferences = list(preferences)
    if len(preferences) > limit:
        raise ValidationError(f"You can select up to {limit} preferred staff members")
    for staff_id in preferences:
        if isinstance(staff_id, bool) or not isinstance(staff_id, int) or staff_id <= 0:
            raise ValidationError("Staff preferences must be positive staff ids")
    if len(set(preferences)) != len(preferences):
        raise ValidationError("Staff preferences cannot contain duplicates")
    return preferences
