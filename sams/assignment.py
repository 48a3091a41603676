# sams/assignment.py
"""Confirm an appointment and bind it to one staff member in a single write."""

from typing import List, NamedTuple, Optional

from sqlmodel import Session

from .appointments import can_manage, get_appointment, list_appointments, update_appointment_status
from .errors import PermissionDeniedError, ValidationError
from .models import Appointment
from .preferences import PreferenceResolution, resolve_preferences, suggest_staff_id
from .staff_directory import list_staff_by_company
from .statuses import AppointmentStatus


class AssignmentResult(NamedTuple):
    appointment: Appointment
    appointments: List[Appointment]  # refreshed listing for the same actor


class StaffChoice(NamedTuple):
    resolution: PreferenceResolution
    suggested_staff_id: Optional[int]


def staff_options(session: Session, actor: dict, appointment_id: int) -> StaffChoice:
    """Roster split into preferred/other for the assignment picker."""
    appt = get_appointment(session, actor, appointment_id)
    if not can_manage(session, actor, appt):
        raise PermissionDeniedError("Access denied")

    roster = list_staff_by_company(session, appt.company_id)
    return StaffChoice(
        resolution=resolve_preferences(appt.staff_preferences, roster),
        suggested_staff_id=suggest_staff_id(roster, appt.staff_preferences, appt.staff_id),
    )


def assign_staff(session: Session, actor: dict, appointment_id: int, staff_id) -> AssignmentResult:
    if not staff_id:
        raise ValidationError("Please select a staff member")

    appt = update_appointment_status(
        session, actor, appointment_id, AppointmentStatus.confirmed, staff_id=staff_id
    )
    return AssignmentResult(appointment=appt, appointments=list_appointments(session, actor))
