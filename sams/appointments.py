# sams/appointments.py
"""Appointment bookings and their status lifecycle.

Access to a single appointment is granted to admins, the booking user, the
owner of the appointment's company and the staff member assigned to it.
Only admins and the owning company's owner may write ``status``,
``staff_id`` and ``staff_preferences``; those fields are dropped from
anyone else's update.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from . import config
from .catalog import get_service
from .companies import find_company_for_owner, get_company
from .deps import require_any_role
from .errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from .models import Appointment, Staff, User, utcnow
from .roles import Role, is_admin_role, is_owner_role, is_staff_role, is_user_role
from .statuses import ACTIVE_APPOINTMENT_STATUSES, AppointmentStatus, CompanyStatus, ServiceStatus, can_transition
from .validators import parse_slot, validate_date, validate_staff_preferences, validate_time

logger = logging.getLogger(__name__)

PRIVILEGED_FIELDS = ("status", "staff_id", "staff_preferences")


# ---- helpers ----

def _normalize_time(value: str) -> str:
    hours, minutes = validate_time(value).split(":")
    return f"{int(hours):02d}:{minutes}"


def _parse_status(status) -> AppointmentStatus:
    try:
        return AppointmentStatus(status)
    except ValueError:
        raise ValidationError("Invalid status. Must be one of: pending, confirmed, completed, cancelled")


def _check_transition(appt: Appointment, target: AppointmentStatus):
    if not config.ENFORCE_STATUS_TRANSITIONS:
        return
    current = AppointmentStatus(appt.status)
    if not can_transition(current, target):
        raise ValidationError(f"Cannot change status from {current.value} to {target.value}")


def _check_notes(notes: Optional[str]):
    if notes is not None and len(notes) > config.NOTES_MAX_LENGTH:
        raise ValidationError(f"Notes cannot exceed {config.NOTES_MAX_LENGTH} characters")


def _check_staff_in_company(session: Session, staff_id: int, company_id: int):
    staff = session.get(Staff, staff_id)
    if staff is None or staff.company_id != company_id:
        raise ValidationError("Staff member does not belong to this company")


def _check_slot_available(session: Session, company_id: int, service_id: int,
                          appointment_date: str, appointment_time: str, exclude_id: Optional[int] = None):
    stmt = (
        select(Appointment.id)
        .where(Appointment.company_id == company_id)
        .where(Appointment.service_id == service_id)
        .where(Appointment.appointment_date == appointment_date)
        .where(Appointment.appointment_time == appointment_time)
        .where(Appointment.status.in_(ACTIVE_APPOINTMENT_STATUSES))
    )
    if exclude_id is not None:
        stmt = stmt.where(Appointment.id != exclude_id)
    if session.exec(stmt).first() is not None:
        raise ConflictError("Time slot is not available")


def _staff_ids_for_user(session: Session, user_id: int) -> List[int]:
    return list(session.exec(select(Staff.id).where(Staff.user_id == user_id)).all())


def is_company_owner(session: Session, actor: dict, company_id: int) -> bool:
    if not is_owner_role(actor["role"]):
        return False
    company = find_company_for_owner(session, actor["id"])
    return company is not None and company.id == company_id


def can_manage(session: Session, actor: dict, appt: Appointment) -> bool:
    """Admin, or the owner of the appointment's company."""
    return is_admin_role(actor["role"]) or is_company_owner(session, actor, appt.company_id)


def can_access(session: Session, actor: dict, appt: Appointment) -> bool:
    if can_manage(session, actor, appt) or appt.user_id == actor["id"]:
        return True
    if is_staff_role(actor["role"]) and appt.staff_id is not None:
        return appt.staff_id in _staff_ids_for_user(session, actor["id"])
    return False


# ---- operations ----

def get_appointment(session: Session, actor: dict, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if appt is None:
        raise NotFoundError("Appointment not found")
    if not can_access(session, actor, appt):
        raise PermissionDeniedError("Access denied")
    return appt


def create_appointment(
    session: Session,
    actor: dict,
    *,
    company_id: int,
    service_id: int,
    appointment_date: str,
    appointment_time: str,
    notes: Optional[str] = None,
    user_id: Optional[int] = None,
    staff_id: Optional[int] = None,
    staff_preferences: Optional[List[int]] = None,
) -> Appointment:
    require_any_role(actor, (Role.ADMIN, Role.OWNER, Role.USER))

    validate_date(appointment_date)
    appointment_time = _normalize_time(appointment_time)
    _check_notes(notes)
    staff_preferences = validate_staff_preferences(staff_preferences, config.MAX_STAFF_PREFERENCES)

    if not config.ALLOW_PAST_APPOINTMENTS:
        slot = parse_slot(appointment_date, appointment_time)
        # not a real calendar day: nothing to compare, the format check already passed
        if slot is not None and slot <= datetime.now():
            raise ValidationError("Appointment date and time must be in the future")

    company = get_company(session, company_id)
    if company.status != CompanyStatus.active.value:
        raise ValidationError("Cannot book appointment with inactive company")

    service = get_service(session, service_id)
    if service.status != ServiceStatus.active.value:
        raise ValidationError("Cannot book inactive service")
    if service.company_id != company.id:
        raise ValidationError("Service does not belong to the specified company")

    # booking on a customer's behalf
    booking_user_id = actor["id"]
    if user_id and (is_admin_role(actor["role"]) or is_company_owner(session, actor, company.id)):
        if session.get(User, user_id) is None:
            raise NotFoundError("User not found")
        booking_user_id = user_id

    if staff_id:
        _check_staff_in_company(session, staff_id, company.id)

    _check_slot_available(session, company.id, service.id, appointment_date, appointment_time)

    appt = Appointment(
        user_id=booking_user_id,
        company_id=company.id,
        service_id=service.id,
        staff_id=staff_id or None,
        staff_preferences=staff_preferences or None,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        notes=notes,
        status=AppointmentStatus.pending.value,
    )
    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info("Appointment %s booked for user %s at company %s", appt.id, booking_user_id, company.id)
    return appt


def update_appointment(session: Session, actor: dict, appointment_id: int, changes: dict) -> Appointment:
    """Partial update. ``changes`` holds only the fields the caller sent."""
    appt = get_appointment(session, actor, appointment_id)
    changes = dict(changes)

    for key in ("company_id", "service_id"):
        if key in changes and changes[key] != getattr(appt, key):
            raise ValidationError(f"{key} cannot be changed")
        changes.pop(key, None)

    if not can_manage(session, actor, appt):
        stripped = [key for key in PRIVILEGED_FIELDS if key in changes]
        if stripped:
            logger.warning(
                "User %s (role %s) may not write %s on appointment %s; ignored",
                actor["id"], actor["role"].name, ", ".join(stripped), appt.id,
            )
        for key in stripped:
            changes.pop(key)

    new_date = changes.get("appointment_date")
    new_time = changes.get("appointment_time")
    if new_date is not None:
        validate_date(new_date)
    if new_time is not None:
        changes["appointment_time"] = new_time = _normalize_time(new_time)
    if "notes" in changes:
        _check_notes(changes["notes"])

    if changes.get("status") is not None:
        target = _parse_status(changes["status"])
        _check_transition(appt, target)
        changes["status"] = target.value
    else:
        changes.pop("status", None)

    if changes.get("staff_id"):
        _check_staff_in_company(session, changes["staff_id"], appt.company_id)
    elif "staff_id" in changes:
        changes["staff_id"] = None

    if "staff_preferences" in changes:
        prefs = validate_staff_preferences(changes["staff_preferences"], config.MAX_STAFF_PREFERENCES)
        changes["staff_preferences"] = prefs or None

    if new_date is not None or new_time is not None:
        _check_slot_available(
            session, appt.company_id, appt.service_id,
            new_date or appt.appointment_date, new_time or appt.appointment_time,
            exclude_id=appt.id,
        )

    for key in ("appointment_date", "appointment_time", "notes"):
        if changes.get(key) is not None:
            setattr(appt, key, changes[key])
    for key in PRIVILEGED_FIELDS:
        if key in changes:
            setattr(appt, key, changes[key])
    appt.updated_at = utcnow()

    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info("Appointment %s updated by user %s", appt.id, actor["id"])
    return appt


def update_appointment_status(session: Session, actor: dict, appointment_id: int,
                              status, staff_id: Optional[int] = None) -> Appointment:
    """Set status and, in the same commit, the assigned staff member."""
    appt = session.get(Appointment, appointment_id)
    if appt is None:
        raise NotFoundError("Appointment not found")

    target = _parse_status(status)

    if not can_manage(session, actor, appt):
        raise PermissionDeniedError("Permission denied. Only company owners can update appointment status")

    _check_transition(appt, target)
    if staff_id:
        _check_staff_in_company(session, staff_id, appt.company_id)

    appt.status = target.value
    if staff_id:
        appt.staff_id = staff_id
    appt.updated_at = utcnow()

    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info("Appointment %s -> %s (staff %s) by user %s", appt.id, appt.status, appt.staff_id, actor["id"])
    return appt


def delete_appointment(session: Session, actor: dict, appointment_id: int) -> None:
    appt = get_appointment(session, actor, appointment_id)
    session.delete(appt)
    session.commit()
    logger.info("Appointment %s deleted by user %s", appointment_id, actor["id"])


def _ordered(stmt):
    return stmt.order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())


def list_appointments(session: Session, actor: dict) -> List[Appointment]:
    """Appointments visible to the actor, newest slot first."""
    role = actor["role"]
    stmt = select(Appointment)

    if is_admin_role(role):
        pass
    elif is_owner_role(role):
        company = find_company_for_owner(session, actor["id"])
        if company is None:
            return []
        stmt = stmt.where(Appointment.company_id == company.id)
    elif is_staff_role(role):
        staff_ids = _staff_ids_for_user(session, actor["id"])
        if not staff_ids:
            return []
        stmt = stmt.where(Appointment.staff_id.in_(staff_ids))
    elif is_user_role(role):
        stmt = stmt.where(Appointment.user_id == actor["id"])
    else:
        raise ValidationError("Invalid user role")

    return list(session.exec(_ordered(stmt)).all())


def list_all_appointments(session: Session, actor: dict) -> List[Appointment]:
    if not is_admin_role(actor["role"]):
        raise PermissionDeniedError("Access denied. Admin role required.")
    return list(session.exec(_ordered(select(Appointment))).all())


def get_appointment_stats(session: Session, actor: dict) -> dict:
    stmt = select(Appointment.status, func.count(Appointment.id)).group_by(Appointment.status)

    if is_owner_role(actor["role"]):
        company = find_company_for_owner(session, actor["id"])
        if company is None:
            raise NotFoundError("Company not found for this user")
        stmt = stmt.where(Appointment.company_id == company.id)
    elif not is_admin_role(actor["role"]):
        raise PermissionDeniedError("Access denied")

    stats = {status.value: 0 for status in AppointmentStatus}
    for status, count in session.exec(stmt).all():
        stats[status] = count
    stats["total"] = sum(stats.values())
    return stats
