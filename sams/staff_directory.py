# sams/staff_directory.py
"""Per-company staff roster.

A staff row wraps an existing user account and is scoped to exactly one
company. The same account may be staffed by several companies, but never
twice by the same one.
"""

import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .companies import get_company_for_owner
from .errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from .models import Appointment, Company, Staff, User, utcnow
from .roles import Role, is_admin_role, is_owner_role
from .statuses import StaffStatus
from .validators import validate_working_hours

logger = logging.getLogger(__name__)

STAFF_FIELDS = ("working_hours_start", "working_hours_end", "skills", "professional_qualifications", "status")


def _status_value(status) -> int:
    try:
        return StaffStatus(status).value
    except ValueError:
        raise ValidationError("Invalid staff status")


def get_staff(session: Session, staff_id: int) -> Staff:
    staff = session.get(Staff, staff_id)
    if staff is None:
        raise NotFoundError("Staff member not found")
    return staff


def get_managed_staff(session: Session, actor: dict, staff_id: int) -> Staff:
    """Staff row the actor may manage: any for admins, own company for owners."""
    staff = get_staff(session, staff_id)
    if is_admin_role(actor["role"]):
        return staff
    if not is_owner_role(actor["role"]):
        raise PermissionDeniedError("Access denied")
    company = get_company_for_owner(session, actor["id"])
    if staff.company_id != company.id:
        raise PermissionDeniedError("Access denied")
    return staff


def list_staff_by_company(session: Session, company_id: int) -> List[Staff]:
    # every status; filtering is up to the caller
    stmt = select(Staff).where(Staff.company_id == company_id).order_by(Staff.id)
    return list(session.exec(stmt).all())


def list_all_staff(session: Session) -> List[Staff]:
    return list(session.exec(select(Staff).order_by(Staff.id)).all())


def is_user_staff_for_company(session: Session, user_id: int, company_id: int) -> bool:
    stmt = select(Staff).where(Staff.user_id == user_id).where(Staff.company_id == company_id)
    return session.exec(stmt).first() is not None


def list_available_users(session: Session, company_id: int, include_staffed: bool = False) -> List[User]:
    """Accounts that can be added as staff of ``company_id``.

    With ``include_staffed`` every account is returned, no exclusion.
    """
    stmt = select(User).order_by(User.id)
    if include_staffed:
        return list(session.exec(stmt).all())

    staffed = select(Staff.user_id).where(Staff.company_id == company_id)
    owner = select(Company.user_id).where(Company.id == company_id)
    stmt = (
        stmt.where(User.id.not_in(staffed))
        .where(User.id.not_in(owner))
        .where(User.role != Role.ADMIN.value)
    )
    return list(session.exec(stmt).all())


def create_staff(session: Session, company_id: int, user_id: int, fields: dict) -> Staff:
    validate_working_hours(fields.get("working_hours_start"), fields.get("working_hours_end"))

    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    if is_user_staff_for_company(session, user_id, company_id):
        raise ConflictError("User is already a staff member for this company")

    status = fields.get("status")
    staff = Staff(
        user_id=user_id,
        company_id=company_id,
        working_hours_start=fields.get("working_hours_start"),
        working_hours_end=fields.get("working_hours_end"),
        skills=fields.get("skills"),
        professional_qualifications=fields.get("professional_qualifications"),
        status=_status_value(status) if status is not None else StaffStatus.ACTIVE.value,
    )
    session.add(staff)

    # plain users become staff; owners and admins keep their role
    if user.role == Role.USER.value:
        user.role = Role.STAFF.value
        user.updated_at = utcnow()
        session.add(user)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("User is already a staff member for this company")

    session.refresh(staff)
    logger.info("User %s added as staff %s of company %s", user_id, staff.id, company_id)
    return staff


def update_staff(session: Session, staff_id: int, fields: dict) -> Staff:
    staff = get_staff(session, staff_id)

    for key in ("user_id", "company_id"):
        if key in fields and fields[key] != getattr(staff, key):
            raise ValidationError(f"{key} cannot be changed")

    changes = {k: fields[k] for k in STAFF_FIELDS if k in fields and fields[k] is not None}
    if "status" in changes:
        changes["status"] = _status_value(changes["status"])

    validate_working_hours(
        changes.get("working_hours_start", staff.working_hours_start),
        changes.get("working_hours_end", staff.working_hours_end),
    )

    for key, value in changes.items():
        setattr(staff, key, value)
    staff.updated_at = utcnow()

    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff


def delete_staff(session: Session, staff_id: int) -> None:
    """Remove a staff row.

    Appointments assigned to it lose their ``staff_id``; ids left inside
    ``staff_preferences`` stay as they are and are skipped when preferences
    are resolved.
    """
    staff = get_staff(session, staff_id)
    user_id = staff.user_id

    assigned = session.exec(select(Appointment).where(Appointment.staff_id == staff_id)).all()
    for appt in assigned:
        appt.staff_id = None
        appt.updated_at = utcnow()
        session.add(appt)

    session.delete(staff)
    session.flush()

    remaining = session.exec(select(Staff).where(Staff.user_id == user_id)).first()
    user = session.get(User, user_id)
    if remaining is None and user is not None and user.role == Role.STAFF.value:
        user.role = Role.USER.value
        user.updated_at = utcnow()
        session.add(user)

    session.commit()
    logger.info("Staff %s removed; %d appointment(s) unassigned", staff_id, len(assigned))
