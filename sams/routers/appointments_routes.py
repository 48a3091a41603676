# sams/routers/appointments_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sams import appointments as booking
from sams.assignment import assign_staff, staff_options
from sams.auth import get_current_user
from sams.db import get_session
from sams.schemas import (
    ApiResponse,
    AppointmentCreate,
    AppointmentPublic,
    AppointmentStats,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    AssignmentPublic,
    AssignStaffRequest,
    StaffOptions,
    StaffPublic,
    envelope,
)

router = APIRouter(
    prefix="/appointments",
    tags=["appointments"],
)


def _public(appts) -> List[AppointmentPublic]:
    return [AppointmentPublic.model_validate(a) for a in appts]


@router.post("", response_model=ApiResponse[AppointmentPublic], status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    created = booking.create_appointment(session, current_user, **appt.model_dump())
    return envelope(AppointmentPublic.model_validate(created), "Appointment created successfully")


@router.get("", response_model=ApiResponse[List[AppointmentPublic]])
def list_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope(_public(booking.list_appointments(session, current_user)))


@router.get("/all", response_model=ApiResponse[List[AppointmentPublic]])
def list_all_appointments(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope(_public(booking.list_all_appointments(session, current_user)))


@router.get("/stats", response_model=ApiResponse[AppointmentStats])
def appointment_stats(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope(AppointmentStats(**booking.get_appointment_stats(session, current_user)))


@router.get("/{appt_id}", response_model=ApiResponse[AppointmentPublic])
def get_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    appt = booking.get_appointment(session, current_user, appt_id)
    return envelope(AppointmentPublic.model_validate(appt))


@router.put("/{appt_id}", response_model=ApiResponse[AppointmentPublic])
def update_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    appt = booking.update_appointment(session, current_user, appt_id, changes.model_dump(exclude_unset=True))
    return envelope(AppointmentPublic.model_validate(appt), "Appointment updated successfully")


@router.put("/{appt_id}/status", response_model=ApiResponse[AppointmentPublic])
def update_appointment_status(
    appt_id: int,
    body: AppointmentStatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    appt = booking.update_appointment_status(session, current_user, appt_id, body.status, body.staff_id)
    return envelope(AppointmentPublic.model_validate(appt), "Appointment status updated successfully")


@router.post("/{appt_id}/assign", response_model=ApiResponse[AssignmentPublic])
def assign_appointment_staff(
    appt_id: int,
    body: AssignStaffRequest,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    result = assign_staff(session, current_user, appt_id, body.staff_id)
    data = AssignmentPublic(
        appointment=AppointmentPublic.model_validate(result.appointment),
        appointments=_public(result.appointments),
    )
    return envelope(data, "Staff member assigned successfully")


@router.get("/{appt_id}/staff-options", response_model=ApiResponse[StaffOptions])
def appointment_staff_options(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    options = staff_options(session, current_user, appt_id)
    data = StaffOptions(
        preferred=[StaffPublic.model_validate(s) for s in options.resolution.preferred],
        other=[StaffPublic.model_validate(s) for s in options.resolution.other],
        stale_preferences=options.resolution.stale,
        suggested_staff_id=options.suggested_staff_id,
    )
    return envelope(data)


@router.delete("/{appt_id}", response_model=ApiResponse[dict])
def delete_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    booking.delete_appointment(session, current_user, appt_id)
    return envelope(message="Appointment deleted successfully")
