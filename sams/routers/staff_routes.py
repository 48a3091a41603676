# sams/routers/staff_routes.py

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from sams import staff_directory
from sams.auth import get_current_user
from sams.companies import get_company, get_company_for_owner
from sams.db import get_session
from sams.deps import require_role
from sams.errors import PermissionDeniedError
from sams.roles import Role, is_admin_only_role
from sams.schemas import ApiResponse, StaffCreate, StaffPublic, StaffUpdate, UserPublic, envelope

router = APIRouter(
    prefix="/staff",
    tags=["staff"],
)


def _owner_company_id(session: Session, current_user: dict) -> int:
    require_role(current_user, Role.OWNER)
    return get_company_for_owner(session, current_user["id"]).id


@router.post("", response_model=ApiResponse[StaffPublic], status_code=201)
def create_staff(
    staff: StaffCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    company_id = _owner_company_id(session, current_user)
    fields = staff.model_dump(exclude={"user_id"}, exclude_unset=True)
    created = staff_directory.create_staff(session, company_id, staff.user_id, fields)
    return envelope(StaffPublic.model_validate(created), "Staff member added successfully")


@router.get("", response_model=ApiResponse[List[StaffPublic]])
def list_my_staff(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    company_id = _owner_company_id(session, current_user)
    roster = staff_directory.list_staff_by_company(session, company_id)
    return envelope([StaffPublic.model_validate(s) for s in roster])


@router.get("/available-users", response_model=ApiResponse[List[UserPublic]])
def available_users(
    include_staffed: bool = Query(False, alias="includeStaffed"),
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    company_id = _owner_company_id(session, current_user)
    users = staff_directory.list_available_users(session, company_id, include_staffed=include_staffed)
    return envelope([UserPublic.model_validate(u) for u in users])


@router.get("/admin/all", response_model=ApiResponse[List[StaffPublic]])
def list_all_staff(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    if not is_admin_only_role(current_user["role"]):
        raise PermissionDeniedError("Access denied. Admin role required.")
    return envelope([StaffPublic.model_validate(s) for s in staff_directory.list_all_staff(session)])


# any signed-in user may browse a company's roster when booking
@router.get("/company/{company_id}", response_model=ApiResponse[List[StaffPublic]])
def list_company_staff(
    company_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    get_company(session, company_id)
    roster = staff_directory.list_staff_by_company(session, company_id)
    return envelope([StaffPublic.model_validate(s) for s in roster])


@router.get("/{staff_id}", response_model=ApiResponse[StaffPublic])
def get_staff(
    staff_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    staff = staff_directory.get_managed_staff(session, current_user, staff_id)
    return envelope(StaffPublic.model_validate(staff))


@router.put("/{staff_id}", response_model=ApiResponse[StaffPublic])
def update_staff(
    staff_id: int,
    changes: StaffUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    staff_directory.get_managed_staff(session, current_user, staff_id)
    updated = staff_directory.update_staff(session, staff_id, changes.model_dump(exclude_unset=True))
    return envelope(StaffPublic.model_validate(updated), "Staff member updated successfully")


@router.delete("/{staff_id}", response_model=ApiResponse[dict])
def delete_staff(
    staff_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    staff_directory.get_managed_staff(session, current_user, staff_id)
    staff_directory.delete_staff(session, staff_id)
    return envelope(message="Staff member removed successfully")
