# sams/schemas.py

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .errors import ValidationError
from .roles import Role, parse_role
from .statuses import CompanyStatus, StaffStatus

T = TypeVar("T")


def _role_before(value: Any) -> Role:
    try:
        return parse_role(value)
    except ValidationError as exc:
        raise ValueError(exc.message)


RoleField = Annotated[Role, BeforeValidator(_role_before)]


class CamelModel(BaseModel):
    """Wire models use camelCase, Python code uses snake_case."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str = ""
    data: Optional[T] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# ---- users ----

class UserCreate(CamelModel):
    email: str
    password: str = Field(min_length=8, max_length=72)
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    role: RoleField = Role.USER


class UserPublic(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None
    role: int


# ---- companies ----

class CompanyCreate(CamelModel):
    name: str
    address: Optional[str] = None
    phone_number: Optional[str] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None


class CompanyStatusUpdate(CamelModel):
    status: CompanyStatus


class CompanyPublic(CamelModel):
    id: int
    user_id: int
    name: str
    address: Optional[str] = None
    phone_number: Optional[str] = None
    status: str
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


# ---- services ----

class ServiceCreate(CamelModel):
    name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    price: Decimal
    status: Optional[str] = None


class ServiceUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[Decimal] = None
    status: Optional[str] = None


class ServicePublic(CamelModel):
    id: int
    company_id: int
    name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    price: Decimal
    status: str


# ---- staff ----

class StaffCreate(CamelModel):
    user_id: int
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    skills: Optional[str] = None
    professional_qualifications: Optional[str] = None
    status: Optional[StaffStatus] = None


class StaffUpdate(CamelModel):
    # userId / companyId are not accepted: both are fixed at creation
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    skills: Optional[str] = None
    professional_qualifications: Optional[str] = None
    status: Optional[StaffStatus] = None


class StaffPublic(CamelModel):
    id: int
    user_id: int
    company_id: int
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    skills: Optional[str] = None
    professional_qualifications: Optional[str] = None
    status: int
    created_at: datetime
    updated_at: datetime


# ---- appointments ----

class AppointmentCreate(CamelModel):
    company_id: int
    service_id: int
    appointment_date: str
    appointment_time: str
    notes: Optional[str] = None
    user_id: Optional[int] = None
    staff_id: Optional[int] = None
    staff_preferences: Optional[List[int]] = None


class AppointmentUpdate(CamelModel):
    appointment_date: Optional[str] = None
    appointment_time: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None
    staff_id: Optional[int] = None
    staff_preferences: Optional[List[int]] = None


class AppointmentStatusUpdate(CamelModel):
    status: str
    staff_id: Optional[int] = None


class AssignStaffRequest(CamelModel):
    staff_id: Optional[int] = None


class AppointmentPublic(CamelModel):
    id: int
    user_id: int
    company_id: int
    service_id: int
    staff_id: Optional[int] = None
    staff_preferences: Optional[List[int]] = None
    appointment_date: str
    appointment_time: str
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AppointmentStats(CamelModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    completed: int = 0
    cancelled: int = 0


class StaffOptions(CamelModel):
    preferred: List[StaffPublic]
    other: List[StaffPublic]
    stale_preferences: List[int]
    suggested_staff_id: Optional[int] = None


class AssignmentPublic(CamelModel):
    appointment: AppointmentPublic
    appointments: List[AppointmentPublic]


def envelope(data=None, message: str = "") -> dict:
    return {"success": True, "message": message, "data": data}
