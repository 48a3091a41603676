# sams/models.py

from typing import Optional, List
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

from .roles import Role
from .statuses import AppointmentStatus, CompanyStatus, ServiceStatus, StaffStatus


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    phone_number: Optional[str] = None
    role: int = Role.USER.value

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Company(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    # exactly one company per owner
    user_id: int = Field(foreign_key="user.id", index=True, unique=True)

    name: str
    address: Optional[str] = None
    phone_number: Optional[str] = None
    status: str = CompanyStatus.pending.value
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    company_id: int = Field(foreign_key="company.id", index=True)

    name: str
    description: Optional[str] = None
    duration: Optional[str] = None
    price: Decimal = Field(max_digits=10, decimal_places=2)
    status: str = ServiceStatus.active.value

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Staff(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("user_id", "company_id", name="uq_staff_user_company"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    company_id: int = Field(foreign_key="company.id", index=True)

    working_hours_start: Optional[str] = None  # HH:MM
    working_hours_end: Optional[str] = None
    skills: Optional[str] = None
    professional_qualifications: Optional[str] = None
    status: int = StaffStatus.ACTIVE.value

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    company_id: int = Field(foreign_key="company.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    staff_id: Optional[int] = Field(default=None, foreign_key="staff.id", index=True)
    staff_preferences: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))

    appointment_date: str  # YYYY-MM-DD
    appointment_time: str  # HH:MM
    status: str = AppointmentStatus.pending.value
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
