# sams/statuses.py

from enum import Enum, IntEnum


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class StaffStatus(IntEnum):
    ACTIVE = 0
    INACTIVE = 1
    SUSPENDED = 2
    TERMINATED = 3


class CompanyStatus(str, Enum):
    pending = "pending"
    active = "active"
    inactive = "inactive"


class ServiceStatus(str, Enum):
    active = "active"
    inactive = "inactive"


# Intended happy path. Only enforced when ENFORCE_STATUS_TRANSITIONS is on.
ALLOWED_STATUS_TRANSITIONS = {
    AppointmentStatus.pending: {AppointmentStatus.confirmed, AppointmentStatus.cancelled},
    AppointmentStatus.confirmed: {AppointmentStatus.completed, AppointmentStatus.cancelled},
    AppointmentStatus.completed: set(),
    AppointmentStatus.cancelled: set(),
}

# Slots held by these statuses are not bookable again
ACTIVE_APPOINTMENT_STATUSES = (AppointmentStatus.pending.value, AppointmentStatus.confirmed.value)


def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    if current == target:
        return True
    return target in ALLOWED_STATUS_TRANSITIONS.get(current, set())
