# sams/roles.py

from enum import IntEnum
from typing import Union

from .errors import ValidationError


class Role(IntEnum):
    ADMIN = 0
    OWNER = 1
    STAFF = 2
    USER = 3


ROLE_NAMES = {
    Role.ADMIN: "admin",
    Role.OWNER: "owner",
    Role.STAFF: "staff",
    Role.USER: "user",
}

ROLE_DISPLAY_NAMES = {
    Role.ADMIN: "Administrator",
    Role.OWNER: "Owner",
    Role.STAFF: "Staff",
    Role.USER: "User",
}


def parse_role(value: Union[Role, int, str]) -> Role:
    """Normalize a role coming off the wire.

    Tokens and JSON bodies sometimes carry the role as ``"1"`` instead of ``1``.
    This is the only place that coercion happens; everything past the API
    boundary compares ``Role`` members.
    """
    if isinstance(value, Role):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Invalid role: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            raise ValidationError(f"Invalid role: {value!r}")
        value = int(value)
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Invalid role: {value!r}")


def role_name(role: Role) -> str:
    return ROLE_NAMES.get(role, "unknown")


def role_display_name(role: Role) -> str:
    return ROLE_DISPLAY_NAMES.get(role, "Unknown")


def role_from_name(name: str) -> Role:
    for role, known in ROLE_NAMES.items():
        if known == name:
            return role
    return Role.USER


def is_admin_role(role: Role) -> bool:
    return role == Role.ADMIN


def is_admin_only_role(role: Role) -> bool:
    # company directory, user directory, all-staff listing
    return role == Role.ADMIN


def is_owner_role(role: Role) -> bool:
    return role == Role.OWNER


def is_staff_role(role: Role) -> bool:
    return role == Role.STAFF


def is_user_role(role: Role) -> bool:
    return role == Role.USER


def is_admin_or_owner_role(role: Role) -> bool:
    return role in (Role.ADMIN, Role.OWNER)
