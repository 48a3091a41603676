# sams/deps.py

from .errors import PermissionDeniedError
from .roles import Role, role_name


def require_role(user: dict, role: Role):
    if user["role"] != role:
        raise PermissionDeniedError(f"Access denied. {role_name(role)} role required.")


def require_any_role(user: dict, roles):
    if user["role"] not in roles:
        names = ", ".join(role_name(r) for r in roles)
        raise PermissionDeniedError(f"Access denied. One of the following roles required: {names}")
