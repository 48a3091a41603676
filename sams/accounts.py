# sams/accounts.py

import logging
from typing import Optional

from sqlmodel import Session, select

from .auth import hash_password, verify_password
from .errors import ConflictError, ValidationError
from .models import User
from .roles import Role

logger = logging.getLogger(__name__)

# staff accounts come from the staff directory, admins from bootstrap
SELF_REGISTER_ROLES = (Role.OWNER, Role.USER)


def find_user_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == email)).first()


def register_user(session: Session, fields: dict) -> User:
    role = fields.get("role", Role.USER)
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError("Only owner or user accounts can be registered")

    email = fields["email"].strip().lower()
    if find_user_by_email(session, email) is not None:
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        password_hash=hash_password(fields["password"]),
        first_name=fields.get("first_name") or "",
        last_name=fields.get("last_name") or "",
        phone_number=fields.get("phone_number"),
        role=Role(role).value,
    )
    session.add(user)
    session.commit()
    session.refresh(user)  # fills user.id
    logger.info("Registered user %s with role %s", user.id, Role(role).name)
    return user


def authenticate(session: Session, email: str, password: str) -> Optional[User]:
    user = find_user_by_email(session, email.strip().lower())
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def ensure_admin(session: Session, email: str, password: str) -> User:
    user = find_user_by_email(session, email.strip().lower())
    if user is None:
        user = User(
            email=email.strip().lower(),
            password_hash=hash_password(password),
            first_name="Admin",
            role=Role.ADMIN.value,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info("Bootstrap admin %s created", user.email)
    return user
