# sams/companies.py
"""Company registry: one company per owner, status moved by admins only."""

import logging
from typing import List, Optional

from sqlmodel import Session, select

from .deps import require_role
from .errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from .models import Company, utcnow
from .roles import Role, is_admin_only_role
from .statuses import CompanyStatus

logger = logging.getLogger(__name__)


def get_company(session: Session, company_id: int) -> Company:
    company = session.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company


def find_company_for_owner(session: Session, user_id: int) -> Optional[Company]:
    return session.exec(select(Company).where(Company.user_id == user_id)).first()


def get_company_for_owner(session: Session, user_id: int) -> Company:
    company = find_company_for_owner(session, user_id)
    if company is None:
        raise ValidationError("User does not have a registered company")
    return company


def create_company(session: Session, actor: dict, fields: dict) -> Company:
    require_role(actor, Role.OWNER)

    name = (fields.get("name") or "").strip()
    if not 2 <= len(name) <= 100:
        raise ValidationError("Company name must be between 2 and 100 characters")

    if find_company_for_owner(session, actor["id"]) is not None:
        raise ConflictError("User already has a registered company")

    company = Company(
        user_id=actor["id"],
        name=name,
        address=fields.get("address"),
        phone_number=fields.get("phone_number"),
        category_id=fields.get("category_id"),
        subcategory_id=fields.get("subcategory_id"),
        status=CompanyStatus.pending.value,
    )
    session.add(company)
    session.commit()
    session.refresh(company)
    logger.info("Company %s registered by user %s (pending)", company.id, actor["id"])
    return company


def list_companies(session: Session, actor: dict) -> List[Company]:
    if not is_admin_only_role(actor["role"]):
        raise PermissionDeniedError("Access denied. Admin role required.")
    return list(session.exec(select(Company).order_by(Company.id)).all())


def update_company_status(session: Session, actor: dict, company_id: int, status: CompanyStatus) -> Company:
    if not is_admin_only_role(actor["role"]):
        raise PermissionDeniedError("Access denied. Admin role required.")

    company = get_company(session, company_id)
    company.status = CompanyStatus(status).value
    company.updated_at = utcnow()
    session.add(company)
    session.commit()
    session.refresh(company)
    logger.info("Company %s status set to %s by admin %s", company.id, company.status, actor["id"])
    return company
