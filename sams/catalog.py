# sams/catalog.py

import logging
from decimal import Decimal
from typing import List

from sqlmodel import Session, select

from .companies import get_company, get_company_for_owner
from .errors import NotFoundError, PermissionDeniedError, ValidationError
from .models import Service, utcnow
from .roles import is_admin_role, is_owner_role
from .statuses import ServiceStatus

logger = logging.getLogger(__name__)


def _check_price(price) -> Decimal:
    if price is None or Decimal(price) <= 0:
        raise ValidationError("Price must be a positive number")
    return Decimal(price)


def _check_status(status) -> str:
    try:
        return ServiceStatus(status).value
    except ValueError:
        raise ValidationError("Invalid status. Must be one of: active, inactive")


def get_service(session: Session, service_id: int) -> Service:
    service = session.get(Service, service_id)
    if service is None:
        raise NotFoundError("Service not found")
    return service


def list_services(session: Session, company_id: int) -> List[Service]:
    get_company(session, company_id)
    stmt = select(Service).where(Service.company_id == company_id).order_by(Service.id)
    return list(session.exec(stmt).all())


def create_service(session: Session, actor: dict, fields: dict) -> Service:
    if not is_owner_role(actor["role"]):
        raise PermissionDeniedError("Only company owners can create services")
    company = get_company_for_owner(session, actor["id"])

    name = (fields.get("name") or "").strip()
    if not name:
        raise ValidationError("Service name is required")

    service = Service(
        company_id=company.id,
        name=name,
        description=fields.get("description"),
        duration=fields.get("duration"),
        price=_check_price(fields.get("price")),
        status=_check_status(fields.get("status") or ServiceStatus.active.value),
    )
    session.add(service)
    session.commit()
    session.refresh(service)
    logger.info("Service %s created for company %s", service.id, company.id)
    return service


def update_service(session: Session, actor: dict, service_id: int, fields: dict) -> Service:
    service = get_service(session, service_id)

    if not is_admin_role(actor["role"]):
        company = get_company_for_owner(session, actor["id"]) if is_owner_role(actor["role"]) else None
        if company is None or company.id != service.company_id:
            raise PermissionDeniedError("Access denied")

    if "price" in fields:
        fields["price"] = _check_price(fields["price"])
    if "status" in fields:
        fields["status"] = _check_status(fields["status"])

    for key in ("name", "description", "duration", "price", "status"):
        if key in fields and fields[key] is not None:
            setattr(service, key, fields[key])
    service.updated_at = utcnow()

    session.add(service)
    session.commit()
    session.refresh(service)
    return service
