# sams/routers/services_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sams import catalog
from sams.auth import get_current_user
from sams.db import get_session
from sams.schemas import ApiResponse, ServiceCreate, ServicePublic, ServiceUpdate, envelope

router = APIRouter(
    prefix="/services",
    tags=["services"],
)


@router.post("", response_model=ApiResponse[ServicePublic], status_code=201)
def create_service(
    service: ServiceCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    created = catalog.create_service(session, current_user, service.model_dump())
    return envelope(ServicePublic.model_validate(created), "Service created successfully")


@router.get("/company/{company_id}", response_model=ApiResponse[List[ServicePublic]])
def list_company_services(
    company_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope([ServicePublic.model_validate(s) for s in catalog.list_services(session, company_id)])


@router.put("/{service_id}", response_model=ApiResponse[ServicePublic])
def update_service(
    service_id: int,
    changes: ServiceUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    updated = catalog.update_service(session, current_user, service_id, changes.model_dump(exclude_unset=True))
    return envelope(ServicePublic.model_validate(updated), "Service updated successfully")
