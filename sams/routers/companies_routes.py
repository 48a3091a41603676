# sams/routers/companies_routes.py

from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sams import companies
from sams.auth import get_current_user
from sams.db import get_session
from sams.schemas import ApiResponse, CompanyCreate, CompanyPublic, CompanyStatusUpdate, envelope

router = APIRouter(
    prefix="/companies",
    tags=["companies"],
)


@router.post("", response_model=ApiResponse[CompanyPublic], status_code=201)
def create_company(
    company: CompanyCreate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    created = companies.create_company(session, current_user, company.model_dump())
    return envelope(CompanyPublic.model_validate(created), "Company registered successfully")


@router.get("", response_model=ApiResponse[List[CompanyPublic]])
def list_companies(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    rows = companies.list_companies(session, current_user)
    return envelope([CompanyPublic.model_validate(c) for c in rows])


@router.get("/me", response_model=ApiResponse[CompanyPublic])
def my_company(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    company = companies.get_company_for_owner(session, current_user["id"])
    return envelope(CompanyPublic.model_validate(company))


@router.get("/{company_id}", response_model=ApiResponse[CompanyPublic])
def get_company(
    company_id: int,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope(CompanyPublic.model_validate(companies.get_company(session, company_id)))


@router.put("/{company_id}/status", response_model=ApiResponse[CompanyPublic])
def update_company_status(
    company_id: int,
    body: CompanyStatusUpdate,
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    company = companies.update_company_status(session, current_user, company_id, body.status)
    return envelope(CompanyPublic.model_validate(company), "Company status updated successfully")
