import os
from decimal import Decimal
from types import SimpleNamespace

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from sams.auth import create_access_token, current_user_dict
from sams.db import get_session
from sams.main import app
from sams.models import Company, Service, Staff, User
from sams.roles import Role
from sams.statuses import CompanyStatus

FUTURE_DATE = "2099-06-01"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def _session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(session, email, role=Role.USER, first_name=""):
    # hash is never checked outside the login tests
    user = User(email=email, password_hash="not-a-hash", first_name=first_name, role=role.value)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def make_company(session, owner, name="Shear Bliss", status=CompanyStatus.active):
    company = Company(user_id=owner.id, name=name, status=status.value)
    session.add(company)
    session.commit()
    session.refresh(company)
    return company


def make_service(session, company, name="Haircut", price=Decimal("25.00")):
    service = Service(company_id=company.id, name=name, duration="1 hour", price=price)
    session.add(service)
    session.commit()
    session.refresh(service)
    return service


def make_staff(session, company, user):
    staff = Staff(company_id=company.id, user_id=user.id)
    session.add(staff)
    session.commit()
    session.refresh(staff)
    return staff


def actor(user):
    return current_user_dict(user)


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def world(session):
    """An active company with three staff members, a service and a customer."""
    admin = make_user(session, "admin@example.com", Role.ADMIN)
    owner = make_user(session, "owner@example.com", Role.OWNER)
    customer = make_user(session, "customer@example.com", Role.USER)
    company = make_company(session, owner)
    service = make_service(session, company)

    staff_users = [make_user(session, f"staff{i}@example.com", Role.STAFF) for i in range(3)]
    roster = [make_staff(session, company, u) for u in staff_users]

    other_owner = make_user(session, "rival@example.com", Role.OWNER)
    other_company = make_company(session, other_owner, name="Cut Above")
    other_staff = make_staff(session, other_company, make_user(session, "elsewhere@example.com", Role.STAFF))

    return SimpleNamespace(
        admin=admin,
        owner=owner,
        customer=customer,
        company=company,
        service=service,
        staff_users=staff_users,
        roster=roster,
        other_owner=other_owner,
        other_company=other_company,
        other_staff=other_staff,
    )


def booking_fields(world, **overrides):
    fields = dict(
        company_id=world.company.id,
        service_id=world.service.id,
        appointment_date=FUTURE_DATE,
        appointment_time="10:00",
    )
    fields.update(overrides)
    return fields
