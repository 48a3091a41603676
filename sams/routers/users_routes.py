# sams/routers/users_routes.py

from fastapi import APIRouter, Depends
from sqlmodel import Session

from sams.accounts import register_user
from sams.auth import get_current_user
from sams.db import get_session
from sams.models import User
from sams.schemas import ApiResponse, UserCreate, UserPublic, envelope

router = APIRouter(
    tags=["users"],
)


@router.get("/me", response_model=ApiResponse[UserPublic])
def me(
    session: Session = Depends(get_session),
    current_user: dict = Depends(get_current_user),
):
    return envelope(UserPublic.model_validate(session.get(User, current_user["id"])))


@router.post("/users", status_code=201, response_model=ApiResponse[UserPublic])
def create_user(
    user: UserCreate,
    session: Session = Depends(get_session),
):
    db_user = register_user(session, user.model_dump())
    return envelope(UserPublic.model_validate(db_user), "User registered successfully")
